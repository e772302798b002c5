import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SCRIPTS_DIR = ROOT / "scripts"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
if str(SCRIPTS_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPTS_DIR))

from init_db import main as init_db
from seed_establishments import main as seed_establishments
from wait_for_db import main as wait_for_db


def main() -> None:
    wait_for_db()
    init_db()
    seed_establishments()


if __name__ == "__main__":
    main()
