"""Per-request stage timing for establishment search.

A ``SearchTrace`` lives in a context variable for the duration of one HTTP
request; ``timed_stage`` and ``instrument_stage`` add elapsed milliseconds to
one of ``STAGES`` on whatever trace is current.
"""

from .instrumentation import instrument_stage, timed_stage
from .trace import (
    STAGES,
    SearchTrace,
    get_current_trace,
    reset_current_trace,
    set_current_trace,
)

__all__ = [
    "STAGES",
    "SearchTrace",
    "get_current_trace",
    "instrument_stage",
    "reset_current_trace",
    "set_current_trace",
    "timed_stage",
]
