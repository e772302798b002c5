"""Opaque, versioned pagination tokens and keyset paging.

Results are totally ordered by ``(score DESC, establishment id ASC)``. A token
captures the last row a caller has seen; the next page resumes strictly after
it. Tokens are signed and bound to the query they were issued for, so a token
that was altered, truncated, or replayed against a different search is
rejected with ``CursorTamperError`` instead of producing a wrong page.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import math
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..errors import CursorTamperError
from .contracts import NearRequest, RankedCandidate
from .ranking_service import RankingWeights

SIGNATURE_BYTES = 16
MAX_CURSOR_LENGTH = 512


@dataclass(frozen=True)
class PageCursor:
    score: float
    establishment_id: uuid.UUID

    @classmethod
    def after(cls, candidate: RankedCandidate) -> "PageCursor":
        return cls(score=candidate.score, establishment_id=candidate.record.id)


@dataclass(frozen=True)
class Page:
    items: list[RankedCandidate]
    has_more: bool
    next_cursor: PageCursor | None


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)


def query_scope(request: NearRequest, weights: RankingWeights) -> str:
    """Fingerprint of everything that determines the ordering of a result set.

    Page size is deliberately absent: keyset resumption does not depend on it.
    """
    payload = {
        "lat": request.origin.latitude.hex(),
        "lng": request.origin.longitude.hex(),
        "radius": float(request.radius_m).hex(),
        "filters": request.filters.as_payload(),
        "weights": weights.fingerprint(),
    }
    raw = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:24]


class CursorCodec:
    def __init__(self, secret: str, version: int = 1) -> None:
        if not secret:
            raise ValueError("Cursor secret must not be empty")
        self._secret = secret.encode("utf-8")
        self._decoders: dict[int, Callable[[dict], PageCursor]] = {1: self._decode_v1_payload}
        if version not in self._decoders:
            raise ValueError(f"Unsupported cursor version {version}")
        self.version = version

    def _sign(self, message: str) -> str:
        digest = hmac.new(self._secret, message.encode("ascii"), hashlib.sha256).digest()
        return _b64encode(digest[:SIGNATURE_BYTES])

    def encode(self, cursor: PageCursor, scope: str = "") -> str:
        if not math.isfinite(cursor.score):
            raise ValueError("Cursor score must be finite")
        payload = {"s": float(cursor.score).hex(), "i": str(cursor.establishment_id), "q": scope}
        body = _b64encode(json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8"))
        message = f"v{self.version}.{body}"
        return f"{message}.{self._sign(message)}"

    def decode(self, token: str, scope: str = "") -> PageCursor:
        if not isinstance(token, str) or not token or not token.isascii():
            raise CursorTamperError()
        if len(token) > MAX_CURSOR_LENGTH:
            raise CursorTamperError()

        parts = token.split(".")
        if len(parts) != 3:
            raise CursorTamperError()
        version_part, body, signature = parts

        if not version_part.startswith("v") or not version_part[1:].isdigit():
            raise CursorTamperError()
        decoder = self._decoders.get(int(version_part[1:]))
        if decoder is None:
            raise CursorTamperError()

        expected = self._sign(f"{version_part}.{body}")
        if not hmac.compare_digest(expected, signature):
            raise CursorTamperError()

        try:
            payload = json.loads(_b64decode(body).decode("utf-8"))
        except (binascii.Error, UnicodeError, ValueError):
            raise CursorTamperError() from None
        if not isinstance(payload, dict):
            raise CursorTamperError()
        if payload.get("q") != scope:
            raise CursorTamperError()
        return decoder(payload)

    @staticmethod
    def _decode_v1_payload(payload: dict) -> PageCursor:
        raw_score = payload.get("s")
        raw_id = payload.get("i")
        if not isinstance(raw_score, str) or not isinstance(raw_id, str):
            raise CursorTamperError()
        try:
            score = float.fromhex(raw_score)
            establishment_id = uuid.UUID(raw_id)
        except (ValueError, OverflowError):
            raise CursorTamperError() from None
        if not math.isfinite(score):
            raise CursorTamperError()
        return PageCursor(score=score, establishment_id=establishment_id)


def is_after(candidate: RankedCandidate, cursor: PageCursor) -> bool:
    return candidate.score < cursor.score or (
        candidate.score == cursor.score and candidate.record.id > cursor.establishment_id
    )


def paginate(ranked: Iterable[RankedCandidate], cursor: PageCursor | None, page_size: int) -> Page:
    if page_size < 1:
        raise ValueError("page_size must be positive")

    window: list[RankedCandidate] = []
    for candidate in sorted(ranked, key=lambda item: item.sort_key):
        if cursor is not None and not is_after(candidate, cursor):
            continue
        window.append(candidate)
        # One extra row tells us whether another page exists.
        if len(window) > page_size:
            break

    has_more = len(window) > page_size
    items = window[:page_size]
    next_cursor = PageCursor.after(items[-1]) if has_more else None
    return Page(items=items, has_more=has_more, next_cursor=next_cursor)
