"""Error taxonomy shared by the search pipeline and the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class DiscoveryError(Exception):
    code = "DISCOVERY_ERROR"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidParameter(DiscoveryError):
    """Malformed coordinate, out-of-range bound, or a filter value outside its enumeration."""

    code = "INVALID_PARAMETER"
    status_code = 400

    def __init__(self, errors: list[FieldError]) -> None:
        if not errors:
            raise ValueError("InvalidParameter requires at least one field error")
        self.errors = list(errors)
        summary = "; ".join(f"{error.field}: {error.message}" for error in self.errors)
        super().__init__(f"Invalid parameter(s) - {summary}")

    @classmethod
    def single(cls, field: str, message: str) -> "InvalidParameter":
        return cls([FieldError(field=field, message=message)])

    @property
    def field(self) -> str:
        return self.errors[0].field


class CursorTamperError(DiscoveryError):
    """The pagination token cannot be trusted; callers restart from the first page."""

    code = "INVALID_CURSOR"
    status_code = 400

    def __init__(self, message: str = "Pagination cursor is invalid or expired; restart from the first page") -> None:
        super().__init__(message)


class UpstreamQueryFailure(DiscoveryError):
    code = "SEARCH_UNAVAILABLE"
    status_code = 503
    public_message = "Search is temporarily unavailable"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)


class MissingRankingInput(UpstreamQueryFailure):
    pass


class ResultAssemblyError(UpstreamQueryFailure):
    pass
