from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class FetchErrorKind(StrEnum):
    CONNECTION = "connection"
    BAD_STATUS = "bad_status"
    FORMAT = "format"
    PARSE = "parse"


class FieldError(BaseModel):
    """One field of the stats line that could not be converted."""

    field: str
    raw: str
    reason: str = ""


class FetchError(Exception):
    """Base for every recoverable failure of a single fetch."""

    kind: FetchErrorKind


class FetchConnectionError(FetchError):
    kind = FetchErrorKind.CONNECTION


class BadStatusError(FetchError):
    kind = FetchErrorKind.BAD_STATUS

    def __init__(self, status: int | str) -> None:
        self.status = status
        super().__init__(f"non-200 status: {status}")


class FormatError(FetchError):
    kind = FetchErrorKind.FORMAT

    def __init__(self, expected: int, actual: int, exact: bool = True) -> None:
        self.expected = expected
        self.actual = actual
        qualifier = "" if exact else "at least "
        super().__init__(
            f"invalid data format: expected {qualifier}{expected} values, got {actual}"
        )


class ParseError(FetchError):
    """Raised with every field that failed to parse, not just the first."""

    kind = FetchErrorKind.PARSE

    def __init__(self, errors: list[FieldError]) -> None:
        if not errors:
            raise ValueError("ParseError requires at least one field error")
        self.errors = errors
        details = "; ".join(f"{e.field}={e.raw!r} ({e.reason})" for e in errors)
        super().__init__(f"parse failed: {details}")

    @property
    def field(self) -> str:
        return self.errors[0].field

    @property
    def raw(self) -> str:
        return self.errors[0].raw


class ErrorBudgetExhausted(Exception):
    """Consecutive fetch failures reached the ceiling under the fail-stop policy."""

    def __init__(self, errors: int) -> None:
        self.errors = errors
        super().__init__(f"{errors} consecutive fetch errors")
