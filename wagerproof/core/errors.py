from __future__ import annotations

from dataclasses import asdict, dataclass


class WagerproofError(Exception):
    """Base class for recoverable, caller-facing failures of the core."""


class InvalidInputError(WagerproofError, ValueError):
    """A prediction set is empty or carries out-of-range values."""


@dataclass(frozen=True)
class FieldError:
    field: str
    reason: str


class ValidationError(WagerproofError, ValueError):
    """A personality profile failed schema validation.

    Carries one ``FieldError`` per offending field so the caller can point the
    user at exactly what to fix.
    """

    def __init__(self, errors: list[FieldError]) -> None:
        if not errors:
            raise ValueError("ValidationError requires at least one field error")
        self.errors = list(errors)
        fields = ", ".join(err.field for err in self.errors)
        super().__init__(f"invalid personality fields: {fields}")

    @property
    def fields(self) -> list[str]:
        return [err.field for err in self.errors]

    def to_list(self) -> list[dict[str, str]]:
        return [asdict(err) for err in self.errors]


class InvalidTransitionError(WagerproofError):
    """A pick grading would leave the pending -> won|lost|push state machine."""
