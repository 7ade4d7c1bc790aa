"""Exception hierarchy for the DCC toy model."""
from __future__ import annotations


class DccModelError(Exception):
    """Base class for all toy-model failures."""


class ConfigurationError(DccModelError, ValueError):
    """Invalid construction parameters. Raised at construction, never while generating."""


class InsufficientDataError(DccModelError):
    """Moments requested before at least two events were accumulated."""

    def __init__(self, n_events: int, required: int = 2, message: str | None = None) -> None:
        super().__init__(
            message
            or f"Cannot calculate moments from {n_events} event(s); at least {required} are required."
        )
        self.n_events = n_events
        self.required = required


class NotFinalizedError(InsufficientDataError, RuntimeError):
    """Summary requested from an accumulator that was never finalized."""

    def __init__(self, n_events: int) -> None:
        super().__init__(
            n_events,
            message=f"Moments over {n_events} event(s) are not finalized; call finalize() first.",
        )


class UndefinedRatioError(DccModelError, ArithmeticError):
    """A derived ratio whose denominator average is exactly zero."""

    def __init__(self, field: str, reason: str | None = None) -> None:
        message = f"Ratio '{field}' is undefined"
        if reason:
            message += f": {reason}"
        super().__init__(message + ".")
        self.field = field
        self.reason = reason
