"""Error types raised by the engine."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from macro_log.domain.targets import DailyTargets


class MacroLogError(Exception):
    """Base class for engine errors."""


class InputValidationError(MacroLogError, ValueError):
    """User input rejected before it reaches the store."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class EstimationFailure(MacroLogError):
    """The estimation capability failed (network or unparseable result)."""

    retryable = True


class ConfigurationError(MacroLogError):
    """The profile settings describe an unsatisfiable macro split."""

    def __init__(self, message: str, clamped: "DailyTargets") -> None:
        super().__init__(message)
        self.clamped = clamped


class UnknownEntityError(MacroLogError, KeyError):
    """A log, draft or favorite id is not known to the store."""

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"Unknown {kind}: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id

    def __str__(self) -> str:
        return str(self.args[0])
