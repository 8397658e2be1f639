"""
Zakat engine exception hierarchy.

All engine exceptions inherit from ZakatEngineError, making it easy for
consumers to catch library-level errors while still distinguishing specific
failure modes. Normal financial input never raises; only structurally
invalid configuration or snapshots do.
"""


class ZakatEngineError(Exception):
    """Base exception class for all zakat engine errors."""


class ConfigurationError(ZakatEngineError):
    """Raised for configuration errors (malformed methodology or settings)."""


class UnknownMethodologyError(ConfigurationError):
    """Raised by strict lookups when a methodology id is not registered."""

    def __init__(self, methodology_id: str, available: list[str] | None = None):
        self.methodology_id = methodology_id
        self.available = sorted(available or [])
        message = f"Unknown methodology: {methodology_id!r}"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(message)


class SnapshotError(ZakatEngineError):
    """Raised when a financial snapshot is structurally invalid."""
