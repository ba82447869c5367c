"""Exceptions raised by the classifier (programmer errors only, never erasures)."""


class ClassifierError(Exception):
    """Base error for whale_swaps."""
    pass


class InvalidTransactionError(ClassifierError):
    """Provider payload could not be parsed into a RawTransaction."""
    pass


class AmountConsistencyError(ClassifierError):
    """Fee/net assembly produced an impossible value (strict mode only)."""

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(ClassifierError):
    """Invalid classifier configuration."""
    pass
