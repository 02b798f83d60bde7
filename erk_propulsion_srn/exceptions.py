class SrnError(Exception):
    """Base class for errors raised by the SRN integration core."""
    pass


class ConfigurationError(SrnError):
    """Raised when a solver is not set up, or is unsuitable for the SDE it is bound to."""
    pass


class MissingParameterError(SrnError, KeyError):
    """Raised when a required named scalar is absent from a cell's data store."""

    def __init__(self, key: str, field: str):
        self.key = key
        self.field = field
        super().__init__(f"Cell data has no item '{key}' (needed for parameter '{field}')")

    def __str__(self):
        # KeyError would otherwise repr() the message
        return self.args[0]


class DomainError(SrnError, ValueError):
    """Raised when a step size or relaxation time would divide by zero."""
    pass
