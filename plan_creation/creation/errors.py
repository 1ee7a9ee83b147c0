"""Domain-specific errors for the creation engine.

Input malformation never raises: edits clamp or keep the previous value.
These types cover programming errors at the engine seams and failures of
external collaborators.
"""


class CreationEngineError(Exception):
    """Base exception for all creation engine errors."""

    pass


class UnknownWeightKeyError(CreationEngineError, KeyError):
    """Raised when a rebalance targets a key outside the composite weight vector."""

    def __init__(self, key: str, keys: tuple[str, ...]):
        self.key = key
        self.keys = keys
        super().__init__(f"Unknown composite weight key '{key}'. Expected one of: {', '.join(keys)}")


class CollaboratorError(CreationEngineError):
    """Raised by collaborator adapters when a suggestion, preview or create call fails.

    Attributes:
        operation: Name of the failed call (e.g., "get_creation_suggestions")
        message: Human-readable failure description
    """

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"{operation}: {message}")
