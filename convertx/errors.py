"""
Exceptions raised by convertx.
"""


class ConvertxError(Exception):
    """Base class for convertx errors."""
    pass


class CycleDetectedError(ConvertxError):
    """Raised when a loaded association leads back to an entity that is still being normalized."""

    def __init__(self, entity_name: str, identity=None):
        self.entity_name = entity_name
        self.identity = identity
        super().__init__(
            f"Cycle detected: {entity_name} with identity {identity} is already being normalized"
        )
