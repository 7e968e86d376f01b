"""Exception hierarchy for lightform."""


class LightformError(Exception):
    """Base exception for all lightform errors."""

    pass


class GeometryError(LightformError):
    """Errors in geometric calculations."""

    pass


class DegenerateGeometryError(GeometryError):
    """A zero or near-zero length element was used where a direction is needed."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class IntersectionNotFoundError(GeometryError):
    """An expected geometric intersection does not exist."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class PathError(LightformError):
    """Errors related to path containers and their handles."""

    pass


class EmptyPathError(PathError):
    """Operation needs at least one segment but the path is empty."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot {operation} on an empty path")


class StaleHandleError(PathError):
    """A segment handle was used after its segment was deleted or moved away."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Stale segment handle: {reason}")


class TopologyError(LightformError):
    """A path that was closed could not be re-closed after reversal.

    This signals a broken kernel invariant rather than bad input.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
