import agentspace


class AgentSpaceError(Exception):
    """Base class for all agentspace-specific exceptions.
    It automatically appends the agentspace version to help with debugging reports.
    """

    def __init__(self, message: str):
        self.agentspace_version = getattr(agentspace, "__version__", "unknown")
        # Store the original message cleanly for programmatic access
        self.original_message = message
        full_message = f"[agentspace {self.agentspace_version}] {message}"
        super().__init__(full_message)


class ConfigurationError(AgentSpaceError):
    """Raised when space or model parameters are invalid or missing."""

    def __init__(self, param_name: str = None, reason: str = None):
        # Allow flexible usage: raise ConfigurationError("Generic message")
        # OR: raise ConfigurationError("dimensions", "must be positive")
        if param_name and reason:
            message = f"Invalid configuration for '{param_name}': {reason}"
            self.param_name = param_name
        else:
            message = param_name if param_name else "Invalid configuration"
            self.param_name = None

        super().__init__(message)


# Agent Errors
class AgentError(AgentSpaceError):
    """Generic errors related to agent behavior or lifecycle."""


class AgentStateError(AgentError):
    """Raised when an agent is in the wrong state for a space operation.

    Examples: adding an agent that is already placed, or moving an agent that
    was never added to the space.
    """


# Space Errors
class SpaceError(AgentSpaceError):
    """Generic errors related to spaces, positions, or movement."""


class OutOfBoundsError(SpaceError):
    """Raised when a position cannot be corrected into the extent of a space."""

    def __init__(self, pos, extent, reason: str | None = None):
        self.pos = pos
        self.extent = extent
        message = f"Position {pos} is out of bounds for extent {extent}"
        message += f": {reason}." if reason else "."
        super().__init__(message)


class SpaceFullError(SpaceError):
    """Raised when an agent has to be placed on an empty cell but no cell is empty."""

    def __init__(self, space):
        self.space = space
        super().__init__(f"{type(space).__name__} has no empty position left.")


class DimensionMismatchError(SpaceError):
    """Raised when a position or vector does not match the dimensionality of a space."""

    def __init__(self, vector, ndims: int):
        self.vector = vector
        self.ndims = ndims
        message = f"{vector} has {len(vector)} components but the space has {ndims} dimensions."
        super().__init__(message)


class InvalidRadiusError(SpaceError):
    """Raised when a neighborhood radius is not usable."""

    def __init__(self, radius, reason: str = "must be positive"):
        self.radius = radius
        message = f"Invalid radius {radius!r}: {reason}."
        super().__init__(message)


class UnsupportedOperationError(SpaceError):
    """Raised when an operation is requested on a space that does not define it.

    Example: euclidean distance on a graph space without coordinates.
    """

    def __init__(self, operation: str, space):
        self.operation = operation
        self.space = space
        message = f"{operation} is not supported by {type(space).__name__}."
        super().__init__(message)
