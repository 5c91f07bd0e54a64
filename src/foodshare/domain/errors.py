"""Domain error types."""


class GatewayError(RuntimeError):
    """Raised when the managed backend rejects a request or is unreachable."""


class CompositionError(ValueError):
    """Raised when a post composition cannot be published."""


class ProfileError(ValueError):
    """Raised when a profile update is rejected before reaching the gateway."""
