class CherryError(RuntimeError):
    """Base class for errors surfaced to the caller of a view."""
    pass


class NotAuthenticatedError(CherryError):
    """Raised when a view is requested without a session."""
    pass


class AuthError(CherryError):
    """Raised when the authentication service fails (network, bad response)."""
    pass


class PermissionDeniedError(CherryError):
    """Raised when the viewer is not a participant allowed to perform the action."""
    pass


class NotFoundError(CherryError):
    """Raised when a request or its listing cannot be resolved for a detail view."""
    pass


class ValidationError(CherryError):
    """Raised when user input is rejected before reaching the store."""
    pass


class InvalidTransitionError(CherryError):
    """Raised when a status change is not allowed from the current status."""
    pass


class StoreError(CherryError):
    """Raised when the relational store fails a read or a write."""
    pass


class CheckoutError(CherryError):
    """Raised when the payment provider fails to create a checkout session."""
    pass
