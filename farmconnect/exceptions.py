"""Error taxonomy shared by services and routes.

Services raise these instead of ``HTTPException`` so that they can be used
outside a request. ``farmconnect.main`` renders every ``MarketplaceError`` as
``{"detail": message}`` with the class's status code.
"""


class MarketplaceError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(MarketplaceError):
    status_code = 400
    default_message = "Invalid request"


class EmptyCart(ValidationError):
    default_message = "Cart is empty"


class MissingCustomer(MarketplaceError):
    status_code = 401
    default_message = "Customer identity is required"


class NotFoundError(MarketplaceError):
    status_code = 404
    default_message = "Not found"


class AuthorizationError(MarketplaceError):
    status_code = 403
    default_message = "Not authorized"


class ConflictError(MarketplaceError):
    status_code = 400
    default_message = "Invalid state transition"


class PersistenceError(MarketplaceError):
    """Storage failure. The whole operation was rolled back and may be retried."""

    status_code = 500
    default_message = "Failed to persist changes"
