"""Error taxonomy for the marketplace API.

Every failure surfaced to a caller is a ``MarketplaceError``; the handler
registered in ``foodlink.main`` renders it as ``{"error": message}`` with the
class's status code. Only authentication failures use 401.
"""
from fastapi import status


class MarketplaceError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"

    def __init__(self, message: str = None, headers: dict = None):
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class Unauthenticated(MarketplaceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ProfileNotFound(MarketplaceError):
    default_message = "User profile not found"


class InvalidRole(MarketplaceError):
    default_message = "Invalid user role"


class InvalidPayload(MarketplaceError):
    default_message = "Invalid request body"


class MissingFields(MarketplaceError):
    default_message = "Missing required fields"


class InvalidQuantity(MarketplaceError):
    default_message = "Invalid price or quantity"


class StorageError(MarketplaceError):
    default_message = "Storage operation failed"


class RateLimited(MarketplaceError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many submissions. Please try again later."
