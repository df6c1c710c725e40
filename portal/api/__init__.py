"""Remote LMS API gateway."""

from portal.api.client import ApiClient
from portal.api.errors import ApiError
from portal.api.session import AuthSession


__all__ = ["ApiClient", "ApiError", "AuthSession"]
