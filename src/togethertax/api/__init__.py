"""Authenticated content API client."""

from togethertax.api.client import (
    ApiClient,
    RequestDescriptor,
    close_api_client,
    get_api_client,
)
from togethertax.api.refresh import (
    RefreshAbortedError,
    RefreshCoordinator,
    RefreshState,
    SessionExpiredError,
)
from togethertax.api.results import ApiResult
from togethertax.api.token_store import (
    FileTokenStore,
    MemoryTokenStore,
    StoredToken,
    TokenStore,
)

__all__ = [
    "ApiClient",
    "ApiResult",
    "FileTokenStore",
    "MemoryTokenStore",
    "RefreshAbortedError",
    "RefreshCoordinator",
    "RefreshState",
    "RequestDescriptor",
    "SessionExpiredError",
    "StoredToken",
    "TokenStore",
    "close_api_client",
    "get_api_client",
]
