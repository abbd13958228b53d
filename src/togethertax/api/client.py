# API Client — authenticated HTTP client for the content API with token refresh.
# Created: 2026-10-19

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import IO, Any

import httpx
from pydantic import ValidationError

from togethertax.api.refresh import RefreshAbortedError, RefreshCoordinator, SessionExpiredError
from togethertax.api.results import (
    RETRY_FAILED_MESSAGE,
    SESSION_EXPIRED_MESSAGE,
    STATUS_TIMEOUT,
    STATUS_TRANSPORT_ERROR,
    STATUS_UNAUTHORIZED,
    TIMEOUT_MESSAGE,
    ApiResult,
    http_error_message,
)
from togethertax.api.schemas import RefreshResponse
from togethertax.api.token_store import FileTokenStore, StoredToken, TokenStore
from togethertax.config import API_ENDPOINTS, Settings, get_settings

logger = logging.getLogger(__name__)

# Called with the login path after the session has been cleared.
SessionExpiredHook = Callable[[str], Awaitable[None] | None]

FileContent = bytes | IO[bytes]
FileInput = FileContent | tuple[str, FileContent] | tuple[str, FileContent, str]

_BODYLESS_METHODS = frozenset({"GET", "HEAD"})


@dataclass(frozen=True)
class RequestDescriptor:
    """One logical call: where to send it and exactly what to send.

    ``content`` is the already-encoded body so that a retry sends identical
    bytes.
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    content: bytes | None = None
    timeout: float = 10.0
    skip_auth_refresh: bool = False

    @property
    def authorization(self) -> str | None:
        return self.headers.get("Authorization")

    def with_token(self, token: str) -> RequestDescriptor:
        headers = dict(self.headers)
        headers["Authorization"] = f"Bearer {token}"
        return replace(self, headers=headers)


class ApiClient:
    """HTTP client for the content API.

    Attaches the stored bearer token to every call, enforces a per-call
    deadline and recovers from an expired access token by refreshing it once
    (shared across concurrent callers) and replaying the request.

    Every public call returns an :class:`ApiResult`; failures never raise.

    Usage::

        async with ApiClient() as api:
            result = await api.get("/insights?page=1&limit=9")
            if result.ok:
                ...
    """

    def __init__(
        self,
        settings: Settings | None = None,
        token_store: TokenStore | None = None,
        coordinator: RefreshCoordinator | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        on_session_expired: SessionExpiredHook | None = None,
    ):
        self.settings = settings or get_settings()
        self.store: TokenStore = token_store or FileTokenStore()
        self.refresh = coordinator or RefreshCoordinator()
        self.base_url = self.settings.api_base_url.rstrip("/")
        self.timeout = self.settings.api_timeout
        self._on_session_expired = on_session_expired
        # The cookie jar carries the refresh-token cookie between calls.
        self._http = httpx.AsyncClient(transport=transport, timeout=self.timeout)

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # -- token helpers ------------------------------------------------------

    def get_auth_token(self) -> str | None:
        stored = self.store.read()
        return stored.access_token if stored else None

    def set_auth_token(self, token: str, remember_me: bool = False) -> None:
        """Persist a newly issued access token."""
        self.store.write(StoredToken.issue(token, remember_me))

    # -- public surface -----------------------------------------------------

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        skip_auth_refresh: bool = False,
    ) -> ApiResult:
        """Send a JSON request to *path* (relative to the API base URL)."""
        method = method.upper()
        merged = dict(headers or {})
        if method not in _BODYLESS_METHODS or body is not None:
            merged["Content-Type"] = "application/json"

        content = None
        if body is not None:
            content = json.dumps(body, ensure_ascii=False).encode("utf-8")

        descriptor = RequestDescriptor(
            method=method,
            url=self._url(path),
            headers=merged,
            content=content,
            timeout=timeout if timeout is not None else self.timeout,
            skip_auth_refresh=skip_auth_refresh,
        )
        return await self._execute(descriptor)

    async def get(self, path: str, **options: Any) -> ApiResult:
        return await self.request(path, method="GET", **options)

    async def post(self, path: str, body: Any = None, **options: Any) -> ApiResult:
        return await self.request(path, method="POST", body=body, **options)

    async def patch(self, path: str, body: Any = None, **options: Any) -> ApiResult:
        return await self.request(path, method="PATCH", body=body, **options)

    async def delete(self, path: str, **options: Any) -> ApiResult:
        return await self.request(path, method="DELETE", **options)

    async def upload_file(self, path: str, file: FileInput, field_name: str = "file") -> ApiResult:
        """Upload *file* as multipart/form-data under *field_name*.

        The multipart body and its boundary header are produced by httpx once;
        a retry after token refresh re-sends the same bytes.
        """
        url = self._url(path)
        encoded = httpx.Request("POST", url, files={field_name: file})
        content = encoded.read()
        descriptor = RequestDescriptor(
            method="POST",
            url=url,
            headers={"Content-Type": encoded.headers["Content-Type"]},
            content=content,
            timeout=self.timeout,
        )
        return await self._execute(descriptor)

    # -- execution ----------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def _execute(self, descriptor: RequestDescriptor) -> ApiResult:
        token = self.get_auth_token()
        if token:
            descriptor = descriptor.with_token(token)

        result = await self._attempt(descriptor)
        if result.status != STATUS_UNAUTHORIZED or not token or descriptor.skip_auth_refresh:
            return result

        try:
            new_token = await self.refresh.acquire(self._refresh_access_token)
        except SessionExpiredError as e:
            if e.initiator:
                await self._invalidate_session()
            return ApiResult.failure(SESSION_EXPIRED_MESSAGE, STATUS_UNAUTHORIZED)
        except RefreshAbortedError:
            return ApiResult.failure(RETRY_FAILED_MESSAGE, STATUS_TRANSPORT_ERROR)

        # Replayed once; a second 401 is returned as-is.
        return await self._attempt(descriptor.with_token(new_token))

    async def _attempt(self, descriptor: RequestDescriptor) -> ApiResult:
        try:
            response = await asyncio.wait_for(self._send(descriptor), descriptor.timeout)
        except (TimeoutError, httpx.TimeoutException):
            logger.warning(
                "%s %s timed out after %.2fs", descriptor.method, descriptor.url, descriptor.timeout
            )
            return ApiResult.failure(TIMEOUT_MESSAGE, STATUS_TIMEOUT)
        except Exception as e:
            logger.warning("%s %s failed: %s", descriptor.method, descriptor.url, e)
            return ApiResult.failure(str(e) or type(e).__name__, STATUS_TRANSPORT_ERROR)
        return self._to_result(response)

    async def _send(self, descriptor: RequestDescriptor) -> httpx.Response:
        request = self._http.build_request(
            descriptor.method,
            descriptor.url,
            headers=descriptor.headers,
            content=descriptor.content,
            timeout=descriptor.timeout,
        )
        return await self._http.send(request)

    @staticmethod
    def _to_result(response: httpx.Response) -> ApiResult:
        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            message = data.get("message") if isinstance(data, dict) else None
            return ApiResult.failure(
                str(message) if message else http_error_message(response.status_code),
                response.status_code,
            )
        return ApiResult.success(data, response.status_code)

    # -- refresh / logout ---------------------------------------------------

    async def _refresh_access_token(self) -> str | None:
        """Exchange the refresh-token cookie for a new access token.

        Returns None on any failure.
        """
        url = self._url(API_ENDPOINTS["auth_refresh"])
        try:
            response = await self._http.post(
                url, headers={"Content-Type": "application/json"}, timeout=self.timeout
            )
        except (httpx.HTTPError, OSError) as e:
            logger.warning("Token refresh failed: %s", e)
            return None

        if not response.is_success:
            logger.warning("Token refresh rejected with HTTP %d", response.status_code)
            return None

        try:
            data = response.json()
        except ValueError:
            logger.warning("Token refresh returned a non-JSON body")
            return None

        try:
            token = RefreshResponse.model_validate(data).access_token
        except ValidationError:
            logger.warning("Token refresh response has no accessToken")
            return None

        stored = self.store.read()
        self.set_auth_token(token, remember_me=stored.remember_me if stored else False)
        return token

    async def _invalidate_session(self) -> None:
        self.store.clear()
        logger.info("Session expired; stored credentials cleared")

        hook = self._on_session_expired
        if hook is None:
            return
        try:
            outcome = hook(self.settings.login_path)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.exception("Session-expired hook failed")


# ---------------------------------------------------------------------------
# Module-level default client
# ---------------------------------------------------------------------------

_client: ApiClient | None = None


def get_api_client() -> ApiClient:
    """Return the process-wide client, creating it on first use."""
    global _client
    if _client is None:
        _client = ApiClient()
    return _client


async def close_api_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
