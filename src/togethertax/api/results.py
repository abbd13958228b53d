# API results — the two-variant outcome returned by every ApiClient call.
# Created: 2026-10-19

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

TIMEOUT_MESSAGE = "요청 시간이 초과되었습니다."
SESSION_EXPIRED_MESSAGE = "세션이 만료되었습니다. 다시 로그인해주세요."
UNKNOWN_ERROR_MESSAGE = "알 수 없는 오류가 발생했습니다."
RETRY_FAILED_MESSAGE = "요청 재시도 중 오류가 발생했습니다."

STATUS_TRANSPORT_ERROR = 0
STATUS_TIMEOUT = 408
STATUS_UNAUTHORIZED = 401


def http_error_message(status: int) -> str:
    return f"HTTP Error: {status}"


@dataclass(frozen=True)
class ApiResult:
    """Outcome of one logical API call.

    Exactly one of ``data`` / ``error`` is meaningful: a success carries the
    decoded response body (which may itself be ``None`` for empty bodies), a
    failure carries a human-readable message. ``status`` is the HTTP status,
    ``0`` for transport failures and ``408`` for client-side timeouts.

    Build instances with :meth:`success` or :meth:`failure`.
    """

    status: int
    data: Any = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.error is not None and self.data is not None:
            raise ValueError("ApiResult cannot carry both data and error")

    @classmethod
    def success(cls, data: Any, status: int) -> ApiResult:
        return cls(status=status, data=data)

    @classmethod
    def failure(cls, error: str, status: int) -> ApiResult:
        return cls(status=status, error=error or UNKNOWN_ERROR_MESSAGE)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"data": self.data, "status": self.status}
        return {"error": self.error, "status": self.status}
