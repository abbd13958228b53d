# Token Store — persisted access token, expiration, remember-me flag and user.
# Created: 2026-10-19

from __future__ import annotations

import json
import logging
import os
import stat
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, Protocol

from togethertax.config import get_config_dir

logger = logging.getLogger(__name__)

REMEMBER_ME_LIFETIME = timedelta(days=7)
SESSION_LIFETIME = timedelta(minutes=15)

SESSION_FILENAME = "session.json"


def token_lifetime(remember_me: bool) -> timedelta:
    """Nominal lifetime of a newly issued access token."""
    return REMEMBER_ME_LIFETIME if remember_me else SESSION_LIFETIME


@dataclass(frozen=True)
class StoredToken:
    """An access token as kept in the store.

    ``expiration`` is informational. The server decides validity; the client
    only reacts to 401 responses.
    """

    access_token: str
    expiration: datetime
    remember_me: bool = False

    @classmethod
    def issue(
        cls, access_token: str, remember_me: bool = False, now: datetime | None = None
    ) -> StoredToken:
        now = now or datetime.now(UTC)
        return cls(
            access_token=access_token,
            expiration=now + token_lifetime(remember_me),
            remember_me=remember_me,
        )


class TokenStore(Protocol):
    """Storage capability the API client depends on."""

    def read(self) -> StoredToken | None: ...

    def write(self, token: StoredToken) -> None: ...

    def clear(self) -> None: ...

    def read_user(self) -> dict[str, Any] | None: ...

    def write_user(self, user: dict[str, Any]) -> None: ...


class MemoryTokenStore:
    """In-process token store. Nothing survives the process."""

    def __init__(self, token: StoredToken | None = None, user: dict[str, Any] | None = None):
        self._token = token
        self._user = user

    def read(self) -> StoredToken | None:
        return self._token

    def write(self, token: StoredToken) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None
        self._user = None

    def read_user(self) -> dict[str, Any] | None:
        return self._user

    def write_user(self, user: dict[str, Any]) -> None:
        self._user = user


class FileTokenStore:
    """File-based store at ~/.togethertax/session.json.

    Keys mirror the browser storage layout the website uses:
    ``accessToken``, ``tokenExpiration`` (ISO-8601), ``rememberMe``
    (``"true"``/``"false"``) and ``user``. The file is chmod 0600.
    """

    def __init__(self, path: Path | None = None):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path or get_config_dir() / SESSION_FILENAME

    def _load(self) -> dict[str, Any]:
        path = self.path
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Failed to read session file %s: %s", path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict[str, Any]) -> None:
        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)

    def read(self) -> StoredToken | None:
        data = self._load()
        access = data.get("accessToken")
        if not access:
            return None
        try:
            expiration = datetime.fromisoformat(data["tokenExpiration"])
        except (KeyError, TypeError, ValueError):
            expiration = datetime.now(UTC)
        return StoredToken(
            access_token=access,
            expiration=expiration,
            remember_me=data.get("rememberMe") == "true",
        )

    def write(self, token: StoredToken) -> None:
        data = self._load()
        data["accessToken"] = token.access_token
        data["tokenExpiration"] = token.expiration.isoformat()
        data["rememberMe"] = "true" if token.remember_me else "false"
        self._dump(data)
        logger.debug("Saved access token to %s", self.path)

    def clear(self) -> None:
        data = self._load()
        for key in ("accessToken", "tokenExpiration", "rememberMe", "user"):
            data.pop(key, None)
        if data:
            self._dump(data)
        elif self.path.exists():
            self.path.unlink()
        logger.info("Cleared stored session")

    def read_user(self) -> dict[str, Any] | None:
        user = self._load().get("user")
        return user if isinstance(user, dict) else None

    def write_user(self, user: dict[str, Any]) -> None:
        data = self._load()
        data["user"] = user
        self._dump(data)
