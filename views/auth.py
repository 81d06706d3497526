"""Login state and the on-disk token store."""

import json
import logging
from pathlib import Path

from client.base import PersuasionBackend
from client.errors import APIError
from config import settings
from schemas import User
from views.forms import LoginForm

logger = logging.getLogger(__name__)


class TokenStore:
    """Keeps the bearer token in a small JSON file between runs."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or settings.token_store_path)

    def load(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable token store %s: %s", self.path, e)
            return None
        return data.get("auth_token") if isinstance(data, dict) else None

    def save(self, token: str) -> None:
        self.path.write_text(json.dumps({"auth_token": token}), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class AuthState:
    def __init__(self, backend: PersuasionBackend, store: TokenStore | None = None):
        self.backend = backend
        self.store = store or TokenStore()
        self.user: User | None = None
        self.loading = False
        self.error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def _set_token(self, token: str | None) -> None:
        self.backend.set_token(token)
        if token:
            self.store.save(token)
        else:
            self.store.clear()

    async def restore(self) -> User | None:
        """Resume a stored login. A token the backend rejects is discarded."""
        token = self.store.load()
        if not token:
            return None
        self.loading = True
        self.backend.set_token(token)
        try:
            data = await self.backend.get_profile()
        except APIError as e:
            logger.info("Stored token rejected: %s", e.message)
            self._set_token(None)
            return None
        finally:
            self.loading = False
        self.user = User.from_api((data or {}).get("user") or {})
        return self.user

    async def _authenticate(self, action: str, form: LoginForm) -> User | None:
        self.loading = True
        self.error = None
        try:
            call = self.backend.login if action == "login" else self.backend.register
            data = await call(form.email, form.password)
        except APIError as e:
            logger.error("%s failed for %s: %s", action.capitalize(), form.email, e.message)
            self.error = e.message
            return None
        finally:
            self.loading = False

        data = data or {}
        self._set_token(data.get("access_token"))
        self.user = User.from_api(data.get("user") or {})
        logger.info("Signed in as %s", self.user.email)
        return self.user

    async def login(self, form: LoginForm) -> User | None:
        return await self._authenticate("login", form)

    async def register(self, form: LoginForm) -> User | None:
        return await self._authenticate("register", form)

    def logout(self) -> None:
        self._set_token(None)
        self.user = None

    def snapshot(self) -> dict:
        return {
            "authenticated": self.is_authenticated,
            "user": self.user.to_dict() if self.user else None,
            "loading": self.loading,
            "error": self.error,
        }
