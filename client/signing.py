"""Request signing strategies: which identity headers go on every backend call."""

from abc import ABC, abstractmethod

from client.fingerprint import generate_fingerprint, new_session_id


class RequestSigner(ABC):
    """Adds identity headers to outgoing requests."""

    @property
    @abstractmethod
    def mode(self) -> str: ...

    @abstractmethod
    def headers(self) -> dict[str, str]: ...


class AnonymousSigner(RequestSigner):
    mode = "anonymous"

    def headers(self) -> dict[str, str]:
        return {}


class BearerTokenSigner(RequestSigner):
    """Authenticated variant. The token changes on login/logout."""

    mode = "auth"

    def __init__(self, token: str | None = None):
        self.token = token

    def set_token(self, token: str | None) -> None:
        self.token = token or None

    def headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}


class FingerprintSigner(RequestSigner):
    """No-auth variant: identifies the install by fingerprint plus a per-process session id."""

    mode = "fingerprint"

    def __init__(self, fingerprint: str | None = None, session_id: str | None = None):
        self.fingerprint = fingerprint or generate_fingerprint()
        self.session_id = session_id or new_session_id(self.fingerprint)

    def headers(self) -> dict[str, str]:
        return {
            "X-Session-ID": self.session_id,
            "X-Fingerprint": self.fingerprint,
        }
