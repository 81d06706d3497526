"""Backend factory: picks the HTTP or mock backend based on config."""

import logging

from client.base import PersuasionBackend
from config import settings

logger = logging.getLogger(__name__)

# Cache backend instance
_backend: PersuasionBackend | None = None


def get_backend(force_new: bool = False) -> PersuasionBackend:
    """Get the configured backend.

    Supports:
    - auth: HTTP backend signing requests with a bearer token (default)
    - fingerprint: HTTP backend sending X-Session-ID / X-Fingerprint
    - anonymous: HTTP backend with no identity headers
    - mock: in-process backend over an async SQLite store

    Args:
        force_new: If True, create a new instance instead of using cached.

    Returns:
        Configured PersuasionBackend instance.
    """
    global _backend

    if _backend is not None and not force_new:
        return _backend

    mode = settings.backend_mode.lower()

    if mode == "mock":
        from client.mock import MockBackend

        _backend = MockBackend()
        logger.info("Using mock backend: %s", settings.mock_database_url)
        return _backend

    from client.http import HTTPBackend
    from client.signing import AnonymousSigner, BearerTokenSigner, FingerprintSigner

    if mode == "fingerprint":
        signer = FingerprintSigner()
    elif mode == "anonymous":
        signer = AnonymousSigner()
    else:
        # Default to bearer-token auth
        signer = BearerTokenSigner()

    _backend = HTTPBackend(
        base_url=settings.api_base_url,
        signer=signer,
        timeout=settings.request_timeout,
    )
    logger.info("Using HTTP backend (%s): %s", signer.mode, settings.api_base_url)
    return _backend


def reset_backend():
    """Reset the cached backend instance.

    Useful for testing or when configuration changes.
    """
    global _backend
    _backend = None
