"""Backend clients for the persuasion API.

Supports the remote HTTP backend (bearer-token, fingerprint or anonymous
signing) and an in-process mock backend, selected via configuration.
"""

from client.base import PersuasionBackend
from client.errors import APIError, PaymentRequiredError
from client.factory import get_backend, reset_backend
from client.signing import AnonymousSigner, BearerTokenSigner, FingerprintSigner, RequestSigner

__all__ = [
    "PersuasionBackend",
    "APIError",
    "PaymentRequiredError",
    "get_backend",
    "reset_backend",
    "RequestSigner",
    "AnonymousSigner",
    "BearerTokenSigner",
    "FingerprintSigner",
]
