"""Provides a collection of utilities for working with a single sign-on
provider's OAuth 1.0a implementation."""
from .errors import (
    ConfigError,
    NotFoundError,
    OAuthException,
    ProviderError,
    SigningError,
)
from .functions import authorize_url, exchange_for_access_token, obtain_request_token
from .handshaker import Handshaker
from .relay import SecretRelay
from .signer import SignedRequest, sign, sign_request
from .tokens import ConsumerToken, RequestToken

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "authorize_url",
    "ConfigError",
    "ConsumerToken",
    "exchange_for_access_token",
    "Handshaker",
    "NotFoundError",
    "OAuthException",
    "obtain_request_token",
    "ProviderError",
    "RequestToken",
    "SecretRelay",
    "sign",
    "sign_request",
    "SignedRequest",
    "SigningError",
]
