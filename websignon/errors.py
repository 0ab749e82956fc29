"""
Errors raised while configuring, signing or running an OAuth handshake.

Only :class:`ConfigError` is fatal; it is raised at startup.  Everything else
aborts a single login attempt and leaves the caller free to start over.
"""


class OAuthException(Exception):
    """Base class for every error raised by :mod:`websignon`."""


class ConfigError(OAuthException):
    """Consumer credentials are missing or unusable."""


class SigningError(OAuthException):
    """The signer was handed inputs it cannot sign."""


class ProviderError(OAuthException):
    """
    The provider could not be reached, answered with a non-success status, or
    answered with a body we could not make sense of.

    :Parameters:
        message : `str`
            What went wrong.
        status_code : `int` | `None`
            The provider's HTTP status, when there was a response at all.
    """

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(OAuthException):
    """No pending secret is stored for the request token of a callback."""
