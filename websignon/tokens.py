"""
A set of tokens (key/secret pairs) used to identify actors during an OAuth
handshake.
"""
from collections import namedtuple

ConsumerToken = namedtuple("ConsumerToken", ["key", "secret"])
"""
Represents a consumer (you).  This key/secret pair is issued by the provider
when the application is registered, and stays the same for the lifetime of the
process.

:Parameters:
    key : `str`
        Identifies the application to the provider
    secret : `str`
        Used to sign communications
"""

RequestToken = namedtuple("RequestToken", ["key", "secret"])
"""
Represents a request for access during authorization.  This key/secret pair
is returned by the provider's request token endpoint.  The key travels through
the user's browser; the secret never does.  Once the user authorizes you, this
token can be traded for an access token via
:func:`~websignon.functions.exchange_for_access_token`.

:Parameters:
    key : `str`
        The temporary token
    secret : `str`
        The temporary token secret
"""
