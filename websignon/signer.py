"""
Builds HMAC-SHA1 signed ``Authorization`` headers for OAuth 1.0a requests.

:Example:
    .. code-block:: python

        from websignon import ConsumerToken
        from websignon.signer import sign_request

        consumer_token = ConsumerToken("key", "secret")
        signed = sign_request(
            consumer_token,
            "POST",
            "https://websignon.warwick.ac.uk/oauth/requestToken",
            callback="http://localhost:8000/authorised",
            params={"scope": "urn:websignon.warwick.ac.uk:sso:service"},
        )
        requests.post(
            signed.url,
            params=signed.params,
            headers={"Authorization": signed.authorization},
        )

Every call generates a new nonce and timestamp, so no two signed requests
share a signature.
"""
from collections import namedtuple
from urllib.parse import urlparse

from oauthlib.common import generate_nonce, generate_timestamp
from oauthlib.oauth1 import Client
from oauthlib.oauth1.rfc5849 import parameters, signature

from .errors import SigningError

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"

SignedRequest = namedtuple(
    "SignedRequest", ["method", "url", "oauth_params", "params", "authorization"]
)
"""
A single signed request.  ``params`` were part of the signature and must be
sent along with it (as the query string) unchanged.

:Parameters:
    method : `str`
        Uppercased HTTP method
    url : `str`
        Target URL, without a query string
    oauth_params : `list` of `tuple`
        Every ``oauth_*`` parameter, ``oauth_signature`` last
    params : `list` of `tuple`
        Additional request parameters covered by the signature
    authorization : `str`
        Value for the ``Authorization`` header
"""


def _base_string_uri(url):
    try:
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("scheme and host are required")
        if parsed.query or parsed.fragment:
            raise ValueError("query strings and fragments are not signed here")
        return signature.base_string_uri(url)
    except (AttributeError, TypeError, ValueError) as e:
        raise SigningError("Cannot sign a request to {0!r}: {1}".format(url, e))


def signature_base_string(method, url, request_params):
    """
    Serializes a request into the string that gets signed (RFC 5849 3.4.1).

    :Parameters:
        method : `str`
            HTTP method, in any case
        url : `str`
            Target URL; scheme and host are lowercased, default ports dropped
        request_params : `list` of `tuple`
            Protocol and request parameters, unencoded and in any order

    :Returns:
        The signature base string.
    """
    base_uri = _base_string_uri(url)
    try:
        normalized = signature.normalize_parameters(
            [(str(key), str(value)) for key, value in request_params]
        )
    except ValueError as e:
        raise SigningError("Cannot encode request parameters: {0}".format(e))
    return signature.signature_base_string(method, base_uri, normalized)


def sign_request(
    consumer_token,
    method,
    url,
    request_token=None,
    verifier=None,
    callback=None,
    params=None,
    nonce=None,
    timestamp=None,
):
    """
    Signs a single request.

    :Parameters:
        consumer_token : :class:`~websignon.ConsumerToken`
            A key/secret pair representing you, the consumer.
        method : `str`
            HTTP method of the request
        url : `str`
            Scheme, host and path of the endpoint; no query string
        request_token : :class:`~websignon.RequestToken`
            Temporary token to bind, if any.  Its secret joins the signing key.
        verifier : `str`
            Verifier returned to the callback.  Requires ``request_token``.
        callback : `str`
            Callback URL, for the request token stage only.
        params : `dict`
            Additional request parameters to cover with the signature.
        nonce : `str`
            Fixed nonce.  Only meant for reproducing known signatures.
        timestamp : `str`
            Fixed timestamp.  Only meant for reproducing known signatures.

    :Returns:
        A :class:`SignedRequest`.
    """
    if consumer_token is None or not consumer_token.key or not consumer_token.secret:
        raise SigningError("A consumer key and secret are required for signing.")
    if verifier is not None and request_token is None:
        raise SigningError("A verifier can only be signed with its request token.")
    if request_token is not None and not request_token.key:
        raise SigningError("The request token to bind has no key.")

    oauth_params = [
        ("oauth_consumer_key", consumer_token.key),
        ("oauth_nonce", nonce or generate_nonce()),
        ("oauth_signature_method", SIGNATURE_METHOD),
        ("oauth_timestamp", str(timestamp or generate_timestamp())),
        ("oauth_version", OAUTH_VERSION),
    ]
    if request_token is not None:
        oauth_params.append(("oauth_token", request_token.key))
    if verifier is not None:
        oauth_params.append(("oauth_verifier", verifier))
    if callback is not None:
        oauth_params.append(("oauth_callback", callback))

    request_params = [(str(key), str(value)) for key, value in (params or {}).items()]

    base_string = signature_base_string(method, url, oauth_params + request_params)
    client = Client(
        consumer_token.key,
        client_secret=consumer_token.secret,
        resource_owner_secret=request_token.secret if request_token else None,
    )
    oauth_params.append(
        ("oauth_signature", signature.sign_hmac_sha1_with_client(base_string, client))
    )

    headers = parameters.prepare_headers(oauth_params)
    return SignedRequest(
        method.upper(), url, oauth_params, request_params, headers["Authorization"]
    )


def sign(consumer_token, method, url, **kwargs):
    """
    Same as :func:`sign_request`, returning only the ``Authorization`` header
    value.
    """
    return sign_request(consumer_token, method, url, **kwargs).authorization
