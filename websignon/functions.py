"""
A set of stateless functions that can be used to complete the three stages of
an OAuth 1.0a handshake with a single sign-on provider.

:Example:
    .. code-block:: python

        from websignon import ConsumerToken, RequestToken
        from websignon.functions import (
            authorize_url,
            exchange_for_access_token,
            obtain_request_token,
        )

        consumer_token = ConsumerToken(
            config.consumer_key, config.consumer_secret)
        callback = "http://localhost:8000/authorised"

        # Stage A: ask the provider for a temporary key/secret
        request_token = obtain_request_token(
            REQUEST_TOKEN_URL, consumer_token, callback)

        # Stage B: send the user to the provider to authorize it
        print("Point your browser to: %s" %
              authorize_url(AUTHORIZE_URL, request_token, callback))
        verifier = input("oauth_verifier: ")

        # Stage C: trade the authorized token for an access token
        access_token = exchange_for_access_token(
            ACCESS_TOKEN_URL, consumer_token, request_token, verifier)
"""
import logging
from urllib.parse import parse_qsl, urlencode

import requests

from .errors import ProviderError
from .signer import sign_request
from .tokens import RequestToken

logger = logging.getLogger(__name__)

REQUEST_TOKEN_URL = "https://websignon.warwick.ac.uk/oauth/requestToken"
AUTHORIZE_URL = "https://websignon.warwick.ac.uk/oauth/authorise"
ACCESS_TOKEN_URL = "https://websignon.warwick.ac.uk/oauth/accessToken"

SCOPE = "urn:websignon.warwick.ac.uk:sso:service"
EXPIRY = "forever"
DEFAULT_PARAMS = {"scope": SCOPE, "expiry": EXPIRY}

USER_AGENT = "Cinnamon"
TIMEOUT = 10


def parse_form_body(content):
    """
    Decodes an ``application/x-www-form-urlencoded`` body.

    :Parameters:
        content : `bytes` | `str`
            The body, as returned by the provider.

    :Returns:
        A `dict` of the decoded fields.  Repeated fields keep the last value.
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProviderError(
                "Expected x-www-form-urlencoded response from the provider, "
                "but got something else: {0!r}".format(content)
            ) from e

    try:
        fields = parse_qsl(content, keep_blank_values=True, strict_parsing=True)
    except ValueError as e:
        raise ProviderError(
            "Expected x-www-form-urlencoded response from the provider, "
            "but got something else: {0!r}".format(content)
        ) from e

    return dict(fields)


def _post(url, signed, user_agent, timeout):
    headers = {"Authorization": signed.authorization, "User-Agent": user_agent}
    logger.info("Sending POST to {url}.".format(url=url))

    try:
        r = requests.post(
            url=url, params=signed.params or None, headers=headers, timeout=timeout
        )
    except requests.RequestException as e:
        raise ProviderError("Request to {0} failed: {1}".format(url, e)) from e

    logger.info("Response code: {status}".format(status=r.status_code))

    if not 200 <= r.status_code < 300:
        raise ProviderError(
            "{0} answered with HTTP {1}: {2!r}".format(url, r.status_code, r.content),
            status_code=r.status_code,
        )

    return r


def obtain_request_token(
    request_token_url,
    consumer_token,
    callback,
    params=None,
    user_agent=USER_AGENT,
    timeout=TIMEOUT,
):
    """
    Asks the provider for a temporary key/secret pair (Stage A).

    :Parameters:
        request_token_url : `str`
            The provider's request token endpoint.
        consumer_token : :class:`~websignon.ConsumerToken`
            A token representing you, the consumer.
        callback : `str`
            Where the provider sends the user after authorization.
        params : `dict`
            Signed request parameters.  Defaults to :data:`DEFAULT_PARAMS`.
        user_agent : `str`
            ``User-Agent`` header for the request.
        timeout : `float`
            Seconds to wait for the provider.

    :Returns:
        A :class:`~websignon.RequestToken`.
    """
    if params is None:
        params = DEFAULT_PARAMS

    signed = sign_request(
        consumer_token, "POST", request_token_url, callback=callback, params=params
    )
    r = _post(request_token_url, signed, user_agent, timeout)

    credentials = parse_form_body(r.content)

    if not credentials:
        raise ProviderError(
            "Expected x-www-form-urlencoded response from the provider, "
            "but got something else: {0!r}".format(r.content)
        )
    elif not credentials.get("oauth_token") or not credentials.get(
        "oauth_token_secret"
    ):
        raise ProviderError(
            "Provider response lacks token information: "
            "{0!r}".format(sorted(credentials))
        )

    return RequestToken(credentials["oauth_token"], credentials["oauth_token_secret"])


def authorize_url(authorize_endpoint, request_token, callback):
    """
    Builds the URL that sends the user to the provider to authorize a request
    token (Stage B).  Makes no network call.

    :Parameters:
        authorize_endpoint : `str`
            The provider's authorization page.
        request_token : :class:`~websignon.RequestToken`
            Token returned by :func:`obtain_request_token`.
        callback : `str`
            Where the provider sends the user afterwards.
    """
    query = urlencode({"oauth_token": request_token.key, "oauth_callback": callback})
    return authorize_endpoint + "?" + query


def exchange_for_access_token(
    access_token_url,
    consumer_token,
    request_token,
    verifier,
    user_agent=USER_AGENT,
    timeout=TIMEOUT,
):
    """
    Trades an authorized request token for an access token (Stage C).

    :Parameters:
        access_token_url : `str`
            The provider's access token endpoint.
        consumer_token : :class:`~websignon.ConsumerToken`
            A key/secret pair representing you, the consumer.
        request_token : :class:`~websignon.RequestToken`
            The authorized token, with the secret issued in Stage A.
        verifier : `str`
            The ``oauth_verifier`` the provider passed to the callback.

    :Returns:
        The provider's response body, uninterpreted.
    """
    signed = sign_request(
        consumer_token,
        "POST",
        access_token_url,
        request_token=request_token,
        verifier=verifier,
    )
    r = _post(access_token_url, signed, user_agent, timeout)

    return r.text
