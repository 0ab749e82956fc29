"""
A client for managing an OAuth 1.0a handshake with a single sign-on provider.

:Example:
    .. code-block:: python

        from websignon import ConsumerToken, Handshaker, SecretRelay

        consumer_token = ConsumerToken(
            config.consumer_key, config.consumer_secret)

        handshaker = Handshaker(consumer_token, SecretRelay())

        # Stages A and B -- get a request token and the URL to authorize it
        redirect, request_token = handshaker.initiate()
        print("Point your browser to: %s" % redirect)

        # Stage C -- the provider calls back with the token and a verifier
        access_token = handshaker.complete(oauth_token, oauth_verifier)
"""
import logging

from .functions import (
    ACCESS_TOKEN_URL,
    AUTHORIZE_URL,
    DEFAULT_PARAMS,
    REQUEST_TOKEN_URL,
    TIMEOUT,
    USER_AGENT,
    authorize_url,
    exchange_for_access_token,
    obtain_request_token,
)
from .tokens import RequestToken

logger = logging.getLogger(__name__)

CALLBACK_URL = "http://localhost:8000/authorised"


class Handshaker(object):
    """
    Runs both halves of a login attempt, keeping the request token secret in
    ``relay`` between them.

    :Parameters:
        consumer_token : :class:`~websignon.ConsumerToken`
            A token representing you, the consumer.
        relay : :class:`~websignon.SecretRelay`
            Anything with ``put(token, secret)`` and ``take(token)``.
        callback : `str`
            The local endpoint the provider redirects the user back to.
    """

    def __init__(
        self,
        consumer_token,
        relay,
        callback=CALLBACK_URL,
        request_token_endpoint=REQUEST_TOKEN_URL,
        authorize_endpoint=AUTHORIZE_URL,
        access_token_endpoint=ACCESS_TOKEN_URL,
        params=None,
        user_agent=USER_AGENT,
        timeout=TIMEOUT,
    ):
        self.consumer_token = consumer_token
        self.relay = relay
        self.callback = callback
        self.request_token_endpoint = request_token_endpoint
        self.authorize_endpoint = authorize_endpoint
        self.access_token_endpoint = access_token_endpoint
        self.params = DEFAULT_PARAMS if params is None else params
        self.user_agent = user_agent
        self.timeout = timeout

    def initiate(self):
        """
        Obtains a request token, stores its secret and builds the authorize
        URL.  Nothing is stored if the provider call fails.

        :Returns:
            A `tuple` of two values:

            * a provider URL to direct the user to
            * a :class:`~websignon.RequestToken`
        """
        request_token = obtain_request_token(
            self.request_token_endpoint,
            self.consumer_token,
            self.callback,
            params=self.params,
            user_agent=self.user_agent,
            timeout=self.timeout,
        )
        logger.info("Request token obtained.")

        self.relay.put(request_token.key, request_token.secret)

        redirect = authorize_url(self.authorize_endpoint, request_token, self.callback)
        return redirect, request_token

    def complete(self, oauth_token, verifier):
        """
        Exchanges the authorized ``oauth_token`` for an access token.

        The secret stored by :meth:`initiate` is consumed first, so an unknown,
        expired or replayed token fails with
        :class:`~websignon.errors.NotFoundError` before the provider is
        contacted.

        :Returns:
            The provider's access token response body.
        """
        secret = self.relay.take(oauth_token)
        request_token = RequestToken(oauth_token, secret)

        return exchange_for_access_token(
            self.access_token_endpoint,
            self.consumer_token,
            request_token,
            verifier,
            user_agent=self.user_agent,
            timeout=self.timeout,
        )
