import logging

from sentry_sdk import capture_exception

from django.apps import apps
from django.conf import settings
from django.core.exceptions import SuspiciousOperation
from django.http import HttpResponse, HttpResponseRedirect
from django.utils.translation import gettext as _
from django.views.generic.base import View

from websignon import ConsumerToken, Handshaker
from websignon.errors import ConfigError, NotFoundError, ProviderError

from .relay import get_secret_relay

logger = logging.getLogger(__name__)

CALLBACK_PARAMETERS = ("oauth_token", "user_id", "oauth_verifier")


def load_consumer_token():
    """
    Build the consumer token from settings. Called once, when the app starts;
    missing credentials stop the server from starting at all.
    """
    key = settings.CINNAMON_OAUTH_CONSUMER_KEY
    secret = settings.CINNAMON_OAUTH_CONSUMER_SECRET

    missing = [
        name
        for name, value in (("CONSUMER_KEY", key), ("CONSUMER_SECRET", secret))
        if not value or not value.strip()
    ]
    if missing:
        raise ConfigError(
            "Missing OAuth consumer credentials: {names}.".format(
                names=", ".join(missing)
            )
        )

    return ConsumerToken(key.strip(), secret.strip())


def _get_handshaker():
    consumer_token = apps.get_app_config("sso").consumer_token
    handshaker = Handshaker(
        consumer_token,
        get_secret_relay(),
        callback=settings.CINNAMON_OAUTH_CALLBACK_URL,
        request_token_endpoint=settings.CINNAMON_OAUTH_REQUEST_TOKEN_URL,
        authorize_endpoint=settings.CINNAMON_OAUTH_AUTHORIZE_URL,
        access_token_endpoint=settings.CINNAMON_OAUTH_ACCESS_TOKEN_URL,
        params={
            "scope": settings.CINNAMON_OAUTH_SCOPE,
            "expiry": settings.CINNAMON_OAUTH_EXPIRY,
        },
        user_agent=settings.CINNAMON_OAUTH_USER_AGENT,
        timeout=settings.CINNAMON_OAUTH_TIMEOUT,
    )
    return handshaker


def _login_failed(message, status):
    return HttpResponse(message, status=status, content_type="text/plain")


def _provider_failed(e):
    logger.warning(e)
    capture_exception(e)
    return _login_failed(
        # Translators: Shown when the sign-on provider could not be reached or gave a bad answer.
        _("Signing in failed because the sign-on service did not respond properly. Please start again from /."),
        502,
    )


class OAuthInitializeView(View):
    """
    Ask the provider for a temporary key/secret for the user, and redirect
    them to the provider to confirm authorization.
    """

    def get(self, request, *args, **kwargs):
        handshaker = _get_handshaker()
        logger.info("Handshaker obtained from OAuthInitialize.")

        try:
            redirect, request_token = handshaker.initiate()
        except ProviderError as e:
            return _provider_failed(e)

        logger.info(
            "Handshaker initiated for request token {token}.".format(
                token=request_token.key
            )
        )
        return HttpResponseRedirect(redirect)


class OAuthCallbackView(View):
    """
    Receive the redirect from the provider and exchange the authorized
    request token for an access token.
    """

    def get(self, request, *args, **kwargs):
        for name in CALLBACK_PARAMETERS:
            if not request.GET.get(name):
                raise SuspiciousOperation(
                    "Callback is missing {name}.".format(name=name)
                )

        oauth_token = request.GET["oauth_token"]
        user_id = request.GET["user_id"]
        oauth_verifier = request.GET["oauth_verifier"]

        logger.info("Request token authorized: {token}".format(token=oauth_token))
        logger.info("User ID: {user_id}".format(user_id=user_id))

        handshaker = _get_handshaker()
        logger.info("Handshaker obtained for OAuthCallback.")

        try:
            access_token = handshaker.complete(oauth_token, oauth_verifier)
        except NotFoundError as e:
            logger.warning(e)
            return _login_failed(
                # Translators: Shown when a sign-in link was already used, has expired, or belongs to another login.
                _("This sign-in link is no longer valid. Please start again from /."),
                400,
            )
        except ProviderError as e:
            return _provider_failed(e)

        logger.info("Access token received.")
        return HttpResponse(access_token, content_type="text/plain")
