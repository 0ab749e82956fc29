# -*- coding: utf-8 -*-
import os
import tempfile
from datetime import timedelta
from io import StringIO
from unittest.mock import patch, Mock

from django.apps import apps
from django.conf import settings
from django.core.management import call_command
from django.db.models.query import QuerySet
from django.test import TestCase, SimpleTestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from oauthlib.oauth1 import Client
from oauthlib.oauth1.rfc5849 import signature, utils

from Cinnamon.crons import ClearPendingSecrets
from Cinnamon.settings.helpers import load_env_file, sentry_before_send
from websignon import ConsumerToken, SecretRelay
from websignon.errors import ConfigError, NotFoundError
from websignon.signer import signature_base_string

from .models import PendingSecret
from .oauth import load_consumer_token
from .relay import DatabaseSecretRelay, get_secret_relay

ACCESS_TOKEN_BODY = "oauth_token=A1&oauth_token_secret=AS1"


def provider_response(content, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.content = content.encode("utf-8")
    response.text = content
    return response


def header_params(authorization):
    return {
        key: utils.unescape(value)
        for key, value in utils.parse_authorization_header(authorization)
    }


def make_stale(token):
    PendingSecret.objects.filter(token=token).update(
        created=timezone.now() - timedelta(seconds=601)
    )


class DatabaseSecretRelayTestCase(TestCase):
    def setUp(self):
        self.relay = DatabaseSecretRelay(ttl=600)

    def test_take_returns_stored_secret(self):
        self.relay.put("T1", "S1")
        self.relay.put("T2", "S2")

        self.assertEqual(self.relay.take("T1"), "S1")
        self.assertEqual(self.relay.take("T2"), "S2")
        self.assertFalse(PendingSecret.objects.exists())

    def test_take_unknown_token(self):
        with self.assertRaises(NotFoundError):
            self.relay.take("never-stored")

    def test_take_is_single_use(self):
        self.relay.put("T1", "S1")
        self.relay.take("T1")

        with self.assertRaises(NotFoundError):
            self.relay.take("T1")

    def test_taken_between_read_and_delete(self):
        """
        When another callback consumes the row after it was read, nothing is
        deleted and this take is a miss.
        """
        self.relay.put("T1", "S1")
        first = QuerySet.first

        def first_then_taken(queryset):
            pending = first(queryset)
            PendingSecret.objects.filter(token="T1").delete()
            return pending

        with patch.object(QuerySet, "first", first_then_taken):
            with self.assertRaises(NotFoundError):
                self.relay.take("T1")

    def test_overwritten_between_read_and_delete(self):
        """
        A put for the same token landing after the read keeps its new secret,
        and the stale read does not hand out the old one.
        """
        self.relay.put("T1", "S1")
        first = QuerySet.first

        def first_then_overwritten(queryset):
            pending = first(queryset)
            DatabaseSecretRelay(ttl=600).put("T1", "S1-again")
            return pending

        with patch.object(QuerySet, "first", first_then_overwritten):
            with self.assertRaises(NotFoundError):
                self.relay.take("T1")

        self.assertEqual(self.relay.take("T1"), "S1-again")

    def test_put_overwrites(self):
        self.relay.put("T1", "S1")
        make_stale("T1")
        self.relay.put("T1", "S1-again")

        self.assertEqual(PendingSecret.objects.count(), 1)
        # Storing again restarts the clock.
        self.assertEqual(self.relay.take("T1"), "S1-again")

    def test_expired_secret(self):
        self.relay.put("T1", "S1")
        make_stale("T1")

        with self.assertRaises(NotFoundError):
            self.relay.take("T1")
        self.assertFalse(PendingSecret.objects.exists())

    def test_sweep(self):
        self.relay.put("T1", "S1")
        self.relay.put("T2", "S2")
        make_stale("T1")

        self.assertEqual(self.relay.sweep(), 1)
        self.assertEqual(
            list(PendingSecret.objects.values_list("token", flat=True)), ["T2"]
        )


class GetSecretRelayTestCase(TestCase):
    def test_default_backend(self):
        relay = get_secret_relay()

        self.assertIsInstance(relay, DatabaseSecretRelay)
        self.assertEqual(relay.ttl, settings.CINNAMON_SECRET_RELAY_TTL)
        self.assertIs(get_secret_relay(), relay)

    @override_settings(
        CINNAMON_SECRET_RELAY="websignon.relay.SecretRelay",
        CINNAMON_SECRET_RELAY_TTL=60,
    )
    def test_in_memory_backend_is_shared(self):
        relay = get_secret_relay()

        self.assertIsInstance(relay, SecretRelay)
        self.assertEqual(relay.ttl, 60)
        relay.put("T1", "S1")
        self.assertEqual(get_secret_relay().take("T1"), "S1")


class ClearPendingSecretsTestCase(TestCase):
    def setUp(self):
        relay = DatabaseSecretRelay()
        relay.put("abandoned", "S1")
        relay.put("in-progress", "S2")
        make_stale("abandoned")

    def test_command(self):
        out = StringIO()
        call_command("clear_pending_secrets", stdout=out)

        self.assertIn("1 expired pending secrets deleted.", out.getvalue())
        self.assertEqual(
            list(PendingSecret.objects.values_list("token", flat=True)),
            ["in-progress"],
        )

    def test_cron_job(self):
        ClearPendingSecrets().do()

        self.assertFalse(PendingSecret.objects.filter(token="abandoned").exists())
        self.assertTrue(PendingSecret.objects.filter(token="in-progress").exists())


class ConsumerTokenTestCase(SimpleTestCase):
    def test_loaded_at_startup(self):
        self.assertEqual(
            apps.get_app_config("sso").consumer_token,
            ConsumerToken("test-consumer-key", "test-consumer-secret"),
        )

    @override_settings(
        CINNAMON_OAUTH_CONSUMER_KEY=" key ", CINNAMON_OAUTH_CONSUMER_SECRET="secret"
    )
    def test_load_consumer_token(self):
        self.assertEqual(load_consumer_token(), ConsumerToken("key", "secret"))

    @override_settings(CINNAMON_OAUTH_CONSUMER_KEY=None)
    def test_missing_key(self):
        with self.assertRaises(ConfigError) as cm:
            load_consumer_token()

        self.assertIn("CONSUMER_KEY", str(cm.exception))

    @override_settings(
        CINNAMON_OAUTH_CONSUMER_KEY="key", CINNAMON_OAUTH_CONSUMER_SECRET="   "
    )
    def test_blank_secret(self):
        with self.assertRaises(ConfigError) as cm:
            load_consumer_token()

        self.assertIn("CONSUMER_SECRET", str(cm.exception))


@patch("Cinnamon.sso.oauth.capture_exception")
@patch("websignon.functions.requests.post")
class OAuthViewsTestCase(TestCase):
    def callback_url(self, **params):
        query = {"oauth_token": "T1", "user_id": "U", "oauth_verifier": "V1"}
        query.update(params)
        return reverse("oauth_callback") + "?" + "&".join(
            "{0}={1}".format(key, value) for key, value in query.items() if value
        )

    def test_login_redirects_to_provider(self, mock_post, mock_capture):
        mock_post.return_value = provider_response(
            "oauth_token=T1&oauth_token_secret=S1&oauth_callback_confirmed=true"
        )

        response = self.client.get(reverse("oauth_login"))

        self.assertEqual(response.status_code, 302)
        self.assertEqual(
            response["Location"],
            settings.CINNAMON_OAUTH_AUTHORIZE_URL
            + "?oauth_token=T1&oauth_callback=http%3A%2F%2Ftestserver%2Fauthorised",
        )
        self.assertEqual(PendingSecret.objects.get(token="T1").secret, "S1")

        kwargs = mock_post.call_args.kwargs
        self.assertEqual(kwargs["url"], settings.CINNAMON_OAUTH_REQUEST_TOKEN_URL)
        self.assertEqual(
            kwargs["params"],
            [
                ("scope", settings.CINNAMON_OAUTH_SCOPE),
                ("expiry", settings.CINNAMON_OAUTH_EXPIRY),
            ],
        )
        self.assertEqual(
            header_params(kwargs["headers"]["Authorization"])["oauth_callback"],
            settings.CINNAMON_OAUTH_CALLBACK_URL,
        )

    def test_full_login(self, mock_post, mock_capture):
        """
        The access token body comes back verbatim, and the access token request
        was signed with the secret handed out for T1.
        """
        mock_post.side_effect = [
            provider_response("oauth_token=T1&oauth_token_secret=S1"),
            provider_response(ACCESS_TOKEN_BODY),
        ]

        self.client.get(reverse("oauth_login"))
        response = self.client.get(self.callback_url())

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "text/plain")
        self.assertEqual(response.content.decode("utf-8"), ACCESS_TOKEN_BODY)
        self.assertFalse(PendingSecret.objects.exists())

        access_url = settings.CINNAMON_OAUTH_ACCESS_TOKEN_URL
        kwargs = mock_post.call_args_list[1].kwargs
        self.assertEqual(kwargs["url"], access_url)
        authorization = kwargs["headers"]["Authorization"]
        params = header_params(authorization)
        self.assertEqual(params["oauth_token"], "T1")
        self.assertEqual(params["oauth_verifier"], "V1")

        base_string = signature_base_string(
            "POST",
            access_url,
            [(key, value) for key, value in params.items() if key != "oauth_signature"],
        )
        self.assertEqual(
            params["oauth_signature"],
            signature.sign_hmac_sha1_with_client(
                base_string,
                Client(
                    settings.CINNAMON_OAUTH_CONSUMER_KEY,
                    client_secret=settings.CINNAMON_OAUTH_CONSUMER_SECRET,
                    resource_owner_secret="S1",
                ),
            ),
        )
        mock_capture.assert_not_called()

    def test_callback_missing_parameters(self, mock_post, mock_capture):
        for name in ("oauth_token", "user_id", "oauth_verifier"):
            response = self.client.get(self.callback_url(**{name: ""}))
            self.assertEqual(response.status_code, 400)

        mock_post.assert_not_called()

    def test_callback_without_pending_secret(self, mock_post, mock_capture):
        response = self.client.get(self.callback_url())

        self.assertEqual(response.status_code, 400)
        self.assertIn(b"no longer valid", response.content)
        mock_post.assert_not_called()
        mock_capture.assert_not_called()

    def test_replayed_callback(self, mock_post, mock_capture):
        mock_post.return_value = provider_response(ACCESS_TOKEN_BODY)
        DatabaseSecretRelay().put("T1", "S1")

        self.assertEqual(self.client.get(self.callback_url()).status_code, 200)
        self.assertEqual(self.client.get(self.callback_url()).status_code, 400)
        self.assertEqual(mock_post.call_count, 1)

    def test_expired_pending_secret(self, mock_post, mock_capture):
        DatabaseSecretRelay().put("T1", "S1")
        make_stale("T1")

        response = self.client.get(self.callback_url())

        self.assertEqual(response.status_code, 400)
        mock_post.assert_not_called()

    def test_access_token_provider_error(self, mock_post, mock_capture):
        mock_post.return_value = provider_response("oauth_problem=token_rejected", 401)
        DatabaseSecretRelay().put("T1", "S1")

        response = self.client.get(self.callback_url())

        self.assertEqual(response.status_code, 502)
        self.assertIn(b"did not respond properly", response.content)
        mock_capture.assert_called_once()

    def test_malformed_request_token_response(self, mock_post, mock_capture):
        mock_post.return_value = provider_response("oauth_token=T1")

        response = self.client.get(reverse("oauth_login"))

        self.assertEqual(response.status_code, 502)
        self.assertFalse(PendingSecret.objects.exists())
        mock_capture.assert_called_once()


class SentryScrubTestCase(SimpleTestCase):
    def test_secrets_are_masked(self):
        event = {
            "request": {
                "headers": {
                    "Authorization": 'OAuth oauth_consumer_key="k", oauth_signature="abc%3D"',
                    "User-Agent": "Cinnamon",
                },
                "query_string": "oauth_token=T1&oauth_verifier=V1&user_id=U",
            },
            "extra": {
                "body": "oauth_token=T1&oauth_token_secret=S1",
                "secret": "S1",
            },
        }

        scrubbed = sentry_before_send(event, {})

        self.assertEqual(scrubbed["request"]["headers"]["Authorization"], "*****")
        self.assertEqual(scrubbed["request"]["headers"]["User-Agent"], "Cinnamon")
        self.assertEqual(
            scrubbed["request"]["query_string"],
            "oauth_token=T1&oauth_verifier=*****&user_id=U",
        )
        self.assertEqual(
            scrubbed["extra"]["body"], "oauth_token=T1&oauth_token_secret=*****"
        )
        self.assertEqual(scrubbed["extra"]["secret"], "*****")

    def test_quoted_header_values_are_masked(self):
        scrubbed = sentry_before_send(
            {"message": 'Authorization: OAuth oauth_signature="abc%3D"'}, {}
        )

        self.assertEqual(
            scrubbed["message"], 'Authorization: OAuth oauth_signature="*****"'
        )


class EnvFileTestCase(SimpleTestCase):
    def setUp(self):
        env_dir = tempfile.TemporaryDirectory()
        self.addCleanup(env_dir.cleanup)
        self.path = os.path.join(env_dir.name, ".env")
        with open(self.path, "w") as env_file:
            env_file.write("CONSUMER_KEY=file-key\nCONSUMER_SECRET=file-secret\n")

    def test_values_are_loaded(self):
        with patch.dict(os.environ, clear=True):
            self.assertTrue(load_env_file(self.path))
            self.assertEqual(os.environ["CONSUMER_KEY"], "file-key")
            self.assertEqual(os.environ["CONSUMER_SECRET"], "file-secret")

    def test_environment_wins_over_file(self):
        with patch.dict(os.environ, {"CONSUMER_KEY": "docker-key"}, clear=True):
            load_env_file(self.path)
            self.assertEqual(os.environ["CONSUMER_KEY"], "docker-key")
            self.assertEqual(os.environ["CONSUMER_SECRET"], "file-secret")

    def test_missing_file(self):
        with patch.dict(os.environ, clear=True):
            self.assertFalse(load_env_file(self.path + ".missing"))
            self.assertNotIn("CONSUMER_KEY", os.environ)
