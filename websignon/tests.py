# -*- coding: utf-8 -*-
import threading
import warnings
from unittest import TestCase
from unittest.mock import patch, Mock

import requests
from oauthlib.oauth1 import Client
from oauthlib.oauth1.rfc5849 import signature, utils

from .errors import NotFoundError, ProviderError, SigningError
from .functions import (
    authorize_url,
    exchange_for_access_token,
    obtain_request_token,
    parse_form_body,
)
from .handshaker import Handshaker
from .relay import SecretRelay
from .signer import sign, sign_request, signature_base_string
from .tokens import ConsumerToken, RequestToken

CONSUMER = ConsumerToken("consumer-key", "consumer-secret")
REQUEST_TOKEN_URL = "https://sso.example.org/oauth/requestToken"
AUTHORIZE_URL = "https://sso.example.org/oauth/authorise"
ACCESS_TOKEN_URL = "https://sso.example.org/oauth/accessToken"
CALLBACK = "http://localhost:8000/authorised"
ACCESS_TOKEN_BODY = "oauth_token=A1&oauth_token_secret=AS1"


def header_params(authorization):
    return {
        key: utils.unescape(value)
        for key, value in utils.parse_authorization_header(authorization)
    }


def expected_signature(
    authorization, method, url, params, consumer_secret, token_secret=None
):
    """Recomputes the signature a provider would expect for a header."""
    oauth_params = [
        (key, value)
        for key, value in header_params(authorization).items()
        if key != "oauth_signature"
    ]
    base_string = signature_base_string(method, url, oauth_params + list(params))
    client = Client(
        "unused", client_secret=consumer_secret, resource_owner_secret=token_secret
    )
    return signature.sign_hmac_sha1_with_client(base_string, client)


def provider_response(content, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.content = content.encode("utf-8")
    response.text = content
    return response


class FakeClock(object):
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class SignerTestCase(TestCase):
    def test_photos_example_vector(self):
        """
        The worked example from the OAuth 1.0 specification (photos.example.net)
        reproduces byte for byte.
        """
        consumer = ConsumerToken("dpf43f3p2l4k3l03", "kd94hf93k423kf44")
        token = RequestToken("nnch734d00sl2jdk", "pfkkdhi9sl3r4s00")
        url = "http://photos.example.net/photos"
        params = {"file": "vacation.jpg", "size": "original"}

        signed = sign_request(
            consumer,
            "GET",
            url,
            request_token=token,
            params=params,
            nonce="kllo9940pd9333jh",
            timestamp="1191242096",
        )

        base_string = signature_base_string(
            "get", url, signed.oauth_params[:-1] + list(params.items())
        )
        self.assertEqual(
            base_string,
            "GET&http%3A%2F%2Fphotos.example.net%2Fphotos&file%3Dvacation.jpg"
            "%26oauth_consumer_key%3Ddpf43f3p2l4k3l03"
            "%26oauth_nonce%3Dkllo9940pd9333jh"
            "%26oauth_signature_method%3DHMAC-SHA1"
            "%26oauth_timestamp%3D1191242096"
            "%26oauth_token%3Dnnch734d00sl2jdk"
            "%26oauth_version%3D1.0%26size%3Doriginal",
        )
        self.assertEqual(
            header_params(signed.authorization)["oauth_signature"],
            "tR3+Ty81lMeYAr/Fid0kMTYa/WM=",
        )
        self.assertIn(
            'oauth_signature="tR3%2BTy81lMeYAr%2FFid0kMTYa%2FWM%3D"',
            signed.authorization,
        )

    def test_percent_encoding_vector(self):
        """
        Values with spaces, plus signs and punctuation are encoded per RFC 3986
        before sorting, using the inputs of Twitter's signing example.
        """
        consumer = ConsumerToken(
            "xvz1evFS4wEEPTGEFPHBog", "kAcSOqF21Fu85e7zjz7ZN2U4ZRhfV3WpwPAoE3Z7kBw"
        )
        token = RequestToken(
            "370773112-GmHxMAgYyLBGkTfTpiosJEsVC7JPvbRsWnQX7mgS",
            "LswwdoUaIvS8ltyTt5jkRh4J50vUPVVHtR2YPi5kE",
        )

        url = "https://api.twitter.com/1.1/statuses/update.json"
        params = {
            "status": "Hello Ladies + Gentlemen, a signed OAuth request!",
            "include_entities": "true",
        }

        signed = sign_request(
            consumer,
            "post",
            url,
            request_token=token,
            params=params,
            nonce="kYjzVBB8Y0ZFabxSWbWovY3uYSQ2pTgmZeNu2VS4cg",
            timestamp="1318622958",
        )

        base_string = signature_base_string(
            "POST", url, signed.oauth_params[:-1] + signed.params
        )
        self.assertEqual(
            base_string,
            "POST&https%3A%2F%2Fapi.twitter.com%2F1.1%2Fstatuses%2Fupdate.json"
            "&include_entities%3Dtrue"
            "%26oauth_consumer_key%3Dxvz1evFS4wEEPTGEFPHBog"
            "%26oauth_nonce%3DkYjzVBB8Y0ZFabxSWbWovY3uYSQ2pTgmZeNu2VS4cg"
            "%26oauth_signature_method%3DHMAC-SHA1"
            "%26oauth_timestamp%3D1318622958"
            "%26oauth_token%3D370773112-GmHxMAgYyLBGkTfTpiosJEsVC7JPvbRsWnQX7mgS"
            "%26oauth_version%3D1.0"
            "%26status%3DHello%2520Ladies%2520%252B%2520Gentlemen%252C"
            "%2520a%2520signed%2520OAuth%2520request%2521",
        )
        self.assertEqual(
            header_params(signed.authorization)["oauth_signature"],
            "v183lW5VLfqjb6+ed1B2LD176Qc=",
        )

    def test_signing_raises_no_warnings(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            sign_request(
                CONSUMER,
                "POST",
                ACCESS_TOKEN_URL,
                request_token=RequestToken("T1", "S1"),
                verifier="V1",
            )

        self.assertEqual([str(w.message) for w in caught], [])

    def test_signatures_are_never_reused(self):
        first = sign_request(CONSUMER, "POST", REQUEST_TOKEN_URL, callback=CALLBACK)
        second = sign_request(CONSUMER, "POST", REQUEST_TOKEN_URL, callback=CALLBACK)

        first_params = header_params(first.authorization)
        second_params = header_params(second.authorization)
        self.assertNotEqual(first_params["oauth_nonce"], second_params["oauth_nonce"])
        self.assertNotEqual(
            first_params["oauth_signature"], second_params["oauth_signature"]
        )

    def test_header_format(self):
        signed = sign_request(
            CONSUMER,
            "post",
            REQUEST_TOKEN_URL,
            callback=CALLBACK,
            params={"scope": "urn:example:sso", "expiry": "forever"},
        )

        self.assertEqual(signed.method, "POST")
        self.assertTrue(
            signed.authorization.startswith('OAuth oauth_consumer_key="consumer-key", ')
        )
        self.assertIn(
            'oauth_callback="http%3A%2F%2Flocalhost%3A8000%2Fauthorised"',
            signed.authorization,
        )
        self.assertEqual(signed.oauth_params[-1][0], "oauth_signature")
        self.assertEqual(
            signed.params, [("scope", "urn:example:sso"), ("expiry", "forever")]
        )

        params = header_params(signed.authorization)
        self.assertEqual(params["oauth_signature_method"], "HMAC-SHA1")
        self.assertEqual(params["oauth_version"], "1.0")
        self.assertNotIn("oauth_token", params)
        self.assertNotIn("oauth_verifier", params)
        # Extra request parameters are signed but never sent in the header.
        self.assertNotIn("scope", params)

    def test_request_parameters_are_signed(self):
        params = {"scope": "urn:example:sso", "expiry": "forever"}
        signed = sign_request(
            CONSUMER, "POST", REQUEST_TOKEN_URL, callback=CALLBACK, params=params
        )

        self.assertEqual(
            header_params(signed.authorization)["oauth_signature"],
            expected_signature(
                signed.authorization,
                "POST",
                REQUEST_TOKEN_URL,
                params.items(),
                CONSUMER.secret,
            ),
        )
        # Dropping a signed parameter invalidates the signature.
        self.assertNotEqual(
            header_params(signed.authorization)["oauth_signature"],
            expected_signature(
                signed.authorization,
                "POST",
                REQUEST_TOKEN_URL,
                [("scope", "urn:example:sso")],
                CONSUMER.secret,
            ),
        )

    def test_token_secret_joins_signing_key(self):
        token = RequestToken("T1", "S1")
        signed = sign_request(
            CONSUMER, "POST", ACCESS_TOKEN_URL, request_token=token, verifier="V1"
        )
        params = header_params(signed.authorization)

        self.assertEqual(params["oauth_token"], "T1")
        self.assertEqual(params["oauth_verifier"], "V1")
        self.assertEqual(
            params["oauth_signature"],
            expected_signature(
                signed.authorization, "POST", ACCESS_TOKEN_URL, [], CONSUMER.secret, "S1"
            ),
        )
        self.assertNotEqual(
            params["oauth_signature"],
            expected_signature(
                signed.authorization, "POST", ACCESS_TOKEN_URL, [], CONSUMER.secret
            ),
        )

    def test_signing_errors(self):
        with self.assertRaises(SigningError):
            sign(ConsumerToken("", "secret"), "POST", REQUEST_TOKEN_URL)
        with self.assertRaises(SigningError):
            sign(ConsumerToken("key", ""), "POST", REQUEST_TOKEN_URL)
        with self.assertRaises(SigningError):
            sign(None, "POST", REQUEST_TOKEN_URL)
        # A verifier is meaningless without the token it was issued for.
        with self.assertRaises(SigningError):
            sign(CONSUMER, "POST", ACCESS_TOKEN_URL, verifier="V1")
        with self.assertRaises(SigningError):
            sign(
                CONSUMER,
                "POST",
                ACCESS_TOKEN_URL,
                request_token=RequestToken("", "S1"),
                verifier="V1",
            )
        with self.assertRaises(SigningError):
            sign(CONSUMER, "POST", "sso.example.org/oauth/requestToken")
        with self.assertRaises(SigningError):
            sign(CONSUMER, "POST", REQUEST_TOKEN_URL + "?scope=everything")


class ParseFormBodyTestCase(TestCase):
    def test_decodes_bytes_and_text(self):
        self.assertEqual(
            parse_form_body(b"oauth_token=T1&oauth_token_secret=S%2B1"),
            {"oauth_token": "T1", "oauth_token_secret": "S+1"},
        )
        self.assertEqual(
            parse_form_body("oauth_token=T1&oauth_callback_confirmed=true"),
            {"oauth_token": "T1", "oauth_callback_confirmed": "true"},
        )

    def test_rejects_non_form_content(self):
        with self.assertRaises(ProviderError):
            parse_form_body(b"<html>Service unavailable</html>")
        with self.assertRaises(ProviderError):
            parse_form_body(b"\xff\xfe")


class RequestTokenTestCase(TestCase):
    @patch("websignon.functions.requests.post")
    def test_obtain_request_token(self, mock_post):
        mock_post.return_value = provider_response(
            "oauth_token=T1&oauth_token_secret=S1&oauth_callback_confirmed=true"
        )

        request_token = obtain_request_token(
            REQUEST_TOKEN_URL,
            CONSUMER,
            CALLBACK,
            params={"scope": "urn:example:sso", "expiry": "forever"},
            timeout=3,
        )

        self.assertEqual(request_token, RequestToken("T1", "S1"))

        mock_post.assert_called_once()
        kwargs = mock_post.call_args.kwargs
        self.assertEqual(kwargs["url"], REQUEST_TOKEN_URL)
        self.assertEqual(
            kwargs["params"], [("scope", "urn:example:sso"), ("expiry", "forever")]
        )
        self.assertEqual(kwargs["timeout"], 3)
        self.assertEqual(kwargs["headers"]["User-Agent"], "Cinnamon")

        authorization = kwargs["headers"]["Authorization"]
        params = header_params(authorization)
        self.assertEqual(params["oauth_callback"], CALLBACK)
        self.assertEqual(
            params["oauth_signature"],
            expected_signature(
                authorization,
                "POST",
                REQUEST_TOKEN_URL,
                kwargs["params"],
                CONSUMER.secret,
            ),
        )

    @patch("websignon.functions.requests.post")
    def test_missing_token_secret(self, mock_post):
        mock_post.return_value = provider_response("oauth_token=T1")

        with self.assertRaises(ProviderError):
            obtain_request_token(REQUEST_TOKEN_URL, CONSUMER, CALLBACK)

    @patch("websignon.functions.requests.post")
    def test_non_success_status(self, mock_post):
        mock_post.return_value = provider_response("oauth_problem=nonce_used", 401)

        with self.assertRaises(ProviderError) as cm:
            obtain_request_token(REQUEST_TOKEN_URL, CONSUMER, CALLBACK)

        self.assertEqual(cm.exception.status_code, 401)

    @patch("websignon.functions.requests.post")
    def test_unreachable_provider(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("connection refused")

        with self.assertRaises(ProviderError) as cm:
            obtain_request_token(REQUEST_TOKEN_URL, CONSUMER, CALLBACK)

        self.assertIsNone(cm.exception.status_code)


class AuthorizeUrlTestCase(TestCase):
    def test_authorize_url(self):
        self.assertEqual(
            authorize_url(AUTHORIZE_URL, RequestToken("T1", "S1"), CALLBACK),
            "https://sso.example.org/oauth/authorise?oauth_token=T1"
            "&oauth_callback=http%3A%2F%2Flocalhost%3A8000%2Fauthorised",
        )

    def test_secret_stays_out_of_url(self):
        url = authorize_url(AUTHORIZE_URL, RequestToken("T1", "S1"), CALLBACK)
        self.assertNotIn("S1", url)


class AccessTokenTestCase(TestCase):
    @patch("websignon.functions.requests.post")
    def test_body_is_returned_verbatim(self, mock_post):
        mock_post.return_value = provider_response(ACCESS_TOKEN_BODY)

        access_token = exchange_for_access_token(
            ACCESS_TOKEN_URL, CONSUMER, RequestToken("T1", "S1"), "V1"
        )

        self.assertEqual(access_token, ACCESS_TOKEN_BODY)
        self.assertIsNone(mock_post.call_args.kwargs["params"])

    @patch("websignon.functions.requests.post")
    def test_non_success_status(self, mock_post):
        mock_post.return_value = provider_response("oauth_problem=token_rejected", 400)

        with self.assertRaises(ProviderError) as cm:
            exchange_for_access_token(
                ACCESS_TOKEN_URL, CONSUMER, RequestToken("T1", "S1"), "V1"
            )

        self.assertEqual(cm.exception.status_code, 400)


class SecretRelayTestCase(TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.relay = SecretRelay(ttl=600, clock=self.clock)

    def test_take_returns_stored_secret(self):
        self.relay.put("T1", "S1")
        self.relay.put("T2", "S2")

        self.assertEqual(self.relay.take("T1"), "S1")
        self.assertEqual(self.relay.take("T2"), "S2")

    def test_take_unknown_token(self):
        with self.assertRaises(NotFoundError):
            self.relay.take("never-stored")

    def test_take_is_single_use(self):
        self.relay.put("T1", "S1")
        self.relay.take("T1")

        with self.assertRaises(NotFoundError):
            self.relay.take("T1")

    def test_concurrent_takes(self):
        """
        Two callbacks racing for one token: exactly one gets the secret.
        """
        self.relay.put("T1", "S1")
        barrier = threading.Barrier(2)
        results = []

        def take():
            barrier.wait()
            try:
                results.append(self.relay.take("T1"))
            except NotFoundError as e:
                results.append(e)

        threads = [threading.Thread(target=take) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(results.count("S1"), 1)
        self.assertEqual(
            len([r for r in results if isinstance(r, NotFoundError)]), 1
        )
        self.assertEqual(len(self.relay), 0)

    def test_put_overwrites(self):
        self.relay.put("T1", "S1")
        self.relay.put("T1", "S1-again")

        self.assertEqual(len(self.relay), 1)
        self.assertEqual(self.relay.take("T1"), "S1-again")

    def test_expired_secret(self):
        self.relay.put("T1", "S1")
        self.clock.now += 601

        with self.assertRaises(NotFoundError):
            self.relay.take("T1")
        # The expired entry is gone rather than left behind.
        self.assertEqual(len(self.relay), 0)

    def test_sweep(self):
        self.relay.put("T1", "S1")
        self.clock.now += 300
        self.relay.put("T2", "S2")
        self.clock.now += 301

        self.assertEqual(self.relay.sweep(), 1)
        self.assertEqual(len(self.relay), 1)
        self.assertEqual(self.relay.take("T2"), "S2")

    def test_put_sweeps_abandoned_logins(self):
        self.relay.put("T1", "S1")
        self.clock.now += 601
        self.relay.put("T2", "S2")

        self.assertEqual(len(self.relay), 1)


class HandshakerTestCase(TestCase):
    def setUp(self):
        self.relay = SecretRelay()
        self.handshaker = Handshaker(
            CONSUMER,
            self.relay,
            callback=CALLBACK,
            request_token_endpoint=REQUEST_TOKEN_URL,
            authorize_endpoint=AUTHORIZE_URL,
            access_token_endpoint=ACCESS_TOKEN_URL,
        )

    @patch("websignon.functions.requests.post")
    def test_full_handshake(self, mock_post):
        mock_post.side_effect = [
            provider_response("oauth_token=T1&oauth_token_secret=S1"),
            provider_response(ACCESS_TOKEN_BODY),
        ]

        redirect, request_token = self.handshaker.initiate()
        self.assertEqual(request_token, RequestToken("T1", "S1"))
        self.assertTrue(redirect.startswith(AUTHORIZE_URL + "?oauth_token=T1&"))
        self.assertEqual(len(self.relay), 1)

        access_token = self.handshaker.complete("T1", "V1")
        self.assertEqual(access_token, ACCESS_TOKEN_BODY)
        self.assertEqual(len(self.relay), 0)

        request_kwargs = mock_post.call_args_list[0].kwargs
        self.assertEqual(
            request_kwargs["params"],
            [("scope", "urn:websignon.warwick.ac.uk:sso:service"), ("expiry", "forever")],
        )

        access_kwargs = mock_post.call_args_list[1].kwargs
        self.assertEqual(access_kwargs["url"], ACCESS_TOKEN_URL)
        authorization = access_kwargs["headers"]["Authorization"]
        params = header_params(authorization)
        self.assertEqual(params["oauth_token"], "T1")
        self.assertEqual(params["oauth_verifier"], "V1")
        self.assertEqual(
            params["oauth_signature"],
            expected_signature(
                authorization, "POST", ACCESS_TOKEN_URL, [], CONSUMER.secret, "S1"
            ),
        )

    @patch("websignon.functions.requests.post")
    def test_unknown_token_fails_before_network(self, mock_post):
        with self.assertRaises(NotFoundError):
            self.handshaker.complete("T-from-before-restart", "V1")

        mock_post.assert_not_called()

    @patch("websignon.functions.requests.post")
    def test_replayed_callback(self, mock_post):
        mock_post.return_value = provider_response(ACCESS_TOKEN_BODY)
        self.relay.put("T1", "S1")

        self.handshaker.complete("T1", "V1")
        with self.assertRaises(NotFoundError):
            self.handshaker.complete("T1", "V1")

        self.assertEqual(mock_post.call_count, 1)

    @patch("websignon.functions.requests.post")
    def test_malformed_request_token_response_stores_nothing(self, mock_post):
        mock_post.return_value = provider_response("oauth_token=T1")

        with self.assertRaises(ProviderError):
            self.handshaker.initiate()

        self.assertEqual(len(self.relay), 0)

    @patch("websignon.functions.requests.post")
    def test_concurrent_logins_keep_their_own_secrets(self, mock_post):
        mock_post.side_effect = [
            provider_response("oauth_token=T1&oauth_token_secret=S1"),
            provider_response("oauth_token=T2&oauth_token_secret=S2"),
            provider_response(ACCESS_TOKEN_BODY),
        ]

        self.handshaker.initiate()
        self.handshaker.initiate()
        self.handshaker.complete("T1", "V1")

        authorization = mock_post.call_args_list[2].kwargs["headers"]["Authorization"]
        self.assertEqual(
            header_params(authorization)["oauth_signature"],
            expected_signature(
                authorization, "POST", ACCESS_TOKEN_URL, [], CONSUMER.secret, "S1"
            ),
        )
        self.assertEqual(self.relay.take("T2"), "S2")
