"""
Unit tests for authorization request and response models.
"""

from urllib.parse import parse_qs, urlparse

import pytest

from src.messages.authorization import AuthorizationRequest, AuthorizationResponse
from src.shared.crypto_utils import PKCEGenerator
from src.shared.exceptions import (
    CodeVerifierFormatError,
    InvalidArgumentError,
    MalformedJsonError,
)
from src.shared.oauth_models import ManagementKind

from conftest import RFC7636_CHALLENGE, RFC7636_VERIFIER, TEST_CLIENT_ID, TEST_REDIRECT_URI


class TestAuthorizationRequestBuilder:
    """Test cases for AuthorizationRequest.Builder."""

    def test_defaults(self, configuration):
        """Test that state, nonce and PKCE values are generated by default."""
        request = AuthorizationRequest.Builder(
            configuration, TEST_CLIENT_ID, "code", TEST_REDIRECT_URI
        ).build()

        assert request.kind == ManagementKind.AUTHORIZATION
        assert request.state
        assert request.nonce
        assert request.code_verifier_challenge_method == "S256"
        assert PKCEGenerator.verify_challenge(request.code_verifier, request.code_verifier_challenge)

    def test_generated_values_are_unique(self, configuration):
        """Test that two builders produce different state and verifier."""
        first = AuthorizationRequest.Builder(configuration, TEST_CLIENT_ID, "code", TEST_REDIRECT_URI).build()
        second = AuthorizationRequest.Builder(configuration, TEST_CLIENT_ID, "code", TEST_REDIRECT_URI).build()

        assert first.state != second.state
        assert first.code_verifier != second.code_verifier

    @pytest.mark.parametrize("field, args", [
        ("configuration", (None, TEST_CLIENT_ID, "code", TEST_REDIRECT_URI)),
        ("client_id", ("CONFIG", "", "code", TEST_REDIRECT_URI)),
        ("response_type", ("CONFIG", TEST_CLIENT_ID, "", TEST_REDIRECT_URI)),
        ("redirect_uri", ("CONFIG", TEST_CLIENT_ID, "code", None)),
        ("redirect_uri scheme", ("CONFIG", TEST_CLIENT_ID, "code", "/callback")),
    ])
    def test_required_fields(self, configuration, field, args):
        """Test that each mandatory builder argument is validated."""
        args = tuple(configuration if arg == "CONFIG" else arg for arg in args)

        with pytest.raises(InvalidArgumentError):
            AuthorizationRequest.Builder(*args)

    def test_rfc7636_challenge(self, authorization_request):
        """Test that the S256 challenge matches RFC 7636 Appendix B."""
        assert authorization_request.code_verifier == RFC7636_VERIFIER
        assert authorization_request.code_verifier_challenge == RFC7636_CHALLENGE

    def test_disable_pkce(self, configuration):
        """Test that a None verifier removes all PKCE values."""
        request = (
            AuthorizationRequest.Builder(configuration, TEST_CLIENT_ID, "code", TEST_REDIRECT_URI)
            .set_code_verifier(None)
            .build()
        )

        assert request.code_verifier is None
        assert request.code_verifier_challenge is None
        assert request.code_verifier_challenge_method is None

    def test_code_verifier_validation(self, configuration):
        """Test invalid verifier and challenge combinations."""
        builder = AuthorizationRequest.Builder(configuration, TEST_CLIENT_ID, "code", TEST_REDIRECT_URI)

        with pytest.raises(CodeVerifierFormatError):
            builder.set_code_verifier("short")
        with pytest.raises(InvalidArgumentError):
            builder.set_code_verifier(None, "challenge", None)
        with pytest.raises(InvalidArgumentError):
            builder.set_code_verifier(RFC7636_VERIFIER, RFC7636_CHALLENGE, None)

    def test_scope_handling(self, configuration):
        """Test that scopes are normalised to a space separated string."""
        builder = AuthorizationRequest.Builder(configuration, TEST_CLIENT_ID, "code", TEST_REDIRECT_URI)

        assert builder.set_scopes(["openid", "email"]).build().scope == "openid email"
        assert builder.set_scope("").build().scope is None
        assert builder.set_scope("openid  profile").build().scope == "openid profile"

    @pytest.mark.parametrize("reserved_key", ["state", "scope", "code_challenge", "nonce"])
    def test_additional_parameters_reject_reserved_keys(self, configuration, reserved_key):
        """Test that protocol parameters cannot be additional parameters."""
        builder = AuthorizationRequest.Builder(configuration, TEST_CLIENT_ID, "code", TEST_REDIRECT_URI)

        with pytest.raises(InvalidArgumentError):
            builder.set_additional_parameters({reserved_key: "x"})


class TestAuthorizationRequest:
    """Test cases for built AuthorizationRequest instances."""

    def test_to_uri(self, configuration):
        """Test the authorization URL rendered for the browser."""
        request = (
            AuthorizationRequest.Builder(configuration, TEST_CLIENT_ID, "code", TEST_REDIRECT_URI)
            .set_scope("openid")
            .set_state("state-123")
            .set_nonce(None)
            .set_code_verifier(RFC7636_VERIFIER)
            .set_additional_parameters({"audience": "api"})
            .build()
        )

        parsed = urlparse(request.to_uri())
        query = parse_qs(parsed.query)

        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://auth.example.com/authorize"
        assert query == {
            "redirect_uri": [TEST_REDIRECT_URI],
            "client_id": [TEST_CLIENT_ID],
            "response_type": ["code"],
            "state": ["state-123"],
            "scope": ["openid"],
            "code_challenge": [RFC7636_CHALLENGE],
            "code_challenge_method": ["S256"],
            "audience": ["api"],
        }

    def test_json_round_trip(self, authorization_request):
        """Test that the request survives a JSON round trip."""
        restored = AuthorizationRequest.json_deserialize_string(
            authorization_request.json_serialize_string()
        )
        assert restored == authorization_request

    def test_is_authorization_request(self, authorization_request, end_session_request):
        """Test the shape test for authorization requests."""
        assert AuthorizationRequest.is_authorization_request(authorization_request.json_serialize())
        assert not AuthorizationRequest.is_authorization_request(end_session_request.json_serialize())

    def test_deserialize_missing_client_id(self, authorization_request):
        """Test that a missing client ID is malformed JSON."""
        json_obj = authorization_request.json_serialize()
        del json_obj["clientId"]

        with pytest.raises(MalformedJsonError):
            AuthorizationRequest.json_deserialize(json_obj)


class TestAuthorizationResponse:
    """Test cases for AuthorizationResponse."""

    def test_from_uri(self, authorization_request):
        """Test that redirect parameters are read into the response."""
        uri = (
            f"{TEST_REDIRECT_URI}?code=auth-code&state=state-123&token_type=Bearer"
            f"&access_token=at&expires_in=3600&id_token=idt&scope=openid&session_state=xyz"
        )
        response = (
            AuthorizationResponse.Builder(authorization_request)
            .from_uri(uri, now_ms=lambda: 1_000_000)
            .build()
        )

        assert response.kind == ManagementKind.AUTHORIZATION
        assert response.authorization_code == "auth-code"
        assert response.state == "state-123"
        assert response.token_type == "Bearer"
        assert response.access_token == "at"
        assert response.access_token_expiration_time == 1_000_000 + 3_600_000
        assert response.id_token == "idt"
        assert response.scope == "openid"
        assert dict(response.additional_parameters) == {"session_state": "xyz"}

    def test_from_uri_rejects_bad_expires_in(self, authorization_request):
        """Test that a non-numeric expires_in is rejected."""
        with pytest.raises(InvalidArgumentError):
            AuthorizationResponse.Builder(authorization_request).from_uri(
                f"{TEST_REDIRECT_URI}?code=c&expires_in=soon"
            )

    def test_from_uri_rejects_empty_code(self, authorization_request):
        """Test that a present but empty code is rejected."""
        with pytest.raises(InvalidArgumentError):
            AuthorizationResponse.Builder(authorization_request).from_uri(f"{TEST_REDIRECT_URI}?code=")

    def test_json_round_trip(self, authorization_request):
        """Test that the response and its request survive a JSON round trip."""
        response = (
            AuthorizationResponse.Builder(authorization_request)
            .from_uri(f"{TEST_REDIRECT_URI}?code=auth-code&state=state-123&expires_in=60")
            .build()
        )
        restored = AuthorizationResponse.json_deserialize_string(response.json_serialize_string())

        assert restored == response
        assert "expires_at" in response.json_serialize()

    def test_deserialize_without_request(self):
        """Test that the request must be embedded."""
        with pytest.raises(InvalidArgumentError):
            AuthorizationResponse.json_deserialize({"code": "c"})

    def test_intent_round_trip(self, authorization_request):
        """Test extraction from the intent-like carrier."""
        response = (
            AuthorizationResponse.Builder(authorization_request)
            .from_uri(f"{TEST_REDIRECT_URI}?code=auth-code&state=state-123")
            .build()
        )
        intent = response.to_intent()

        assert AuthorizationResponse.contains_authorization_response(intent)
        assert AuthorizationResponse.from_intent(intent) == response
        assert hash(AuthorizationResponse.from_intent(intent)) == hash(response)

    def test_from_intent_without_response(self):
        """Test that a carrier without the marker is rejected."""
        with pytest.raises(InvalidArgumentError):
            AuthorizationResponse.from_intent({"other": "value"})
