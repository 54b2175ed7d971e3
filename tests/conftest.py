"""
Pytest configuration and shared fixtures for OAuth message tests.

This module provides common test fixtures used across all test modules:
service configurations, valid PKCE values and pre-built messages.
"""

import logging
from typing import List

import pytest

from src.messages.authorization import AuthorizationRequest
from src.messages.end_session import EndSessionRequest
from src.messages.service_configuration import AuthorizationServiceConfiguration
from src.messages.token_revocation import TokenRevocationRequest
from src.shared.crypto_utils import PKCEGenerator

# RFC 7636 Appendix B example values
RFC7636_VERIFIER = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
RFC7636_CHALLENGE = "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

TEST_CLIENT_ID = "client1"
TEST_REDIRECT_URI = "https://app.example/callback"


class RecordingHandler(logging.Handler):
    """Logging handler that keeps every record it receives."""

    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def configuration() -> AuthorizationServiceConfiguration:
    """A provider configuration defining every endpoint."""
    return AuthorizationServiceConfiguration(
        authorization_endpoint="https://auth.example.com/authorize",
        token_endpoint="https://auth.example.com/token",
        registration_endpoint="https://auth.example.com/register",
        end_session_endpoint="https://auth.example.com/logout",
        revocation_endpoint="https://auth.example.com/revoke",
    )


@pytest.fixture
def minimal_configuration() -> AuthorizationServiceConfiguration:
    """A provider configuration with only the required endpoints."""
    return AuthorizationServiceConfiguration(
        authorization_endpoint="https://auth.example.com/authorize",
        token_endpoint="https://auth.example.com/token",
    )


@pytest.fixture
def pkce_pair() -> tuple:
    """Generate a PKCE verifier and challenge pair for testing."""
    return PKCEGenerator.generate_challenge()


@pytest.fixture
def revocation_request(configuration) -> TokenRevocationRequest:
    """A revocation request with every persisted field set."""
    return (
        TokenRevocationRequest.Builder(configuration, TEST_CLIENT_ID)
        .set_redirect_uri(TEST_REDIRECT_URI)
        .set_token("tok-xyz")
        .set_additional_parameters({"token_type_hint": "refresh_token"})
        .build()
    )


@pytest.fixture
def authorization_request(configuration) -> AuthorizationRequest:
    """An authorization code request with a fixed state and verifier."""
    return (
        AuthorizationRequest.Builder(configuration, TEST_CLIENT_ID, "code", TEST_REDIRECT_URI)
        .set_scope("openid profile")
        .set_state("state-123")
        .set_nonce("nonce-456")
        .set_code_verifier(RFC7636_VERIFIER)
        .build()
    )


@pytest.fixture
def end_session_request(configuration) -> EndSessionRequest:
    """An end session request with a fixed state."""
    return (
        EndSessionRequest.Builder(configuration)
        .set_id_token_hint("id-token-abc")
        .set_post_logout_redirect_uri(TEST_REDIRECT_URI)
        .set_state("logout-state")
        .build()
    )


@pytest.fixture
def recording_handler():
    """Attach a recording handler to the oauth logger hierarchy at DEBUG."""
    handler = RecordingHandler()
    names = ["oauth.dispatcher", "oauth.revocation", "oauth.authorization"]
    loggers = [logging.getLogger(name) for name in names]
    previous_levels = [lg.level for lg in loggers]

    for lg in loggers:
        lg.addHandler(handler)
        lg.setLevel(logging.DEBUG)

    yield handler

    for lg, level in zip(loggers, previous_levels):
        lg.removeHandler(handler)
        lg.setLevel(level)
