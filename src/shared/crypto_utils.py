"""
PKCE (Proof Key for Code Exchange) cryptographic utilities.

This module implements RFC 7636 PKCE functionality including code verifier
generation and format checking, S256 challenge derivation, and generation of
the random state and nonce values attached to authorization requests.
"""

import base64
import hashlib
import re
import secrets
from typing import Optional, Tuple

from .config import PKCE_CONFIG
from .exceptions import CodeVerifierFormatError

CODE_CHALLENGE_METHOD_S256 = "S256"
CODE_CHALLENGE_METHOD_PLAIN = "plain"

MIN_CODE_VERIFIER_LENGTH = PKCE_CONFIG["min_verifier_length"]
MAX_CODE_VERIFIER_LENGTH = PKCE_CONFIG["max_verifier_length"]

# RFC 7636 section 4.1: unreserved characters [A-Z] / [a-z] / [0-9] / "-" / "." / "_" / "~"
CODE_VERIFIER_PATTERN = re.compile(r"[0-9a-zA-Z\-._~]+")


def _base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode('utf-8').rstrip('=')


def check_code_verifier(code_verifier: str) -> None:
    """
    Check that a code verifier satisfies RFC 7636 section 4.1.

    Args:
        code_verifier: The PKCE code verifier to check

    Raises:
        CodeVerifierFormatError: If the verifier has the wrong length or
            contains characters outside the unreserved set
    """
    if not isinstance(code_verifier, str):
        raise CodeVerifierFormatError("codeVerifier must be a string")

    if len(code_verifier) < MIN_CODE_VERIFIER_LENGTH:
        raise CodeVerifierFormatError(
            f"codeVerifier length is shorter than allowed by RFC 7636 "
            f"({MIN_CODE_VERIFIER_LENGTH})"
        )

    if len(code_verifier) > MAX_CODE_VERIFIER_LENGTH:
        raise CodeVerifierFormatError(
            f"codeVerifier length is longer than allowed by RFC 7636 "
            f"({MAX_CODE_VERIFIER_LENGTH})"
        )

    if not CODE_VERIFIER_PATTERN.fullmatch(code_verifier):
        raise CodeVerifierFormatError(
            "codeVerifier string contains illegal characters"
        )


class PKCEGenerator:
    """
    PKCE code verifier and challenge generator.

    Implements RFC 7636 with the S256 method, plus the random state and
    nonce values used alongside it in authorization requests.
    """

    @staticmethod
    def generate_code_verifier(entropy_bytes: Optional[int] = None) -> str:
        """
        Generate a random code verifier.

        Args:
            entropy_bytes: Number of random bytes (default from PKCE_CONFIG).
                32 bytes encode to the minimum 43 characters, 96 bytes to
                the maximum 128.

        Returns:
            str: base64url encoded verifier without padding

        Example:
            verifier = PKCEGenerator.generate_code_verifier()
            # verifier: 86-character base64url string
        """
        if entropy_bytes is None:
            entropy_bytes = PKCE_CONFIG["verifier_entropy_bytes"]

        if not 32 <= entropy_bytes <= 96:
            raise ValueError("entropy_bytes must be between 32 and 96")

        return _base64url(secrets.token_bytes(entropy_bytes))

    @staticmethod
    def derive_code_verifier_challenge(code_verifier: str) -> str:
        """
        Derive the S256 challenge for a code verifier.

        Returns:
            str: base64url(SHA256(ascii(code_verifier))) without padding
        """
        return _base64url(hashlib.sha256(code_verifier.encode('ascii')).digest())

    @staticmethod
    def generate_challenge() -> Tuple[str, str]:
        """
        Generate PKCE code verifier and challenge pair.

        Returns:
            Tuple[str, str]: (code_verifier, code_challenge)
        """
        verifier = PKCEGenerator.generate_code_verifier()
        return verifier, PKCEGenerator.derive_code_verifier_challenge(verifier)

    @staticmethod
    def verify_challenge(verifier: str, challenge: str) -> bool:
        """
        Verify PKCE code verifier against an S256 challenge.

        Args:
            verifier: The PKCE code verifier
            challenge: The expected PKCE challenge

        Returns:
            bool: True if verifier matches challenge, False otherwise

        Example:
            is_valid = PKCEGenerator.verify_challenge(
                "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk",
                "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"
            )
        """
        if not isinstance(verifier, str) or not isinstance(challenge, str):
            return False

        try:
            expected_challenge = PKCEGenerator.derive_code_verifier_challenge(verifier)
        except UnicodeEncodeError:
            return False

        # Constant-time comparison to prevent timing attacks
        return secrets.compare_digest(expected_challenge, challenge)

    @staticmethod
    def generate_state_parameter() -> str:
        """
        Generate a random state value for CSRF protection.

        Returns:
            str: base64url encoded random value
        """
        return _base64url(secrets.token_bytes(PKCE_CONFIG["state_entropy_bytes"]))

    @staticmethod
    def generate_nonce() -> str:
        """Generate a random OpenID Connect nonce."""
        return PKCEGenerator.generate_state_parameter()
