"""
Runtime configuration for the OAuth message models.

Values are read once from the environment at import time, following the
module-level configuration dictionaries used by the rest of the project.
"""

import os


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off", "")


# Logging configuration
LOGGING_CONFIG = {
    "level": os.getenv("OAUTH_MESSAGES_LOG_LEVEL", "WARNING").upper(),
    "colors": _env_flag("OAUTH_MESSAGES_LOG_COLORS", True),
}

# PKCE configuration (RFC 7636)
PKCE_CONFIG = {
    "verifier_entropy_bytes": int(os.getenv("OAUTH_MESSAGES_PKCE_ENTROPY", "64")),
    "challenge_method": "S256",
    "min_verifier_length": 43,
    "max_verifier_length": 128,
    "state_entropy_bytes": 16,
}

# Marker keys for intent-like data carriers handed back by the interactive flow
INTENT_EXTRAS = {
    "authorization_response": "oauth_messages.AuthorizationResponse",
    "end_session_response": "oauth_messages.EndSessionResponse",
}
