"""
Colored logging utilities for OAuth message handling.

This module provides colored console logging with component identification,
timestamps and sanitized message data, so that message construction,
serialization and dispatch can be followed without leaking tokens.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from colorama import Fore, Style, init

from .config import LOGGING_CONFIG

init(autoreset=True)  # Initialize colorama for Windows compatibility


class ComponentType(str, Enum):
    """OAuth message handling components."""
    AUTHORIZATION = "AUTHORIZATION"
    END_SESSION = "END-SESSION"
    REVOCATION = "REVOCATION"
    DISPATCHER = "DISPATCHER"
    HOST_APP = "HOST-APP"
    SYSTEM = "SYSTEM"


class MessageType(str, Enum):
    """Message types for logging."""
    REQUEST = "REQUEST"
    RESPONSE = "RESPONSE"
    ERROR = "ERROR"
    INFO = "INFO"
    DEBUG = "DEBUG"
    PKCE_GENERATION = "PKCE-GENERATION"
    SERIALIZATION = "SERIALIZATION"
    DESERIALIZATION = "DESERIALIZATION"
    DISPATCH = "DISPATCH"
    REDIRECT = "REDIRECT"


class OAuthLogger:
    """
    Colored logger for OAuth message flows.

    Formats each message with a timestamp, a source and destination
    component, a message type and the sanitized message data, and emits it
    through the standard ``logging`` module under ``oauth.<component>``.
    Records propagate; handlers are left to the host application.
    """

    def __init__(self, component_name: str, use_colors: Optional[bool] = None):
        """
        Initialize OAuth logger for a specific component.

        Args:
            component_name: Name of the component (DISPATCHER, REVOCATION, etc.)
            use_colors: Override LOGGING_CONFIG["colors"]
        """
        self.component_name = component_name.upper()
        if use_colors is None:
            use_colors = LOGGING_CONFIG["colors"]
        self.use_colors = use_colors
        self.colors = self._get_component_colors()

        self.logger = logging.getLogger(f"oauth.{component_name.lower()}")
        self.logger.setLevel(LOGGING_CONFIG["level"])

    def _get_component_colors(self) -> Dict[str, str]:
        """Get color scheme for different components and message types."""
        colors = {
            'AUTHORIZATION': Fore.BLUE + Style.BRIGHT,
            'END-SESSION': Fore.CYAN + Style.BRIGHT,
            'REVOCATION': Fore.YELLOW + Style.BRIGHT,
            'DISPATCHER': Fore.GREEN + Style.BRIGHT,
            'HOST-APP': Fore.WHITE + Style.BRIGHT,
            'SYSTEM': Fore.MAGENTA + Style.BRIGHT,
            'ERROR': Fore.RED + Style.BRIGHT,
            'SUCCESS': Fore.GREEN + Style.BRIGHT,
            'INFO': Fore.CYAN,
            'DEBUG': Fore.WHITE + Style.DIM,
            'HEADER': Fore.WHITE + Style.BRIGHT,
            'SEPARATOR': Fore.WHITE + Style.DIM,
            'RESET': Style.RESET_ALL
        }
        if not self.use_colors:
            return {key: "" for key in colors}
        return colors

    def _format_timestamp(self) -> str:
        """Format current timestamp for log messages."""
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

    def _sanitize_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Sanitize sensitive data for logging.

        Redacts secrets and truncates tokens, codes and verifiers.
        """
        sanitized = {}
        for key, value in data.items():
            key_lower = key.lower()

            if any(sensitive in key_lower for sensitive in ['password', 'secret']):
                sanitized[key] = '[REDACTED]'
            elif any(token in key_lower for token in ['token', 'code', 'challenge', 'verifier', 'nonce']):
                # Show first 10 characters of tokens/codes for debugging
                if isinstance(value, str) and len(value) > 10:
                    sanitized[key] = f"{value[:10]}..."
                else:
                    sanitized[key] = value
            else:
                sanitized[key] = value

        return sanitized

    def log_oauth_message(self,
                          source: str,
                          destination: str,
                          message_type: str,
                          data: Dict[str, Any],
                          success: bool = True,
                          level: int = logging.DEBUG):
        """
        Log an OAuth message with color coding and formatting.

        Args:
            source: Source component name
            destination: Destination component name
            message_type: Type of message (REQUEST, DISPATCH, etc.)
            data: Message data dictionary
            success: Whether the operation was successful
            level: Logging level the record is emitted at
        """
        if not self.logger.isEnabledFor(level):
            return

        timestamp = self._format_timestamp()
        source_color = self.colors.get(source.upper(), self.colors['INFO'])
        dest_color = self.colors.get(destination.upper(), self.colors['INFO'])
        reset = self.colors['RESET']

        # Choose message color based on type and success
        if not success:
            msg_color = self.colors['ERROR']
        elif message_type in ['RESPONSE', 'SUCCESS']:
            msg_color = self.colors['SUCCESS']
        else:
            msg_color = self.colors['INFO']

        lines = [
            f"{self.colors['HEADER']}[{timestamp}] {source_color}{source}{reset} → {dest_color}{destination}{reset}",
            f"{msg_color}{message_type}:{reset}",
        ]
        for key, value in self._sanitize_data(data).items():
            lines.append(f"  {self.colors['INFO']}{key}:{reset} {value}")
        lines.append(f"{self.colors['SEPARATOR']}{'-' * 60}{reset}")

        self.logger.log(level, "\n".join(lines))

    def log_pkce_operation(self,
                           operation: str,
                           details: Dict[str, Any],
                           success: bool = True):
        """
        Log PKCE-specific operations.

        Args:
            operation: PKCE operation (generation, verification, etc.)
            details: Operation details
            success: Whether operation was successful
        """
        self.log_oauth_message(
            source=self.component_name,
            destination=self.component_name,
            message_type=f"PKCE-{operation.upper()}",
            data=details,
            success=success
        )

    def log_error(self,
                  error_type: str,
                  message: str,
                  details: Optional[Dict[str, Any]] = None):
        """
        Log error messages with context.

        Args:
            error_type: Type of error
            message: Error message
            details: Additional error context
        """
        error_data = {
            "error_type": error_type,
            "message": message
        }

        if details:
            error_data.update(details)

        self.log_oauth_message(
            source=self.component_name,
            destination="ERROR-HANDLER",
            message_type="ERROR",
            data=error_data,
            success=False,
            level=logging.WARNING
        )

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Log informational messages.

        Args:
            message: Info message
            details: Additional context
        """
        lines = [f"{self.colors['INFO']}[{self._format_timestamp()}] {self.component_name}: {message}{self.colors['RESET']}"]
        if details:
            for key, value in self._sanitize_data(details).items():
                lines.append(f"  {key}: {value}")

        self.logger.info("\n".join(lines))


def create_logger(component_name: str) -> OAuthLogger:
    """
    Factory function to create OAuth logger instances.

    Args:
        component_name: Name of the component

    Returns:
        OAuthLogger: Configured logger instance
    """
    return OAuthLogger(component_name)
