"""
Validation and error handling for the nfsgaze package.

This module provides the exception hierarchy raised by the parser and the
monitor, input validation for configuration and command-line values, and
error handling helpers with consistent logging.
"""

# Core exception classes and error handling
from .exceptions import (
    ErrorSeverity,
    FieldParseError,
    InsufficientTokensError,
    MountNotFoundError,
    MountstatsParseError,
    NfsGazeError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
)

# Validation functions
from .validators import (
    validate_boolean,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    # Exceptions and handlers
    "ErrorSeverity",
    "FieldParseError",
    "InsufficientTokensError",
    "MountNotFoundError",
    "MountstatsParseError",
    "NfsGazeError",
    "ValidationError",
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    # Validators
    "validate_boolean",
    "validate_enum_choice",
    "validate_positive_float",
    "validate_positive_integer",
]
