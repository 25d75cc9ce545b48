"""
Exception types and error handling helpers.

This module holds the errors raised by the mountstats parser and the monitor,
the ValidationError used for configuration and command-line values, and the
small set of helpers that log an error with a severity before re-raising or
exiting.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class NfsGazeError(Exception):
    """Base class for errors raised while reading or monitoring NFS statistics."""


class MountstatsParseError(NfsGazeError):
    """
    Raised when a mountstats line does not have the shape its section requires.

    The whole parse is abandoned; callers never receive a partial mapping.

    Attributes:
        line_kind: Kind of the offending line ("device", "age", "events",
            "bytes" or "operation")
        line: The offending line, stripped
    """

    def __init__(self, message: str, line_kind: str, line: Optional[str] = None):
        super().__init__(message)
        self.line_kind = line_kind
        self.line = line


class FieldParseError(MountstatsParseError):
    """
    Raised when a token expected to be an integer is not.

    The underlying ValueError is chained as ``__cause__``.

    Attributes:
        field: Field name; operation fields are qualified as ``<OP>.<field>``
        value: The token that failed to convert
    """

    def __init__(self, field: str, value: str, line_kind: str, line: Optional[str] = None,
                 reason: Optional[Exception] = None):
        message = f"Error parsing {field}: invalid integer {value!r}"
        if reason is not None:
            message = f"{message} ({reason})"
        super().__init__(message, line_kind=line_kind, line=line)
        self.field = field
        self.value = value


class InsufficientTokensError(MountstatsParseError):
    """
    Raised when an operation line carries fewer counters than required.

    Attributes:
        operation: Name of the operation
        actual: Number of counters found
        required: Minimum number of counters
    """

    def __init__(self, operation: str, actual: int, required: int, line: Optional[str] = None):
        super().__init__(
            f"insufficient stats for operation {operation}: got {actual}, need {required}",
            line_kind="operation",
            line=line,
        )
        self.operation = operation
        self.actual = actual
        self.required = required


class MountNotFoundError(NfsGazeError):
    """Raised when a requested mount point is not present in the report."""

    def __init__(self, mount_path: str):
        super().__init__(f"Mount point not found: {mount_path}")
        self.mount_path = mount_path


class ValidationError(Exception):
    """
    Exception raised when validation fails.

    Used for configuration files and command-line values.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


_LOG_LEVELS = {
    ErrorSeverity.DEBUG: logging.DEBUG,
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log an error as ``Error in <context>: <error>`` and optionally re-raise it.

    Debug and critical entries carry the traceback.

    Args:
        error: The exception that occurred
        context: What was being done when it occurred
        severity: ErrorSeverity or its lowercase name
        reraise: Re-raise ``error`` after logging
        logger: Logger to use, this module's logger when None
    """
    if isinstance(severity, str):
        severity = ErrorSeverity(severity.lower())
    effective_logger = logger or globals()['logger']

    effective_logger.log(
        _LOG_LEVELS[severity],
        f"Error in {context}: {error}",
        exc_info=severity in (ErrorSeverity.DEBUG, ErrorSeverity.CRITICAL),
    )

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """
    Log a command-line error and terminate the process.

    Args:
        error: The exception that occurred
        context: Context description of where the error occurred
        exit_code: Process exit status (default 1)
        include_traceback: Log at critical severity, which includes the traceback
    """
    exit_code = kwargs.pop('exit_code', 1)
    include_traceback = kwargs.pop('include_traceback', False)

    default_severity = ErrorSeverity.CRITICAL if include_traceback else ErrorSeverity.ERROR
    severity = kwargs.pop('severity', default_severity)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)

    sys.exit(exit_code)
