"""Custom exception hierarchy for floe-sass.

This module defines the exception classes used throughout floe-sass:
- FloeSassError: Base exception for all floe-sass errors
- InvalidPathError: Raised when a path cannot be normalized
- SassCompileError: Structured error reported by the Sass compiler

User-facing messages are safe to display. Technical details are logged
internally via structlog and never attached to the message.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class FloeSassError(Exception):
    """Base exception for floe-sass.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but NEVER exposed to the user.

    Example:
        >>> raise FloeSassError(
        ...     "Stylesheet could not be compiled",
        ...     internal_details="compiler exited with status 65",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize FloeSassError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "floe_sass_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class InvalidPathError(FloeSassError):
    """Raised when normalize_path() receives something that is not a string."""

    def __init__(self, value: object = None) -> None:
        super().__init__(
            "invalid path to normalize",
            internal_details=f"received {type(value).__name__}",
        )
        self.value = value


class SassCompileError(FloeSassError):
    """Structured error reported by the Sass compiler.

    Compiler adapters raise this when compilation fails with location
    metadata. The plugin converts it into a Diagnostic carrying the
    offending source lines.

    Attributes:
        message: Compiler message. May contain a visual source excerpt
            after a '╷' marker.
        status: Numeric status code reported by the compiler, if any.
        file: Path of the file that failed, or "stdin" for inline data.
        line: 1-based line number of the error, if known.
        column: Column of the error, if known.
        formatted: Pre-formatted message as rendered by the compiler.

    Example:
        >>> raise SassCompileError(
        ...     "Undefined variable.",
        ...     status=1,
        ...     file="/project/src/button.scss",
        ...     line=3,
        ...     column=10,
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        file: str | None = None,
        line: int | None = None,
        column: int | None = None,
        formatted: str | None = None,
    ) -> None:
        """Initialize SassCompileError with compiler metadata.

        Args:
            message: Compiler message.
            status: Numeric status code.
            file: Path of the failing file.
            line: 1-based line number.
            column: Column number.
            formatted: Pre-formatted compiler output.
        """
        super().__init__(message)
        self.message = message
        self.status = status
        self.file = file
        self.line = line
        self.column = column
        self.formatted = formatted
