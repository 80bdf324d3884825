"""
Error handling and reporting for dostrans.

This module provides the exception hierarchy used across the translator,
the disassembler adapters and the CLI, together with a small logging-backed
error handler.
"""

import sys
import traceback
import logging
from enum import Enum
from typing import Optional, Dict, Any
from dataclasses import dataclass


class ErrorSeverity(Enum):
    """Error severity levels."""
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class ErrorCategory(Enum):
    """Categories of errors that can occur."""
    INPUT_ERROR = "Input Error"
    DISASSEMBLY_ERROR = "Disassembly Error"
    TRANSLATION_ERROR = "Translation Error"
    CONFIGURATION_ERROR = "Configuration Error"
    INTERNAL_ERROR = "Internal Error"


@dataclass
class ErrorContext:
    """Context information for an error."""
    file: Optional[str] = None
    function: Optional[str] = None
    line_number: Optional[int] = None
    source_line: Optional[str] = None
    additional_info: Optional[Dict[str, Any]] = None


class DosTransError(Exception):
    """Base exception class for dostrans errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.INTERNAL_ERROR,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[ErrorContext] = None,
        suggestion: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.suggestion = suggestion
        self.original_exception = original_exception

    def __str__(self):
        """Format error message with all context."""
        lines = [
            f"\n{'='*70}",
            f"{self.severity.value}: {self.category.value}",
            f"{'='*70}",
            f"\nMessage: {self.message}",
        ]

        if self.context.file:
            lines.append(f"File: {self.context.file}")
        if self.context.function:
            lines.append(f"Function: {self.context.function}")
        if self.context.line_number:
            lines.append(f"Line: {self.context.line_number}")
        if self.context.source_line:
            lines.append(f"Instruction: {self.context.source_line}")
        if self.context.additional_info:
            lines.append("\nAdditional Information:")
            for key, value in self.context.additional_info.items():
                lines.append(f"  {key}: {value}")

        if self.suggestion:
            lines.append(f"\nSuggestion: {self.suggestion}")

        if self.original_exception:
            lines.append(f"\nOriginal Exception: {type(self.original_exception).__name__}")
            lines.append(f"  {str(self.original_exception)}")

        lines.append(f"{'='*70}\n")

        return "\n".join(lines)


class InputError(DosTransError):
    """Error related to invalid input."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.INPUT_ERROR,
            **kwargs
        )


class DisassemblyError(DosTransError):
    """Error while running the external disassembler."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.DISASSEMBLY_ERROR,
            **kwargs
        )


class ConfigurationError(DosTransError):
    """Error related to configuration."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION_ERROR,
            **kwargs
        )


class TranslationError(DosTransError):
    """
    Fatal error while translating a single instruction line.

    The offending line is kept on the exception as ``line`` and copied into
    the error context so it is always part of the report.
    """

    def __init__(self, message: str, line: str, line_number: Optional[int] = None, **kwargs):
        context = kwargs.pop("context", None) or ErrorContext()
        context.source_line = line
        if line_number is not None:
            context.line_number = line_number
        super().__init__(
            f"{message}: {line}",
            category=ErrorCategory.TRANSLATION_ERROR,
            context=context,
            **kwargs
        )
        self.line = line


class MalformedOperandCount(TranslationError):
    """Wrong number of operands for mov, int, push or pop."""
    pass


class UnsupportedOperandForm(TranslationError):
    """push or pop aimed at a literal or a memory location."""
    pass


class ErrorHandler:
    """Central error handler for dostrans."""

    def __init__(self, debug_mode: bool = False):
        self.debug_mode = debug_mode
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        """Set up logging configuration."""
        logger = logging.getLogger("dostrans")
        logger.setLevel(logging.DEBUG if self.debug_mode else logging.INFO)

        # Replace the console handler so it writes to the current sys.stderr
        for handler in list(logger.handlers):
            if getattr(handler, "dostrans_console", False):
                logger.removeHandler(handler)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.dostrans_console = True
        console_handler.setLevel(logging.DEBUG if self.debug_mode else logging.INFO)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        logger.addHandler(console_handler)

        return logger

    def handle_error(
        self,
        error: Exception,
        context: Optional[ErrorContext] = None,
        reraise: bool = False
    ):
        """
        Handle an error with appropriate logging and reporting.

        Args:
            error: The exception to handle
            context: Additional context information
            reraise: Whether to re-raise the exception after handling
        """
        if isinstance(error, DosTransError):
            self._log_error(error)
        else:
            wrapped = DosTransError(
                message=str(error),
                context=context,
                original_exception=error
            )
            self._log_error(wrapped)

        if self.debug_mode:
            traceback.print_exc()

        if reraise:
            raise error

    def _log_error(self, error: DosTransError):
        """Log a dostrans error with appropriate level."""
        error_message = str(error)

        if error.severity == ErrorSeverity.CRITICAL:
            self.logger.critical(error_message)
        elif error.severity == ErrorSeverity.ERROR:
            self.logger.error(error_message)
        elif error.severity == ErrorSeverity.WARNING:
            self.logger.warning(error_message)
        else:
            self.logger.info(error_message)

    def log_info(self, message: str):
        """Log an informational message."""
        self.logger.info(message)


# Common error messages with suggestions
ERROR_MESSAGES = {
    "file_not_found": {
        "message": "Could not find {path}",
        "suggestion": "Check that the file path is correct and the file exists."
    },
    "empty_input": {
        "message": "No instructions found in {path}",
        "suggestion": "Pass a DOS .com binary, or a disassembly listing together with --listing."
    },
    "disassembler_missing": {
        "message": "Disassembler executable not found: {command}",
        "suggestion": "Install nasm (which ships ndisasm) or use --backend capstone."
    },
    "disassembly_failed": {
        "message": "Disassembly of {path} failed with exit status {status}",
        "suggestion": "Make sure the file is a 16-bit real-mode binary."
    },
    "disassembly_timeout": {
        "message": "Disassembler did not finish within {timeout} seconds",
        "suggestion": "Raise the timeout or use --backend capstone."
    },
}


def create_error(
    error_key: str,
    error_class: type = DosTransError,
    severity: ErrorSeverity = ErrorSeverity.ERROR,
    context: Optional[ErrorContext] = None,
    **format_args
) -> DosTransError:
    """
    Create a dostrans error from a predefined error message.

    Args:
        error_key: Key in ERROR_MESSAGES dictionary
        error_class: DosTransError subclass to instantiate
        severity: Error severity level
        context: Error context
        **format_args: Arguments to format the error message

    Returns:
        Configured error instance
    """
    if error_key not in ERROR_MESSAGES:
        return DosTransError(
            message=f"Unknown error: {error_key}",
            severity=severity,
            context=context
        )

    error_info = ERROR_MESSAGES[error_key]
    message = error_info["message"].format(**format_args)
    suggestion = error_info.get("suggestion")

    if error_class is DosTransError:
        return DosTransError(
            message=message,
            severity=severity,
            context=context,
            suggestion=suggestion
        )
    return error_class(
        message,
        severity=severity,
        context=context,
        suggestion=suggestion
    )
