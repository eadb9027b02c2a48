"""Error handling for MangaBind.

This module provides the exception hierarchy raised by the export pipeline
and the error handler the CLI uses to log and display failures.
"""

import logging
import traceback
from enum import Enum
from typing import Dict, Any, Optional, List, Union
from dataclasses import dataclass
import click
from pathlib import Path

# Set up logging
logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Categories of errors that can occur in MangaBind."""

    NETWORK = "network"  # Fetching page images
    FILE_SYSTEM = "fs"  # Directory/file create, write or copy
    VALIDATION = "validation"  # Section data not exportable
    CONVERSION = "conversion"  # Document rendering
    EXTERNAL = "external"  # Archiving and external tools
    UNEXPECTED = "unexpected"
    USER_INPUT = "input"


@dataclass
class MangaBindError(Exception):
    """Custom exception class for MangaBind errors."""

    message: str
    category: ErrorCategory = ErrorCategory.UNEXPECTED
    original_error: Optional[Exception] = None
    details: Optional[Dict[str, Any]] = None
    recoverable: bool = True

    def __post_init__(self):
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.message} [{self.category.value}]"


@dataclass
class AcquisitionError(MangaBindError):
    """Page images could not be fetched into the origins directory."""

    category: ErrorCategory = ErrorCategory.NETWORK


@dataclass
class FilesystemError(MangaBindError):
    """A directory or file could not be created, written or copied."""

    category: ErrorCategory = ErrorCategory.FILE_SYSTEM


@dataclass
class TemplateError(MangaBindError):
    """A document could not be rendered from the given data."""

    category: ErrorCategory = ErrorCategory.CONVERSION
    recoverable: bool = False


@dataclass
class ArchiveError(MangaBindError):
    """The package file could not be produced."""

    category: ErrorCategory = ErrorCategory.EXTERNAL


@dataclass
class InvalidSectionError(MangaBindError):
    """The section does not satisfy the export preconditions."""

    category: ErrorCategory = ErrorCategory.VALIDATION
    recoverable: bool = False


class ErrorHandler:
    """Error handler for MangaBind operations."""

    def __init__(self, debug: bool = False):
        """Initialize error handler.

        Args:
            debug: Whether to enable debug mode.
        """
        self.debug = debug
        self.error_log: List[MangaBindError] = []
        self.log_file: Optional[Path] = None

    def set_log_file(self, log_file: Union[str, Path]) -> None:
        """Send log records to a file as well.

        Args:
            log_file: Path to log file.
        """
        self.log_file = Path(log_file)

        file_handler = logging.FileHandler(self.log_file)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
        logging.getLogger().addHandler(file_handler)

    def handle(self, error: Exception, category: ErrorCategory = ErrorCategory.UNEXPECTED,
               details: Optional[Dict[str, Any]] = None, recoverable: bool = True) -> MangaBindError:
        """Record an exception, converting it to MangaBindError if needed.

        Errors already raised as MangaBindError keep their own category,
        details and recoverability.

        Args:
            error: The original exception.
            category: The error category.
            details: Additional details about the error.
            recoverable: Whether the error is recoverable.

        Returns:
            MangaBindError: The handled error.
        """
        if isinstance(error, MangaBindError):
            mb_error = error
        else:
            mb_error = MangaBindError(
                message=str(error),
                category=category,
                original_error=error,
                details=details or {},
                recoverable=recoverable
            )

        self.error_log.append(mb_error)

        logger.error(f"{mb_error} - {'Recoverable' if mb_error.recoverable else 'Fatal'}")

        if self.debug:
            logger.debug(f"Details: {mb_error.details}")
            logger.debug(f"Traceback: {traceback.format_exc()}")

        return mb_error

    def display_error(self, error: MangaBindError) -> None:
        """Display error to user with appropriate formatting.

        Args:
            error: The error to display.
        """
        category_display = {
            ErrorCategory.NETWORK: "Network Error",
            ErrorCategory.FILE_SYSTEM: "File System Error",
            ErrorCategory.VALIDATION: "Validation Error",
            ErrorCategory.CONVERSION: "Conversion Error",
            ErrorCategory.EXTERNAL: "Packaging Error",
            ErrorCategory.USER_INPUT: "Input Error",
            ErrorCategory.UNEXPECTED: "Unexpected Error"
        }

        click.secho(category_display.get(error.category, "Error"), fg="yellow", bold=True, err=True)
        click.secho(f"{error.message}", fg="red", err=True)

        if self.debug and error.details:
            click.echo("Details:", err=True)
            for key, value in error.details.items():
                click.echo(f"  - {key}: {value}", err=True)

        if not error.recoverable:
            click.secho("This error prevents the operation from continuing.", fg="red", err=True)

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of errors.

        Returns:
            Dict with error summary information.
        """
        errors_by_category: Dict[str, List[str]] = {}
        for error in self.error_log:
            errors_by_category.setdefault(error.category.value, []).append(error.message)

        return {
            "total_errors": len(self.error_log),
            "fatal_errors": sum(1 for e in self.error_log if not e.recoverable),
            "categories": errors_by_category,
            "log_file": str(self.log_file) if self.log_file else None
        }


# Create global error handler
error_handler = ErrorHandler()


def initialize_error_handler(debug: bool = False, log_dir: Optional[str] = None) -> ErrorHandler:
    """Initialize global error handler.

    Args:
        debug: Whether to enable debug mode.
        log_dir: Directory for log files.

    Returns:
        The initialized error handler.
    """
    error_handler.debug = debug

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        from datetime import datetime
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        error_handler.set_log_file(log_path / f"mangabind_{timestamp}.log")

    return error_handler
