"""User interface utilities for MangaBind.

This module provides colored terminal output used by the CLI.
"""

import click


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"

    BRIGHT_CYAN = "\033[96m"
    BRIGHT_MAGENTA = "\033[95m"


class ColorfulFormatter:
    """Formats text with colors for terminal output."""

    @staticmethod
    def info(text: str) -> str:
        return f"{Colors.CYAN}{text}{Colors.RESET}"

    @staticmethod
    def success(text: str) -> str:
        return f"{Colors.GREEN}{text}{Colors.RESET}"

    @staticmethod
    def warning(text: str) -> str:
        return f"{Colors.YELLOW}{text}{Colors.RESET}"

    @staticmethod
    def error(text: str) -> str:
        return f"{Colors.RED}{text}{Colors.RESET}"

    @staticmethod
    def section_title(text: str) -> str:
        """Format a section title.

        Args:
            text: Text to format.

        Returns:
            Formatted text.
        """
        return f"{Colors.BOLD}{Colors.BRIGHT_MAGENTA}{text}{Colors.RESET}"


def print_info(message: str) -> None:
    click.echo(ColorfulFormatter.info(message))


def print_success(message: str) -> None:
    click.echo(ColorfulFormatter.success(message))


def print_warning(message: str) -> None:
    click.echo(ColorfulFormatter.warning(message))


def print_section_title(title: str) -> None:
    click.echo(ColorfulFormatter.section_title(title))


def print_header(text: str, width: int = 60,
                 char: str = "=", color: str = Colors.BRIGHT_CYAN) -> None:
    """Print header with separator lines.

    Args:
        text: Header text.
        width: Width of separator.
        char: Character for separator.
        color: Color for header.
    """
    separator = char * width
    click.echo(f"{color}{separator}{Colors.RESET}")
    click.echo(f"{color}{text.center(width)}{Colors.RESET}")
    click.echo(f"{color}{separator}{Colors.RESET}")
