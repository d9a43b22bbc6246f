"""Output formatting utilities for consistent CLI reporting."""

import click


def section_header(text: str) -> str:
    """Format a section header with color.

    Args:
        text: Header text

    Returns:
        Formatted header string
    """
    return click.style(f"▶ {text}", fg='cyan', bold=True)


def success(text: str, prefix: str = "✓") -> str:
    """Format a success message.

    Args:
        text: Message text
        prefix: Prefix character (default: ✓)

    Returns:
        Formatted success string
    """
    return f"{click.style(prefix, fg='green')} {text}"


def error(text: str, prefix: str = "✗") -> str:
    return f"{click.style(prefix, fg='red')} {text}"


def warning(text: str, prefix: str = "⚠") -> str:
    return f"{click.style(prefix, fg='yellow')} {text}"


def info(text: str) -> str:
    """Format an info message (indented bullet)."""
    return f"  {click.style('•', fg='blue')} {text}"


def playlist_line(name: str, playlist_id: str, marker: str = "") -> str:
    """Format one playlist row: name, id and an optional slot marker."""
    tag = f" {click.style(marker, fg='green', bold=True)}" if marker else ""
    return f"  {name} {click.style(playlist_id, fg='bright_black')}{tag}"


__all__ = [
    "section_header",
    "success",
    "error",
    "warning",
    "info",
    "playlist_line",
]
