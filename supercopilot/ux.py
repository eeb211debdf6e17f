"""
Terminal output for the SuperCopilot CLI.

Everything goes through click.echo, so styling is dropped automatically
when output is not a terminal (pipes, CliRunner).

Usage:
    from supercopilot.ux import print_success, print_error, print_table

    print_success("Valid: copilot.yaml")
    print_table(["COMMAND", "TRIGGER"], [["help", "/help"]])
"""

from typing import List

import click


ICONS = {
    "success": "✓",
    "error": "✗",
    "bullet": "•",
}


def print_success(message: str) -> None:
    click.echo(f"{click.style(ICONS['success'], fg='green')} {message}")


def print_error(message: str) -> None:
    """Print an error line to stderr."""
    click.echo(f"{click.style(ICONS['error'], fg='red')} {message}", err=True)


def print_bullets(items: List[str], err: bool = False) -> None:
    for item in items:
        click.echo(f"  {ICONS['bullet']} {item}", err=err)


def print_table(headers: List[str], rows: List[List[str]]) -> None:
    """Print rows under bold headers, columns padded to the widest cell.

    Nothing is printed when there are no rows.
    """
    if not rows:
        return

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[:len(widths)]):
            widths[i] = max(widths[i], len(str(cell)))

    click.echo("  ".join(click.style(h.ljust(w), bold=True) for h, w in zip(headers, widths)))
    click.echo("-" * (sum(widths) + 2 * (len(widths) - 1)))
    for row in rows:
        click.echo("  ".join(str(cell).ljust(w) for cell, w in zip(row, widths)).rstrip())
