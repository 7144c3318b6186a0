"""CLI entry point for the uptime and content change evaluation core."""

from __future__ import annotations

import click

from src.cli.commands import (
    evaluate,
    evaluate_file,
    init_db,
    list_targets,
    list_transitions,
    register_target,
    show_snapshots,
    show_state,
)


@click.group()
def cli() -> None:
    """Uptime confirmation and content change evaluation."""


cli.add_command(init_db)
cli.add_command(register_target)
cli.add_command(list_targets)
cli.add_command(evaluate)
cli.add_command(evaluate_file)
cli.add_command(show_state)
cli.add_command(list_transitions)
cli.add_command(show_snapshots)
