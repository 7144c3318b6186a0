"""CLI command implementations for the uptime and content change evaluation core."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from src.models.config import Config
from src.services.database import Database
from src.utils.logger import configure_logging


def _get_config() -> Config:
    """Load configuration from environment and .env file."""
    return Config()


def _get_db(config: Config) -> Database:
    """Initialize database with schema."""
    db = Database(db_path=config.database_path)
    db.init_db()
    return db


def _print_summary(title: str, stats: dict[str, Any]) -> None:
    """Print a formatted summary of batch operation results."""
    click.echo(f"\n[SUCCESS] {title}")
    for key, value in stats.items():
        if key == "errors" and isinstance(value, list):
            if value:
                click.echo(f"  Errors ({len(value)}):")
                for error in value[:10]:
                    click.echo(f"    - {error}")
                if len(value) > 10:
                    click.echo(f"    ... and {len(value) - 10} more")
        else:
            click.echo(f"  {key}: {value}")


def _format_validation_error(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'probe'}: {err['msg']}"
        for err in exc.errors()
    )


@click.command()
def init_db() -> None:
    """Create the database schema."""
    config = _get_config()
    configure_logging(config.log_level, config.log_format)
    db = _get_db(config)
    click.echo(f"[SUCCESS] Database initialized at {config.database_path}")
    db.close()


@click.command()
@click.argument("url")
@click.option("--target-id", default=None, type=int, help="Explicit target ID (updates if exists)")
@click.option("--name", default=None, type=str, help="Display name")
@click.option(
    "--confirmations",
    default=None,
    type=click.IntRange(min=1),
    help="Consecutive probes required to confirm a transition",
)
@click.option("--disabled", is_flag=True, help="Register with monitoring disabled")
def register_target(
    url: str,
    target_id: int | None,
    name: str | None,
    confirmations: int | None,
    disabled: bool,
) -> None:
    """Register or update a monitored target."""
    config = _get_config()
    configure_logging(config.log_level, config.log_format)
    db = _get_db(config)

    from src.domains.monitoring.repositories.target_repository import TargetRepository

    threshold = confirmations or config.default_confirmation_threshold
    new_id = TargetRepository(db).upsert_target(
        url,
        name=name,
        confirmation_threshold=threshold,
        monitoring_enabled=not disabled,
        target_id=target_id,
    )
    click.echo(f"[SUCCESS] Target {new_id} registered ({url}, confirmations={threshold})")
    db.close()


@click.command()
@click.option(
    "--state",
    "state_filter",
    default=None,
    type=click.Choice(["UP", "DOWN"], case_sensitive=False),
    help="Only show targets currently in this state",
)
def list_targets(state_filter: str | None) -> None:
    """List registered targets with their current availability state."""
    config = _get_config()
    configure_logging(config.log_level, config.log_format)
    db = _get_db(config)

    from src.domains.monitoring.repositories.availability_state_repository import (
        AvailabilityStateRepository,
    )
    from src.domains.monitoring.repositories.target_repository import TargetRepository

    state_repo = AvailabilityStateRepository(db)
    targets = TargetRepository(db).get_all_targets()
    if state_filter:
        states = {s.target_id: s for s in state_repo.get_states_by_status(state_filter)}
        targets = [target for target in targets if target.id in states]
    else:
        states = {}
        for target in targets:
            state = state_repo.get_state(target.id)
            if state is not None:
                states[target.id] = state
    db.close()

    if not targets:
        click.echo("[INFO] No targets found")
        return

    click.echo(f"\nTargets ({len(targets)}):")
    for target in targets:
        current = states.get(target.id)
        label = current.state.value if current else "-"
        disabled = "" if target.monitoring_enabled else "  (disabled)"
        click.echo(
            f"  {target.id}  {label:<4}  {target.url}  "
            f"confirmations={target.confirmation_threshold}{disabled}"
        )


@click.command()
@click.argument("target_id", type=int)
@click.option(
    "--outcome",
    required=True,
    type=click.Choice(["SUCCESS", "ERROR", "TIMEOUT", "BLOCKED"], case_sensitive=False),
    help="Probe outcome category",
)
@click.option("--http-status", default=None, type=int, help="HTTP status code")
@click.option("--final-url", default=None, type=str, help="Final URL after redirects")
@click.option("--latency-ms", default=0, type=int, help="Probe latency in milliseconds")
@click.option(
    "--body-file",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="File holding the retrieved body (SUCCESS only)",
)
@click.option("--headers-json", default=None, type=str, help="Response headers as a JSON object")
@click.option(
    "--output-format",
    default="summary",
    type=click.Choice(["summary", "json"]),
    help="Output format",
)
def evaluate(
    target_id: int,
    outcome: str,
    http_status: int | None,
    final_url: str | None,
    latency_ms: int,
    body_file: Path | None,
    headers_json: str | None,
    output_format: str,
) -> None:
    """Evaluate one probe result for a target."""
    config = _get_config()
    configure_logging(config.log_level, config.log_format)

    from src.domains.monitoring.services.evaluation_orchestrator import (
        EvaluationError,
        build_orchestrator,
    )

    payload: dict[str, Any] = {
        "outcome": outcome,
        "http_status": http_status,
        "final_url": final_url,
        "latency_ms": latency_ms,
    }
    if body_file is not None:
        payload["body"] = body_file.read_text(encoding="utf-8")
    if headers_json is not None:
        try:
            payload["headers"] = json.loads(headers_json)
        except json.JSONDecodeError as exc:
            raise click.BadParameter(str(exc), param_hint="--headers-json") from exc
    elif body_file is not None:
        payload["headers"] = {}

    db = _get_db(config)
    try:
        result = build_orchestrator(db).evaluate_target(target_id, payload)
    except ValidationError as exc:
        reason = _format_validation_error(exc)
        raise click.ClickException(f"Invalid probe result: {reason}") from exc
    except EvaluationError as exc:
        raise click.ClickException(str(exc)) from exc
    finally:
        db.close()

    if output_format == "json":
        click.echo(result.model_dump_json(indent=2))
        return

    if result.skipped or result.state is None:
        click.echo(f"[WARNING] Target {target_id} skipped: {result.skip_reason}")
        return

    state = result.state
    click.echo(f"[SUCCESS] Target {target_id} evaluated")
    click.echo(f"  state: {state.state.value}")
    click.echo(f"  consecutive_failures: {state.consecutive_failures}")
    click.echo(f"  consecutive_successes: {state.consecutive_successes}")
    if result.transition is not None:
        click.echo(
            f"  transition: {result.transition.from_state.value} -> "
            f"{result.transition.to_state.value}"
        )
    if result.snapshot is not None:
        if result.snapshot.error:
            click.echo(f"  snapshot: failed ({result.snapshot.error})")
        else:
            level = result.snapshot.change_level.value if result.snapshot.change_level else "n/a"
            click.echo(f"  snapshot: #{result.snapshot.sequence_number} change_level={level}")


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--max-workers", default=None, type=click.IntRange(1, 32), help="Parallel targets")
@click.option(
    "--output-format",
    default="summary",
    type=click.Choice(["summary", "json"]),
    help="Output format",
)
def evaluate_file(path: Path, max_workers: int | None, output_format: str) -> None:
    """Evaluate a JSON-lines file of probe results."""
    config = _get_config()
    configure_logging(config.log_level, config.log_format)

    from src.domains.monitoring.services.batch_evaluator import BatchEvaluator, load_probe_file
    from src.domains.monitoring.services.evaluation_orchestrator import build_orchestrator

    try:
        probes = load_probe_file(path)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    db = _get_db(config)
    click.echo(f"[INFO] Evaluating {len(probes)} probes from {path}...")
    try:
        evaluator = BatchEvaluator(build_orchestrator(db))
        result = evaluator.evaluate_batch(
            probes, max_workers=max_workers or config.batch_max_workers
        )
    finally:
        db.close()

    if output_format == "json":
        click.echo(json.dumps(result, indent=2))
    else:
        _print_summary("Probe evaluation complete", result)


@click.command()
@click.argument("target_id", type=int)
def show_state(target_id: int) -> None:
    """Show the current availability state of a target."""
    config = _get_config()
    configure_logging(config.log_level, config.log_format)
    db = _get_db(config)

    from src.domains.monitoring.repositories.availability_state_repository import (
        AvailabilityStateRepository,
    )

    state = AvailabilityStateRepository(db).get_state(target_id)
    db.close()

    if state is None:
        click.echo(f"[INFO] No availability state recorded for target {target_id}")
        return

    click.echo(f"\nTarget {target_id}: {state.state.value}")
    click.echo(f"  Since: {state.changed_at.isoformat()}")
    click.echo(f"  Consecutive failures: {state.consecutive_failures}")
    click.echo(f"  Consecutive successes: {state.consecutive_successes}")
    click.echo(f"  Last outcome: {state.last_outcome.value}")
    click.echo(f"  Last HTTP status: {state.last_http_status or 'n/a'}")
    click.echo(f"  Last latency: {state.last_latency_ms or 0} ms")
    click.echo(f"  Last final URL: {state.last_final_url or 'n/a'}")
    click.echo(f"  Last observed: {state.last_observed_at.isoformat()}")


@click.command()
@click.argument("target_id", type=int)
@click.option("--limit", default=50, type=int, help="Max records to display")
def list_transitions(target_id: int, limit: int) -> None:
    """List confirmed UP/DOWN transitions for a target, newest first."""
    config = _get_config()
    configure_logging(config.log_level, config.log_format)
    db = _get_db(config)

    from src.domains.monitoring.repositories.transition_event_repository import (
        TransitionEventRepository,
    )

    events = TransitionEventRepository(db).list_transitions(target_id, limit=limit)
    db.close()

    if not events:
        click.echo(f"[INFO] No transitions recorded for target {target_id}")
        return

    click.echo(f"\nTransitions for target {target_id} ({len(events)}):")
    for event in events:
        status = f" HTTP {event.reason_http_status}" if event.reason_http_status else ""
        click.echo(
            f"  {event.observed_at.isoformat()}  {event.from_state.value} -> "
            f"{event.to_state.value}  ({event.reason_outcome.value}{status})"
        )


@click.command()
@click.argument("target_id", type=int)
@click.option("--limit", default=20, type=int, help="Max snapshots to display")
def show_snapshots(target_id: int, limit: int) -> None:
    """Show a target's most recent content snapshots and their change levels."""
    config = _get_config()
    configure_logging(config.log_level, config.log_format)
    db = _get_db(config)

    from src.domains.monitoring.repositories.snapshot_repository import SnapshotRepository

    snapshots = SnapshotRepository(db).list_snapshots(target_id, limit=limit)
    db.close()

    if not snapshots:
        click.echo(f"[INFO] No snapshots recorded for target {target_id}")
        return

    click.echo(f"\nSnapshots for target {target_id}:")
    for snapshot in snapshots:
        diff = snapshot.diff_summary
        click.echo(
            f"  #{snapshot.sequence_number} [{snapshot.change_level.value}] "
            f"{snapshot.created_at.isoformat()}  {snapshot.body_size} bytes "
            f"(prev: {snapshot.previous_snapshot_id or '-'})"
        )
        if diff.has_structural_change:
            click.echo(
                f"    scripts +{len(diff.scripts_added)}/-{len(diff.scripts_removed)}  "
                f"styles +{len(diff.styles_added)}/-{len(diff.styles_removed)}  "
                f"images +{len(diff.images_added)}/-{len(diff.images_removed)}  "
                f"meta changed: {'yes' if diff.meta_tags_changed else 'no'}"
            )
