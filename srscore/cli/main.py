"""
CLI entry point for srscore.
"""

# Standard library imports
from datetime import datetime, timezone
from pathlib import Path
from typing import List, NoReturn, Optional, Tuple

# Third-party imports
import typer
from rich.markup import escape

# Local application imports
from srscore.config import POLICY_ENV_VAR, resolve_scheduler_config
from srscore.models import Grade, SRSState
from srscore.scheduler import StepScheduler
from srscore.cli.review_ui import (
    console,
    policy_table,
    preview_table,
    simulation_table,
    state_table,
)


app = typer.Typer(
    name="srscore",
    help="srscore: step-based spaced repetition scheduler.",
    add_completion=False,
    rich_markup_mode="markdown",
)


# ---------------------------------------------------------------------------
# Common options and helpers
# ---------------------------------------------------------------------------

_policy_option = typer.Option(  # noqa: B008
    None,
    "--policy",
    help="YAML scheduling policy file. "
    f"Falls back to {POLICY_ENV_VAR} env var, then built-in defaults.",
    envvar=POLICY_ENV_VAR,
)

_now_option = typer.Option(  # noqa: B008
    None,
    "--now",
    help="Review time as ISO-8601 (naive means UTC). Defaults to now.",
)

_ease_option = typer.Option(250, "--ease", help="Ease factor x100.")
_interval_option = typer.Option(0, "--interval", help="Interval in days.")
_repetitions_option = typer.Option(0, "--reps", help="Repetitions.")
_step_option = typer.Option(0, "--step", help="Learning step (3+ = graduated).")


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error: {escape(message)}[/bold red]")
    raise typer.Exit(code=1)


def _load_scheduler(policy: Optional[Path]) -> StepScheduler:
    try:
        config = resolve_scheduler_config(policy)
    except ValueError as e:
        _fail(str(e))
    return StepScheduler(config)


def _parse_now(now: Optional[str]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(now)
    except ValueError:
        _fail(f"Invalid --now timestamp: {now!r}. Use ISO-8601.")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _build_state(
    ease: int, interval: int, reps: int, step: int, now: datetime
) -> SRSState:
    try:
        return SRSState(
            ease_factor=ease,
            interval=interval,
            repetitions=reps,
            learning_step=step,
            next_review_at=now,
        )
    except ValueError as e:
        _fail(f"Invalid state: {e}")


def _parse_grades(tokens: List[str]) -> List[Grade]:
    grades = []
    for token in tokens:
        try:
            grades.append(Grade.parse(token))
        except ValueError as e:
            _fail(str(e))
    return grades


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def grade(
    grade_token: str = typer.Argument(
        ..., metavar="GRADE", help="again, hard, good or easy (or 1-4)."
    ),
    ease: int = _ease_option,
    interval: int = _interval_option,
    reps: int = _repetitions_option,
    step: int = _step_option,
    now: Optional[str] = _now_option,
    policy: Optional[Path] = _policy_option,
):
    """
    Apply one grade to a card state and print the resulting state.
    """
    scheduler = _load_scheduler(policy)
    review_ts = _parse_now(now)
    state = _build_state(ease, interval, reps, step, review_ts)
    parsed_grade = _parse_grades([grade_token])[0]

    try:
        new_state = scheduler.compute_next_state(state, parsed_grade, review_ts)
    except ValueError as e:
        _fail(str(e))

    console.print(
        state_table(new_state, scheduler.config, title=f"After '{parsed_grade.token}'")
    )


@app.command()
def preview(
    ease: int = _ease_option,
    interval: int = _interval_option,
    reps: int = _repetitions_option,
    step: int = _step_option,
    policy: Optional[Path] = _policy_option,
):
    """
    Show how far out each grade would schedule a card.
    """
    scheduler = _load_scheduler(policy)
    review_ts = datetime.now(timezone.utc)
    state = _build_state(ease, interval, reps, step, review_ts)

    try:
        delays = scheduler.preview(state, review_ts)
    except ValueError as e:
        _fail(str(e))

    console.print(preview_table(delays))


@app.command()
def simulate(
    grade_tokens: List[str] = typer.Argument(  # noqa: B008
        ..., metavar="GRADES...", help="Grades to apply in order."
    ),
    now: Optional[str] = _now_option,
    policy: Optional[Path] = _policy_option,
):
    """
    Replay a sequence of grades on a new card, reviewing each time it falls due.
    """
    scheduler = _load_scheduler(policy)
    grades = _parse_grades(grade_tokens)
    review_ts = _parse_now(now)

    state = scheduler.new_state(review_ts)
    steps: List[Tuple[Grade, datetime, SRSState]] = []
    for parsed_grade in grades:
        state = scheduler.compute_next_state(state, parsed_grade, review_ts)
        steps.append((parsed_grade, review_ts, state))
        review_ts = state.next_review_at

    console.print(simulation_table(steps, scheduler.config))


@app.command("policy")
def show_policy(policy: Optional[Path] = _policy_option):
    """Print the effective scheduling policy."""
    scheduler = _load_scheduler(policy)
    console.print(policy_table(scheduler.config))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """
    Run the CLI application.

    If an unexpected exception occurs, print a bold red error message to the console and exit the process with status code 1.
    """
    try:
        app()
    except Exception as e:
        console.print(f"[bold red]UNEXPECTED ERROR: {e}[/bold red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
