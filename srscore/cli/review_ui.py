"""
Rich rendering of SRS states, previews and policies for the command line.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Tuple

from rich.console import Console
from rich.table import Table

from srscore.models import Grade, Learning, MasteryLevel, SRSState
from srscore.presentation import format_interval, mastery_level
from srscore.scheduler import SchedulerConfig

logger = logging.getLogger(__name__)
console = Console()

LEVEL_STYLES = {
    MasteryLevel.New: "blue",
    MasteryLevel.Learning: "dark_orange",
    MasteryLevel.Young: "yellow",
    MasteryLevel.Mature: "green",
}


def level_badge(state: SRSState, config: SchedulerConfig) -> str:
    """Markup for the card's maturity label, e.g. ``[green]Mature[/green]``."""
    level = mastery_level(state, graduated_step=config.graduated_step)
    style = LEVEL_STYLES[level]
    return f"[{style}]{level.name}[/{style}]"


def phase_label(state: SRSState, config: SchedulerConfig) -> str:
    phase = state.phase_at(config.graduated_step)
    if isinstance(phase, Learning):
        return f"Learning (step {phase.step})"
    return "Review"


def state_table(
    state: SRSState, config: SchedulerConfig, title: str = "SRS state"
) -> Table:
    table = Table(title=title, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Phase", phase_label(state, config))
    table.add_row("Level", level_badge(state, config))
    table.add_row("Ease factor", f"{state.ease_factor} ({state.ease_factor / 100:.2f})")
    table.add_row("Interval", f"{state.interval} days")
    table.add_row("Repetitions", str(state.repetitions))
    table.add_row("Learning step", str(state.learning_step))
    table.add_row("Next review", state.next_review_at.isoformat())
    table.add_row("Correct / incorrect", f"{state.times_correct} / {state.times_incorrect}")
    return table


def preview_table(preview: Dict[Grade, timedelta]) -> Table:
    table = Table(title="Next review by grade")
    table.add_column("Grade", style="bold")
    table.add_column("Due in", justify="right")
    for grade, delay in preview.items():
        table.add_row(grade.token, format_interval(delay))
    return table


def simulation_table(
    steps: List[Tuple[Grade, datetime, SRSState]], config: SchedulerConfig
) -> Table:
    """One row per (grade, review time, resulting state)."""
    table = Table(title="Simulated reviews")
    table.add_column("#", justify="right")
    table.add_column("Grade")
    table.add_column("Phase")
    table.add_column("Ivl", justify="right")
    table.add_column("Ease", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("Due in", justify="right")
    table.add_column("Level")
    for index, (grade, reviewed_at, state) in enumerate(steps, start=1):
        phase = state.phase_at(config.graduated_step)
        table.add_row(
            str(index),
            grade.token,
            f"L{phase.step}" if isinstance(phase, Learning) else "R",
            str(state.interval),
            str(state.ease_factor),
            str(state.repetitions),
            format_interval(state.next_review_at - reviewed_at),
            level_badge(state, config),
        )
    return table


def policy_table(config: SchedulerConfig) -> Table:
    table = Table(title="Scheduling policy", show_header=False)
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    table.add_row(
        "learning_steps",
        ", ".join(format_interval(step) for step in config.learning_steps),
    )
    for name, value in config.model_dump(exclude={"learning_steps"}).items():
        table.add_row(name, str(value))
    return table
