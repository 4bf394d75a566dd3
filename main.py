"""
RaceSelect: race recommendations for sim racers
Entry point. Wires all modules together.

Usage:
  python main.py score opportunity.json history.json --mode balanced
  python main.py score opportunity.json history.json --now 2025-03-01T12:00:00Z --json
  python main.py recommend schedule.json history.json --mode safety_recovery --min-score 60
  python main.py recommend schedule.json history.json --csv ranked.csv
  python main.py compare schedule.json history.json --top 5
  python main.py weights
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

import click
from rich.logging import RichHandler

# Ensure the project root is importable when run as a script
import os
sys.path.insert(0, os.path.dirname(__file__))

import config
from raceselect import display, loader
from raceselect.models import Category, Mode
from raceselect.analysis import engine, recommender
from raceselect.analysis.scorer import InvalidModeError, get_mode_weights, parse_mode


# ---------------------------------------------------------------------------
# Option helpers
# ---------------------------------------------------------------------------

def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.LOG_LEVEL,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=display.console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _parse_mode(ctx: click.Context, param: click.Parameter, value: str) -> Mode:
    try:
        return parse_mode(value)
    except InvalidModeError as e:
        raise click.BadParameter(str(e)) from None


def _parse_now(ctx: click.Context, param: click.Parameter, value: str | None) -> datetime | None:
    """
    Accept an ISO-8601 timestamp and pin the scoring clock to it.
    Naive timestamps are taken as UTC.
    """
    if value is None:
        return None
    try:
        moment = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise click.BadParameter(f"Cannot parse timestamp: {value}") from None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _parse_category(ctx: click.Context, param: click.Parameter, value: str | None) -> Category | None:
    if value is None:
        return None
    try:
        return Category(value.strip().lower())
    except ValueError:
        valid = ", ".join(c.value for c in Category)
        raise click.BadParameter(f"Unknown category {value!r} (expected one of: {valid})") from None


def _clock_for(now: datetime | None) -> engine.Clock | None:
    return engine.fixed_clock(now) if now is not None else None


def _load_inputs(opportunities_path: str, history_path: str):
    try:
        opportunities = loader.load_opportunities(opportunities_path)
        history = loader.load_history(history_path)
    except (loader.OpportunityDataError, ValueError) as e:
        display.print_error(str(e))
        sys.exit(1)
    return opportunities, history


_mode_option = click.option(
    "--mode", "-m",
    default=config.DEFAULT_MODE,
    show_default=True,
    callback=_parse_mode,
    help="Optimisation goal: balanced, irating_push or safety_recovery.",
)
_now_option = click.option(
    "--now",
    default=None,
    callback=_parse_now,
    help="Pin the clock (ISO-8601) for reproducible familiarity scores.",
)
_json_option = click.option(
    "--json", "as_json",
    is_flag=True,
    default=False,
    help="Print JSON instead of tables.",
)
_verbose_option = click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Show factor evidence and debug logging.",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
def cli() -> None:
    """RaceSelect: which races to enter this week.

    \b
    Subcommands:
      score      Score one racing opportunity
      recommend  Score and rank a week's schedule
      compare    Rank the same races under every mode
      weights    Show factor weights per mode
    """


# ---------------------------------------------------------------------------
# score subcommand
# ---------------------------------------------------------------------------

@cli.command("score")
@click.argument("opportunity_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("history_file", type=click.Path(exists=True, dir_okay=False))
@_mode_option
@_now_option
@_json_option
@_verbose_option
def score_cmd(
    opportunity_file: str,
    history_file: str,
    mode: Mode,
    now: datetime | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Score the opportunity (or each opportunity) in OPPORTUNITY_FILE."""
    _configure_logging(verbose)
    opportunities, history = _load_inputs(opportunity_file, history_file)
    scored = recommender.score_all(opportunities, history, mode, clock=_clock_for(now))

    if as_json:
        payload = [loader.scored_to_dict(s, include_breakdown=verbose) for s in scored]
        click.echo(json.dumps(payload[0] if len(payload) == 1 else payload, indent=2))
        return

    display.print_header(mode)
    for s in scored:
        display.print_score(s.opportunity, s.score, verbose=verbose)


# ---------------------------------------------------------------------------
# recommend subcommand
# ---------------------------------------------------------------------------

@cli.command("recommend")
@click.argument("opportunities_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("history_file", type=click.Path(exists=True, dir_okay=False))
@_mode_option
@click.option(
    "--category", "-c",
    default=None,
    callback=_parse_category,
    help="Only consider this category (oval, sports_car, formula_car, dirt_oval, dirt_road).",
)
@click.option(
    "--min-score",
    type=float,
    default=config.MIN_SCORE,
    show_default=True,
    help="Drop races with an overall score below this.",
)
@click.option(
    "--max-results", "-n",
    type=click.IntRange(min=1),
    default=config.MAX_RESULTS,
    show_default=True,
    help="Maximum number of races to return.",
)
@click.option(
    "--csv", "csv_path",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Also write the ranked table to this CSV file.",
)
@_now_option
@_json_option
@_verbose_option
def recommend_cmd(
    opportunities_file: str,
    history_file: str,
    mode: Mode,
    category: Category | None,
    min_score: float,
    max_results: int,
    csv_path: str | None,
    now: datetime | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Rank the races in OPPORTUNITIES_FILE for the user in HISTORY_FILE."""
    _configure_logging(verbose)
    opportunities, history = _load_inputs(opportunities_file, history_file)

    result = recommender.recommend(
        opportunities,
        history,
        mode=mode,
        category=category,
        min_score=min_score,
        max_results=max_results,
        clock=_clock_for(now),
    )

    if csv_path:
        recommender.to_frame(result.recommendations).to_csv(csv_path, index=False)

    if as_json:
        click.echo(json.dumps({
            "mode": result.mode.value,
            "recommendations": [
                loader.scored_to_dict(s, include_breakdown=verbose) for s in result.recommendations
            ],
            "experience": recommender.experience_summary(history),
            "metadata": result.metadata,
        }, indent=2))
        return

    display.print_header(mode)
    if not result.recommendations:
        display.print_no_recommendations(min_score)
        return

    display.print_recommendations_table(result.recommendations, result.metadata)
    display.print_experience_summary(recommender.experience_summary(history))

    if verbose:
        display.console.rule("[bold]Full Factor Breakdowns[/bold]")
        for i, s in enumerate(result.recommendations, 1):
            display.print_score(s.opportunity, s.score, rank=i, verbose=True)

    if csv_path:
        display.console.print(f"[green]✓ Ranked table written to {csv_path}[/green]")


# ---------------------------------------------------------------------------
# compare subcommand
# ---------------------------------------------------------------------------

@cli.command("compare")
@click.argument("opportunities_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("history_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--top", "-n", "top_n",
    type=click.IntRange(min=1),
    default=config.COMPARE_TOP_N,
    show_default=True,
    help="Races to show per mode.",
)
@_now_option
@_json_option
@_verbose_option
def compare_cmd(
    opportunities_file: str,
    history_file: str,
    top_n: int,
    now: datetime | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Rank the same eligible races under every mode."""
    _configure_logging(verbose)
    opportunities, history = _load_inputs(opportunities_file, history_file)
    results = recommender.compare_modes(opportunities, history, clock=_clock_for(now), top_n=top_n)

    if as_json:
        click.echo(json.dumps({
            mode.value: [loader.scored_to_dict(s, include_breakdown=verbose) for s in picks]
            for mode, picks in results.items()
        }, indent=2))
        return

    display.print_mode_comparison(results)


# ---------------------------------------------------------------------------
# weights subcommand
# ---------------------------------------------------------------------------

@cli.command("weights")
def weights_cmd() -> None:
    """Show the factor weights for every mode."""
    display.print_weights_table({mode: get_mode_weights(mode) for mode in Mode})


if __name__ == "__main__":
    cli()
