"""
All rich output formatting. Nothing outside this module prints to the terminal.
"""
from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text
from rich import box
from rich.rule import Rule

import config
from raceselect.models import (
    ConfidenceLevel,
    Mode,
    ModeWeights,
    RacingOpportunity,
    RiskLevel,
    Score,
    ScoredOpportunity,
)
from raceselect.analysis.context import effective_race_length
from raceselect.analysis.scorer import label_overall

console = Console()

_FACTOR_LABELS: dict[str, str] = {
    "performance":      "Performance",
    "safety":           "Safety",
    "consistency":      "Consistency",
    "predictability":   "Predictability",
    "familiarity":      "Familiarity",
    "fatigue_risk":     "Fatigue Risk",
    "attrition_risk":   "Attrition Risk",
    "time_volatility":  "Time Volatility",
}


# ---------------------------------------------------------------------------
# Colour helpers
# ---------------------------------------------------------------------------

def _score_colour(score: float) -> str:
    if score >= 90:
        return "bold green"
    if score >= 75:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def _risk_colour(risk: RiskLevel) -> str:
    return {
        RiskLevel.LOW:    "green",
        RiskLevel.MEDIUM: "yellow",
        RiskLevel.HIGH:   "bold red",
    }[risk]


def _confidence_colour(level: ConfidenceLevel) -> str:
    return {
        ConfidenceLevel.HIGH:      "green",
        ConfidenceLevel.ESTIMATED: "yellow",
        ConfidenceLevel.NO_DATA:   "dim",
    }[level]


def confidence_badge(level: ConfidenceLevel) -> Text:
    return Text(config.CONFIDENCE_BADGES[level.value], style=_confidence_colour(level))


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------

def print_header(mode: Mode) -> None:
    console.print()
    console.print(Panel(
        "[bold cyan]RaceSelect — Race Recommendations[/bold cyan]\n"
        f"[dim]Mode: {mode.value}[/dim]",
        box=box.DOUBLE_EDGE,
        expand=False,
    ))
    console.print()


def print_error(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")


def print_no_recommendations(min_score: float) -> None:
    console.print(Panel(
        f"[yellow]No races scored {min_score:g} or higher.\n"
        "Try a lower --min-score or a different --mode.[/yellow]",
        title="No Recommendations",
    ))


# ---------------------------------------------------------------------------
# Single score display
# ---------------------------------------------------------------------------

def print_score(
    opportunity: RacingOpportunity,
    score: Score,
    rank: int | None = None,
    verbose: bool = False,
) -> None:
    score_col = _score_colour(score.overall)
    rank_str = f"#{rank} " if rank else ""
    title = (
        f"{rank_str}[bold]{opportunity.series_name}[/bold] @ {opportunity.track_name}  "
        f"[dim]{effective_race_length(opportunity):.0f} min · {opportunity.license_required.value}[/dim]  "
        f"[{score_col}][{label_overall(score.overall)}: {score.overall}/100][/{score_col}]"
    )

    irating_col = _risk_colour(score.irating_risk)
    sr_col = _risk_colour(score.safety_rating_risk)
    lines: list[str] = [
        f"  iRating risk: [{irating_col}]{score.irating_risk.value}[/{irating_col}]   "
        f"SR risk: [{sr_col}]{score.safety_rating_risk.value}[/{sr_col}]   "
        f"[dim]priority {score.priority_score}[/dim]",
        "",
    ]

    factor_scores = score.factors.as_dict()
    details = {f.name: f for f in score.breakdown}
    for name, label in _FACTOR_LABELS.items():
        value = factor_scores[name]
        f_col = _score_colour(value)
        lines.append(f"  [dim]{label:16s}[/dim]  [{f_col}]{value:3d}/100[/{f_col}]")
        if verbose and name in details:
            for ev in details[name].evidence:
                lines.append(f"    [dim]• {ev}[/dim]")

    lines.append("")
    for reason in score.reasoning:
        lines.append(f"  → {reason}")

    dc = score.data_confidence
    lines.append("")
    lines.append(
        "  [dim]Data:[/dim] "
        f"performance [{_confidence_colour(dc.performance)}]{dc.performance.value}[/]  "
        f"safety [{_confidence_colour(dc.safety)}]{dc.safety.value}[/]  "
        f"consistency [{_confidence_colour(dc.consistency)}]{dc.consistency.value}[/]  "
        f"familiarity [{_confidence_colour(dc.familiarity)}]{dc.familiarity.value}[/]  "
        f"global [dim]{dc.global_stats.value}[/dim]"
    )

    console.print(Panel("\n".join(lines), title=title, box=box.ROUNDED))


# ---------------------------------------------------------------------------
# Recommendation table
# ---------------------------------------------------------------------------

def print_recommendations_table(scored: list[ScoredOpportunity], metadata: dict) -> None:
    table = Table(
        title=f"Recommended Races ({len(scored)} of {metadata.get('total_opportunities', len(scored))})",
        box=box.SIMPLE,
        show_lines=False,
    )
    table.add_column("#", style="dim", justify="right")
    table.add_column("Series", style="bold")
    table.add_column("Track")
    table.add_column("Len", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Flag")
    table.add_column("iR risk")
    table.add_column("SR risk")
    table.add_column("Data")

    for i, s in enumerate(scored, 1):
        opp, sc = s.opportunity, s.score
        table.add_row(
            str(i),
            opp.series_name,
            opp.track_name,
            f"{effective_race_length(opp):.0f}m",
            Text(f"{sc.overall}/100", style=_score_colour(sc.overall)),
            label_overall(sc.overall),
            Text(sc.irating_risk.value, style=_risk_colour(sc.irating_risk)),
            Text(sc.safety_rating_risk.value, style=_risk_colour(sc.safety_rating_risk)),
            confidence_badge(sc.data_confidence.performance),
        )

    console.print(table)
    console.print(
        f"[dim]{metadata.get('high_confidence_count', 0)} high confidence · "
        f"{metadata.get('estimated_count', 0)} estimated · "
        f"{metadata.get('no_data_count', 0)} no personal data · "
        f"{metadata.get('processing_time_ms', 0):.1f} ms[/dim]"
    )
    console.print()


def print_experience_summary(summary: dict) -> None:
    console.print(Rule("[bold]Experience[/bold]"))
    console.print(
        f"  {summary['total_races']} races · "
        f"{summary['series_with_experience']} series · "
        f"{summary['tracks_with_experience']} tracks"
    )
    if summary["most_raced_series"]:
        top = ", ".join(
            f"series {s['series_id']} ({s['race_count']})" for s in summary["most_raced_series"]
        )
        console.print(f"  [dim]Most raced: {top}[/dim]")
    console.print()


# ---------------------------------------------------------------------------
# Mode weights
# ---------------------------------------------------------------------------

def print_weights_table(weights: dict[Mode, ModeWeights]) -> None:
    table = Table(title="Factor Weights by Mode", box=box.SIMPLE_HEAVY)
    table.add_column("Factor")
    for mode in weights:
        table.add_column(mode.value, justify="right")

    for name, label in _FACTOR_LABELS.items():
        table.add_row(label, *(f"{w.as_dict()[name]:.2f}" for w in weights.values()))

    console.print(table)


# ---------------------------------------------------------------------------
# Mode comparison
# ---------------------------------------------------------------------------

def print_mode_comparison(results: dict[Mode, list[ScoredOpportunity]]) -> None:
    """Side-by-side top races per mode; row N is each mode's Nth pick."""
    depth = max((len(picks) for picks in results.values()), default=0)
    if depth == 0:
        console.print("[yellow]No eligible races to compare.[/yellow]")
        return

    table = Table(title="Top Races by Mode", box=box.SIMPLE_HEAVY, show_lines=False)
    table.add_column("#", style="dim", justify="right")
    for mode in results:
        table.add_column(mode.value)

    for i in range(depth):
        cells: list[Text | str] = [str(i + 1)]
        for picks in results.values():
            if i >= len(picks):
                cells.append("")
                continue
            s = picks[i]
            cell = Text(f"{s.opportunity.series_name} @ {s.opportunity.track_name} ")
            cell.append(str(s.score.overall), style=_score_colour(s.score.overall))
            cells.append(cell)
        table.add_row(*cells)

    console.print(table)
