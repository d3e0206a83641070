"""Terminal and JSON presentation of conversion results."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tunebridge.core.models.conversion import ConversionReport, TargetOutcome, TargetStatus
from tunebridge.core.models.platform import Platform
from tunebridge.core.models.records import MatchResult, Record
from tunebridge.services.url_parser import SourceReference

STATUS_STYLES = {
    TargetStatus.MATCHED: "green",
    TargetStatus.SEARCH_LINKS: "cyan",
    TargetStatus.NO_MATCH: "yellow",
    TargetStatus.FAILED: "red",
}


def format_duration(seconds: float | None) -> str:
    """``m:ss`` for a duration, or an empty string when unknown."""
    if not seconds:
        return ""
    minutes, remainder = divmod(round(seconds), 60)
    return f"{minutes}:{remainder:02d}"


def dump_json(data: dict[str, Any]) -> str:
    """Serialize a result dict for machine consumption."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def _artists(record: Record) -> str:
    return escape(", ".join(artist for artist in record.artists if artist)) or "-"


def render_source(console: Console, source: Record) -> None:
    """One-line description of the resolved source."""
    platform = source.platform.display_name if source.platform else "Unknown"
    title = escape(source.title) if source.title else "[dim](untitled)[/dim]"
    console.print(f"[bold]{platform}[/bold]: {title} [dim]by[/dim] {_artists(source)}")


def _records_table(title: str, records: list[Record], scores: list[float] | None = None) -> Table:
    table = Table(title=title, title_justify="left", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title")
    table.add_column("Artist")
    table.add_column("Length", justify="right")
    if scores is not None:
        table.add_column("Score", justify="right")
    table.add_column("Link", overflow="fold")

    for index, record in enumerate(records, start=1):
        row = [str(index), escape(record.title), _artists(record), format_duration(record.duration_seconds)]
        if scores is not None:
            row.append(f"{scores[index - 1]:.1f}")
        row.append(escape(record.url or ""))
        table.add_row(*row)
    return table


def render_outcome(console: Console, outcome: TargetOutcome) -> None:
    """Table (or status line) for one target platform."""
    style = STATUS_STYLES[outcome.status]
    heading = f"{outcome.platform.display_name} [{style}]{outcome.status}[/{style}]"

    if outcome.status is TargetStatus.FAILED:
        console.print(f"{heading}: {escape(outcome.error_message or '')}")
        return
    if outcome.status is TargetStatus.NO_MATCH:
        console.print(f"{heading}: no match found")
        return
    if outcome.result.tier is not None:
        heading = f"{heading} [dim]({outcome.result.tier})[/dim]"
    console.print(_records_table(heading, outcome.records))


def render_report(console: Console, report: ConversionReport) -> None:
    """Source line followed by one block per target platform."""
    render_source(console, report.source)
    for outcome in report.outcomes:
        console.print()
        render_outcome(console, outcome)


def render_candidates(console: Console, source: Record, platform: Platform, result: MatchResult) -> None:
    """Scored candidates of a single matching run."""
    render_source(console, source)
    if result.is_empty:
        console.print(f"{platform.display_name}: no candidates")
        return
    scores = [candidate.score for candidate in result.candidates]
    console.print(_records_table(f"{platform.display_name} candidates ({result.tier})", result.records, scores))


def candidates_to_dict(source: Record, platform: Platform, result: MatchResult) -> dict[str, Any]:
    """JSON shape of a single matching run."""
    return {
        "source": source.to_dict(),
        "platform": str(platform),
        "tier": str(result.tier) if result.tier else None,
        "candidates": [
            {"score": round(candidate.score, 2), "tier": str(candidate.tier), "record": candidate.record.to_dict()}
            for candidate in result.candidates
        ],
    }


def reference_to_dict(reference: SourceReference) -> dict[str, Any]:
    """JSON shape of a parsed link."""
    return {
        "platform": str(reference.platform),
        "kind": str(reference.kind),
        "id": reference.id,
        "short_link": reference.is_short_link,
    }
