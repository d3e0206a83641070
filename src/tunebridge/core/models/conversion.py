"""Conversion report returned to the CLI: the resolved source plus one outcome per target."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from tunebridge.core.exceptions import ErrorKind
from tunebridge.core.models.platform import ContentKind, Platform
from tunebridge.core.models.records import MatchResult, Record


class TargetStatus(StrEnum):
    """How a single target platform was served."""

    MATCHED = "matched"
    SEARCH_LINKS = "search_links"
    NO_MATCH = "no_match"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class TargetOutcome:
    """Result of converting the source to one target platform.

    ``result`` is filled for platforms with search, ``links`` for the others.
    ``error_kind`` and ``error_message`` are set only when ``status`` is FAILED.
    """

    platform: Platform
    status: TargetStatus
    result: MatchResult = field(default_factory=MatchResult)
    links: tuple[Record, ...] = ()
    error_kind: ErrorKind | None = None
    error_message: str | None = None

    @property
    def records(self) -> list[Record]:
        """Matched records or search links, whichever this outcome carries."""
        return self.result.records if self.result else list(self.links)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        data: dict[str, Any] = {
            "platform": str(self.platform),
            "status": str(self.status),
            "tier": str(self.result.tier) if self.result.tier else None,
            "records": [record.to_dict() for record in self.records],
        }
        if self.result:
            data["scores"] = [round(candidate.score, 2) for candidate in self.result.candidates]
        if self.status is TargetStatus.FAILED:
            data["error"] = {"kind": str(self.error_kind), "message": self.error_message}
        return data


@dataclass(frozen=True, slots=True)
class ConversionReport:
    """Everything one conversion produced."""

    source_url: str
    kind: ContentKind
    source: Record
    outcomes: tuple[TargetOutcome, ...] = ()

    def outcome_for(self, platform: Platform) -> TargetOutcome | None:
        """Outcome for one target platform, if it was requested."""
        return next((outcome for outcome in self.outcomes if outcome.platform is platform), None)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "source_url": self.source_url,
            "kind": str(self.kind),
            "source": self.source.to_dict(),
            "targets": [outcome.to_dict() for outcome in self.outcomes],
        }
