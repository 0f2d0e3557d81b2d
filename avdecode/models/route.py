"""Route analysis records."""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Tuple


class RegionFamily(Enum):
    """Strictness family applied by the route heuristics."""
    EUROPE = "europe"
    US = "us"


class RegionKind(Enum):
    EUROPE = "europe"
    US = "us"
    TRANSATLANTIC = "transatlantic"
    UNKNOWN = "unknown"


class RouteStatus(Enum):
    """Overall verdict of a route check."""
    INVALID = "Invalid"
    LIKELY_REROUTE = "LikelyReroute"
    LOOKS_OK = "LooksOk"

    @property
    def label(self) -> str:
        return {
            RouteStatus.INVALID: "Invalid format",
            RouteStatus.LIKELY_REROUTE: "Likely reroute",
            RouteStatus.LOOKS_OK: "Looks OK",
        }[self]

    @property
    def description(self) -> str:
        return {
            RouteStatus.INVALID: "The route appears malformed or incomplete.",
            RouteStatus.LIKELY_REROUTE: (
                "The route may work, but ATC may amend it based on local preferred routings."
            ),
            RouteStatus.LOOKS_OK: (
                "Format looks reasonable. Final acceptance depends on local vACC/ATC "
                "and current constraints."
            ),
        }[self]


@dataclass(frozen=True)
class RegionInfo:
    family: RegionFamily
    kind: RegionKind
    label: str
    uk_involved: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'family': self.family.value,
            'kind': self.kind.value,
            'label': self.label,
            'uk_involved': self.uk_involved,
        }


@dataclass(frozen=True)
class TokenClasses:
    """Route tokens bucketed by syntactic category, input order kept per bucket."""

    icao: Tuple[str, ...] = ()
    dct: Tuple[str, ...] = ()
    speed_level: Tuple[str, ...] = ()
    coordinate: Tuple[str, ...] = ()
    waypoint: Tuple[str, ...] = ()
    airway: Tuple[str, ...] = ()
    nat: Tuple[str, ...] = ()
    oceanic_waypoint: Tuple[str, ...] = ()
    unknown: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, List[str]]:
        return {key: list(value) for key, value in asdict(self).items()}


@dataclass(frozen=True)
class RouteAnalysis:
    tokens: Tuple[str, ...]
    region: RegionInfo
    status: RouteStatus
    reasons: Tuple[str, ...] = ()
    suggestions: Tuple[str, ...] = ()
    dct_count: int = 0
    token_classes: TokenClasses = field(default_factory=TokenClasses)
    parsed: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tokens': list(self.tokens),
            'region': self.region.to_dict(),
            'status': self.status.value,
            'reasons': list(self.reasons),
            'suggestions': list(self.suggestions),
            'dct_count': self.dct_count,
            'token_classes': self.token_classes.to_dict(),
            'parsed': self.parsed,
        }

    def summary(self) -> str:
        lines = [f"Status: {self.status.label}", self.status.description, "", self.parsed]
        if self.reasons:
            lines.append("")
            lines.append("Flags:")
            lines.extend(f"• {r}" for r in self.reasons)
        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            lines.extend(f"• {s}" for s in self.suggestions)
        return "\n".join(lines)


@dataclass(frozen=True)
class RouteSuggestion:
    """Cleaned-up route tokens plus notes explaining each change."""

    tokens: Tuple[str, ...]
    notes: Tuple[str, ...] = ()

    @property
    def route(self) -> str:
        return " ".join(self.tokens)

    def to_dict(self) -> Dict[str, Any]:
        return {'tokens': list(self.tokens), 'notes': list(self.notes)}
