"""Pilot briefing records built from a route."""
from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class RouteVariants:
    """The same route formatted for filing and for the FMC."""

    controller: Tuple[str, ...]
    fmc: Tuple[str, ...]
    cleanup: Tuple[str, ...]

    def to_dict(self) -> Dict[str, str]:
        return {
            'controller': " ".join(self.controller),
            'fmc': " ".join(self.fmc),
            'cleanup': " ".join(self.cleanup),
        }

    def summary(self) -> str:
        data = self.to_dict()
        return "\n".join([
            f"Filing variant (controller-friendly): {data['controller']}",
            f"FMC paste (as entered): {data['fmc']}",
            f"Filing variant (cleanup): {data['cleanup']}",
        ])


@dataclass(frozen=True)
class OceanicBrief:
    required: bool
    detected: bool = False
    route_type: str = ''
    position_report: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'required': self.required,
            'detected': self.detected,
            'route_type': self.route_type,
            'position_report': self.position_report,
        }

    def summary(self) -> str:
        if not self.required:
            return "This looks like a non-transatlantic flight. Oceanic brief not required."
        status = ("Oceanic segment: detected" if self.detected else
                  "Oceanic segment: NOT detected (you may be rerouted/asked for oceanic routing)")
        return "\n".join([
            f"Route type: {self.route_type}",
            status,
            "Position report template:",
            self.position_report,
        ])


@dataclass(frozen=True)
class Readback:
    """IFR clearance readback template, one sentence per line."""

    lines: Tuple[str, ...]

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def to_dict(self) -> Dict[str, Any]:
        return {'lines': list(self.lines), 'text': self.text}

    def summary(self) -> str:
        return self.text
