"""Runway suggestion record."""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class RunwaySuggestion:
    runway: Optional[str]
    wind_direction: Optional[int] = None
    wind_speed: int = 0
    headwind: int = 0
    crosswind: int = 0
    candidates: Tuple[str, ...] = ()
    closed: Tuple[str, ...] = ()
    note: str = ''

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['candidates'] = list(self.candidates)
        result['closed'] = list(self.closed)
        return result

    def summary(self) -> str:
        if not self.runway:
            return self.note or "No runway suggestion available."

        wind = "VRB" if self.wind_direction is None else f"{self.wind_direction:03d}°"
        side = "right" if self.crosswind >= 0 else "left"
        headwind = (f"{self.headwind} kt headwind" if self.headwind >= 0
                    else f"{-self.headwind} kt tailwind")
        lines = [
            f"Best runway: {self.runway}",
            f"Wind: {wind} @ {self.wind_speed}kt",
            f"Components: {headwind}, {abs(self.crosswind)} kt crosswind from the {side}",
        ]
        if self.closed:
            lines.append(f"Closed by NOTAM: {', '.join(self.closed)}")
        if self.note:
            lines.append(self.note)
        return "\n".join(lines)
