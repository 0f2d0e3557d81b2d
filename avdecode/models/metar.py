"""METAR result record."""
from dataclasses import dataclass, asdict
from typing import Dict, List, Tuple


# Rendering order and labels for decoded METAR fields
METAR_LABELS = [
    ('station', 'Station'),
    ('time', 'Time'),
    ('wind', 'Wind'),
    ('visibility', 'Visibility'),
    ('weather', 'Weather'),
    ('clouds', 'Clouds'),
    ('temperature', 'Temperature'),
    ('dewpoint', 'Dewpoint'),
    ('altimeter', 'Altimeter'),
    ('remarks', 'Remarks'),
]


@dataclass(frozen=True)
class MetarReport:
    """Decoded METAR; every field is '' when not found at its position."""

    raw: str
    station: str = ''
    time: str = ''
    wind: str = ''
    visibility: str = ''
    weather: str = ''
    clouds: str = ''
    temperature: str = ''
    dewpoint: str = ''
    altimeter: str = ''
    remarks: str = ''

    def items(self) -> List[Tuple[str, str]]:
        """Return (label, value) pairs for populated fields in METAR order."""
        return [(label, getattr(self, name)) for name, label in METAR_LABELS if getattr(self, name)]

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    def summary(self) -> str:
        lines = [f"Raw METAR: {self.raw}"]
        lines.extend(f"{label}: {value}" for label, value in self.items())
        return "\n".join(lines)
