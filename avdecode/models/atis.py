"""ATIS result record."""
from dataclasses import dataclass, asdict
from typing import Dict, List, Tuple


# Fixed, ordered set of labeled ATIS fields
ATIS_LABELS = [
    ('airport', 'Airport'),
    ('information', 'Information'),
    ('time', 'Time'),
    ('runways', 'Runway(s)'),
    ('transition_level', 'Transition level'),
    ('wind', 'Wind'),
    ('visibility', 'Visibility'),
    ('weather', 'Weather'),
    ('sky', 'Sky condition'),
    ('temperature', 'Temperature'),
    ('dewpoint', 'Dewpoint'),
    ('altimeter', 'Altimeter/QNH'),
    ('trend', 'Trend'),
    ('remarks', 'Remarks'),
]

ATIS_FIELDS = [name for name, _ in ATIS_LABELS]


@dataclass(frozen=True)
class AtisReport:
    """Decoded ATIS broadcast. An empty string means "not found"."""

    airport: str = ''
    information: str = ''
    time: str = ''
    runways: str = ''
    transition_level: str = ''
    wind: str = ''
    visibility: str = ''
    weather: str = ''
    sky: str = ''
    temperature: str = ''
    dewpoint: str = ''
    altimeter: str = ''
    trend: str = ''
    remarks: str = ''

    def items(self) -> List[Tuple[str, str]]:
        """Return (label, value) pairs for found fields, absent ones omitted."""
        return [(label, getattr(self, name)) for name, label in ATIS_LABELS if getattr(self, name)]

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    def summary(self) -> str:
        return "\n".join(f"{label}: {value}" for label, value in self.items())
