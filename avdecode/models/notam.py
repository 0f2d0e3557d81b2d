"""NOTAM domain model."""
from datetime import datetime
from typing import Optional, Dict, Any, List, Tuple
from dataclasses import dataclass, field, asdict
from enum import Enum


class NotamFormat(Enum):
    """Grammar a NOTAM chunk was recognised as."""
    FAA_BANG = "FAA_BANG"   # !LOC MM/NNNN LOC ...
    ICAO = "ICAO"           # Q) A) B) C) E) lettered fields
    PLAIN = "PLAIN"         # free text


# ---------------------------------------------------------------------------
# Q-Code decoding tables (ICAO Doc 8126)
#
# Q_CODE_SUBJECTS is keyed on letters 2+3 of the Q-code (e.g. "MR" in QMRLC),
# Q_CODE_CONDITIONS on letters 4+5 (e.g. "LC"). The tables are independent:
# "LC" is "Runway centre line lights" as a subject but "Closed" as a condition.
# ---------------------------------------------------------------------------

Q_CODE_SUBJECTS = {
    # Lighting
    "LA": "Approach lighting system",
    "LB": "Aerodrome beacon",
    "LC": "Runway centre line lights",
    "LE": "Runway edge lights",
    "LP": "Precision approach path indicator",
    "LT": "Threshold lights",
    "LX": "Taxiway centre line lights",
    "LZ": "Runway touchdown zone lights",

    # Movement and landing area
    "MA": "Movement area",
    "MD": "Declared distances",
    "MK": "Parking area",
    "MN": "Apron",
    "MP": "Aircraft stands",
    "MR": "Runway",
    "MT": "Threshold",
    "MX": "Taxiway(s)",

    # Facilities and services
    "FA": "Aerodrome",
    "FF": "Fire fighting and rescue",
    "FU": "Fuel availability",

    # Communications and landing aids
    "CA": "Air/ground facility",
    "IC": "Instrument landing system",
    "ID": "DME associated with ILS",
    "IG": "ILS glide path",
    "IL": "ILS localiser",

    # En-route navigation facilities
    "NA": "All radio navigation facilities",
    "NB": "Non-directional radio beacon (NDB)",
    "ND": "Distance measuring equipment (DME)",
    "NM": "VOR/DME",
    "NV": "VOR",

    # Airspace and procedures
    "AF": "Flight information region (FIR)",
    "AR": "RNAV route",
    "PA": "Standard instrument arrival (STAR)",
    "PD": "Standard instrument departure (SID)",
    "PI": "Instrument approach procedure",
    "RD": "Danger area",
    "RP": "Prohibited area",
    "RR": "Restricted area",
    "RT": "Temporary restricted area",

    # Warnings and other
    "WU": "Unmanned aircraft",
    "OB": "Obstacle",
    "OL": "Obstacle lights",
    "XX": "Plain language",
}

Q_CODE_CONDITIONS = {
    "AS": "Unserviceable",
    "AU": "Not available",
    "AW": "Completely withdrawn",
    "CA": "Activated",
    "CD": "Deactivated",
    "CH": "Changed",
    "CS": "Installed",
    "HW": "Work in progress",
    "HX": "Concentration of birds",
    "LC": "Closed",
    "LI": "Closed to IFR operations",
    "LT": "Limited to",
    "LV": "Closed to VFR operations",
    "TT": "Trigger NOTAM",
    "XX": "Plain language",
}


@dataclass(frozen=True)
class QLine:
    """Decoded ICAO Q-line (FIR/QCODE/TRAFFIC/PURPOSE/SCOPE/LOWER/UPPER/POSITION)."""

    raw: str
    fir: str = ''
    q_code: str = ''
    traffic: str = ''
    purpose: str = ''
    scope: str = ''
    lower: str = ''
    upper: str = ''
    position_raw: str = ''
    altitudes: str = ''
    position: str = ''

    @property
    def subject(self) -> Optional[str]:
        """Q-code letters 2+3 decoded (what the NOTAM is about)."""
        if len(self.q_code) < 5:
            return None
        code = self.q_code[1:3]
        return Q_CODE_SUBJECTS.get(code, f"Unknown ({code})")

    @property
    def condition(self) -> Optional[str]:
        """Q-code letters 4+5 decoded (the status of the subject)."""
        if len(self.q_code) < 5:
            return None
        code = self.q_code[3:5]
        return Q_CODE_CONDITIONS.get(code, f"Unknown ({code})")


@dataclass(frozen=True)
class Notam:
    """One decoded NOTAM chunk."""

    id: str
    location: str
    validity: str
    text: str
    kind: NotamFormat = NotamFormat.PLAIN
    raw: str = ''
    q_line: Optional[str] = None
    altitudes: Optional[str] = None
    position: Optional[str] = None
    q_code: Optional[str] = None
    q_code_subject: Optional[str] = None
    q_code_condition: Optional[str] = None
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    is_permanent: bool = False

    @property
    def title(self) -> str:
        parts = [p for p in (self.id, self.location) if p]
        return f"NOTAM {' — '.join(parts)}" if parts else "NOTAM"

    def body_lines(self) -> List[str]:
        """Rendered body lines, omitting fields that were not found."""
        lines = []
        if self.validity:
            lines.append(f"Validity: {self.validity}")
        if self.q_line:
            lines.append(f"Q-line: {self.q_line}")
        if self.q_code_subject or self.q_code_condition:
            q_str = "Q-Code: "
            if self.q_code_subject:
                q_str += self.q_code_subject
            if self.q_code_condition:
                q_str += f" — {self.q_code_condition}"
            lines.append(q_str)
        if self.altitudes:
            lines.append(f"Altitudes: {self.altitudes}")
        if self.position:
            lines.append(f"Area: {self.position}")
        if self.text:
            lines.append(self.text)
        return lines

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly dictionary."""
        result = {}

        for key, value in asdict(self).items():
            if isinstance(value, datetime):
                result[key] = value.isoformat()
            elif isinstance(value, NotamFormat):
                result[key] = value.value
            else:
                result[key] = value

        return result

    def summary(self) -> str:
        lines = [self.title, "=" * len(self.title)]
        lines.extend(self.body_lines())
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"<Notam {self.id or 'N/A'} {self.location or 'N/A'} {self.kind.value}>"


@dataclass(frozen=True)
class NotamBatch:
    """Ordered NOTAMs decoded from one input plus the category summary line."""

    summary: str = ''
    items: Tuple[Notam, ...] = field(default_factory=tuple)
    runway_count: int = 0
    taxiway_count: int = 0
    navaid_count: int = 0

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'summary': self.summary,
            'runway_count': self.runway_count,
            'taxiway_count': self.taxiway_count,
            'navaid_count': self.navaid_count,
            'items': [n.to_dict() for n in self.items],
        }

    def render(self) -> str:
        """Full text rendering: summary line then one block per NOTAM."""
        blocks = []
        if self.summary:
            blocks.append(f"Summary: {self.summary}")
        blocks.extend(n.summary() for n in self.items)
        return "\n\n".join(blocks)
