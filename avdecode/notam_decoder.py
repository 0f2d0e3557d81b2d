"""
NOTAM decoder.

Splits pasted NOTAM text into chunks, classifies each chunk as FAA bang
format, ICAO lettered-field format or plain text, and parses it with the
matching grammar. Chunks with nothing extractable are dropped.
"""
import re
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from avdecode.abbreviations import expand_notam_abbreviations
from avdecode.icao import normalize_icao_hint
from avdecode.models.notam import Notam, NotamBatch, NotamFormat, QLine

logger = logging.getLogger(__name__)


_RE_BANG_LINE = re.compile(r'^\s*!')
_RE_ICAO_MARKER = re.compile(r'\b[QA]\)', re.IGNORECASE)
_RE_PARAGRAPH_BREAK = re.compile(r'\n\s*\n+')
_RE_FAA_BANG = re.compile(r'^!([A-Z0-9]{3,4})\s+(\d{2}/\d{3,4})\s+([A-Z0-9]{3,4})\s+(.+)$')
_RE_NOTAM_ID = re.compile(r'\b([A-Z]\d{4}/\d{2})\b')
_RE_VALIDITY = re.compile(r'\b(\d{10})\s*(?:-|TO)\s*(\d{10}|PERM)\b', re.IGNORECASE)
_RE_NOTAM_TIME = re.compile(r'^(\d{10})')
_RE_Q_POSITION = re.compile(r'^(\d{2})(\d{2})([NS])(\d{3})(\d{2})([EW])(\d{3})$')

# Item markers used in ICAO NOTAMs
_FIELD_MARKERS = 'A-GQ'

# Category patterns for the batch summary; raw and expanded forms both count
RUNWAY_PATTERN = re.compile(r'\b(RWY|RUNWAY)\b', re.IGNORECASE)
TAXIWAY_PATTERN = re.compile(r'\b(TWY|TAXIWAY)\b', re.IGNORECASE)
NAVAID_PATTERN = re.compile(r'\b(VOR|DME|ILS|LOC|NDB)\b', re.IGNORECASE)


def split_notam_chunks(text: str) -> List[str]:
    """
    Split NOTAM text into one chunk per NOTAM.

    If any line starts with '!', a chunk starts at each such line. Otherwise
    chunks are separated by one or more blank lines.
    """
    if not text:
        return []

    lines = text.split('\n')
    if any(_RE_BANG_LINE.match(line) for line in lines):
        chunks = []
        buf: List[str] = []
        for line in lines:
            if _RE_BANG_LINE.match(line) and buf:
                chunks.append('\n'.join(buf).strip())
                buf = [line]
            else:
                buf.append(line)
        if buf:
            chunks.append('\n'.join(buf).strip())
        return [c for c in chunks if c]

    return [c.strip() for c in _RE_PARAGRAPH_BREAK.split(text) if c.strip()]


def classify_chunk(chunk: str) -> NotamFormat:
    if _RE_BANG_LINE.match(chunk):
        return NotamFormat.FAA_BANG
    if _RE_ICAO_MARKER.search(chunk):
        return NotamFormat.ICAO
    return NotamFormat.PLAIN


def extract_notam_id(text: str) -> str:
    """Find an ICAO series/number/year ID such as A1234/24."""
    m = _RE_NOTAM_ID.search(text)
    return m.group(1) if m else ''


def extract_validity(text: str) -> str:
    m = _RE_VALIDITY.search(text)
    if not m:
        return ''
    return f"{m.group(1)} to {m.group(2)}"


def format_validity(start: str, end: str) -> str:
    if start and end:
        return f"{start} to {end}"
    if start:
        return f"From {start}"
    if end:
        return f"Until {end}"
    return ''


def parse_notam_time(value: str) -> Optional[datetime]:
    """Parse a YYMMDDHHMM NOTAM time; trailing qualifiers like EST are ignored."""
    m = _RE_NOTAM_TIME.match((value or '').strip())
    if not m:
        return None
    try:
        return datetime.strptime(m.group(1), '%y%m%d%H%M')
    except ValueError:
        logger.debug(f"Invalid NOTAM time: {value}")
        return None


def _validity_dates(start: str, end: str) -> Tuple[Optional[datetime], Optional[datetime], bool]:
    is_permanent = (end or '').strip().upper().startswith('PERM')
    return parse_notam_time(start), parse_notam_time(end), is_permanent


def _generic_validity_dates(text: str) -> Tuple[Optional[datetime], Optional[datetime], bool]:
    m = _RE_VALIDITY.search(text)
    if not m:
        return None, None, False
    return _validity_dates(m.group(1), m.group(2))


def extract_field(text: str, letter: str) -> str:
    """
    Value of an ICAO item such as 'E)', up to the next item marker or the
    end of the text, whitespace-collapsed.
    """
    pattern = re.compile(
        rf'\b{letter}\)\s*(.*?)(?=\s*\b[{_FIELD_MARKERS}]\)|\Z)',
        re.DOTALL | re.IGNORECASE
    )
    m = pattern.search(text)
    if not m:
        return ''
    return ' '.join(m.group(1).split())


def decode_q_position(position: str) -> str:
    """
    Decode a Q-line centre and radius, e.g.
    5321N00216W005 -> 53°21'N 002°16'W within 5 NM.

    Unrecognised strings are returned unchanged.
    """
    m = _RE_Q_POSITION.match(position)
    if not m:
        return position
    lat_deg, lat_min, lat_hem, lon_deg, lon_min, lon_hem, radius = m.groups()
    return f"{lat_deg}°{lat_min}'{lat_hem} {lon_deg}°{lon_min}'{lon_hem} within {int(radius)} NM"


def decode_q_line(q_line: str) -> Optional[QLine]:
    """
    Decode FIR/QCODE/TRAFFIC/PURPOSE/SCOPE/LOWER/UPPER/POSITION.

    Lower, upper and position are the last three fields when all eight are
    present, so a line with an extra leading field decodes the same way.
    """
    parts = [p.strip() for p in q_line.split('/')]
    if len(parts) < 2:
        return None

    def part(idx: int) -> str:
        return parts[idx] if 0 <= idx < len(parts) else ''

    if len(parts) >= 8:
        lower, upper, position_raw = parts[-3], parts[-2], parts[-1]
    else:
        lower, upper, position_raw = part(5), part(6), part(7)

    altitudes = f"FL{lower or '---'} to FL{upper or '---'}" if (lower or upper) else ''

    return QLine(
        raw=q_line.strip(),
        fir=part(0),
        q_code=part(1),
        traffic=part(2),
        purpose=part(3),
        scope=part(4),
        lower=lower,
        upper=upper,
        position_raw=position_raw,
        altitudes=altitudes,
        position=decode_q_position(position_raw) if position_raw else '',
    )


def parse_faa_bang_notam(chunk: str, icao_hint: str = '') -> Optional[Notam]:
    """Parse '!LOC MM/NNNN LOC body' (the whole chunk is read as one line)."""
    one_line = ' '.join(chunk.split())
    m = _RE_FAA_BANG.match(one_line)

    location = m.group(1) if m else ''
    notam_id = f"{location} {m.group(2)}" if m else extract_notam_id(one_line)
    body = m.group(4) if m else one_line.lstrip('!').strip()
    valid_from, valid_to, is_permanent = _generic_validity_dates(one_line)

    return Notam(
        id=notam_id,
        location=location,
        validity=extract_validity(one_line),
        text=expand_notam_abbreviations(body),
        kind=NotamFormat.FAA_BANG,
        raw=chunk,
        valid_from=valid_from,
        valid_to=valid_to,
        is_permanent=is_permanent,
    )


def parse_icao_structured_notam(chunk: str, icao_hint: str = '') -> Optional[Notam]:
    """Parse a NOTAM with Q) A) B) C) E) items."""
    q_text = extract_field(chunk, 'Q').upper()
    location = extract_field(chunk, 'A').upper() or icao_hint
    start = extract_field(chunk, 'B')
    end = extract_field(chunk, 'C')
    body = extract_field(chunk, 'E')

    validity = format_validity(start, end) or extract_validity(chunk)
    if start or end:
        valid_from, valid_to, is_permanent = _validity_dates(start, end)
    else:
        valid_from, valid_to, is_permanent = _generic_validity_dates(chunk)

    q_line = decode_q_line(q_text) if q_text else None

    return Notam(
        id=extract_notam_id(chunk),
        location=location,
        validity=validity,
        text=expand_notam_abbreviations(body or chunk),
        kind=NotamFormat.ICAO,
        raw=chunk,
        q_line=q_text or None,
        altitudes=(q_line.altitudes or None) if q_line else None,
        position=(q_line.position or None) if q_line else None,
        q_code=(q_line.q_code or None) if q_line else None,
        q_code_subject=q_line.subject if q_line else None,
        q_code_condition=q_line.condition if q_line else None,
        valid_from=valid_from,
        valid_to=valid_to,
        is_permanent=is_permanent,
    )


def parse_plain_notam(chunk: str, icao_hint: str = '') -> Optional[Notam]:
    valid_from, valid_to, is_permanent = _generic_validity_dates(chunk)
    return Notam(
        id=extract_notam_id(chunk),
        location=icao_hint,
        validity=extract_validity(chunk),
        text=expand_notam_abbreviations(chunk),
        kind=NotamFormat.PLAIN,
        raw=chunk,
        valid_from=valid_from,
        valid_to=valid_to,
        is_permanent=is_permanent,
    )


CHUNK_PARSERS: Dict[NotamFormat, Callable[[str, str], Optional[Notam]]] = {
    NotamFormat.FAA_BANG: parse_faa_bang_notam,
    NotamFormat.ICAO: parse_icao_structured_notam,
    NotamFormat.PLAIN: parse_plain_notam,
}


def count_categories(items: List[Notam]) -> Dict[str, int]:
    """Count runway, taxiway and navaid related NOTAMs."""
    counts = {'runway': 0, 'taxiway': 0, 'navaid': 0}
    for notam in items:
        haystack = f"{notam.raw}\n{notam.text}"
        if RUNWAY_PATTERN.search(haystack):
            counts['runway'] += 1
        if TAXIWAY_PATTERN.search(haystack):
            counts['taxiway'] += 1
        if NAVAID_PATTERN.search(haystack):
            counts['navaid'] += 1
    return counts


def build_notam_summary(items: List[Notam]) -> str:
    """'Total: N • Runway-related: x • ...' with zero categories omitted."""
    if not items:
        return ''

    counts = count_categories(items)
    parts = [f"Total: {len(items)}"]
    if counts['runway']:
        parts.append(f"Runway-related: {counts['runway']}")
    if counts['taxiway']:
        parts.append(f"Taxiway-related: {counts['taxiway']}")
    if counts['navaid']:
        parts.append(f"Nav/procedures: {counts['navaid']}")
    return ' • '.join(parts)


class NotamDecoder:
    """Decodes a block of pasted NOTAM text into a NotamBatch."""

    def __init__(self, parsers: Optional[Dict[NotamFormat, Callable[[str, str], Optional[Notam]]]] = None):
        self.parsers = parsers or CHUNK_PARSERS

    def parse_chunk(self, chunk: str, icao_hint: str = '') -> Optional[Notam]:
        """
        Parse one chunk with the grammar it is classified as.

        Returns:
            Notam, or None for a chunk with nothing extractable
        """
        text = (chunk or '').strip()
        if not text:
            return None

        kind = classify_chunk(text)
        notam = self.parsers[kind](text, icao_hint)
        if notam is None or not (notam.id or notam.validity or notam.text):
            logger.debug(f"Dropping NOTAM chunk with no content: {text[:40]!r}")
            return None

        logger.debug(f"Parsed {kind.value} NOTAM {notam.id or '(no id)'}")
        return notam

    def decode(self, raw: str, icao_hint: str = '') -> NotamBatch:
        """
        Decode every NOTAM in raw text.

        Args:
            raw: NOTAM text, one or more NOTAMs
            icao_hint: Optional location used when a NOTAM carries none

        Returns:
            NotamBatch; empty input yields an empty batch

        Raises:
            InvalidIcaoError: if icao_hint is non-empty and malformed
        """
        hint = normalize_icao_hint(icao_hint)
        cleaned = (raw or '').replace('\r', '').strip()

        items = []
        for chunk in split_notam_chunks(cleaned):
            notam = self.parse_chunk(chunk, hint)
            if notam:
                items.append(notam)

        counts = count_categories(items)
        logger.debug(f"Decoded {len(items)} NOTAM(s)")

        return NotamBatch(
            summary=build_notam_summary(items),
            items=tuple(items),
            runway_count=counts['runway'],
            taxiway_count=counts['taxiway'],
            navaid_count=counts['navaid'],
        )


def decode_notams(raw: str, icao_hint: str = '') -> NotamBatch:
    """Decode NOTAM text with the default chunk parsers."""
    return NotamDecoder().decode(raw, icao_hint)
