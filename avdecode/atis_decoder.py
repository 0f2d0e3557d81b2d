"""
ATIS decoder.

ATIS transcripts are free text with no fixed field order, so every field of
an AtisReport is found by searching the whole text. Each field has an
ordered list of extractor strategies (text -> value or ''); the first
strategy returning a value wins. Token strategies reuse the METAR group
decoders on METAR-style groups embedded anywhere in the text, phrase
strategies handle spoken forms ("WIND 270 AT 15 KNOTS").
"""
import re
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from avdecode.icao import normalize_icao_hint
from avdecode.metar_parser import (
    CLEAR_SKY_CODES,
    CLOUD_COVER,
    decode_clouds,
    decode_temperature,
    decode_variable_direction,
    decode_visibility,
    decode_weather,
    decode_wind,
    format_wind,
    is_altimeter_group,
    is_cloud_group,
    is_temperature_group,
    is_weather_phenomenon,
    is_wind_group,
)
from avdecode.models.atis import AtisReport
from avdecode.units import format_celsius, hpa_to_inhg

logger = logging.getLogger(__name__)


NATO_ALPHABET = [
    'Alpha', 'Bravo', 'Charlie', 'Delta', 'Echo', 'Foxtrot', 'Golf', 'Hotel',
    'India', 'Juliet', 'Kilo', 'Lima', 'Mike', 'November', 'Oscar', 'Papa',
    'Quebec', 'Romeo', 'Sierra', 'Tango', 'Uniform', 'Victor', 'Whiskey',
    'X-ray', 'Yankee', 'Zulu',
]

LETTER_NAMES = {name[0].upper(): name for name in NATO_ALPHABET}

PHONETIC_LETTERS = {name.upper(): name[0].upper() for name in NATO_ALPHABET}
PHONETIC_LETTERS.update({'ALFA': 'A', 'JULIETT': 'J', 'WHISKY': 'W', 'XRAY': 'X'})

TREND_CODES = ('NOSIG', 'TEMPO', 'BECMG', 'NSW')

RUNWAY_WORDS = {'RUNWAY', 'RUNWAYS', 'RWY', 'RWYS', 'RY'}

# Valid weather codes that are also common words or abbreviations in ATIS prose
AMBIGUOUS_WEATHER_WORDS = {
    'UP', 'SA', 'PO', 'DU', 'FU', 'IC', 'VA', 'SS', 'DS', 'FC', 'SQ', 'GS', 'SG', 'PL',
}

# ICAO-shaped words that can precede "ATIS" without being an airport
_NON_AIRPORT_WORDS = {'THIS', 'THAT', 'WITH', 'HAVE', 'FROM', 'YOUR', 'NOTE', 'INFO'}

# Words that make an "... INFORMATION X" sentence a request rather than a header
_REMARK_VERBS = {'ADVISE', 'ACKNOWLEDGE', 'CONFIRM', 'CONTACT', 'HAVE', 'RECEIPT', 'YOU'}

_PHONETIC_ALT = '|'.join(sorted((re.escape(w) for w in PHONETIC_LETTERS), key=len, reverse=True))

_RE_INFORMATION = re.compile(rf'\b(?:INFORMATION|INFO|ATIS)\s+({_PHONETIC_ALT}|[A-Z])\b')
_RE_TIME = re.compile(r'\b(?:\d{2})?(\d{2})(\d{2})\s*(?:ZULU|UTC|Z)\b')
_RE_TRANSITION_LEVEL = re.compile(
    r'\b(?:TRANSITION\s+LEVEL|TRANS\s+LEVEL|TRL|TL)\s*:?\s*(?:FL\s*)?(\d{2,3})\b'
)
_RE_AIRPORT = re.compile(r'\b([A-Z][A-Z0-9]{3})\s+(?:ARRIVAL\s+|DEPARTURE\s+)?(?:ATIS|INFORMATION)\b')

# Runway phrases
_RWY = r'(?:RUNWAYS?|RWYS?|RY)'
_RWY_NUM = r'\d{1,2}[LRC]?\b'
_RWY_LIST = rf'{_RWY_NUM}(?:\s*(?:AND|&|,|/)\s*(?:{_RWY}\s*)?{_RWY_NUM})*'
_FILLER = (
    rf'(?:[\s:]+(?:{_RWY}|IN|USE|IS|ARE|EXPECT|ILS|RNAV|VISUAL|APPROACH(?:ES)?|APCH|FOR|ON|TO)\b)*'
)

_RE_RUNWAY_NUMBER = re.compile(r'\b(\d{1,2})([LRC]?)\b')
_RE_COMBINED_RUNWAYS = re.compile(
    rf'\b(?:LANDING|ARRIVALS?|ARRIVING)\s+AND\s+(?:DEPARTING|DEPARTURES?|TAKE-?OFF)\b'
    rf'{_FILLER}[\s:]+({_RWY_LIST})'
)
_RE_ARRIVAL_RUNWAYS = re.compile(
    rf'\b(?:ARRIVALS?|ARRIVING|LANDING|LDG|LNDG|APPROACH(?:ES)?|APCH)\b{_FILLER}[\s:]+({_RWY_LIST})'
)
_RE_DEPARTURE_RUNWAYS = re.compile(
    rf'\b(?:DEPARTURES?|DEPARTING|DEPG|DEP|TAKE-?OFF|TAKE\s+OFF|TKOF)\b{_FILLER}[\s:]+({_RWY_LIST})'
)
_RE_IN_USE_RUNWAYS = [
    re.compile(rf'\b{_RWY}\s+(?:IN\s+USE|ACTIVE)[\s:]+({_RWY_LIST})'),
    re.compile(rf'\b{_RWY}[\s:]+({_RWY_LIST})\s+(?:IN\s+USE|ACTIVE)\b'),
    re.compile(rf'\b(?:ACTIVE|IN\s+USE)\s+{_RWY}[\s:]+({_RWY_LIST})'),
]
_RE_ANY_RUNWAY = re.compile(rf'\b{_RWY}[\s:]+({_RWY_LIST})')

# Spoken-form fallbacks
_SPEED_UNIT = r'(?:KNOTS?|KTS?|KT)\b'
_RE_WIND_CALM = re.compile(r'\bWIND\s+(?:IS\s+)?CALM\b')
_RE_WIND_VARIABLE = re.compile(rf'\bWIND\s+(?:IS\s+)?VARIABLE\s+(?:AT\s+)?(\d{{1,3}})\s*{_SPEED_UNIT}')
_RE_WIND_PHRASE = re.compile(
    rf'\bWIND\s+(\d{{3}})(?:\s*/\s*|\s+DEGREES\s+|\s+)(?:AT\s+)?(\d{{1,3}})\s*{_SPEED_UNIT}'
    r'(?:[\s,]+(?:GUSTING|GUSTS?|MAXIMUM)\s+(?:TO\s+)?(\d{1,3}))?'
)
_RE_VISIBILITY_PHRASE = re.compile(
    r'\bVIS(?:IBILITY)?\s+(?:IS\s+)?(\d{1,5}|ONE\s+ZERO)\s*'
    r'(KILOMETERS?|KILOMETRES?|KM|METERS?|METRES?|M|STATUTE\s+MILES?|MILES?|SM)?\b'
)
_RE_SKY_CLEAR = re.compile(r'\b(?:SKY\s+CLEAR|CLEAR\s+SKY|NO\s+SIGNIFICANT\s+CLOUD|NO\s+CLOUD)')
_RE_SKY_LAYER = re.compile(
    r'\b(FEW|SCATTERED|BROKEN|OVERCAST)\s+(?:CLOUDS?\s+)?(?:AT\s+)?(\d{3,5})\s*(?:FEET|FT)?\b'
)
_RE_TEMPERATURE_PHRASE = re.compile(r'\bTEMP(?:ERATURE)?\s+(?:IS\s+)?(MINUS\s+|M)?(\d{1,2})\b')
_RE_DEWPOINT_PHRASE = re.compile(r'\b(?:DEW\s*POINT|DEWPT|DP)\s+(?:IS\s+)?(MINUS\s+|M)?(\d{1,2})\b')
_RE_QNH_PHRASE = re.compile(r'\bQNH\s+(?:IS\s+)?(\d{3,4})\b')
_RE_ALTIMETER_PHRASE = re.compile(r'\bALTIMETER\s+(?:SETTING\s+)?(\d{2})\.?\s?(\d{2})\b')

_RE_SENTENCE_BREAK = re.compile(r'\.\s+')
_RE_HEADER = re.compile(
    rf'^(.*?)\b(?:INFORMATION|INFO|ATIS)\s+(?:{_PHONETIC_ALT}|[A-Z])'
    r'(?:\s+(?:TIME\s+)?(?:\d{2})?\d{4}\s*(?:Z|ZULU|UTC))?$'
)
_RE_TIMESTAMP_SENTENCE = re.compile(r'^(?:TIME\s+)?(?:\d{2})?\d{4}\s*(?:Z|ZULU|UTC)$')

_SKY_WORDS = {'FEW': 'FEW', 'SCATTERED': 'SCT', 'BROKEN': 'BKN', 'OVERCAST': 'OVC'}


@dataclass(frozen=True)
class AtisSource:
    """ATIS text prepared once for all extractors."""

    text: str
    upper: str
    tokens: Tuple[str, ...]

    @classmethod
    def from_text(cls, text: Optional[str]) -> 'AtisSource':
        collapsed = ' '.join((text or '').split())
        upper = collapsed.upper()
        tokens = tuple(re.sub(r'[^A-Z0-9/+\-]+', ' ', upper).split())
        return cls(collapsed, upper, tokens)


Extractor = Callable[[AtisSource], str]


def _unique(values: List[str]) -> List[str]:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def _pad_runway(number: str, suffix: str) -> str:
    return f"{int(number):02d}{suffix}"


def _runways_matching(patterns: List[re.Pattern], upper: str) -> List[str]:
    runways = []
    for pattern in patterns:
        for m in pattern.finditer(upper):
            runways.extend(_pad_runway(n, s) for n, s in _RE_RUNWAY_NUMBER.findall(m.group(1)))
    return _unique(runways)


def _signed(sign: Optional[str], digits: str) -> int:
    return -int(digits) if sign else int(digits)


def _render_hpa(value: str) -> str:
    return f"{value} hPa ({hpa_to_inhg(int(value))} inHg)"


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------

def extract_information(src: AtisSource) -> str:
    m = _RE_INFORMATION.search(src.upper)
    if not m:
        return ''
    letter = PHONETIC_LETTERS.get(m.group(1), m.group(1))
    return f"Information {letter} ({LETTER_NAMES[letter]})"


def extract_time(src: AtisSource) -> str:
    for m in _RE_TIME.finditer(src.upper):
        hour, minute = m.groups()
        if int(hour) < 24 and int(minute) < 60:
            return f"{hour}:{minute} UTC"
    return ''


def extract_runways(src: AtisSource) -> str:
    """
    Runways in use, preferring the arrival/departure split.

    Falls back to "in use"/"active" phrases, then to any runway phrase.
    """
    combined = _runways_matching([_RE_COMBINED_RUNWAYS], src.upper)
    arrival = _unique(combined + _runways_matching([_RE_ARRIVAL_RUNWAYS], src.upper))
    departure = _unique(combined + _runways_matching([_RE_DEPARTURE_RUNWAYS], src.upper))

    if arrival or departure:
        parts = []
        if arrival:
            parts.append(f"Arrival: {', '.join(arrival)}")
        if departure:
            parts.append(f"Departure: {', '.join(departure)}")
        return '; '.join(parts)

    in_use = _runways_matching(_RE_IN_USE_RUNWAYS, src.upper)
    if in_use:
        return f"In use: {', '.join(in_use)}"

    mentioned = _runways_matching([_RE_ANY_RUNWAY], src.upper)
    if mentioned:
        return f"Runway(s): {', '.join(mentioned)}"
    return ''


def extract_transition_level(src: AtisSource) -> str:
    m = _RE_TRANSITION_LEVEL.search(src.upper)
    return f"FL{int(m.group(1))}" if m else ''


def wind_from_tokens(src: AtisSource) -> str:
    for i, token in enumerate(src.tokens):
        if is_wind_group(token):
            following = src.tokens[i + 1] if i + 1 < len(src.tokens) else ''
            return decode_wind(token) + decode_variable_direction(following)
    return ''


def wind_from_phrase(src: AtisSource) -> str:
    if _RE_WIND_CALM.search(src.upper):
        return format_wind(0, 0)
    m = _RE_WIND_VARIABLE.search(src.upper)
    if m:
        return format_wind(None, int(m.group(1)))
    m = _RE_WIND_PHRASE.search(src.upper)
    if m:
        direction, speed, gust = m.groups()
        return format_wind(int(direction), int(speed), int(gust) if gust else None)
    return ''


def visibility_from_tokens(src: AtisSource) -> str:
    """
    Visibility group among the tokens.

    A bare 4-digit token is only taken as visibility right after a wind group
    or a VIS/VISIBILITY word, since frequencies and times share the shape.
    """
    tokens = src.tokens
    for i, token in enumerate(tokens):
        if token in ('CAVOK', '9999') or re.match(r'^(?:P?\d{1,2}|\d/\d{1,2})SM$', token):
            return decode_visibility(token)
        if re.match(r'^\d{4}$', token) and i > 0:
            previous = tokens[i - 1]
            if (previous in ('VIS', 'VISIBILITY') or is_wind_group(previous)
                    or decode_variable_direction(previous)):
                return decode_visibility(token)
    return ''


def visibility_from_phrase(src: AtisSource) -> str:
    m = _RE_VISIBILITY_PHRASE.search(src.upper)
    if not m:
        return ''
    amount = 10 if m.group(1).startswith('ONE') else int(m.group(1))
    unit = ' '.join((m.group(2) or '').split())

    if unit.startswith('K'):
        return decode_visibility('9999') if amount >= 10 else f"{amount} km"
    if unit.startswith('ME') or unit == 'M' or (not unit and amount >= 100):
        return decode_visibility('9999') if amount >= 9999 else f"{amount} meters"
    return f"{amount} statute {'mile' if amount == 1 else 'miles'}"


def weather_from_tokens(src: AtisSource) -> str:
    codes = _unique([
        t for t in src.tokens
        if t not in AMBIGUOUS_WEATHER_WORDS and is_weather_phenomenon(t)
    ])
    return decode_weather(codes) if codes else ''


def sky_from_tokens(src: AtisSource) -> str:
    groups = [t for t in src.tokens if is_cloud_group(t)]
    return decode_clouds(groups) if groups else ''


def sky_from_phrase(src: AtisSource) -> str:
    if _RE_SKY_CLEAR.search(src.upper):
        return decode_clouds(['CLR'])
    layers = []
    for m in _RE_SKY_LAYER.finditer(src.upper):
        cover, height = m.groups()
        feet = int(height) * 100 if len(height) == 3 else int(height)
        layers.append(f"{CLOUD_COVER[_SKY_WORDS[cover]]} at {feet} feet")
    return ', '.join(layers)


def _temperature_token(src: AtisSource) -> str:
    for i, token in enumerate(src.tokens):
        if not is_temperature_group(token):
            continue
        if i > 0 and src.tokens[i - 1] in RUNWAY_WORDS:
            continue
        return token
    return ''


def temperature_from_tokens(src: AtisSource) -> str:
    token = _temperature_token(src)
    return decode_temperature(token)[0] if token else ''


def dewpoint_from_tokens(src: AtisSource) -> str:
    token = _temperature_token(src)
    return decode_temperature(token)[1] if token else ''


def temperature_from_phrase(src: AtisSource) -> str:
    m = _RE_TEMPERATURE_PHRASE.search(src.upper)
    return format_celsius(_signed(*m.groups())) if m else ''


def dewpoint_from_phrase(src: AtisSource) -> str:
    m = _RE_DEWPOINT_PHRASE.search(src.upper)
    return format_celsius(_signed(*m.groups())) if m else ''


def altimeter_from_tokens(src: AtisSource) -> str:
    for token in src.tokens:
        if is_altimeter_group(token):
            if token.startswith('Q'):
                return _render_hpa(token[1:])
            return f"{token[1:3]}.{token[3:]} inHg"
    return ''


def altimeter_from_qnh_phrase(src: AtisSource) -> str:
    m = _RE_QNH_PHRASE.search(src.upper)
    return _render_hpa(m.group(1).zfill(4)) if m else ''


def altimeter_from_phrase(src: AtisSource) -> str:
    m = _RE_ALTIMETER_PHRASE.search(src.upper)
    return f"{m.group(1)}.{m.group(2)} inHg" if m else ''


def extract_trend(src: AtisSource) -> str:
    return ' '.join(_unique([t for t in src.tokens if t in TREND_CODES]))


def extract_airport(src: AtisSource) -> str:
    for m in _RE_AIRPORT.finditer(src.upper):
        if m.group(1) not in _NON_AIRPORT_WORDS:
            return m.group(1)
    return ''


FIELD_EXTRACTORS: List[Tuple[str, List[Extractor]]] = [
    ('information', [extract_information]),
    ('time', [extract_time]),
    ('runways', [extract_runways]),
    ('transition_level', [extract_transition_level]),
    ('wind', [wind_from_tokens, wind_from_phrase]),
    ('visibility', [visibility_from_tokens, visibility_from_phrase]),
    ('weather', [weather_from_tokens]),
    ('sky', [sky_from_tokens, sky_from_phrase]),
    ('temperature', [temperature_from_tokens, temperature_from_phrase]),
    ('dewpoint', [dewpoint_from_tokens, dewpoint_from_phrase]),
    ('altimeter', [altimeter_from_tokens, altimeter_from_qnh_phrase, altimeter_from_phrase]),
    ('trend', [extract_trend]),
]

# Fields whose presence in a sentence removes it from the remarks
CONTENT_FIELDS = (
    'runways', 'transition_level', 'wind', 'visibility', 'weather', 'sky',
    'temperature', 'dewpoint', 'altimeter', 'trend',
)


class AtisDecoder:
    """Decodes ATIS transcripts by running field extractors over the text."""

    def __init__(self, extractors: Optional[List[Tuple[str, List[Extractor]]]] = None):
        self.extractors = extractors or FIELD_EXTRACTORS

    def extract(self, src: AtisSource, name: str) -> str:
        """Run the strategies for one field; first non-empty value wins."""
        for field_name, strategies in self.extractors:
            if field_name != name:
                continue
            for strategy in strategies:
                value = strategy(src)
                if value:
                    return value
        return ''

    def decode(self, text: str, icao_hint: str = '') -> AtisReport:
        """
        Decode an ATIS transcript.

        Args:
            text: ATIS text, already flattened to a single string
            icao_hint: Optional airport code shown as the airport field

        Returns:
            AtisReport with '' for every field that was not found

        Raises:
            InvalidIcaoError: if icao_hint is non-empty and malformed
        """
        airport = normalize_icao_hint(icao_hint)
        src = AtisSource.from_text(text)

        values = {}
        for name, _ in self.extractors:
            value = self.extract(src, name)
            if value:
                values[name] = value

        values['airport'] = airport or extract_airport(src)
        values['remarks'] = self.extract_remarks(src)

        logger.debug(f"ATIS decoded fields: {', '.join(k for k, v in values.items() if v)}")
        return AtisReport(**values)

    def extract_remarks(self, src: AtisSource) -> str:
        """
        Free-text sentences left after removing headers, time stamps and
        sentences that carry a decoded field.
        """
        kept = []
        for sentence in _RE_SENTENCE_BREAK.split(src.text):
            sentence = sentence.strip().rstrip('.').strip()
            if not sentence:
                continue
            upper = sentence.upper()
            if self._is_header(upper) or _RE_TIMESTAMP_SENTENCE.match(upper):
                continue
            if self._has_decoded_content(AtisSource.from_text(sentence)):
                continue
            kept.append(sentence)
        return '. '.join(kept) + '.' if kept else ''

    def _has_decoded_content(self, src: AtisSource) -> bool:
        return any(self.extract(src, name) for name in CONTENT_FIELDS)

    @staticmethod
    def _is_header(upper: str) -> bool:
        """Airport name + INFORMATION/ATIS + letter, optionally with a time."""
        m = _RE_HEADER.match(upper)
        if not m:
            return False
        prefix = m.group(1).split()
        return len(prefix) <= 4 and not (set(prefix) & _REMARK_VERBS)


def decode_atis(text: str, icao_hint: str = '') -> AtisReport:
    """Decode an ATIS transcript with the default extractors."""
    return AtisDecoder().decode(text, icao_hint)
