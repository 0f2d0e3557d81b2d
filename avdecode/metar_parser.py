"""
METAR parser.

Consumes whitespace-separated tokens left to right against the fixed METAR
group order: station, time, wind, variable wind direction, visibility,
weather, clouds, temperature/dewpoint, altimeter, remarks. A group that does
not match at its position is left empty and the parser moves on to the next
group with the same token; it never looks ahead for a missing group.

The per-group decoders are public so the ATIS decoder can reuse them on
METAR-style groups embedded in free text.
"""
import re
import logging
from typing import List, Optional, Tuple

from avdecode.exceptions import EmptyInputError
from avdecode.models.metar import MetarReport
from avdecode.units import format_celsius, parse_signed_celsius, speed_unit_text

logger = logging.getLogger(__name__)


# Weather descriptors and phenomena (2-letter METAR codes)
WEATHER_DESCRIPTORS = {
    'MI': 'shallow',
    'BC': 'patches',
    'PR': 'partial',
    'DR': 'drifting',
    'BL': 'blowing',
    'TS': 'thunderstorm',
    'FZ': 'freezing',
    'SH': 'showers',
    'VC': 'in vicinity',
}

WEATHER_PHENOMENA = {
    'RA': 'rain',
    'SN': 'snow',
    'DZ': 'drizzle',
    'GR': 'hail',
    'GS': 'small hail',
    'PL': 'ice pellets',
    'SG': 'snow grains',
    'IC': 'ice crystals',
    'UP': 'unknown precipitation',
    'FG': 'fog',
    'BR': 'mist',
    'HZ': 'haze',
    'FU': 'smoke',
    'VA': 'volcanic ash',
    'DU': 'dust',
    'SA': 'sand',
    'PO': 'dust whirls',
    'SQ': 'squalls',
    'FC': 'funnel cloud',
    'DS': 'duststorm',
    'SS': 'sandstorm',
}

# Intensity only applies to precipitation
PRECIPITATION_CODES = {'RA', 'SN', 'DZ', 'GR', 'GS', 'PL', 'SG', 'IC', 'UP'}

# Descriptors rendered after the phenomenon ("rain showers", "fog in vicinity")
_TRAILING_DESCRIPTORS = ('SH', 'VC')

CLOUD_COVER = {
    'FEW': 'Few clouds',
    'SCT': 'Scattered clouds',
    'BKN': 'Broken clouds',
    'OVC': 'Overcast',
    'VV': 'Vertical visibility',
}

CLOUD_TYPES = {
    'CB': 'cumulonimbus',
    'TCU': 'towering cumulus',
}

CLEAR_SKY_CODES = {'CLR', 'SKC', 'NSC', 'NCD', 'CAVOK'}

_WEATHER_CODE_ALT = '|'.join(list(WEATHER_DESCRIPTORS) + list(WEATHER_PHENOMENA))

_RE_STATION = re.compile(r'^[A-Z]{4}$')
_RE_TIME = re.compile(r'^(\d{2})(\d{2})(\d{2})Z$')
_RE_WIND = re.compile(r'^(\d{3}|VRB)(\d{2,3})(?:G(\d{2,3}))?(KT|MPS|KMH)$')
_RE_VRB_SPEED = re.compile(r'^(\d{2,3})(KT|MPS|KMH)$')
_RE_VAR_DIRECTION = re.compile(r'^(\d{3})V(\d{3})$')
_RE_VISIBILITY = re.compile(r'^(?:CAVOK|\d{4}|P?\d{1,2}SM|\d/\d{1,2}SM)$')
_RE_WEATHER = re.compile(rf'^[+-]?(?:{_WEATHER_CODE_ALT})+$')
_RE_CLOUD = re.compile(r'^(FEW|SCT|BKN|OVC|VV)(\d{3})(CB|TCU|///)?$')
_RE_TEMPERATURE = re.compile(r'^(M?\d{2})/(M?\d{2})$')
_RE_ALTIMETER = re.compile(r'^[AQ]\d{4}$')

REPORT_TYPES = ('METAR', 'SPECI')
REPORT_MODIFIERS = ('AUTO', 'COR')


def decode_station(code: str) -> str:
    return code


def decode_time(time_str: str) -> str:
    m = _RE_TIME.match(time_str)
    if not m:
        return ''
    day, hour, minute = m.groups()
    return f"Observed on day {day} at {hour}:{minute} UTC"


def is_wind_group(token: str) -> bool:
    return bool(_RE_WIND.match(token))


def format_wind(direction: Optional[int], speed: int, gust: Optional[int] = None,
                unit_text: str = 'knots') -> str:
    """Render a wind; direction None means variable."""
    if direction is None:
        text = f"Variable wind at {speed} {unit_text}"
    elif direction == 0 and speed == 0 and not gust:
        return "Wind calm"
    else:
        text = f"Wind from {direction:03d}° at {speed} {unit_text}"
    if gust:
        text += f", gusting to {gust} {unit_text}"
    return text


def decode_wind(wind_str: str) -> str:
    """
    Decode a METAR wind group such as 36015G25KT, VRB03KT or 00000KT.

    Returns '' when the token is not a wind group.
    """
    m = _RE_WIND.match(wind_str)
    if not m:
        return ''

    direction, speed, gust, unit = m.groups()
    unit_text = speed_unit_text(unit)
    gust_value = int(gust) if gust else None

    if direction == 'VRB':
        return format_wind(None, int(speed), gust_value, unit_text)
    return format_wind(int(direction), int(speed), gust_value, unit_text)


def decode_variable_direction(token: str) -> str:
    """Decode a DDDVDDD qualifier into a suffix for the wind text."""
    m = _RE_VAR_DIRECTION.match(token)
    if not m:
        return ''
    return f" (varying between {m.group(1)}° and {m.group(2)}°)"


def is_visibility_group(token: str) -> bool:
    return bool(_RE_VISIBILITY.match(token))


def decode_visibility(vis_str: str) -> str:
    if vis_str == 'CAVOK':
        return ('10 km or more (CAVOK: ceiling and visibility OK, no cloud below '
                '5000 ft, no significant weather)')
    if vis_str == '9999':
        return '10 km or more (excellent visibility)'
    if vis_str.endswith('SM'):
        miles = vis_str[:-2]
        if miles.startswith('P'):
            return f"more than {miles[1:]} statute miles"
        return f"{miles} statute {'mile' if miles == '1' else 'miles'}"
    if re.match(r'^\d{4}$', vis_str):
        return f"{int(vis_str)} meters"
    return ''


def is_weather_phenomenon(code: str) -> bool:
    """
    Strict check for a present-weather group: optional +/- intensity then
    one or more 2-letter codes, at least one of which is a phenomenon (or a
    thunderstorm / showers-in-vicinity on its own).
    """
    if not _RE_WEATHER.match(code):
        return False
    codes = _split_codes(code.lstrip('+-'))
    if any(c in WEATHER_PHENOMENA for c in codes):
        return True
    return 'TS' in codes or ('VC' in codes and 'SH' in codes)


def _split_codes(body: str) -> List[str]:
    return [body[i:i + 2] for i in range(0, len(body), 2)]


def describe_weather_token(code: str) -> str:
    """Describe one weather group, e.g. -SHRA -> 'Light rain showers'."""
    intensity = ''
    if code.startswith('+'):
        intensity = 'heavy'
        code = code[1:]
    elif code.startswith('-'):
        intensity = 'light'
        code = code[1:]

    codes = _split_codes(code)
    words = [WEATHER_DESCRIPTORS[c] for c in codes
             if c in WEATHER_DESCRIPTORS and c not in _TRAILING_DESCRIPTORS]
    words.extend(WEATHER_PHENOMENA[c] for c in codes if c in WEATHER_PHENOMENA)
    words.extend(WEATHER_DESCRIPTORS[c] for c in _TRAILING_DESCRIPTORS if c in codes)

    if not intensity and any(c in PRECIPITATION_CODES for c in codes):
        intensity = 'moderate'
    if intensity:
        words.insert(0, intensity)

    text = ' '.join(words)
    return text[:1].upper() + text[1:]


def decode_weather(codes: List[str]) -> str:
    return ', '.join(describe_weather_token(c) for c in codes)


def is_cloud_group(token: str) -> bool:
    return bool(_RE_CLOUD.match(token)) or token in CLEAR_SKY_CODES


def decode_clouds(cloud_groups: List[str]) -> str:
    if any(g in CLEAR_SKY_CODES for g in cloud_groups):
        return 'Clear'

    descriptions = []
    for group in cloud_groups:
        m = _RE_CLOUD.match(group)
        if not m:
            descriptions.append(group)
            continue
        cover, height, cloud_type = m.groups()
        text = f"{CLOUD_COVER[cover]} at {int(height) * 100} feet"
        if cloud_type in CLOUD_TYPES:
            text += f" ({CLOUD_TYPES[cloud_type]})"
        descriptions.append(text)

    return ', '.join(descriptions)


def is_temperature_group(token: str) -> bool:
    return bool(_RE_TEMPERATURE.match(token))


def decode_temperature(temp_str: str) -> Tuple[str, str]:
    """Decode TT/DD into (temperature, dewpoint) text, 'M' meaning negative."""
    m = _RE_TEMPERATURE.match(temp_str)
    if not m:
        return '', ''
    temperature = parse_signed_celsius(m.group(1))
    dewpoint = parse_signed_celsius(m.group(2))
    return format_celsius(temperature), format_celsius(dewpoint)


def is_altimeter_group(token: str) -> bool:
    return bool(_RE_ALTIMETER.match(token))


def decode_altimeter(alt_str: str) -> str:
    if not _RE_ALTIMETER.match(alt_str):
        return ''
    value = alt_str[1:]
    if alt_str.startswith('A'):
        return f"{value[:2]}.{value[2:]} inHg"
    return f"{int(value)} hPa"


def parse_metar(raw: str) -> MetarReport:
    """
    Parse a raw METAR string.

    Args:
        raw: METAR text, e.g. "KJFK 121851Z 18010KT 10SM FEW250 28/18 A3000"

    Returns:
        MetarReport with each group decoded or '' when absent

    Raises:
        EmptyInputError: if the input is empty or whitespace only
    """
    text = (raw or '').strip()
    if not text:
        raise EmptyInputError("Please enter a METAR code to decode.")

    parts = text.rstrip('=').split()
    fields = {}
    i = 0

    def at(idx: int) -> str:
        return parts[idx] if idx < len(parts) else ''

    if at(i) in REPORT_TYPES:
        i += 1

    # Station identifier
    if _RE_STATION.match(at(i)):
        fields['station'] = decode_station(at(i))
        i += 1

    # Date and time
    if _RE_TIME.match(at(i)):
        fields['time'] = decode_time(at(i))
        i += 1
        if at(i) in REPORT_MODIFIERS:
            i += 1

    # Wind
    if is_wind_group(at(i)):
        fields['wind'] = decode_wind(at(i))
        i += 1
    elif at(i) == 'VRB' and _RE_VRB_SPEED.match(at(i + 1)):
        m = _RE_VRB_SPEED.match(at(i + 1))
        fields['wind'] = format_wind(None, int(m.group(1)), None, speed_unit_text(m.group(2)))
        i += 2

    # Variable wind direction
    if _RE_VAR_DIRECTION.match(at(i)):
        if 'wind' in fields:
            fields['wind'] += decode_variable_direction(at(i))
        else:
            m = _RE_VAR_DIRECTION.match(at(i))
            fields['wind'] = f"Wind direction varying between {m.group(1)}° and {m.group(2)}°"
        i += 1

    # Visibility
    if is_visibility_group(at(i)):
        fields['visibility'] = decode_visibility(at(i))
        i += 1

    # Weather phenomena
    weather_codes = []
    while is_weather_phenomenon(at(i)):
        weather_codes.append(at(i))
        i += 1
    if weather_codes:
        fields['weather'] = decode_weather(weather_codes)

    # Cloud groups
    cloud_groups = []
    while is_cloud_group(at(i)):
        cloud_groups.append(at(i))
        i += 1
    if cloud_groups:
        fields['clouds'] = decode_clouds(cloud_groups)

    # Temperature and dewpoint
    if is_temperature_group(at(i)):
        fields['temperature'], fields['dewpoint'] = decode_temperature(at(i))
        i += 1

    # Altimeter
    if is_altimeter_group(at(i)):
        fields['altimeter'] = decode_altimeter(at(i))
        i += 1

    # Remarks
    if at(i) == 'RMK':
        fields['remarks'] = ' '.join(parts[i + 1:])
    elif i < len(parts):
        logger.debug(f"METAR parse stopped at token {i}: '{at(i)}'")

    return MetarReport(raw=text, **fields)
