"""Unit conversions and value formatting shared by the decoders."""
import math

HPA_TO_INHG = 0.02953

SPEED_UNITS = {
    'KT': 'knots',
    'MPS': 'meters per second',
    'KMH': 'kilometers per hour',
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def celsius_to_fahrenheit(celsius: int) -> int:
    return round_half_up(celsius * 9 / 5 + 32)


def format_celsius(celsius: int) -> str:
    """Render a Celsius value with its Fahrenheit equivalent, e.g. '28°C (82°F)'."""
    return f"{celsius}°C ({celsius_to_fahrenheit(celsius)}°F)"


def parse_signed_celsius(text: str) -> int:
    """Parse a METAR temperature such as '08' or 'M03'."""
    if text.startswith('M'):
        return -int(text[1:])
    return int(text)


def hpa_to_inhg(hpa: float) -> str:
    """Convert hectopascals to inches of mercury with two decimals."""
    return f"{hpa * HPA_TO_INHG:.2f}"


def speed_unit_text(unit: str) -> str:
    return SPEED_UNITS.get(unit.upper(), 'knots')
