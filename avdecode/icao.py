"""ICAO airport code helpers."""
import re

from avdecode.exceptions import InvalidIcaoError

ICAO_PATTERN = re.compile(r'^[A-Z0-9]{4}$')


def validate_icao_code(code: str) -> bool:
    """Return True for a 4-character alphanumeric ICAO code."""
    return bool(ICAO_PATTERN.match((code or '').strip().upper()))


def normalize_icao_hint(code, role: str = 'ICAO') -> str:
    """
    Upper-case and strip an optional ICAO hint.

    Empty or missing hints normalize to ''. A non-empty hint that is not
    a valid code raises InvalidIcaoError.
    """
    value = (code or '').strip().upper()
    if value and not ICAO_PATTERN.match(value):
        raise InvalidIcaoError(value, role)
    return value
