"""
Flatten feed payloads into the plain text the decoders accept.

METAR, ATIS and NOTAM sources return several shapes (plain strings, lists
of lines, JSON records). Fetching is left to the caller; these helpers only
turn an already-decoded payload into a string.
"""
import logging
from typing import Any, List, Optional

logger = logging.getLogger(__name__)

# Keys holding NOTAM text in common API records, in preference order
NOTAM_TEXT_KEYS = ('raw_text', 'icaoMessage', 'text', 'raw')

# Keys wrapping a list of NOTAM records
NOTAM_LIST_KEYS = ('notams', 'items', 'data', 'notamList')


def flatten_metar_feed(payload: Any) -> str:
    """First non-empty line of a METAR payload (string or list of strings)."""
    if payload is None:
        return ''
    if isinstance(payload, str):
        lines = payload.splitlines()
    elif isinstance(payload, (list, tuple)):
        lines = [str(line) for line in payload if line is not None]
    else:
        logger.warning(f"Unexpected METAR payload format: {type(payload)}")
        return ''
    return next((line.strip() for line in lines if line.strip()), '')


def flatten_atis_feed(payload: Any) -> str:
    """
    Join an ATIS payload into one line.

    Accepts a string, a list of per-line strings, or a VATSIM ATIS record
    whose 'text_atis' is a string or list.
    """
    if payload is None:
        return ''
    if isinstance(payload, dict):
        payload = payload.get('text_atis') or payload.get('atis') or ''
    if isinstance(payload, str):
        return ' '.join(payload.split())
    if isinstance(payload, (list, tuple)):
        return ' '.join(' '.join(str(line).split()) for line in payload if line)
    logger.warning(f"Unexpected ATIS payload format: {type(payload)}")
    return ''


def _notam_record_text(record: Any) -> str:
    if isinstance(record, str):
        return record.strip()
    if isinstance(record, dict):
        for key in NOTAM_TEXT_KEYS:
            value = record.get(key)
            if value:
                return str(value).strip()
        logger.debug(f"NOTAM record without text field: {sorted(record)}")
        return ''
    logger.debug(f"Skipping NOTAM record of type {type(record)}")
    return ''


def _notam_records(payload: Any, icao: Optional[str]) -> List[Any]:
    if isinstance(payload, (list, tuple)):
        return list(payload)
    if isinstance(payload, dict):
        if icao and icao.upper() in payload:
            return _notam_records(payload[icao.upper()], None)
        for key in NOTAM_LIST_KEYS:
            if key in payload:
                return _notam_records(payload[key], None)
        return [payload]
    logger.warning(f"Unexpected NOTAM payload format: {type(payload)}")
    return []


def flatten_notam_feed(payload: Any, icao: Optional[str] = None) -> str:
    """
    Turn a NOTAM payload into blank-line-separated NOTAM text.

    Args:
        payload: Newline-delimited string, list of strings or records with a
            raw-text field, or a mapping keyed by ICAO code or 'notams'
        icao: Airport whose entry to take from an ICAO-keyed mapping

    Returns:
        Text ready for decode_notams
    """
    if payload is None:
        return ''
    if isinstance(payload, str):
        return payload.replace('\r', '').strip()

    texts = [_notam_record_text(r) for r in _notam_records(payload, icao)]
    return '\n\n'.join(t for t in texts if t)
