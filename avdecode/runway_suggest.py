"""Landing/departure runway suggestion from METAR wind, ATIS and NOTAMs."""
import math
import re
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from avdecode.models.runway import RunwaySuggestion
from avdecode.units import round_half_up

logger = logging.getLogger(__name__)

# Crosswind counts against a runway at half the weight of headwind
CROSSWIND_PENALTY = 0.5

_RE_METAR_WIND = re.compile(r'\b(\d{3}|VRB)(\d{2,3})(?:G\d{2,3})?(KT|MPS|KMH)\b')
_RE_RUNWAYS_IN_USE = re.compile(r'RUNWAYS?\s+IN\s+USE\s+([\w\s/,]+)', re.IGNORECASE)
_RE_RUNWAY = re.compile(r'^(\d{1,2})([LRC]?)$')
_RE_CLOSED_RUNWAY = re.compile(r'\bRWY\s?(\d{2}[LRC]?)(?:/(\d{2}[LRC]?))?')
_RE_CLOSED = re.compile(r'\b(?:CLSD|CLOSED)\b')


def extract_wind(metar: str) -> Optional[Tuple[Optional[int], int]]:
    """
    First wind group of a METAR as (direction, speed).

    Direction is None for variable wind. Returns None when no wind group is found.
    """
    m = _RE_METAR_WIND.search((metar or '').upper())
    if not m:
        return None
    direction = None if m.group(1) == 'VRB' else int(m.group(1))
    return direction, int(m.group(2))


def runway_heading(runway: str) -> int:
    """Magnetic heading of a runway designator, 27L -> 270."""
    return int(runway[:2]) * 10


def wind_components(direction: int, speed: int, heading: int) -> Tuple[int, int]:
    """
    Headwind and crosswind for a runway heading, rounded to whole knots.

    A negative headwind is a tailwind; a negative crosswind comes from the left.
    """
    angle = math.radians(direction - heading)
    headwind = speed * math.cos(angle)
    crosswind = speed * math.sin(angle)
    return round_half_up(headwind), round_half_up(crosswind)


def _normalize_runway(token: str) -> Optional[str]:
    m = _RE_RUNWAY.match(token)
    if not m or not 1 <= int(m.group(1)) <= 36:
        return None
    return f"{int(m.group(1)):02d}{m.group(2)}"


def parse_atis_runways(atis: str) -> List[str]:
    """Runways listed after 'RUNWAY(S) IN USE' in an ATIS."""
    m = _RE_RUNWAYS_IN_USE.search(atis or '')
    if not m:
        return []
    runways = []
    for token in re.split(r'[\s,/]+', m.group(1).upper()):
        runway = _normalize_runway(re.sub(r'[^\w]', '', token))
        if runway and runway not in runways:
            runways.append(runway)
    return runways


def closed_runways(notam_texts: Iterable[str]) -> List[str]:
    """Runways named after RWY in NOTAM texts that mention a closure."""
    closed = []
    for text in notam_texts:
        upper = (text or '').upper()
        if not _RE_CLOSED.search(upper):
            continue
        for pair in _RE_CLOSED_RUNWAY.findall(upper):
            for runway in pair:
                if runway and runway not in closed:
                    closed.append(runway)
    return closed


def suggest_runway(metar: str, runways: Sequence[str], closed: Sequence[str] = ()) -> RunwaySuggestion:
    """
    Pick the open runway with the best wind.

    Score is headwind minus half the absolute crosswind.
    """
    closed = tuple(closed)
    candidates = tuple(r for r in (_normalize_runway(x.strip().upper()) for x in runways) if r)
    wind = extract_wind(metar)

    if not candidates:
        return RunwaySuggestion(None, note="No runway data available.", closed=closed)
    if wind is None:
        return RunwaySuggestion(None, candidates=candidates, closed=closed,
                                note="Could not parse wind from METAR.")

    direction, speed = wind
    open_runways = [r for r in candidates if r not in closed]
    if not open_runways:
        return RunwaySuggestion(None, direction, speed, candidates=candidates, closed=closed,
                                note="All listed runways are closed.")
    if direction is None:
        return RunwaySuggestion(None, None, speed, candidates=candidates, closed=closed,
                                note="Variable wind: any open runway is suitable.")

    best, best_score, best_components = None, -math.inf, (0, 0)
    for runway in open_runways:
        headwind, crosswind = wind_components(direction, speed, runway_heading(runway))
        score = headwind - abs(crosswind) * CROSSWIND_PENALTY
        logger.debug(f"Runway {runway}: headwind {headwind}, crosswind {crosswind}, score {score}")
        if score > best_score:
            best, best_score, best_components = runway, score, (headwind, crosswind)

    return RunwaySuggestion(
        runway=best,
        wind_direction=direction,
        wind_speed=speed,
        headwind=best_components[0],
        crosswind=best_components[1],
        candidates=candidates,
        closed=closed,
    )
