"""
Route briefing helpers.

Filing variants of a route, the transatlantic oceanic brief and the IFR
clearance readback template. All of them work on already tokenized routes
and never look anything up.
"""
import logging
from typing import Optional, Sequence

from avdecode.icao import normalize_icao_hint
from avdecode.models.briefing import OceanicBrief, Readback, RouteVariants
from avdecode.models.route import RegionInfo, RegionKind
from avdecode.route_analyzer import (
    detect_region,
    is_coordinate_token,
    is_nat_token,
    suggest_better_route,
)

logger = logging.getLogger(__name__)

POSITION_REPORT_TEMPLATE = (
    "{callsign} POSITION <FIX/COORD> AT <TIME> FL<LEVEL> ESTIMATING <NEXT> AT <TIME> THEN <NEXT>"
)


def format_route_variants(tokens: Sequence[str], dep: str = '', arr: str = '',
                          region: Optional[RegionInfo] = None) -> RouteVariants:
    """
    Three ways to file the same route.

    The controller-friendly variant drops the departure ICAO when it is the
    first token and the arrival ICAO when it is the last one. The FMC
    variant is the route as entered. The cleanup variant is the output of
    suggest_better_route.
    """
    tokens = tuple(tokens)
    dep = normalize_icao_hint(dep, 'Departure')
    arr = normalize_icao_hint(arr, 'Arrival')
    region = region or detect_region(dep, arr)

    last = len(tokens) - 1
    controller = tuple(
        t for idx, t in enumerate(tokens)
        if not (idx == 0 and dep and t == dep) and not (idx == last and arr and t == arr)
    )
    cleanup = suggest_better_route(tokens, dep, arr, region).tokens
    return RouteVariants(controller=controller, fmc=tokens, cleanup=cleanup)


def oceanic_brief(tokens: Sequence[str], dep: str = '', arr: str = '', callsign: str = '') -> OceanicBrief:
    """
    Oceanic brief for a transatlantic flight.

    Region detection always runs in auto mode here; flights that are not
    transatlantic get a brief with required=False.
    """
    region = detect_region(normalize_icao_hint(dep, 'Departure'), normalize_icao_hint(arr, 'Arrival'), 'auto')
    if region.kind != RegionKind.TRANSATLANTIC:
        return OceanicBrief(required=False, route_type=region.label)

    detected = any(is_nat_token(t) or is_coordinate_token(t) for t in tokens)
    logger.debug(f"Oceanic segment {'found' if detected else 'missing'} on {dep}-{arr}")
    return OceanicBrief(
        required=True,
        detected=detected,
        route_type=region.label,
        position_report=POSITION_REPORT_TEMPLATE.format(callsign=(callsign or '').strip().upper() or 'CALLSIGN'),
    )


def build_readback(callsign: str = '', arr: str = '', sid: str = '', runway: str = '',
                   initial_altitude: str = '', cruise: str = '', departure_frequency: str = '',
                   squawk: str = '', qnh: str = '') -> Readback:
    """
    IFR clearance readback template.

    Callsign and destination fall back to CALLSIGN and DEST; every other
    line is only included when its value is given.
    """
    callsign = (callsign or '').strip().upper()
    arr = (arr or '').strip().upper()
    sid = (sid or '').strip().upper()
    runway = (runway or '').strip().upper()

    lines = [f"{callsign or 'CALLSIGN'} ready to copy IFR clearance."]
    lines.append(f"Cleared to {arr or 'DEST'}{f' via the {sid} departure' if sid else ''}.")
    if runway:
        lines.append(f"Departure runway {runway}.")
    if initial_altitude:
        lines.append(f"Initial altitude {initial_altitude.strip()}.")
    if cruise:
        lines.append(f"Expect {cruise.strip()} in cruise.")
    if departure_frequency:
        lines.append(f"Departure frequency {departure_frequency.strip()}.")
    if squawk:
        lines.append(f"Squawk {squawk.strip()}.")
    if qnh:
        lines.append(f"QNH {qnh.strip()}.")
    return Readback(tuple(lines))
