"""
ATC route string checker.

Classifies route tokens by shape and applies region-aware heuristics to flag
routes that controllers are likely to amend. This is not a navigation
database: a waypoint that looks like a waypoint is accepted as one.
"""
import re
import logging
from typing import Dict, List, Optional, Sequence

from avdecode.config import Config
from avdecode.icao import normalize_icao_hint, validate_icao_code
from avdecode.models.route import (
    RegionFamily,
    RegionInfo,
    RegionKind,
    RouteAnalysis,
    RouteStatus,
    RouteSuggestion,
    TokenClasses,
)

logger = logging.getLogger(__name__)


DCT = 'DCT'

PROCEDURE_WORDS = ('SID', 'STAR', 'DEPARTURE', 'ARRIVAL')

_RE_ILLEGAL = re.compile(r'[^A-Z0-9/\-]')
_RE_ROUTE_PREFIX = re.compile(r'^\s*(?:ROUTE|RTE)\s*[:=-]?\s*', re.IGNORECASE)
_RE_SPEED_LEVEL = re.compile(r'^[KN]\d{4}F\d{3}$')
_RE_COORDINATE = re.compile(r'^(?:\d{2}[NS]\d{3}[EW]|\d{4}[NS]\d{5}[EW])$')
_RE_NAT = re.compile(r'^NAT[A-Z\d]{1,2}$')
_RE_NAT_VALID = re.compile(r'^NAT(?:[A-Z]|\d{1,2})$')
_RE_AIRWAY = re.compile(r'^(?:UL|UM|UN|UT|UZ|U|T|Q|J|V|L|M|N)\d{1,3}[A-Z]?$')
_RE_WAYPOINT = re.compile(r'^[A-Z]{2,5}\d?$')
_RE_OCEANIC_WAYPOINT = re.compile(r'^(?:\d{4}[NSEW]|\d{2}[NSEW]\d{2})$')
_RE_PROCEDURE = [
    re.compile(r'^RW\d{2}[LRC]?$'),
    re.compile(r'^\d{2}[LRC]?$'),
    re.compile(r'^(?:SID|STAR)[A-Z0-9]+$'),
    re.compile(r'^[A-Z]{3,5}\d[A-Z]$'),
]

REGION_LABELS = {
    'uk-eu': 'UK/Europe',
    'europe': 'Europe',
    'us': 'US/Canada',
    'transatlantic': 'Transatlantic (Europe ↔ US/Canada)',
    'unknown': 'Auto (default)',
}


def normalize_route_text(text: str) -> str:
    """Strip ROUTE:/RTE: prefixes and line breaks, collapse spaces, upper-case."""
    route = str(text or '').replace('\r', ' ').replace('\n', ' ')
    route = _RE_ROUTE_PREFIX.sub('', route, count=1)
    return ' '.join(route.split()).upper()


def tokenize_route(route: str) -> List[str]:
    return [t for t in route.split(' ') if t.strip()]


def detect_region(dep: str = '', arr: str = '', region_pref: Optional[str] = None) -> RegionInfo:
    """
    Work out which regional rule set applies to a route.

    An explicit 'uk-eu' or 'us' preference wins; otherwise the region is
    inferred from the departure/arrival ICAO prefixes (E = Europe, EG = UK,
    K/C/P = US/Canada). Unknown regions get Europe strictness.
    """
    pref = (region_pref or 'auto').strip().lower()
    if pref not in Config.REGION_PREFERENCES:
        logger.warning(f"Unknown region preference '{region_pref}', using auto detection")
        pref = 'auto'

    if pref == 'uk-eu':
        return RegionInfo(RegionFamily.EUROPE, RegionKind.EUROPE, REGION_LABELS['uk-eu'], True)
    if pref == 'us':
        return RegionInfo(RegionFamily.US, RegionKind.US, REGION_LABELS['us'], False)

    d = (dep or '').strip().upper()
    a = (arr or '').strip().upper()

    def looks_europe(code: str) -> bool:
        return code.startswith('E')

    def looks_us_canada(code: str) -> bool:
        return code.startswith(('K', 'C', 'P'))

    dep_europe, arr_europe = looks_europe(d), looks_europe(a)
    dep_us, arr_us = looks_us_canada(d), looks_us_canada(a)
    uk_involved = d.startswith('EG') or a.startswith('EG')

    if (dep_europe and arr_us) or (arr_europe and dep_us):
        return RegionInfo(RegionFamily.EUROPE, RegionKind.TRANSATLANTIC,
                          REGION_LABELS['transatlantic'], uk_involved)
    if dep_europe or arr_europe:
        label = REGION_LABELS['uk-eu'] if uk_involved else REGION_LABELS['europe']
        return RegionInfo(RegionFamily.EUROPE, RegionKind.EUROPE, label, uk_involved)
    if dep_us or arr_us:
        return RegionInfo(RegionFamily.US, RegionKind.US, REGION_LABELS['us'], False)

    return RegionInfo(RegionFamily.EUROPE, RegionKind.UNKNOWN, REGION_LABELS['unknown'], False)


def is_speed_level_token(token: str) -> bool:
    return bool(_RE_SPEED_LEVEL.match(token))


def is_coordinate_token(token: str) -> bool:
    return bool(_RE_COORDINATE.match(token))


def is_nat_token(token: str) -> bool:
    return bool(_RE_NAT.match(token))


def is_airway_token(token: str) -> bool:
    return bool(_RE_AIRWAY.match(token))


def is_procedure_token(token: str) -> bool:
    """SID/STAR words, runway designators and procedure names such as BPK7G."""
    if token in PROCEDURE_WORDS:
        return True
    return any(p.match(token) for p in _RE_PROCEDURE)


def classify_token(token: str) -> str:
    """Return the TokenClasses bucket name for one token."""
    if token == DCT:
        return 'dct'
    if is_speed_level_token(token):
        return 'speed_level'
    if is_coordinate_token(token):
        return 'coordinate'
    if is_nat_token(token):
        return 'nat'
    if is_airway_token(token):
        return 'airway'
    if validate_icao_code(token):
        return 'icao'
    if _RE_WAYPOINT.match(token):
        return 'waypoint'
    if _RE_OCEANIC_WAYPOINT.match(token):
        return 'oceanic_waypoint'
    return 'unknown'


def classify_tokens(tokens: Sequence[str]) -> TokenClasses:
    buckets: Dict[str, List[str]] = {}
    for token in tokens:
        buckets.setdefault(classify_token(token), []).append(token)
    return TokenClasses(**{name: tuple(values) for name, values in buckets.items()})


def _first_icao(tokens: Sequence[str]) -> str:
    return next((t for t in tokens if validate_icao_code(t)), '')


def _last_icao(tokens: Sequence[str]) -> str:
    return next((t for t in reversed(tokens) if validate_icao_code(t)), '')


def _has_oceanic_segment(tokens: Sequence[str]) -> bool:
    return any(is_nat_token(t) or is_coordinate_token(t) for t in tokens)


def build_parsed_summary(tokens: Sequence[str], dep: str = '', arr: str = '') -> str:
    first_icao = _first_icao(tokens)
    last_icao = _last_icao(tokens)
    dct_count = sum(1 for t in tokens if t == DCT)

    lines = []
    if dep:
        lines.append(f"Departure: {dep}")
    elif first_icao:
        lines.append(f"Detected departure ICAO: {first_icao}")

    if arr:
        lines.append(f"Arrival: {arr}")
    elif last_icao and last_icao != first_icao:
        lines.append(f"Detected arrival ICAO: {last_icao}")

    lines.append(f"Tokens: {len(tokens)} (DCT: {dct_count})")
    return "\n".join(lines)


def fallback_suggestions(region: RegionInfo) -> List[str]:
    if region.family == RegionFamily.US:
        first = 'Check the published preferred routes (or ARTCC/vARTCC routing) for your city pair.'
    else:
        first = 'Check your vACC preferred routes for your departure/arrival pair.'
    return [first, 'If ATC issues a reroute, read back and update the FMC route accordingly.']


def analyze_route(tokens: Sequence[str], dep: str = '', arr: str = '',
                  region_pref: Optional[str] = None) -> RouteAnalysis:
    """
    Check a tokenized route and flag likely reroutes.

    Args:
        tokens: Route tokens, normally from tokenize_route(normalize_route_text(...))
        dep: Optional departure ICAO
        arr: Optional arrival ICAO
        region_pref: 'auto', 'uk-eu' or 'us'; defaults to Config.DEFAULT_REGION

    Returns:
        RouteAnalysis; malformed or incomplete routes give an INVALID status,
        never an exception

    Raises:
        InvalidIcaoError: if dep or arr is non-empty and malformed
    """
    tokens = tuple(tokens)
    dep = normalize_icao_hint(dep, 'Departure')
    arr = normalize_icao_hint(arr, 'Arrival')
    region = detect_region(dep, arr, region_pref or Config.DEFAULT_REGION)
    parsed = build_parsed_summary(tokens, dep, arr)
    dct_count = sum(1 for t in tokens if t == DCT)
    classes = classify_tokens(tokens)

    illegal = next((t for t in tokens if _RE_ILLEGAL.search(t)), None)
    if illegal is not None:
        logger.debug(f"Route token with illegal characters: {illegal}")
        return RouteAnalysis(
            tokens=tokens,
            region=region,
            status=RouteStatus.INVALID,
            reasons=(
                f"Route contains invalid characters in token: {illegal}",
                'Only letters/numbers and / - are expected in a route line.',
            ),
            suggestions=('Remove commas/periods/special symbols and try again.',),
            dct_count=dct_count,
            token_classes=classes,
            parsed=parsed,
        )

    reasons: List[str] = []
    suggestions: List[str] = []
    non_dct = [t for t in tokens if t != DCT]

    # DCT usage
    warn, heavy = Config.dct_thresholds(region.family.value)
    if dct_count >= heavy:
        reasons.append(f"Heavy DCT usage ({dct_count}x). Many FIRs/vACCs prefer structured airways.")
        suggestions.append(
            'Try generating a route with more airways (UL/UT/UQ/etc) or use local preferred routes.'
        )
    elif dct_count >= warn:
        reasons.append(f"Moderate DCT usage ({dct_count}x). You may get a minor reroute.")

    # Europe expects airway structure on longer routes
    if (region.family == RegionFamily.EUROPE
            and len(non_dct) >= Config.DIRECT_ROUTE_MIN_TOKENS and not classes.airway):
        reasons.append('Route has no airway designators. European controllers usually expect '
                       'airway-structured routes.')
        suggestions.append('Join fixes with airways (e.g. UL9, UN57, L620) instead of direct legs.')

    # Departure/arrival placement
    if dep and not (tokens[:1] == (dep,) or _first_icao(tokens) == dep):
        reasons.append(f"Route does not appear to start at {dep}.")
        suggestions.append(f"Ensure the route begins with {dep} (or remove airport codes if your "
                           f"vACC prefers that format).")
    if arr and not (tokens[-1:] == (arr,) or _last_icao(tokens) == arr):
        reasons.append(f"Route does not appear to end at {arr}.")
        suggestions.append(f"Ensure the route ends with {arr} (or remove airport codes if your "
                           f"vACC prefers that format).")

    # UK FIR entry/exit fixes
    if region.uk_involved and len(tokens) >= Config.UK_LONG_ROUTE_TOKENS:
        early = tokens[:Config.UK_BOUNDARY_SCAN_DEPTH]
        if not any(t in Config.UK_BOUNDARY_FIXES for t in early):
            reasons.append('No common UK FIR entry/exit fix found early in the route. '
                           'You may be rerouted via a standard boundary point.')
            suggestions.append('Check the UK standard route document for the expected FIR '
                               'entry/exit fix for your flight.')

    # Procedures in the enroute string
    if any(is_procedure_token(t) for t in tokens):
        reasons.append('Route line appears to include runway/SID/STAR/procedure text. Many '
                       'controllers expect those via the FMS/clearance, not in the enroute string.')
        suggestions.append('Consider removing runway/SID/STAR names from the route line unless '
                           'your vACC specifically asks for them.')

    # Oceanic sanity
    has_oceanic = _has_oceanic_segment(tokens)
    if region.kind == RegionKind.TRANSATLANTIC and not has_oceanic:
        reasons.append('Transatlantic route has no NAT track or lat/long oceanic points.')
        suggestions.append('Add the oceanic segment (NAT track or lat/long points) as published '
                           'for your crossing.')
    elif region.kind == RegionKind.EUROPE and has_oceanic:
        reasons.append('Oceanic tokens (NAT or lat/long) found on a non-transatlantic route. '
                       'They were probably pasted by accident.')

    # NAT designators
    malformed_nat = [t for t in tokens if t.startswith('NAT') and not _RE_NAT_VALID.match(t)]
    for token in malformed_nat:
        reasons.append(f"NAT token looks unusual: {token}.")
    if malformed_nat:
        suggestions.append('If flying oceanic, use a valid track designator (e.g., NATA) or paste '
                           'the track routing as published.')

    # Speed/level groups
    if len(classes.speed_level) > Config.MAX_SPEED_LEVEL_TOKENS:
        reasons.append('Multiple speed/level tokens found. Usually one is enough.')

    # Very short routes
    incomplete = len(non_dct) < Config.MIN_MEANINGFUL_TOKENS
    if incomplete:
        reasons.append('Route is very short. This is likely incomplete.')
        suggestions.append('Paste the full enroute string from SimBrief (not just one waypoint).')

    # Tokens of no known shape
    if classes.unknown:
        listed = ', '.join(classes.unknown[:Config.MAX_UNRECOGNIZED_LISTED])
        more = '…' if len(classes.unknown) > Config.MAX_UNRECOGNIZED_LISTED else ''
        reasons.append(f"Unrecognized tokens: {listed}{more}")
        suggestions.append('Double-check for typos. This tool can’t confirm every waypoint without '
                           'a nav database.')

    if incomplete:
        status = RouteStatus.INVALID
    elif len(reasons) >= 2 or dct_count >= heavy:
        status = RouteStatus.LIKELY_REROUTE
    else:
        status = RouteStatus.LOOKS_OK

    if not suggestions:
        suggestions.extend(fallback_suggestions(region))

    logger.debug(f"Route status {status.value} ({len(reasons)} reason(s), region {region.kind.value})")

    return RouteAnalysis(
        tokens=tokens,
        region=region,
        status=status,
        reasons=tuple(reasons),
        suggestions=tuple(suggestions),
        dct_count=dct_count,
        token_classes=classes,
        parsed=parsed,
    )


def check_route(text: str, dep: str = '', arr: str = '', region_pref: Optional[str] = None) -> RouteAnalysis:
    """Normalize and tokenize raw route text, then analyze it."""
    return analyze_route(tokenize_route(normalize_route_text(text)), dep, arr, region_pref)


def region_notes(tokens: Sequence[str], region: RegionInfo) -> List[str]:
    """Advisory notes for a cleaned-up route in its region."""
    notes = []
    dct_count = sum(1 for t in tokens if t == DCT)
    warn, heavy = Config.dct_thresholds(region.family.value)

    if region.family == RegionFamily.EUROPE and dct_count >= warn:
        notes.append('UK/Europe tends to prefer airway-structured routes; reduce DCT where possible.')
    if region.family == RegionFamily.US and dct_count >= heavy - 2:
        notes.append('US allows more DCT, but very high DCT usage can still be amended.')
    if region.kind == RegionKind.TRANSATLANTIC and not _has_oceanic_segment(tokens):
        notes.append('Transatlantic flights usually need an oceanic segment (NAT or lat/long points).')
    return notes


def suggest_better_route(tokens: Sequence[str], dep: str = '', arr: str = '',
                         region: Optional[RegionInfo] = None) -> RouteSuggestion:
    """
    Produce a cleaned-up route.

    Steps, each adding a note when it changes something:
    strip the departure/arrival ICAO at the ends, drop procedure and runway
    tokens, keep only the first speed/level group, collapse repeated DCT and
    trim DCT at both ends. If fewer than the minimum meaningful tokens remain,
    the original tokens are returned with a single note.
    """
    original = tuple(tokens)
    dep = (dep or '').strip().upper()
    arr = (arr or '').strip().upper()
    region = region or detect_region(dep, arr)
    notes = []
    route = list(original)

    if dep and route[:1] == [dep]:
        route = route[1:]
        notes.append(f"Removed leading departure ICAO ({dep}).")
    if arr and route[-1:] == [arr]:
        route = route[:-1]
        notes.append(f"Removed trailing arrival ICAO ({arr}).")

    kept = [t for t in route if t and not is_procedure_token(t)]
    if len(kept) != len(route):
        notes.append('Removed runway/SID/STAR/procedure tokens.')
    route = kept

    pruned = []
    seen_speed_level = False
    for token in route:
        if is_speed_level_token(token):
            if seen_speed_level:
                continue
            seen_speed_level = True
        pruned.append(token)
    if len(pruned) != len(route):
        notes.append('Kept only the first speed/level token.')
    route = pruned

    compressed = []
    for token in route:
        if token == DCT and compressed[-1:] == [DCT]:
            continue
        compressed.append(token)
    while compressed[:1] == [DCT]:
        compressed.pop(0)
    while compressed[-1:] == [DCT]:
        compressed.pop()
    if len(compressed) != len(route):
        notes.append('Collapsed repeated DCT and removed DCT at the route ends.')
    route = compressed

    notes.extend(region_notes(route, region))

    if len([t for t in route if t != DCT]) < Config.MIN_MEANINGFUL_TOKENS:
        return RouteSuggestion(original, ('Route is too short to safely improve; showing original.',))

    return RouteSuggestion(tuple(route), tuple(notes))
