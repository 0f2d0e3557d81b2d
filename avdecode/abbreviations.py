"""NOTAM abbreviation expansion."""
import re

# Abbreviation -> plain text. Matching is case-sensitive so expanded output
# ("Runway") is never expanded again.
NOTAM_ABBREVIATIONS = {
    'RWY': 'Runway',
    'TWY': 'Taxiway',
    'APRON': 'Apron',
    'CLSD': 'Closed',
    'SVC': 'Service',
    'U/S': 'Unserviceable',
    'UNSERVICEABLE': 'Unserviceable',
    'OPR': 'Operational',
    'OBST': 'Obstacle',
    'LGT': 'Light',
    'LGTS': 'Lights',
    'PAPI': 'PAPI',
    'RCLL': 'Runway centerline lights',
    'TDZ': 'Touchdown zone',
    'WIP': 'Work in progress',
    'MEN AND EQUIP': 'Men and equipment',
    'DEP': 'Departure',
    'ARR': 'Arrival',
    'SIDs': 'Standard instrument departures',
    'STARs': 'Standard terminal arrival routes',
    'PROC': 'Procedure',
    'TWR': 'Tower',
    'GND': 'Ground',
    'ATC': 'Air traffic control',
    'RAMP': 'Ramp',
    'NAV': 'Navigation',
    'VFR': 'Visual flight rules',
    'IFR': 'Instrument flight rules',
    'DLY': 'Daily',
    'EXC': 'Except',
    'BTN': 'Between',
}

# One alternation, longest first, so LGTS wins over LGT and MEN AND EQUIP
# over its parts. Lookarounds instead of \b keep U/S whole-word too.
_RE_ABBREVIATION = re.compile(
    r'(?<![A-Za-z0-9])(?:'
    + '|'.join(re.escape(a) for a in sorted(NOTAM_ABBREVIATIONS, key=len, reverse=True))
    + r')(?![A-Za-z0-9])'
)


def expand_notam_abbreviations(text: str) -> str:
    """
    Replace whole-word NOTAM abbreviations and normalize whitespace.

    'RWY 27 CLSD' -> 'Runway 27 Closed'; 'RWYX' is left alone.
    """
    if not text:
        return ''
    expanded = _RE_ABBREVIATION.sub(lambda m: NOTAM_ABBREVIATIONS[m.group(0)], text)
    return ' '.join(expanded.split())
