#!/usr/bin/env python3
"""Command line entry point for the aviation text decoders."""
import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from avdecode.atis_decoder import decode_atis
from avdecode.briefing import build_readback, format_route_variants, oceanic_brief
from avdecode.config import Config
from avdecode.exceptions import DecodeInputError, EmptyInputError
from avdecode.feeds import flatten_atis_feed, flatten_metar_feed, flatten_notam_feed
from avdecode.metar_parser import parse_metar
from avdecode.notam_decoder import decode_notams
from avdecode.route_analyzer import check_route, suggest_better_route
from avdecode.runway_suggest import parse_atis_runways, suggest_runway

# Configure logging from environment
log_level = Config.LOG_LEVEL
logging.basicConfig(
    level=getattr(logging, log_level.upper(), logging.INFO),
    format="%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-20s | %(filename)-15s | %(funcName)-15s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='avdecode',
        description='Decode METAR, ATIS and NOTAM text and sanity-check ATC routes'
    )
    parser.add_argument('--version', action='version', version=Config.VERSION)
    subparsers = parser.add_subparsers(dest='command', required=True)

    def add_command(name: str, help_text: str) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('text', nargs='?', help='Input text (default: read --file or stdin)')
        sub.add_argument('--file', metavar='PATH', help='Read input text from PATH')
        sub.add_argument('--json', action='store_true', help='Print JSON instead of text')
        return sub

    add_command('metar', 'Decode a METAR').add_argument(
        '--feed', action='store_true', help='Input is a JSON METAR feed payload')

    atis = add_command('atis', 'Decode an ATIS transcript')
    atis.add_argument('--icao', default='', help='Airport ICAO code')
    atis.add_argument('--feed', action='store_true', help='Input is a JSON VATSIM ATIS record')

    notam = add_command('notam', 'Decode one or more NOTAMs')
    notam.add_argument('--icao', default='', help='Location used when a NOTAM has none')
    notam.add_argument('--feed', action='store_true', help='Input is a JSON NOTAM feed payload')

    route = add_command('route', 'Check an ATC route string')
    route.add_argument('--dep', default='', help='Departure ICAO')
    route.add_argument('--arr', default='', help='Arrival ICAO')
    route.add_argument('--region', default=None, choices=Config.REGION_PREFERENCES,
                       help=f'Region rules (default: {Config.DEFAULT_REGION})')
    route.add_argument('--variants', action='store_true', help='Also print filing/FMC route variants')
    route.add_argument('--oceanic', action='store_true', help='Also print the oceanic brief')
    route.add_argument('--callsign', default='', help='Callsign used in the position report template')

    readback = subparsers.add_parser('readback', help='Build an IFR clearance readback template')
    readback.add_argument('--json', action='store_true', help='Print JSON instead of text')
    readback.add_argument('--callsign', default='')
    readback.add_argument('--arr', default='', help='Clearance limit (destination ICAO)')
    readback.add_argument('--sid', default='')
    readback.add_argument('--runway', default='')
    readback.add_argument('--initial-altitude', default='')
    readback.add_argument('--cruise', default='', help='Cruise level, e.g. FL350')
    readback.add_argument('--departure-frequency', default='')
    readback.add_argument('--squawk', default='')
    readback.add_argument('--qnh', default='')

    runway = add_command('runway', 'Suggest a runway from a METAR wind')
    runway.add_argument('--runways', default='', help='Comma-separated runways, e.g. 09L,27R')
    runway.add_argument('--atis', default='', help='ATIS text to read runways in use from')
    runway.add_argument('--closed', default='', help='Comma-separated closed runways')

    return parser


def read_input(args: argparse.Namespace) -> str:
    if not hasattr(args, 'text'):
        return ''
    if args.text:
        return args.text
    if args.file:
        with open(args.file, 'r', encoding='utf-8') as f:
            return f.read()
    if not sys.stdin.isatty():
        return sys.stdin.read()
    return ''


def _split_list(value: str) -> List[str]:
    return [v.strip().upper() for v in value.split(',') if v.strip()]


def _load_feed(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeInputError(f"Feed input is not valid JSON: {e}") from e


def run_command(args: argparse.Namespace, text: str) -> Dict[str, Any]:
    """
    Run one decoder and return {'text': rendered, 'data': json-ready dict}.

    Raises:
        DecodeInputError: on empty required input or a malformed ICAO code
    """
    if args.command == 'metar':
        if args.feed:
            text = flatten_metar_feed(_load_feed(text))
        report = parse_metar(text)
        return {'text': report.summary(), 'data': report.to_dict()}

    if args.command == 'atis':
        if args.feed:
            text = flatten_atis_feed(_load_feed(text))
        report = decode_atis(text, args.icao)
        return {'text': report.summary() or 'No ATIS fields recognised.', 'data': report.to_dict()}

    if args.command == 'notam':
        if args.feed:
            text = flatten_notam_feed(_load_feed(text), args.icao or None)
        if not text.strip():
            raise EmptyInputError("Please paste one or more NOTAMs to decode.")
        batch = decode_notams(text, args.icao)
        return {'text': batch.render() or 'No NOTAMs recognised.', 'data': batch.to_dict()}

    if args.command == 'route':
        analysis = check_route(text, args.dep, args.arr, args.region)
        suggestion = suggest_better_route(analysis.tokens, args.dep, args.arr, analysis.region)
        lines = [analysis.summary(), "", f"Suggested route: {suggestion.route}"]
        lines.extend(f"• {note}" for note in suggestion.notes)
        data = {'analysis': analysis.to_dict(), 'suggestion': suggestion.to_dict()}
        if args.variants:
            variants = format_route_variants(analysis.tokens, args.dep, args.arr, analysis.region)
            lines.extend(["", variants.summary()])
            data['variants'] = variants.to_dict()
        if args.oceanic:
            brief = oceanic_brief(analysis.tokens, args.dep, args.arr, args.callsign)
            lines.extend(["", brief.summary()])
            data['oceanic'] = brief.to_dict()
        return {'text': "\n".join(lines), 'data': data}

    if args.command == 'readback':
        result = build_readback(
            callsign=args.callsign,
            arr=args.arr,
            sid=args.sid,
            runway=args.runway,
            initial_altitude=args.initial_altitude,
            cruise=args.cruise,
            departure_frequency=args.departure_frequency,
            squawk=args.squawk,
            qnh=args.qnh,
        )
        return {'text': result.summary(), 'data': result.to_dict()}

    if args.command == 'runway':
        runways = _split_list(args.runways) or parse_atis_runways(args.atis)
        result = suggest_runway(text, runways, _split_list(args.closed))
        return {'text': result.summary(), 'data': result.to_dict()}

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        Config.validate()
        text = read_input(args)
        logger.debug(f"Running {args.command} on {len(text)} character(s)")
        result = run_command(args, text)
    except DecodeInputError as e:
        logger.error(str(e))
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    if args.json:
        print(json.dumps(result['data'], indent=2, ensure_ascii=False))
    else:
        print(result['text'])


if __name__ == '__main__':
    main()
