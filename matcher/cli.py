"""
Command-line interface for the volunteer matcher.
"""

import argparse
import sys
import yaml
from datetime import date
from .config import MatcherConfig, load_config
from .errors import InvalidArgument, InvalidInterval
from .ingest import load_request_slots, load_availability_slots, validate_slots, get_slot_summary
from .runner import MatchingRunner
from .engine import validate_matching
from .export import write_excel


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date: {value}. Use YYYY-MM-DD format.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Volunteer Matcher - pair requests for help with volunteer availability"
    )

    parser.add_argument(
        "--requests",
        required=True,
        help="Path to Excel or CSV file with requested time slots"
    )

    parser.add_argument(
        "--availability",
        required=True,
        help="Path to Excel or CSV file with volunteer availability"
    )

    parser.add_argument(
        "--config",
        help="Path to YAML configuration file (defaults are used when omitted)"
    )

    parser.add_argument(
        "--out",
        help="Path to output Excel file"
    )

    parser.add_argument(
        "--date",
        type=_parse_day,
        help="Day to match in YYYY-MM-DD format (defaults to tomorrow)"
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only validate the input slots without matching"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    return parser


def _print_issues(label: str, issues) -> None:
    for kind in ('errors', 'warnings'):
        if issues[kind]:
            print(f"{kind.upper()} found in {label}:")
            for issue in issues[kind]:
                print(f"  - {issue}")


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        print("Loading configuration...")
        config = load_config(args.config) if args.config else MatcherConfig()
        if args.verbose:
            config.verbose = True

        print("Loading requested time slots...")
        requests = load_request_slots(args.requests, config)
        print(f"Loaded {len(requests)} request slots")

        print("Loading volunteer availability...")
        availabilities = load_availability_slots(args.availability, config)
        print(f"Loaded {len(availabilities)} availability slots")

        _print_issues("request slots", validate_slots(requests, config))
        _print_issues("availability slots", validate_slots(availabilities, config))

        if args.validate_only:
            if args.verbose:
                print(f"Request summary: {get_slot_summary(requests)}")
                print(f"Availability summary: {get_slot_summary(availabilities)}")
            print("Validation complete. Exiting.")
            return

        runner = MatchingRunner(config)
        runner.set_request_slots(requests)
        runner.set_availability_slots(availabilities)
        report = runner.run(day=args.date)

        matched = [r for r in requests if r.is_paired()]
        violations = validate_matching(report.unmatched + matched, matched)
        if violations['errors']:
            _print_issues("matching", violations)
        else:
            print("No errors found in matching!")

        if args.out:
            print(f"\nExporting matches to {args.out}...")
            write_excel(report, config, args.out)

        print("\n" + "="*50)
        print("MATCHING COMPLETE")
        print("="*50)

        stats = report.get_summary_stats()
        print(f"Day: {stats['day']}")
        print(f"Requests: {stats['total_requests']}")
        print(f"Availability slots: {stats['total_availabilities']}")
        print(f"Matched: {stats['matched']} ({stats['match_rate']:.0%})")
        print(f"Unmatched requests: {stats['unmatched']}")

        for record in report.records:
            print(f"  {record.start:%H:%M}-{record.end:%H:%M} "
                  f"isolate {record.request_owner} <- volunteer {record.availability_owner}")

    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}")
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"ERROR: Invalid YAML configuration: {e}")
        sys.exit(1)
    except (InvalidInterval, InvalidArgument) as e:
        print(f"ERROR: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"ERROR: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
