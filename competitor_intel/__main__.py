"""
Competitor Intelligence Module - Entry Point

Run with: python -m competitor_intel [command]

Commands:
    analyze         Analyze a client site against its competitors
"""

import sys
import argparse


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Competitor Intelligence Module",
        prog="competitor_intel"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a client site against its competitors"
    )
    analyze_parser.add_argument(
        "--client",
        help="Client domain"
    )
    analyze_parser.add_argument(
        "--competitor",
        action="append",
        default=[],
        help="Competitor domain (repeatable)"
    )
    analyze_parser.add_argument(
        "--keyword",
        action="append",
        default=[],
        help="Keyword to check coverage for (repeatable)"
    )
    source = analyze_parser.add_mutually_exclusive_group()
    source.add_argument(
        "--data-dir",
        help="Directory of <domain>.json crawler exports"
    )
    source.add_argument(
        "--provider-url",
        help="Base URL of the crawler metrics API"
    )
    analyze_parser.add_argument(
        "--history",
        help="JSON file with historical category scores"
    )
    analyze_parser.add_argument(
        "--timeline-months",
        type=int,
        help="Strategy timeline length in months"
    )
    analyze_parser.add_argument(
        "--output",
        help="Write the full result as JSON to this file"
    )
    analyze_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override LOG_LEVEL for this run"
    )

    args = parser.parse_args(argv)

    if args.command == "analyze" and args.timeline_months is not None and args.timeline_months < 0:
        parser.error("--timeline-months must be zero or positive")

    if args.command == "analyze":
        if args.log_level:
            from runner.logging_setup import set_log_level
            set_log_level(args.log_level)

        from competitor_intel.cli import run_analysis
        exit_code = run_analysis(
            client=args.client,
            competitors=args.competitor,
            keywords=args.keyword,
            data_dir=args.data_dir,
            provider_url=args.provider_url,
            history_file=args.history,
            timeline_months=args.timeline_months,
            output=args.output,
        )
        sys.exit(exit_code)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
