"""
CLI Interface for OrgPulse Analytics Module

Provides command-line access to risk signals, review trends and rating
summaries for an organization.
"""

import argparse
import json
import logging
import sys
from datetime import datetime

from config import load_analytics_config

from .exceptions import AnalyticsError
from .facade import AnalyticsFacade
from .scheduler import CacheWarmer
from .store import SQLAlchemyReviewStore
from .windows import ensure_utc


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def build_facade() -> AnalyticsFacade:
    """Create a facade over the configured database."""
    return AnalyticsFacade(SQLAlchemyReviewStore(), load_analytics_config())


def parse_as_of(value: str) -> datetime:
    """Parse an ISO-8601 instant; naive values are UTC."""
    try:
        return ensure_utc(datetime.fromisoformat(value))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid ISO-8601 instant: {value!r}")


def print_json(payload):
    print(json.dumps(payload, indent=2, default=str))


def run_risk(args):
    """Show the risk signal for an organization."""
    facade = build_facade()
    signal = facade.evaluate_risk(
        args.org_id,
        args.as_of,
        window_days=args.window_days,
        threshold_percent=args.threshold,
    )

    if args.json:
        print_json(signal.to_dict())
        return 0

    print(f"🔍 Risk signal for organization {args.org_id}")
    print(f"   📅 Window: last {signal.window_days} days")
    print(f"   📊 Negative reviews: {signal.negative}/{signal.total}")
    print(f"   📏 Negative share: {signal.negative_percentage:.2f}% (threshold {signal.threshold_percent:g}%)")
    if signal.has_risk:
        print(f"🚨 Risk: more than {signal.threshold_percent:g}% negative reviews")
    else:
        print("✅ No risk signal")
    return 0


def run_trend(args):
    """Show daily review volume for an organization."""
    facade = build_facade()
    points = facade.trend(args.org_id, args.as_of, period_days=args.period_days)

    if args.json:
        print_json([point.to_dict() for point in points])
        return 0

    print(f"📈 Review volume for organization {args.org_id}")
    if not points:
        print("⚠️  No reviews in the period")
        return 0
    for point in points:
        print(f"   {point.date.isoformat()}: {point.count}")
    return 0


def run_summary(args):
    """Show the rating summary for an organization."""
    facade = build_facade()
    summary = facade.summarize(args.org_id, args.as_of, period_days=args.period_days)

    if args.json:
        print_json(summary.to_dict())
        return 0

    print(f"📊 Rating summary for organization {args.org_id}")
    print(f"   Reviews: {summary.review_count}")
    print(f"   Average rating: {summary.average_rating:.2f}")
    print(
        f"   Negative / non-negative / unrated: {summary.negative_count} / "
        f"{summary.non_negative_count} / {summary.excluded_count}"
    )
    for dimension, average in summary.dimension_averages.items():
        shown = f"{average:.2f}" if average is not None else "n/a"
        print(f"   {dimension}: {shown}")
    return 0


def run_report(args):
    """Show risk, trend and summary computed against one instant."""
    facade = build_facade()
    result = facade.get_analytics(args.org_id, args.as_of, include_summary=True)

    if args.json:
        print_json(result.to_dict())
        return 0

    risk = result.risk
    print(f"📊 OrgPulse report for organization {args.org_id} as of {result.as_of.isoformat()}")
    print(f"{'='*50}")
    print(f"   Negative share: {risk.negative_percentage:.2f}% of {risk.total} reviews")
    print(f"   {'🚨 Risk signal raised' if risk.has_risk else '✅ No risk signal'}")
    print(f"   Active days: {len(result.trend)}")
    print(f"   Average rating: {result.summary.average_rating:.2f}")
    return 0


def run_warm(args):
    """Warm the cache once for the given organizations."""
    facade = build_facade()
    warmer = CacheWarmer(facade, args.org_ids)
    warmed = warmer.warm()

    print(f"🔥 Warmed {warmed}/{len(args.org_ids)} organization(s)")
    return 0 if warmed == len(args.org_ids) else 1


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="OrgPulse Analytics - Review Risk Signals and Trends",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m analytics risk --org-id 7
  python -m analytics risk --org-id 7 --threshold 35 --window-days 14
  python -m analytics trend --org-id 7 --period-days 7 --json
  python -m analytics report --org-id 7 --as-of 2024-02-01T00:00:00
  python -m analytics warm 1 2 3
        """,
    )

    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_common(sub):
        sub.add_argument("--org-id", type=int, required=True, help="Organization id")
        sub.add_argument(
            "--as-of", type=parse_as_of, default=None, help="Snapshot instant (ISO-8601, UTC)"
        )
        sub.add_argument("--json", action="store_true", help="Print JSON output")

    # Risk command
    risk_parser = subparsers.add_parser("risk", help="Show the negative-review risk signal")
    add_common(risk_parser)
    risk_parser.add_argument("--window-days", type=int, default=None, help="Trailing window in days")
    risk_parser.add_argument("--threshold", type=float, default=None, help="Alert threshold in percent")

    # Trend command
    trend_parser = subparsers.add_parser("trend", help="Show daily review volume")
    add_common(trend_parser)
    trend_parser.add_argument("--period-days", type=int, default=None, help="Trailing period in days")

    # Summary command
    summary_parser = subparsers.add_parser("summary", help="Show rating summary")
    add_common(summary_parser)
    summary_parser.add_argument("--period-days", type=int, default=None, help="Trailing period in days")

    # Report command (combined)
    report_parser = subparsers.add_parser("report", help="Show risk, trend and summary together")
    add_common(report_parser)

    # Warm command
    warm_parser = subparsers.add_parser("warm", help="Compute analytics once for organizations")
    warm_parser.add_argument("org_ids", type=int, nargs="+", help="Organization ids")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Setup logging
    setup_logging(args.verbose)

    commands = {
        "risk": run_risk,
        "trend": run_trend,
        "summary": run_summary,
        "report": run_report,
        "warm": run_warm,
    }

    try:
        return commands[args.command](args)
    except AnalyticsError as e:
        print(f"❌ {args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
