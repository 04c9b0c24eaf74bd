"""Command-line interface for the year-in-review pipeline."""

import argparse
import logging
import sys

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from wrapped import config
from wrapped.analytics.wrapped_stats import process_activities
from wrapped.analytics.years import filter_activities_by_year, get_available_years
from wrapped.etl.extractors.archive_extractor import ExportImportError, import_strava_export
from wrapped.export.reports import ReportExporter
from wrapped.integrations.strava_api import StravaAPIError, StravaClient


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='wrapped',
        description='Year in review for your Strava activities',
        epilog='For more information on a specific command, run: wrapped <command> --help'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(
        dest='command',
        help='Available commands',
        metavar='<command>'
    )

    # Import command
    import_parser = subparsers.add_parser(
        'import',
        help='Import a Strava bulk export ZIP',
        description='Parse a Strava export archive and report what was found'
    )
    import_parser.add_argument('archive', help='Path to the export ZIP file')
    import_parser.add_argument(
        '--export-csv',
        help='Write the imported activities to this CSV file'
    )

    # Years command
    years_parser = subparsers.add_parser(
        'years',
        help='List years with activities',
        description='List the years present in a Strava export archive'
    )
    years_parser.add_argument('archive', help='Path to the export ZIP file')

    # Stats command
    stats_parser = subparsers.add_parser(
        'stats',
        help='Show the year in review for an export',
        description='Summarize one year of a Strava export archive'
    )
    stats_parser.add_argument('archive', help='Path to the export ZIP file')
    stats_parser.add_argument(
        '--year',
        type=int,
        help='Year to summarize (default: most recent year with activities)'
    )
    stats_parser.add_argument(
        '--json',
        dest='json_path',
        help='Also write the statistics to this JSON file'
    )

    # Fetch command
    fetch_parser = subparsers.add_parser(
        'fetch',
        help='Fetch a year of activities from the Strava API',
        description='Summarize one year of activities fetched with an access token'
    )
    fetch_parser.add_argument('year', type=int, help='Year to fetch')
    fetch_parser.add_argument(
        '--token',
        help='Strava access token (or set STRAVA_ACCESS_TOKEN env var)'
    )
    fetch_parser.add_argument(
        '--json',
        dest='json_path',
        help='Also write the statistics to this JSON file'
    )

    # Parse arguments
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Handle commands
    if args.command is None:
        parser.print_help()
        return 0

    try:
        if args.command == 'import':
            return run_import(args)
        elif args.command == 'years':
            return run_years(args)
        elif args.command == 'stats':
            return run_stats(args)
        elif args.command == 'fetch':
            return run_fetch(args)
    except ExportImportError as e:
        print(f"Error: {e}")
        return 1
    except StravaAPIError as e:
        print(f"Error: {e}")
        return 1
    return 0


def run_import(args):
    """Import an archive and print what was found."""
    result = import_strava_export(args.archive)
    report = result.report

    print("\n" + "="*60)
    print("IMPORT SUMMARY")
    print("="*60)
    print(f"Athlete: {result.athlete.firstname} {result.athlete.lastname}")
    print(f"Archive entries: {report.archive_entries}")
    print(f"Rows read: {report.total_rows}")
    print(f"Activities imported: {report.imported_activities}")
    print(f"Rows rejected: {report.rejected_rows}")
    print(f"Track files: {report.side_files_found} ({report.side_files_failed} unreadable)")
    print(f"Routes attached: {report.routes_attached}")
    if result.profile_picture:
        print("Profile picture: yes")

    if args.export_csv:
        path = ReportExporter(process_activities(result.activities), result.activities).export_to_csv(args.export_csv)
        print(f"\nActivities written to {path}")
    return 0


def run_years(args):
    """Print the years present in an archive."""
    result = import_strava_export(args.archive)
    years = get_available_years(result.activities)
    if not years:
        print("No activities with a valid date found")
        return 1
    for year in years:
        count = len(filter_activities_by_year(result.activities, year))
        print(f"{year}: {count} activities")
    return 0


def run_stats(args):
    """Print the year in review for an archive."""
    result = import_strava_export(args.archive)
    years = get_available_years(result.activities)

    year = args.year
    if year is None:
        if not years:
            print("No activities with a valid date found")
            return 1
        year = years[0]

    activities = filter_activities_by_year(result.activities, year)
    _print_report(activities, year, args.json_path)
    return 0


def run_fetch(args):
    """Fetch a year from the Strava API and print the year in review."""
    token = args.token or config.STRAVA_ACCESS_TOKEN
    if not token:
        print("Error: no access token. Pass --token or set STRAVA_ACCESS_TOKEN")
        return 1

    activities = StravaClient(token).get_activities(args.year)
    _print_report(activities, args.year, args.json_path)
    return 0


def _print_report(activities, year, json_path=None):
    stats = process_activities(activities)
    exporter = ReportExporter(stats, activities, year=year)
    print(exporter.generate_summary_report())
    if json_path:
        path = exporter.export_to_json(json_path)
        print(f"\nStatistics written to {path}")


if __name__ == "__main__":
    sys.exit(main())
