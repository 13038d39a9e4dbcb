#!/usr/bin/env python3
"""
Open Data Communities - Command Line Interface

Search and download Energy Performance Certificates and Display Energy
Certificates. Credentials are read from ODC_API_KEY, or ODC_USER and
ODC_KEY, in the environment or a .env file.
"""

import argparse
import sys
from typing import Any, Dict, List, Optional

import pandas as pd
from tabulate import tabulate

from opendatacommunities import OpenDataCommunitiesClient, ODCError
from opendatacommunities.core.config import CERTIFICATE_TYPES, DISPLAY, PAGINATION_MODES
from opendatacommunities.core.errors import ValidationError, format_error_details
from opendatacommunities.core.events import SearchEvent
from opendatacommunities.core.logging import setup_logging


def parse_filters(items: List[str]) -> Dict[str, Any]:
    """
    Parse ``name=value`` search filters.

    Integer values (such as ``size=100``) are converted to int.

    Raises:
        ValidationError: If an item has no ``=``
    """
    filters: Dict[str, Any] = {}
    for item in items:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise ValidationError(f"Filters must look like name=value, got '{item}'")
        filters[name] = int(value) if value.lstrip("-").isdigit() else value
    return filters


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Open Data Communities energy certificate client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  odc search domestic postcode="SW1A 1AA"
  odc search domestic --max-records 500 local_authority=E09000030
  odc search display --paginate manual address=Manchester
  odc get 12345678901234567890123456789012 domestic certificate
  odc files --type domestic --local-authority E08000025
  odc download domestic-E08000025.zip ./downloads --resource recommendation
  odc schema non_domestic certificate
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    parser.add_argument("-o", "--output", help="Write the table to this CSV file instead of printing it")

    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Search certificates")
    search.add_argument("type", choices=CERTIFICATE_TYPES, help="Certificate type")
    search.add_argument("filters", nargs="+", help="Search filters as name=value")
    search.add_argument("--paginate", choices=PAGINATION_MODES, default="none", help="Pagination mode")
    search.add_argument("--max-pages", type=int, help="Maximum pages to fetch")
    search.add_argument("--max-records", type=int, help="Maximum records to return")

    get = subparsers.add_parser("get", help="Retrieve a certificate or its recommendations")
    get.add_argument("lmk_key", help="LMK key of the certificate")
    get.add_argument("type", choices=CERTIFICATE_TYPES, help="Certificate type")
    get.add_argument("endpoint", choices=["certificate", "recommendation"], help="Data to retrieve")

    subparsers.add_parser("meta", help="Show API metadata")

    files = subparsers.add_parser("files", help="List bulk download files")
    files.add_argument("--type", choices=CERTIFICATE_TYPES, help="Filter by certificate type")
    files.add_argument("--local-authority", help="Filter by local authority code")

    download = subparsers.add_parser("download", help="Download and extract a bulk file")
    download.add_argument("file_name", help="File name as listed by 'files'")
    download.add_argument("destination", help="Destination directory")
    download.add_argument(
        "--resource", choices=["certificate", "recommendation"], default="certificate"
    )
    download.add_argument("--keep-zip", action="store_true", help="Keep the downloaded archive")

    schema = subparsers.add_parser("schema", help="Describe the columns of a resource")
    schema.add_argument("type", choices=CERTIFICATE_TYPES, help="Certificate type")
    schema.add_argument("resource", choices=["certificate", "recommendation"], nargs="?",
                        default="certificate")

    return parser.parse_args(argv)


def print_event(event: SearchEvent) -> None:
    """Show search progress on stderr."""
    print(f"i {event.message}", file=sys.stderr)


def display_table(df: pd.DataFrame, output: Optional[str] = None) -> None:
    """Print a DataFrame as a table, or write it to CSV."""
    if output:
        df.to_csv(output, index=False)
        print(f"Saved {len(df)} rows to {output}", file=sys.stderr)
        return

    if df.empty:
        print("No rows.")
        return

    shown = df.head(DISPLAY["MAX_ROWS"]).astype(str).apply(
        lambda col: col.str.slice(0, DISPLAY["MAX_COLUMN_WIDTH"])
    )
    print(tabulate(shown, headers="keys", tablefmt=DISPLAY["TABLE_FORMAT"], showindex=False))
    if len(df) > DISPLAY["MAX_ROWS"]:
        print(f"... {len(df) - DISPLAY['MAX_ROWS']} more rows (use --output to save all)")


def run(args: argparse.Namespace, client: OpenDataCommunitiesClient) -> None:
    """Execute the selected command."""
    if args.command == "search":
        df = client.search(
            args.type,
            paginate=args.paginate,
            max_pages=args.max_pages,
            max_records=args.max_records,
            **parse_filters(args.filters),
        )
        display_table(df, args.output)
    elif args.command == "get":
        display_table(client.get_data(args.lmk_key, args.type, args.endpoint), args.output)
    elif args.command == "meta":
        meta = client.get_meta()
        print(tabulate(sorted(meta.items()), headers=["field", "value"], tablefmt=DISPLAY["TABLE_FORMAT"]))
    elif args.command == "files":
        display_table(client.get_file(args.type, args.local_authority), args.output)
    elif args.command == "download":
        path = client.bulk_download(
            args.file_name, args.destination, resource=args.resource, keep_zip=args.keep_zip
        )
        print(f"{path.name} file has been saved to {path.parent}")
    elif args.command == "schema":
        display_table(client.get_schema(args.type, args.resource), args.output)


def main(argv: Optional[List[str]] = None, client: Optional[OpenDataCommunitiesClient] = None) -> int:
    """
    Command line entry point.

    Args:
        argv: Arguments (default: sys.argv)
        client: Injected client (default: a new client)

    Returns:
        Process exit code
    """
    args = parse_arguments(argv)
    setup_logging("DEBUG" if args.verbose else "WARNING", console=True)

    client = client or OpenDataCommunitiesClient(observer=print_event)
    try:
        run(args, client)
    except ODCError as e:
        print(f"Error: {format_error_details(e)}", file=sys.stderr)
        return 1
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
