"""Main CLI entry point for the Zoho CRM client."""

import argparse
import json
import logging
import sys

from zoho_crm.builder import build_client
from zoho_crm.core import (
    ApiVersion,
    ClientSettings,
    APIError,
    ConfigError,
    ZohoCRMError,
    load_client_settings,
    save_client_settings,
)

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def _load_profile(profile: str) -> ClientSettings:
    try:
        return load_client_settings(profile)
    except ConfigError:
        print(f"Error: Profile '{profile}' is not configured.", file=sys.stderr)
        print(f"Run 'zoho-crm configure --profile {profile}' first.", file=sys.stderr)
        sys.exit(1)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_configure(args):
    """Handle the configure command."""
    try:
        settings = ClientSettings(
            api_version=ApiVersion(args.api_version),
            endpoint=args.endpoint,
            auth_token=args.auth_token,
            client_id=args.client_id,
            client_secret=args.client_secret,
            refresh_token=args.refresh_token,
            timeout_seconds=args.timeout,
            max_retries=args.max_retries,
            concurrency=args.concurrency,
        )

        if settings.api_version == ApiVersion.V1 and not settings.auth_token:
            print("Error: --auth-token is required for the V1 API.", file=sys.stderr)
            sys.exit(1)

        if settings.api_version == ApiVersion.V2 and not (
            settings.client_id and settings.client_secret and settings.refresh_token
        ):
            print(
                "Error: --client-id, --client-secret and --refresh-token are required for the V2 API.",
                file=sys.stderr,
            )
            sys.exit(1)

        path = save_client_settings(args.profile, settings)
        print(f"Successfully configured profile '{args.profile}' ({settings.api_version.value})")
        print(f"Configuration saved to: {path}")

    except ConfigError as e:
        print(f"Error saving configuration: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_token(args):
    """Handle the token command - refresh the V2 access token."""
    settings = _load_profile(args.profile)

    if settings.api_version != ApiVersion.V2:
        print("Error: Access tokens are only used by the V2 API.", file=sys.stderr)
        sys.exit(1)

    try:
        with build_client(settings, args.profile) as client:
            client.refresh_access_token()
            expiry_date = client.token_store.get_expiry_date()

        print(f"✓ Access token refreshed for profile '{args.profile}'")
        print(f"Expires at: {expiry_date.isoformat()}")

    except ZohoCRMError as e:
        print(f"Error refreshing access token: {e}", file=sys.stderr)
        sys.exit(1)


def _build_records_query(client, settings: ClientSettings, args):
    """Create the paginated query listing the records of a module."""
    if settings.api_version == ApiVersion.V1:
        query = client.module(args.module).all()
        if args.fields:
            query.select(args.fields.split(","))
    else:
        query = client.records(args.module).list()
        if args.fields:
            query.fields(*args.fields.split(","))

    if args.modified_after:
        query.modified_after(args.modified_after)
    if args.modified_before:
        query.modified_before(args.modified_before)

    concurrency = args.concurrency if args.concurrency is not None else settings.concurrency
    return query.concurrency(concurrency)


def _fetch_concurrently_up_to(paginator, concurrency: int, max_pages: int) -> None:
    """Fetch batches of pages until there is no more data or max_pages pages are fetched."""
    if max_pages <= 0:
        raise ValueError("--max-pages must be a positive integer.")

    while paginator.has_more_data and paginator.pages_fetched < max_pages:
        paginator.fetch_concurrently(min(concurrency, max_pages - paginator.pages_fetched))


def cmd_records(args):
    """Handle the records command - fetch the records of a module."""
    settings = _load_profile(args.profile)

    try:
        with build_client(settings, args.profile) as client:
            query = _build_records_query(client, settings, args)
            paginator = query.get_paginator()

            logger.info(f"Fetching {args.module} records...")

            if args.max_pages and query.must_be_paginated_concurrently():
                _fetch_concurrently_up_to(paginator, query.get_concurrency(), args.max_pages)
            elif args.max_pages:
                paginator.fetch_limit(args.max_pages)
            else:
                paginator.fetch_all()

            contents = [page.content for page in paginator.responses if page.content]
            records = query.get_response_page_merger().merge_paginated_contents(*contents)

            _print_json(records.to_list())

            summary = f"✓ Retrieved {len(records)} records in {paginator.pages_fetched} pages"
            if paginator.has_more_data:
                summary += " (more records available)"
            print(summary, file=sys.stderr)

    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except APIError as e:
        print(f"API error: {e}", file=sys.stderr)
        if e.status_code:
            print(f"HTTP Status: {e.status_code}", file=sys.stderr)
        sys.exit(1)
    except ZohoCRMError as e:
        print(f"Error fetching records: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


def cmd_get(args):
    """Handle the get command - print one record."""
    settings = _load_profile(args.profile)

    try:
        with build_client(settings, args.profile) as client:
            if settings.api_version == ApiVersion.V1:
                record = client.module(args.module).find(args.id)
            else:
                record = client.records(args.module).find(args.id)

    except (ValueError, ZohoCRMError) as e:
        print(f"Error getting record: {e}", file=sys.stderr)
        sys.exit(1)

    if record is None:
        print(f"Error: Record '{args.id}' not found in {args.module}.", file=sys.stderr)
        sys.exit(1)

    _print_json(record.to_dict())


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="zoho-crm",
        description="Zoho CRM API client",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Configure command
    configure_parser = subparsers.add_parser("configure", help="Save the connection settings of a profile")
    configure_parser.add_argument("--profile", default="default", help="Profile name")
    configure_parser.add_argument(
        "--api-version",
        required=True,
        choices=["v1", "v2"],
        help="API version",
    )
    configure_parser.add_argument("--endpoint", help="API base URL (version default if omitted)")
    configure_parser.add_argument("--auth-token", help="Auth token (V1)")
    configure_parser.add_argument("--client-id", help="OAuth client ID (V2)")
    configure_parser.add_argument("--client-secret", help="OAuth client secret (V2)")
    configure_parser.add_argument("--refresh-token", help="OAuth refresh token (V2)")
    configure_parser.add_argument("--timeout", type=float, default=10.0, help="Request timeout in seconds")
    configure_parser.add_argument("--max-retries", type=int, default=3, help="Attempts for each request")
    configure_parser.add_argument("--concurrency", type=int, help="Default number of pages fetched at once")
    configure_parser.set_defaults(func=cmd_configure)

    # Token command
    token_parser = subparsers.add_parser("token", help="Refresh the access token of a V2 profile")
    token_parser.add_argument("--profile", default="default", help="Profile name")
    token_parser.set_defaults(func=cmd_token)

    # Records command
    records_parser = subparsers.add_parser("records", help="Fetch the records of a module")
    records_parser.add_argument("--profile", default="default", help="Profile name")
    records_parser.add_argument("--module", required=True, help="Module name (e.g., 'Contacts')")
    records_parser.add_argument("--concurrency", type=int, help="Number of pages fetched at once")
    records_parser.add_argument("--max-pages", type=int, help="Maximum number of pages to fetch, by batches of --concurrency pages")
    records_parser.add_argument("--modified-after", help="Minimum modification date (ISO 8601)")
    records_parser.add_argument("--modified-before", help="Maximum modification date, excluded (ISO 8601)")
    records_parser.add_argument("--fields", help="Comma-separated fields to retrieve")
    records_parser.set_defaults(func=cmd_records)

    # Get command
    get_parser = subparsers.add_parser("get", help="Print a record")
    get_parser.add_argument("--profile", default="default", help="Profile name")
    get_parser.add_argument("--module", required=True, help="Module name (e.g., 'Contacts')")
    get_parser.add_argument("--id", required=True, help="Record ID")
    get_parser.set_defaults(func=cmd_get)

    args = parser.parse_args()

    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
