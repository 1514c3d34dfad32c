"""CLI entry point: python main.py search "travel" --platform instagram"""

import argparse
import asyncio
import json
import sys

from src.api_errors import SocialAPIError
from src.federated_search import build_aggregator
from src.federated_search.registry import LIVE_MODE, MOCK_MODE
from src.logging_config import LogLevel, LoggingConfig, configure_logging
from src.settings import get_settings
from src.social_catalog import DatasetError, ProfileCatalog, QueryService


def _load_queries(dataset: str) -> QueryService:
    return QueryService(ProfileCatalog.from_json_file(dataset))


def cmd_serve(args, settings) -> int:
    import uvicorn

    from src.api import create_app

    app = create_app(settings=settings)
    uvicorn.run(app, host=args.host or settings.host, port=args.port or settings.port, log_config=None)
    return 0


def cmd_search(args, settings) -> int:
    queries = _load_queries(args.dataset or settings.dataset_path)
    entries = queries.search(args.query, platform=args.platform, limit=args.limit)
    if args.json:
        print(json.dumps([e.to_dict() for e in entries], indent=2))
        return 0

    if not entries:
        print("No matches.")
        return 0
    for entry in entries:
        print(f"  {entry.platform.value:10s} {entry.handle:24s} {entry.display_name:28s} "
              f"{entry.followers:>12,d}  {entry.engagement_rate:.1f}%")
    return 0


def cmd_federated(args, settings) -> int:
    queries = None
    mode = (args.mode or settings.data_mode).lower()
    if mode not in (MOCK_MODE, LIVE_MODE):
        print(f"Error: unknown data mode '{mode}' (expected mock or live)", file=sys.stderr)
        return 2
    if mode == MOCK_MODE:
        queries = _load_queries(args.dataset or settings.dataset_path)
    aggregator = build_aggregator(settings, queries, mode=mode)
    response = asyncio.run(aggregator.search(args.query, args.platforms, args.limit))

    if args.json:
        print(json.dumps(response.to_dict(), indent=2))
        return 0

    print(f"Federated search '{response.query}' on {', '.join(p.value for p in response.platforms)}")
    for result in response.results:
        followers = f"{result.followers:,d}" if result.followers is not None else "-"
        print(f"  {result.platform.value:10s} {result.handle or '-':24s} {result.name:28s} {followers:>12s}")
    for issue in response.issues:
        print(f"  ! {issue.to_dict()['platform']}: {issue.message}", file=sys.stderr)
    return 0


def cmd_profile(args, settings) -> int:
    queries = _load_queries(args.dataset or settings.dataset_path)
    profile = queries.get_profile(args.platform, args.handle)
    if profile is None:
        print(f"No profile for {args.handle} on {args.platform}", file=sys.stderr)
        return 1
    print(json.dumps(profile.to_dict(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SocialScope - influencer catalog and federated social search"
    )
    parser.add_argument(
        "--dataset", default=None,
        help="Dataset JSON file (default: SOCIAL_DATASET_PATH)"
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Enable debug logging"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(func=cmd_serve)

    search = sub.add_parser("search", help="Search the influencer catalog")
    search.add_argument("query", nargs="?", default="")
    search.add_argument("--platform", default=None)
    search.add_argument("--limit", type=int, default=None)
    search.add_argument("--json", action="store_true")
    search.set_defaults(func=cmd_search)

    federated = sub.add_parser("federated", help="Search several platforms at once")
    federated.add_argument("query")
    federated.add_argument(
        "--platforms", default=None,
        help="Comma or space separated platforms (default: SOCIAL_FEDERATED_DEFAULT_PLATFORMS)"
    )
    federated.add_argument("--limit", type=int, default=None)
    federated.add_argument("--mode", choices=["mock", "live"], default=None)
    federated.add_argument("--json", action="store_true")
    federated.set_defaults(func=cmd_federated)

    profile = sub.add_parser("profile", help="Print one normalized profile as JSON")
    profile.add_argument("platform")
    profile.add_argument("handle")
    profile.set_defaults(func=cmd_profile)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(LoggingConfig(level=LogLevel.DEBUG if args.verbose else LogLevel.WARNING))
    settings = get_settings()

    try:
        return args.func(args, settings)
    except (SocialAPIError, DatasetError) as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
