"""Command line entry point for the launcher.

The launcher runs ``sherlock-dict {keyword}`` and renders stdout as a
bulk text result. Diagnostics and logs go to stderr.
"""

import argparse
import logging
import sys
from dataclasses import replace

from dotenv import load_dotenv

from adapter.dict_server.client import DictServerAdapter
from domain.model.dictionary import ServerAddress
from domain.model.errors import (
    DictConnectionError,
    DictError,
    ProtocolError,
    ServerError,
    ValidationError,
)
from launcher.assembler import assemble, assemble_catalog, assemble_error, render
from services.lookup_service import LookupRequest, LookupService
from utils.config import LOG_LEVELS, OUTPUT_MODES, VERSION, Settings, validate_port, validate_timeout
from utils.logging import setup_structured_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONNECTION = 1
EXIT_USAGE = 2
EXIT_PROTOCOL = 3
EXIT_SERVER = 4
EXIT_INVALID = 5


def exit_code_for(error: DictError) -> int:
    if isinstance(error, DictConnectionError):
        return EXIT_CONNECTION
    if isinstance(error, ProtocolError):
        return EXIT_PROTOCOL
    if isinstance(error, ServerError):
        return EXIT_SERVER
    return EXIT_INVALID


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sherlock-dict",
        description="Look words up on a DICT (RFC 2229) server for a launcher.",
    )
    parser.add_argument("words", nargs="*", help="Word or phrase to define")
    parser.add_argument("--host", help="DICT server host (env DICT_HOST)")
    parser.add_argument("--port", type=int, help="DICT server port (env DICT_PORT)")
    parser.add_argument("--timeout", type=float, help="Connect/read timeout in seconds (env DICT_TIMEOUT)")
    parser.add_argument("--database", help='Database to search, "*" for all (env DICT_DATABASE)')
    parser.add_argument("--strategy", help="MATCH strategy for suggestions (env DICT_MATCH_STRATEGY)")
    parser.add_argument(
        "--suggest", action=argparse.BooleanOptionalAction, default=None,
        help="Ask the server for similar words when nothing is defined (env DICT_SUGGEST)",
    )
    parser.add_argument("--output-mode", choices=OUTPUT_MODES, help="Result layout (env DICT_OUTPUT_MODE)")
    parser.add_argument(
        "--markup", action=argparse.BooleanOptionalAction, default=None,
        help="Wrap content in Pango markup (env DICT_OUTPUT_MARKUP)",
    )
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Log level (env LOG_LEVEL)")
    listing = parser.add_mutually_exclusive_group()
    listing.add_argument("--databases", action="store_true", help="List the server's databases")
    listing.add_argument("--strategies", action="store_true", help="List the server's MATCH strategies")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Let command line flags win over environment settings."""
    changes = {}
    if args.host:
        changes["host"] = args.host
    if args.port is not None:
        changes["port"] = validate_port(args.port)
    if args.timeout is not None:
        changes["timeout"] = validate_timeout(args.timeout)
    if args.database:
        changes["database"] = args.database
    if args.strategy:
        changes["strategy"] = args.strategy
    if args.suggest is not None:
        changes["suggest"] = args.suggest
    if args.markup is not None:
        changes["markup"] = args.markup
    if args.log_level:
        changes["log_level"] = args.log_level
    if args.output_mode:
        changes["output"] = replace(settings.output, mode=args.output_mode)
    return replace(settings, **changes)


def build_service(settings: Settings) -> LookupService:
    adapter = DictServerAdapter(
        address=ServerAddress(host=settings.host, port=settings.port),
        timeout=settings.timeout,
        database=settings.database,
        strategy=settings.strategy,
        client_name=settings.client_name,
    )
    return LookupService(adapter, suggest=settings.suggest)


def run(args: argparse.Namespace, settings: Settings, service: LookupService) -> int:
    """Execute one invocation and write the result list to stdout."""
    word = " ".join(args.words)
    try:
        if args.databases:
            items = assemble_catalog(service.databases(), "databases", settings)
        elif args.strategies:
            items = assemble_catalog(service.strategies(), "strategies", settings)
        else:
            result = service.lookup(LookupRequest(word=word, suggest=settings.suggest))
            items = assemble(result, settings)
    except DictError as e:
        logger.error("Lookup failed", extra={
            "word": word,
            "error_type": type(e).__name__,
            "server": f"{settings.host}:{settings.port}",
        })
        print(f"sherlock-dict: {e}", file=sys.stderr)
        print(render(assemble_error(e, word, settings), settings))
        return exit_code_for(e)

    print(render(items, settings))
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the dictionary client."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.words and not (args.databases or args.strategies):
        parser.error("no word provided")

    try:
        settings = apply_overrides(Settings.from_env(), args)
    except ValidationError as e:
        print(f"sherlock-dict: {e}", file=sys.stderr)
        return EXIT_INVALID

    setup_structured_logging(settings.log_level)
    return run(args, settings, build_service(settings))


if __name__ == "__main__":
    sys.exit(main())
