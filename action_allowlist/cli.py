"""CLI entrypoints for action-allowlist commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from .config import AllowlistConfig, load_config, parse_repositories
from .dedup import reference_set
from .errors import ConfigError, DiscoveryError
from .extractor import ReferenceExtractor
from .logging import configure_logging
from .models import ActionReference
from .orchestrator import Orchestrator, format_summary


def _add_verbosity_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )
    quiet_kwargs = dict(kwargs, help="Only log warnings and errors.")
    parser.add_argument(
        "-q",
        "--quiet",
        **quiet_kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="action-allowlist",
        description="Build GitHub Actions allowlists from template repository workflows.",
    )
    _add_verbosity_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Scan discovered repositories and write the strict and simple allowlists.",
    )
    _add_verbosity_options(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "--config",
        default=".",
        help="Path to .allowlist.yml or its directory (defaults to current directory).",
    )
    generate_parser.add_argument(
        "--strict-output",
        help="Destination of the pinned allowlist (overrides config and environment).",
    )
    generate_parser.add_argument(
        "--simple-output",
        help="Destination of the wildcarded allowlist (overrides config and environment).",
    )
    generate_parser.add_argument(
        "--org",
        dest="organizations",
        action="append",
        metavar="ORG",
        help="Organization to search; repeat for several (replaces configured list).",
    )
    generate_parser.add_argument("--topic", help="Repository topic to search for.")
    generate_parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="OWNER/NAME",
        help="Repository to skip; repeat for several (added to configured exclusions).",
    )
    generate_parser.add_argument(
        "--include-archived",
        action="store_true",
        help="Also scan archived repositories.",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the allowlists instead of writing them.",
    )
    generate_parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write logs to this file.",
    )

    extract_parser = subparsers.add_parser(
        "extract",
        help="Print the action references found in local workflow files.",
    )
    _add_verbosity_options(extract_parser, suppress_default=True)
    extract_parser.add_argument("paths", nargs="+", help="Files to scan.")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbosity_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def _apply_overrides(config: AllowlistConfig, args: argparse.Namespace) -> AllowlistConfig:
    if args.strict_output:
        config.output.strict_path = Path(args.strict_output).expanduser().resolve()
    if args.simple_output:
        config.output.simple_path = Path(args.simple_output).expanduser().resolve()
    if args.organizations:
        config.discovery.organizations = list(args.organizations)
    if args.topic:
        config.discovery.topic = args.topic
    if args.exclude:
        config.discovery.exclude_repositories.extend(parse_repositories(args.exclude))
    if args.include_archived:
        config.discovery.exclude_archived = False
    return config


def extract_paths(paths: List[str]) -> List[ActionReference]:
    """Extract references from local files, deduplicated across files."""
    extractor = ReferenceExtractor()
    found = reference_set()
    for raw in paths:
        path = Path(raw)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        found.update(extractor.extract(path.read_text(encoding="utf-8")))
    return found.items()


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for action-allowlist commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=getattr(args, "log_file", None),
    )

    if args.command == "generate":
        try:
            config = _apply_overrides(load_config(Path(args.config)), args)
            outcome = Orchestrator().run(config, dry_run=bool(args.dry_run))
        except ConfigError as exc:
            parser.exit(1, f"Configuration error: {exc}\n")
        except DiscoveryError as exc:
            parser.exit(1, f"Discovery failed: {exc}\n")
        except Exception as exc:  # pragma: no cover - defensive guard
            parser.exit(1, f"action-allowlist generate failed: {exc}\nRun with --verbose for more details.\n")
        if outcome.dry_run:
            print(f"# strict ({outcome.strict_path})")
            print(outcome.allowlists.strict_text, end="")
            print(f"# simple ({outcome.simple_path})")
            print(outcome.allowlists.simple_text, end="")
        print(format_summary(outcome.report))
    elif args.command == "extract":
        try:
            references = extract_paths(args.paths)
        except (FileNotFoundError, UnicodeDecodeError) as exc:
            parser.exit(1, f"{exc}\n")
        for reference in references:
            print(reference.full)
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
