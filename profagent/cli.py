"""Command-line interface for profagent."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from profagent.config import DEFAULT_CONFIG, AgentConfig, load_config
from profagent.dispatch import ProfileDispatcher, resolve_limit
from profagent.errors import ProfileError
from profagent.logging import get_logger, set_global_log_level
from profagent.report.views import render_view
from profagent.runtime.folded import dump_folded, parse_folded
from profagent.runtime.sampler import RuntimeSampler
from profagent.server.server import ProfileServer
from profagent.types.base import ProfileKind, ViewMode

logger = get_logger(__name__)


def _load_config(path: Optional[Path]) -> AgentConfig:
    if path is None:
        return DEFAULT_CONFIG
    try:
        config = load_config(path)
    except FileNotFoundError:
        logger.error(f"Config file not found: {path}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Invalid config file {path}: {type(e).__name__}: {e}")
        sys.exit(1)
    logger.debug(f"Loaded config from {path}")
    return config


def _serve(config: AgentConfig) -> None:
    """Run the stdio tool server until stdin closes."""
    sampler = RuntimeSampler(config)
    sampler.install()
    try:
        server = ProfileServer(ProfileDispatcher(sampler, config), config)
        server.serve(sys.stdin, sys.stdout)
    finally:
        sampler.uninstall()


def _show(
    kind: str,
    view: str,
    limit: Optional[int],
    duration: Optional[int],
    folded: Optional[Path],
    config: AgentConfig,
) -> None:
    """Print a profile of this process, or write it as folded stacks."""
    sampler = RuntimeSampler(config)
    sampler.install()
    dispatcher = ProfileDispatcher(sampler, config)
    seconds = config.clamp_duration(duration)
    try:
        if folded is not None:
            profile = dispatcher.acquire(kind, seconds)
            folded.parent.mkdir(parents=True, exist_ok=True)
            folded.write_bytes(dump_folded(profile))
            logger.info(f"Wrote {len(profile.samples)} samples to {folded}")
        else:
            print(dispatcher.render(kind, view, limit, seconds), end="")
    except ProfileError as e:
        logger.error(str(e))
        sys.exit(1)
    finally:
        sampler.uninstall()


def _render_file(
    path: Path,
    kind: Optional[str],
    view: str,
    limit: Optional[int],
    config: AgentConfig,
) -> None:
    """Render a folded profile file to stdout."""
    if not path.exists():
        logger.error(f"Profile file not found: {path}")
        sys.exit(1)
    try:
        profile_kind = ProfileKind.from_string(kind) if kind else None
        profile = parse_folded(path.read_bytes(), kind=profile_kind)
    except ValueError as e:
        logger.error(f"Failed to parse profile {path}: {e}")
        sys.exit(1)
    text = render_view(
        profile,
        view,
        resolve_limit(limit),
        inclusive_cumulative=config.inclusive_cumulative,
    )
    print(text, end="")


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``profagent`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="profagent",
        description="Collect and render runtime profiles of Python processes.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and errors"
    )
    parser.add_argument(
        "--config", "-c", type=Path, default=None, help="Path to config YAML"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{serve,show,render}",
        help="Available commands",
    )

    subparsers.add_parser("serve", help="Serve profile tools over stdio JSON-RPC")

    kinds = [k.value for k in ProfileKind]
    views = [m.value for m in ViewMode]

    show_parser = subparsers.add_parser(
        "show", help="Profile this process and print the report"
    )
    show_parser.add_argument("kind", choices=kinds, help="Profile kind")
    show_parser.add_argument(
        "--duration",
        "-d",
        type=int,
        default=None,
        help="CPU sampling duration in seconds (cpu only)",
    )
    show_parser.add_argument(
        "--folded",
        type=Path,
        default=None,
        help="Write the raw profile as folded stacks to this file instead",
    )

    render_parser = subparsers.add_parser(
        "render", help="Render a folded profile file"
    )
    render_parser.add_argument("profile", type=Path, help="Path to folded profile")
    render_parser.add_argument(
        "--kind",
        "-k",
        choices=kinds,
        default=None,
        help="Profile kind (default: taken from the file header)",
    )

    for p in (show_parser, render_parser):
        p.add_argument("--view", choices=views, default=ViewMode.FLAT.value)
        p.add_argument(
            "--limit", "-n", type=int, default=None, help="Maximum rows to show"
        )

    effective_args = sys.argv[1:] if argv is None else argv
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    config = _load_config(args.config)

    if args.command == "serve":
        _serve(config)
    elif args.command == "show":
        _show(args.kind, args.view, args.limit, args.duration, args.folded, config)
    elif args.command == "render":
        _render_file(args.profile, args.kind, args.view, args.limit, config)


if __name__ == "__main__":
    main()
