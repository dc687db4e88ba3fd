"""IssueScope CLI.

Subcommands:
  show    -> fetch open issues of owner/repo (optionally several pages)
  star    -> star the repository after loading it
  unstar  -> remove the star after loading it
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from issuescope.browser import IssueBrowser
from issuescope.config import BrowserConfig, ConfigError
from issuescope.env_auth import EnvAuthConfig, create_env_auth_manager
from issuescope.errors import InvalidPathError, MutationError, PayloadError, TransportError
from issuescope.logging import get_logger
from issuescope.models import Snapshot
from issuescope.render import render_snapshot
from issuescope.runtime import execute_command, prepare_config

CONFIG_HELP = "Path to issuescope.config.yaml (default: ./issuescope.config.yaml if present)"
PATH_HELP = "Repository path owner/repo (default from config)"

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog="issuescope", description="Browse open GitHub issues through the GraphQL API"
    )
    p.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    p.add_argument("--json-logs", action="store_true", help="Emit structured JSON log lines")
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    ps = sub.add_parser("show", help="Show open issues for a repository")
    ps.add_argument("path", nargs="?", help=PATH_HELP)
    ps.add_argument("--config", help=CONFIG_HELP)
    pages = ps.add_mutually_exclusive_group()
    pages.add_argument("--pages", type=int, default=1, help="Number of issue pages to load")
    pages.add_argument("--all", action="store_true", help="Load every remaining page")
    ps.add_argument("--json", action="store_true", help="Print the snapshot as JSON")

    for name, help_text in (("star", "Star a repository"), ("unstar", "Remove a star")):
        pm = sub.add_parser(name, help=help_text)
        pm.add_argument("path", nargs="?", help=PATH_HELP)
        pm.add_argument("--config", help=CONFIG_HELP)
        pm.add_argument("--json", action="store_true", help="Print the snapshot as JSON")

    return p


def _build_browser(cfg: BrowserConfig) -> IssueBrowser:
    token: str | None = None
    if cfg.env_auth_enabled:
        manager = create_env_auth_manager(
            EnvAuthConfig(load_dotenv=cfg.env_auth_load_dotenv, dotenv_path=cfg.env_auth_dotenv_path)
        )
        token = manager.get_github_token()
        for hint in manager.get_authentication_recommendations():
            get_logger().warning(hint)
    return IssueBrowser.from_config(cfg, token)


def _emit(snapshot: Snapshot, path: str, as_json: bool) -> None:
    if as_json:
        print(json.dumps(snapshot.to_payload(), indent=2))
    else:
        print(render_snapshot(snapshot, path))


def _cmd_show(cfg: BrowserConfig, args: argparse.Namespace) -> int:
    browser = _build_browser(cfg)
    max_pages = None if args.all else max(1, args.pages)
    snapshot = browser.fetch_all(cfg.path, max_pages=max_pages)
    _emit(snapshot, cfg.path, args.json)
    return 1 if snapshot.errors else 0


def _cmd_star(cfg: BrowserConfig, args: argparse.Namespace, *, star: bool) -> int:
    browser = _build_browser(cfg)
    snapshot = browser.fetch_issues(cfg.path)
    repo = snapshot.repository
    if repo is None or snapshot.errors:
        _emit(snapshot, cfg.path, args.json)
        return 1
    try:
        if star:
            snapshot = browser.star_repository(repo.id)
        else:
            snapshot = browser.unstar_repository(repo.id)
    except (MutationError, TransportError, PayloadError) as exc:
        print(f"Something went wrong: {exc}", file=sys.stderr)
        _emit(browser.snapshot, cfg.path, args.json)
        return 1
    _emit(snapshot, cfg.path, args.json)
    return 0


def _build_handlers(args: argparse.Namespace, cfg: BrowserConfig) -> dict[str, Any]:
    return {
        "show": lambda: _cmd_show(cfg, args),
        "star": lambda: _cmd_star(cfg, args, star=True),
        "unstar": lambda: _cmd_star(cfg, args, star=False),
    }


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = prepare_config(args)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    handlers = _build_handlers(args, cfg)
    handler = handlers.get(args.cmd)
    if handler is None:  # pragma: no cover - argparse enforces valid choices
        parser.print_help()
        return 1
    try:
        return execute_command(handler, args.cmd)
    except InvalidPathError as exc:
        print(str(exc), file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
