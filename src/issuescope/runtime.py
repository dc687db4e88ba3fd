"""Runtime helpers for IssueScope CLI orchestration."""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from issuescope.config import CONFIG_DEFAULT, BrowserConfig, load_config
from issuescope.logging import configure_logging, get_logger


class _HandlerCallable(Protocol):
    def __call__(self) -> Any: ...


def prepare_config(
    args: Any, *, loader: Callable[[str], BrowserConfig] = load_config
) -> BrowserConfig:
    """Load BrowserConfig for the given argparse namespace and configure logging.

    An explicitly passed ``--config`` must exist; the default file is optional.
    """
    config_path = getattr(args, "config", None)
    if config_path:
        cfg = loader(config_path)
    elif Path(CONFIG_DEFAULT).exists():
        cfg = loader(CONFIG_DEFAULT)
    else:
        cfg = BrowserConfig()
    if getattr(args, "json_logs", False):
        cfg.logging_json_enabled = True
    level = "WARNING" if getattr(args, "quiet", False) else cfg.logging_level
    configure_logging(json_logging=cfg.logging_json_enabled, level=level)
    path_override = getattr(args, "path", None)
    if path_override:
        cfg.path = path_override
    return cfg


def execute_command(handler: _HandlerCallable, command: str) -> int:
    """Execute a command handler and log its exit code and duration."""
    start = time.monotonic()
    logger = get_logger()
    try:
        result = handler()
        exit_code = int(result) if result is not None else 0
    except Exception as exc:
        logger.log_error(f"command {command} failed", error=str(exc))
        raise
    logger.log_performance(
        f"command_{command}", (time.monotonic() - start) * 1000, exit_code=exit_code
    )
    return exit_code


__all__ = ["prepare_config", "execute_command"]
