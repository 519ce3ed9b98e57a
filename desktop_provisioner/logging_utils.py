from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .lib.env import user_paths

DEFAULT_LOG_PATH = str(user_paths().log_default)


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging for a provisioning run.

    Notes:
    - The log lives under the user's state directory by default. If it
      cannot be created there we fall back to a file in the working
      directory and keep going.
    - The console handler only shows warnings unless ``level`` is DEBUG;
      the full story is in the file, the console gets the final report.

    Returns the actual file path being used.
    """

    root = logging.getLogger()
    root.setLevel(min(level, logging.INFO))

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(root, "_desktop_provision_configured", False):
        return getattr(root, "_desktop_provision_log_path", log_path)

    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        chosen_path = log_path
    except OSError:
        # Fall back to a writable location.
        chosen_path = str(Path.cwd() / "desktop-provision.log")
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setFormatter(fmt)
    file_handler.setLevel(min(level, logging.INFO))
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        console.setLevel(level if level <= logging.DEBUG else logging.WARNING)
        handlers.append(console)

    for h in handlers:
        root.addHandler(h)

    setattr(root, "_desktop_provision_configured", True)
    setattr(root, "_desktop_provision_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
