"""Logging utilities for sixdegrees searches.

Provides color-coded output to distinguish local graph work from network lookups.
"""

import os
import time
from contextlib import contextmanager
from enum import Enum
from typing import Iterator


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for operation types
    BLUE = "\033[94m"      # Local graph operations (folds, path checks)
    YELLOW = "\033[93m"    # Resolver calls
    RED = "\033[91m"       # Errors and retries
    GREEN = "\033[92m"     # Success/completion
    CYAN = "\033[96m"      # Info/metadata
    GRAY = "\033[90m"      # Timings
    WHITE = "\033[97m"     # Emphasis

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if SIXDEGREES_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("SIXDEGREES_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


# Markers for operation types (color-blind accessible)
LOG_TAG_DETERMINISTIC = "[•]"  # Local graph operation
LOG_TAG_NETWORK = "[NET]"      # Resolver call
LOG_TAG_ERROR = "[!]"          # Error/retry
LOG_TAG_SUCCESS = "[✓]"        # Success
LOG_TAG_INFO = "[i]"           # Information


def log_deterministic(message: str) -> None:
    """Log a local graph operation (blue)."""
    print(colored(f"{LOG_TAG_DETERMINISTIC} {message}", Color.BLUE))


def log_network(message: str) -> None:
    """Log a resolver call (yellow)."""
    print(colored(f"{LOG_TAG_NETWORK} {message}", Color.YELLOW))


def log_error(message: str) -> None:
    """Log an error or retry (red)."""
    print(colored(f"{LOG_TAG_ERROR} {message}", Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))


@contextmanager
def profile(name: str, **data: object) -> Iterator[None]:
    """Time a named section and log how long it took.

    Keyword arguments are rendered into the label, e.g.
    ``profile("resolve", node="Kevin Bacon")`` logs
    ``resolve(node=Kevin Bacon): completed in 0.42s``.
    """

    label = name
    if data:
        args = "&".join(f"{key}={value}" for key, value in data.items())
        label = f"{name}({args})"

    started = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - started
        print(colored(f"{label}: completed in {elapsed:.2f}s", Color.GRAY))
