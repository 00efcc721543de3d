"""Running external tools and parsing their delimited output."""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Callable, Sequence

log = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 60

# Cleanup commands (git gc --aggressive, docker system prune) may run for minutes.
MAINTENANCE_TIMEOUT = 30 * 60

CommandRunner = Callable[[Sequence[str]], str]


class CommandUnavailableError(Exception):
    """Raised when an external command is missing or does not succeed."""


def has_command(name: str) -> bool:
    """Check if a command exists on the system."""
    return shutil.which(name) is not None


def run_command(args: Sequence[str], timeout: float = _DEFAULT_TIMEOUT) -> str:
    """Run *args* and return its standard output as text.

    Raises:
        CommandUnavailableError: if the binary is missing, times out or
            exits with a non-zero status.
    """
    try:
        proc = subprocess.run(list(args), capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError:
        raise CommandUnavailableError(f"'{args[0]}' is not installed") from None
    except subprocess.TimeoutExpired:
        raise CommandUnavailableError(f"'{args[0]}' timed out after {timeout:g}s") from None
    except OSError as e:
        raise CommandUnavailableError(f"'{args[0]}' could not be started: {e}") from None

    if proc.returncode != 0:
        stderr = proc.stderr.strip()
        log.debug("%s exited with %d: %s", args[0], proc.returncode, stderr)
        raise CommandUnavailableError(f"'{args[0]}' failed (exit {proc.returncode}): {stderr}")
    return proc.stdout


def run_maintenance(args: Sequence[str]) -> str:
    """Like :func:`run_command`, with a timeout long enough for cleanup commands."""
    return run_command(args, timeout=MAINTENANCE_TIMEOUT)


def parse_rows(text: str, fields: int, delimiter: str = "|") -> list[tuple[str, ...]]:
    """Split *text* into rows of exactly *fields* values.

    Blank lines and lines with fewer values are dropped; extra values are
    folded into the last field.
    """
    rows: list[tuple[str, ...]] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        parts = line.split(delimiter, fields - 1)
        if len(parts) < fields:
            log.debug("Skipping malformed row: %r", line)
            continue
        rows.append(tuple(p.strip() for p in parts))
    return rows
