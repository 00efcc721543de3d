"""User and system junk: caches and logs that are safe to clear."""

from __future__ import annotations

from zenscan.config import ScanConfig
from zenscan.models.scan_result import CandidateEntry
from zenscan.models.scanner import Scanner

# Names under ~/.local/state that hold logs; everything else there is
# application state (undo history, shell history, device settings).
_LOG_NAMES = frozenset({"log", "logs"})

# Deep enough for ~/.local/state/<app>/<sub>/logs.
_STATE_LOG_DEPTH = 3


def is_log(entry: CandidateEntry) -> bool:
    """Whether *entry* is a log file or a log directory by its name."""
    return entry.name.lower() in _LOG_NAMES or ".log" in entry.path.suffixes


def build(config: ScanConfig) -> list[Scanner]:
    home = config.home
    library_logs = home / "Library" / "Logs"

    def _user_log(entry: CandidateEntry) -> bool:
        # ~/Library/Logs only holds logs, so each of its children counts.
        return entry.path.parent == library_logs or is_log(entry)

    return [
        Scanner(
            id="user_cache",
            name="User Cache",
            description="Application caches in your home folder",
            roots=(
                config.root(home / "Library" / "Caches", skip_hidden=False),
                config.root(home / ".cache", skip_hidden=False),
            ),
            min_size=config.junk_min_size,
            preselect=True,
        ),
        Scanner(
            id="user_logs",
            name="User Logs",
            description="Application logs in your home folder",
            roots=(
                config.root(library_logs, skip_hidden=False),
                config.root(home / ".local" / "state", skip_hidden=False, max_depth=_STATE_LOG_DEPTH),
            ),
            predicate=_user_log,
            min_size=config.junk_min_size,
            recursive=True,
            preselect=True,
        ),
        Scanner(
            id="system_cache",
            name="System Cache",
            description="System-wide caches, may need elevated permissions to remove",
            group="system",
            roots=(
                config.root("/Library/Caches", skip_hidden=False),
                config.root("/var/cache", skip_hidden=False),
            ),
            min_size=config.junk_min_size,
            preselect=True,
        ),
    ]
