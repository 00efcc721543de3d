"""Central scanner registry."""

from __future__ import annotations

import logging
from typing import Iterator

from zenscan.models.scanner import Scanner

log = logging.getLogger(__name__)


class ScannerRegistry:
    """Stores and retrieves registered scanners."""

    def __init__(self) -> None:
        self._scanners: dict[str, Scanner] = {}

    def register(self, scanner: Scanner) -> None:
        """Register a scanner; a second scanner with the same id is ignored."""
        if scanner.id in self._scanners:
            log.warning("Scanner '%s' already registered, skipping duplicate", scanner.id)
            return
        self._scanners[scanner.id] = scanner
        log.debug("Registered scanner: %s (%s)", scanner.id, scanner.name)

    def get(self, scanner_id: str) -> Scanner | None:
        """Get a scanner by its ID."""
        return self._scanners.get(scanner_id)

    def get_all(self) -> list[Scanner]:
        return list(self._scanners.values())

    def get_available(self) -> list[Scanner]:
        """Get all scanners that have at least one root on this system."""
        available = []
        for scanner in self._scanners.values():
            try:
                if scanner.is_available():
                    available.append(scanner)
            except Exception:
                log.exception("Error checking availability for scanner '%s'", scanner.id)
        return available

    def get_groups(self) -> dict[str, list[Scanner]]:
        """Group scanners by their ``group`` id, in registration order."""
        groups: dict[str, list[Scanner]] = {}
        for scanner in self._scanners.values():
            groups.setdefault(scanner.group, []).append(scanner)
        return groups

    def __len__(self) -> int:
        return len(self._scanners)

    def __iter__(self) -> Iterator[Scanner]:
        return iter(self._scanners.values())

    def __contains__(self, scanner_id: str) -> bool:
        return scanner_id in self._scanners
