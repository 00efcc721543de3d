"""Sandboxed application data containers."""

from __future__ import annotations

from zenscan.config import ScanConfig
from zenscan.models.scanner import Scanner


def build(config: ScanConfig) -> list[Scanner]:
    home = config.home
    return [
        Scanner(
            id="app_containers",
            name="App Containers",
            description="Per-application sandbox data (macOS containers, Flatpak app data)",
            roots=(
                config.root(home / "Library" / "Containers", skip_hidden=False),
                config.root(home / ".var" / "app", skip_hidden=False),
            ),
            min_size=1,
        ),
    ]
