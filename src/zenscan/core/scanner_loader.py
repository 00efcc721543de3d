"""Scanner discovery and loading.

A scanner module is any module exposing ``build(config) -> list[Scanner]``.
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
import pkgutil
from pathlib import Path
from types import ModuleType

from zenscan.config import ScanConfig
from zenscan.core.registry import ScannerRegistry
from zenscan.models.scanner import Scanner
from zenscan.utils import xdg_data_home

log = logging.getLogger(__name__)


def user_scanner_dir() -> Path:
    return xdg_data_home() / "zenscan" / "scanners"


def _build_from_module(module: ModuleType, config: ScanConfig) -> list[Scanner]:
    build = getattr(module, "build", None)
    if not callable(build):
        log.debug("Module %s has no build(), skipping", module.__name__)
        return []
    return [s for s in build(config) if isinstance(s, Scanner)]


def _load_builtin_scanners(config: ScanConfig) -> list[Scanner]:
    """Build scanners from the zenscan.scanners package."""
    import zenscan.scanners as scanners_pkg

    found: list[Scanner] = []
    for _importer, modname, _ispkg in pkgutil.iter_modules(scanners_pkg.__path__):
        try:
            module = importlib.import_module(f"zenscan.scanners.{modname}")
            found.extend(_build_from_module(module, config))
        except Exception:
            log.exception("Failed to load built-in scanner module: %s", modname)
    return found


def _load_scanners_from_directory(directory: Path, config: ScanConfig) -> list[Scanner]:
    """Build scanners from ``*.py`` files in an external directory."""
    if not directory.is_dir():
        return []

    found: list[Scanner] = []
    for path in sorted(directory.iterdir()):
        if path.suffix != ".py" or path.name.startswith("_"):
            continue
        try:
            spec = importlib.util.spec_from_file_location(f"zenscan_ext_scanner_{path.stem}", path)
            if spec is None or spec.loader is None:
                continue
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
            found.extend(_build_from_module(module, config))
        except Exception:
            log.exception("Failed to load scanner from: %s", path)
    return found


def load_scanners(
    registry: ScannerRegistry,
    config: ScanConfig,
    extra_dirs: list[Path] | None = None,
) -> None:
    """Discover and register all scanners.

    Searches in order: built-in, user-local, then *extra_dirs*.
    """
    scanners = _load_builtin_scanners(config)
    scanners.extend(_load_scanners_from_directory(user_scanner_dir(), config))
    for directory in extra_dirs or []:
        scanners.extend(_load_scanners_from_directory(directory, config))

    for scanner in scanners:
        registry.register(scanner)

    log.info("Loaded %d scanners", len(registry))
