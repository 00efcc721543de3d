"""Developer tool leftovers: Xcode data, package caches, node_modules, Git repositories."""

from __future__ import annotations

from zenscan.config import ScanConfig
from zenscan.core.git import git_dir
from zenscan.core.homebrew import cache_dirs
from zenscan.models.category import Category
from zenscan.models.scan_result import CandidateEntry
from zenscan.models.scanner import Scanner

_GROUP = "developer"

PROJECT_FOLDERS = ("Projects", "Developer", "Documents", "Desktop")

# node_modules folders nested deeper than this below a project folder are not found.
_NODE_MODULES_DEPTH = 6
_GIT_REPO_DEPTH = 4


def _is_node_modules(entry: CandidateEntry) -> bool:
    return entry.is_dir and entry.name == "node_modules"


def _is_git_repo(entry: CandidateEntry) -> bool:
    # .git is a directory in a clone and a file in a worktree or submodule.
    return entry.is_dir and (entry.path / ".git").exists()


def _package_cache(path, *, is_dir: bool = False) -> Category:
    return Category.PACKAGE_CACHE


def build(config: ScanConfig) -> list[Scanner]:
    home = config.home
    library = home / "Library"
    xcode = library / "Developer" / "Xcode"

    return [
        Scanner(
            id="xcode_caches",
            name="Xcode Caches",
            description="DerivedData, archives, device support files and simulator caches",
            group=_GROUP,
            roots=tuple(
                config.root(path, skip_hidden=False)
                for path in (
                    xcode / "DerivedData",
                    xcode / "Archives",
                    xcode / "iOS DeviceSupport",
                    xcode / "watchOS DeviceSupport",
                    library / "Developer" / "CoreSimulator" / "Caches",
                    library / "Caches" / "org.swift.swiftpm",
                )
            ),
            min_size=1,
            roots_as_items=True,
        ),
        Scanner(
            id="node_caches",
            name="Node Package Caches",
            description="npm, yarn and pnpm download caches",
            group=_GROUP,
            roots=tuple(
                config.root(path, skip_hidden=False)
                for path in (
                    home / ".npm" / "_cacache",
                    home / ".yarn" / "cache",
                    home / ".yarn" / "berry" / "cache",
                    home / ".cache" / "yarn",
                    library / "Caches" / "Yarn",
                    home / ".pnpm-store",
                )
            ),
            min_size=1,
            roots_as_items=True,
            preselect=True,
            classifier=_package_cache,
        ),
        Scanner(
            id="node_modules",
            name="node_modules Folders",
            description="Installed JavaScript dependencies inside your projects",
            group=_GROUP,
            roots=tuple(
                config.root(home / name, max_depth=_NODE_MODULES_DEPTH, skip_packages=True)
                for name in PROJECT_FOLDERS
            ),
            predicate=_is_node_modules,
            min_size=1,
            recursive=True,
        ),
        Scanner(
            id="homebrew_cache",
            name="Homebrew Cache",
            description="Downloaded bottles and source archives of Homebrew packages",
            group=_GROUP,
            roots=tuple(config.root(path, skip_hidden=False) for path in cache_dirs(home)),
            min_size=1,
            preselect=True,
            classifier=_package_cache,
        ),
        Scanner(
            id="git_repos",
            name="Git Repositories",
            description="Repository history size; compact it with git gc instead of deleting it",
            group=_GROUP,
            roots=tuple(
                config.root(home / name, max_depth=_GIT_REPO_DEPTH, skip_packages=True)
                for name in PROJECT_FOLDERS
            ),
            predicate=_is_git_repo,
            min_size=1,
            recursive=True,
            measure=git_dir,
            removable=False,
        ),
    ]
