"""Path classification.

A static, ordered rule table maps a path to a :class:`Category`. Location
rules match a run of consecutive path components anywhere in the path,
extension rules match the final suffix. The first matching rule wins.
Classification never touches the filesystem.
"""

from __future__ import annotations

from pathlib import PurePath

from zenscan.models.category import Category

# System locations are anchored at the filesystem root so that e.g. a
# "tmp" folder inside a project is not mistaken for /tmp.
_LOCATION_RULES: tuple[tuple[tuple[str, ...], Category], ...] = (
    # Package manager caches sit inside generic cache dirs, so they go first.
    (("Library", "Caches", "Homebrew"), Category.PACKAGE_CACHE),
    (("Library", "Caches", "org.swift.swiftpm"), Category.PACKAGE_CACHE),
    ((".npm",), Category.PACKAGE_CACHE),
    ((".yarn",), Category.PACKAGE_CACHE),
    ((".pnpm-store",), Category.PACKAGE_CACHE),
    ((".cache", "pip"), Category.PACKAGE_CACHE),
    ((".cache", "yarn"), Category.PACKAGE_CACHE),
    (("node_modules",), Category.BUILD_ARTIFACT),
    (("DerivedData",), Category.BUILD_ARTIFACT),
    (("Developer", "Xcode"), Category.BUILD_ARTIFACT),
    (("Developer", "CoreSimulator"), Category.BUILD_ARTIFACT),
    (("__pycache__",), Category.BUILD_ARTIFACT),
    (("Library", "Caches"), Category.CACHE),
    ((".cache",), Category.CACHE),
    (("/", "var", "cache"), Category.CACHE),
    (("Library", "Logs"), Category.LOG),
    (("/", "var", "log"), Category.LOG),
    (("Library", "Containers"), Category.APP_CONTAINER),
    ((".var", "app"), Category.APP_CONTAINER),
    (("/", "tmp"), Category.TEMPORARY),
    (("/", "var", "tmp"), Category.TEMPORARY),
)

_EXTENSION_RULES: tuple[tuple[frozenset[str], Category], ...] = (
    (frozenset({".log"}), Category.LOG),
    (frozenset({".tmp", ".temp", ".part", ".crdownload", ".download"}), Category.TEMPORARY),
    (frozenset({".zip", ".rar", ".7z", ".tar", ".gz", ".tgz", ".bz2", ".xz", ".zst"}), Category.ARCHIVE),
    (frozenset({".dmg", ".iso", ".img", ".vmdk", ".qcow2"}), Category.DISK_IMAGE),
    (frozenset({".mp4", ".mov", ".avi", ".mkv", ".webm", ".m4v", ".wmv"}), Category.VIDEO),
    (frozenset({".mp3", ".wav", ".aac", ".flac", ".m4a", ".ogg", ".opus"}), Category.AUDIO),
    (frozenset({".jpg", ".jpeg", ".png", ".gif", ".heic", ".webp", ".tiff", ".raw", ".bmp"}), Category.IMAGE),
    (
        frozenset({".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".odt", ".txt", ".md", ".pages"}),
        Category.DOCUMENT,
    ),
    (
        frozenset({".py", ".swift", ".js", ".ts", ".c", ".h", ".cpp", ".rs", ".go", ".java", ".kt", ".rb", ".sh"}),
        Category.SOURCE,
    ),
    (frozenset({".app", ".exe", ".appimage", ".deb", ".rpm", ".pkg", ".msi", ".flatpak"}), Category.APPLICATION),
)


def _contains_run(parts: tuple[str, ...], run: tuple[str, ...]) -> bool:
    n = len(run)
    return any(parts[i:i + n] == run for i in range(len(parts) - n + 1))


def classify(path: PurePath | str, *, is_dir: bool = False) -> Category:
    """Return the category of *path*; always returns a value."""
    pure = PurePath(path)
    parts = pure.parts
    for run, category in _LOCATION_RULES:
        if _contains_run(parts, run):
            return category
    suffix = pure.suffix.lower()
    if suffix:
        for extensions, category in _EXTENSION_RULES:
            if suffix in extensions:
                return category
    return Category.FOLDER if is_dir else Category.OTHER
