"""Tests for path classification."""

from __future__ import annotations

import pytest

from zenscan.core.classifier import classify
from zenscan.models.category import Category


class TestClassify:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/Users/me/Library/Caches/com.apple.Safari", Category.CACHE),
            ("/home/me/.cache/thumbnails", Category.CACHE),
            ("/var/cache/apt", Category.CACHE),
            ("/Users/me/Library/Logs/DiagnosticReports", Category.LOG),
            ("/var/log/syslog", Category.LOG),
            ("/Users/me/Library/Containers/com.example.app", Category.APP_CONTAINER),
            ("/home/me/.var/app/org.gimp.GIMP", Category.APP_CONTAINER),
            ("/home/me/.npm/_cacache", Category.PACKAGE_CACHE),
            ("/Users/me/Library/Caches/Homebrew/downloads", Category.PACKAGE_CACHE),
            ("/home/me/Projects/site/node_modules", Category.BUILD_ARTIFACT),
            ("/Users/me/Library/Developer/Xcode/DerivedData/App-abc", Category.BUILD_ARTIFACT),
            ("/tmp/session.sock", Category.TEMPORARY),
        ],
    )
    def test_locations(self, path, expected):
        assert classify(path) is expected

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("movie.MKV", Category.VIDEO),
            ("song.flac", Category.AUDIO),
            ("photo.heic", Category.IMAGE),
            ("backup.tar", Category.ARCHIVE),
            ("installer.dmg", Category.DISK_IMAGE),
            ("report.pdf", Category.DOCUMENT),
            ("main.py", Category.SOURCE),
            ("app.AppImage", Category.APPLICATION),
            ("debug.log", Category.LOG),
            ("file.crdownload", Category.TEMPORARY),
        ],
    )
    def test_extensions(self, name, expected):
        assert classify(f"/home/me/Downloads/{name}") is expected

    def test_fallbacks(self):
        assert classify("/home/me/Documents/notes") is Category.OTHER
        assert classify("/home/me/Documents/notes", is_dir=True) is Category.FOLDER

    def test_location_wins_over_extension(self):
        assert classify("/home/me/.cache/pip/wheel.zip") is Category.PACKAGE_CACHE

    def test_project_tmp_folder_is_not_system_tmp(self):
        assert classify("/home/me/Projects/site/tmp", is_dir=True) is Category.FOLDER

    def test_never_touches_filesystem(self):
        assert classify("/definitely/not/there/video.mp4") is Category.VIDEO
