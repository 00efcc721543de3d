"""Semantic content categories."""

from __future__ import annotations

from enum import Enum


class Category(str, Enum):
    """What a scanned path most likely holds."""

    CACHE = "cache"
    LOG = "log"
    TEMPORARY = "temporary"
    APP_CONTAINER = "app_container"
    BUILD_ARTIFACT = "build_artifact"
    PACKAGE_CACHE = "package_cache"
    ARCHIVE = "archive"
    DISK_IMAGE = "disk_image"
    VIDEO = "video"
    AUDIO = "audio"
    IMAGE = "image"
    DOCUMENT = "document"
    SOURCE = "source"
    APPLICATION = "application"
    FOLDER = "folder"
    OTHER = "other"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()
