"""ZenScan data models."""

from zenscan.models.action_result import ActionMode, ActionResult
from zenscan.models.category import Category
from zenscan.models.duplicate import DuplicateFile, DuplicateGroup, DuplicateReport
from zenscan.models.scan_result import CandidateEntry, ScanResult, ScanResultItem, ScanRoot
from zenscan.models.scanner import Scanner
from zenscan.models.tool_report import ToolReport
from zenscan.models.treemap import Rect, TreemapNode

__all__ = [
    "ActionMode",
    "ActionResult",
    "CandidateEntry",
    "Category",
    "DuplicateFile",
    "DuplicateGroup",
    "DuplicateReport",
    "Rect",
    "ScanResult",
    "ScanResultItem",
    "ScanRoot",
    "Scanner",
    "ToolReport",
    "TreemapNode",
]
