"""Directory walking and ignore-pattern filtering."""

from filesift.scanning.file_filter import FileFilter
from filesift.scanning.walker import WalkResult, scan_directory

__all__ = ["FileFilter", "WalkResult", "scan_directory"]
