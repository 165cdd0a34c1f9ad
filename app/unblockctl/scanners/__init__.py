"""Scanners for files carrying the Mark of the Web.

This module exports the scanner and its script/parse helpers.
"""

from unblockctl.scanners.zone import (
    ZoneScanner,
    build_scan_script,
    parse_scan_output,
    validate_directory,
)

__all__ = ["ZoneScanner", "build_scan_script", "parse_scan_output", "validate_directory"]
