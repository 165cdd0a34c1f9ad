"""Operators that remove the Mark of the Web.

This module exports the operator and its script/parse helpers.
"""

from unblockctl.operators.zone import ZoneOperator, build_unblock_script, parse_unblock_output

__all__ = ["ZoneOperator", "build_unblock_script", "parse_unblock_output"]
