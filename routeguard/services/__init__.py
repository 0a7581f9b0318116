"""Access-rule resolution services."""

from .rights_service import RightsService
from .rule_index import Rule, RuleIndex, build_index, normalize_path
from .authorization import GrantRow, Principal

__all__ = [
    "RightsService",
    "Rule", "RuleIndex", "build_index", "normalize_path",
    "GrantRow", "Principal",
]
