"""Analysis utilities for post-run auditing and comparison."""

from .audit import build_audit_report
from .compare import build_compare_report, compare_report_to_rows
from .report import dependency_summary

__all__ = [
    "build_audit_report",
    "build_compare_report",
    "compare_report_to_rows",
    "dependency_summary",
]
