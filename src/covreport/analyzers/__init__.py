"""Coverage aggregation."""

from covreport.analyzers.coverage import aggregate_coverage, qualified_class_name

__all__ = ["aggregate_coverage", "qualified_class_name"]
