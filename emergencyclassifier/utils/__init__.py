"""EmergencyClassifier utilities package.

Text helpers are stateless pure functions; logging helpers configure the
standard library logging tree.
"""

from emergencyclassifier.utils.logging_utils import (
    ReportContextAdapter,
    configure_logging,
    get_logger,
    get_report_logger,
    resolve_level,
)
from emergencyclassifier.utils.text import (
    any_name_matches,
    contains_any,
    count_matching_names,
    count_patterns,
    count_terms,
    matches,
    matches_in_either_order,
)

__all__ = [
    "ReportContextAdapter",
    "configure_logging",
    "get_logger",
    "get_report_logger",
    "resolve_level",
    "any_name_matches",
    "contains_any",
    "count_matching_names",
    "count_patterns",
    "count_terms",
    "matches",
    "matches_in_either_order",
]
