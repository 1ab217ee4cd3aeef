"""
Report search: keyword, target type, category and status filters composed
into one store query.

The status constraint always comes from ``rules.narrow_filter``; nothing in
this module reads the requested status directly.
"""

import logging
from typing import Callable, List, Optional, Union
from scamguard.authentication.schemas import Identity
from scamguard.policy import rules
from scamguard.policy.schemas import Action
from scamguard.reports import utils
from scamguard.reports.schemas import Report, ReportFilters

logger = logging.getLogger(__name__)


def build_predicate(filters: ReportFilters) -> Callable[[dict], bool]:
    keyword = filters.keyword.lower() if filters.keyword else None

    def matches(row: dict) -> bool:
        if filters.status is not None and row["status"] != filters.status.value:
            return False
        if filters.target_type is not None and row["target_type"] != filters.target_type.value:
            return False
        if filters.category is not None and row["category"] != filters.category.value:
            return False
        if keyword and keyword not in row["title"].lower() and keyword not in row["description"].lower():
            return False
        return True

    return matches


def search(raw_filters: Union[ReportFilters, dict, None], identity: Optional[Identity]) -> List[Report]:
    """Reports visible to ``identity`` matching the filters, newest first."""
    if isinstance(raw_filters, ReportFilters):
        requested = raw_filters
    else:
        requested = ReportFilters(**(raw_filters or {}))

    effective, decision = rules.narrow_filter(identity, requested)
    if not decision.allowed:
        logger.info("Denied %s status filter %s: %s", Action.LIST_REPORTS.value,
                    requested.status.value, decision.reason.value)

    reports = utils.load_reports(build_predicate(effective))
    reports.sort(key=lambda r: (r.created_at, r.id), reverse=True)
    return reports
