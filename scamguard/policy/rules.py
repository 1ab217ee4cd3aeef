"""
Access policy: who may see and change which reports, comments, users and
advertisement settings.

Everything here is a pure function of (identity, action, resource). Callers
turn a denial into an error with ``enforce`` before touching the store.
A banned identity is treated exactly like an anonymous caller.
"""

import logging
from typing import Optional, Tuple
from scamguard.authentication.reconciler import is_admin, is_authenticated
from scamguard.authentication.schemas import Identity
from scamguard.core.errors import Forbidden, NotFound, Unauthenticated
from scamguard.policy.schemas import Action, Decision, DenyReason
from scamguard.reports.schemas import Report, ReportFilters, ReportStatus

logger = logging.getLogger(__name__)

ADMIN_ACTIONS = {
    Action.SET_REPORT_STATUS,
    Action.DELETE_REPORT,
    Action.LIST_USERS,
    Action.SET_USER_ROLE,
    Action.SET_USER_BAN,
    Action.MANAGE_ADVERTISEMENT,
}

# Actions an admin may not perform on their own account
SELF_PROTECTED_ACTIONS = {Action.SET_USER_ROLE, Action.SET_USER_BAN}


def _report_visible(identity: Optional[Identity], report: Report) -> bool:
    return is_admin(identity) or report.status == ReportStatus.approved


def authorize(identity: Optional[Identity], action: Action, resource=None) -> Decision:
    """Decide whether ``identity`` may perform ``action`` on ``resource``.

    ``resource`` is the Report for report and comment actions, and the target
    user id for user management actions.
    """
    if action == Action.LIST_REPORTS:
        return Decision.allow()

    if action in (Action.VIEW_REPORT, Action.VIEW_COMMENTS):
        if _report_visible(identity, resource):
            return Decision.allow()
        return Decision.deny(DenyReason.REPORT_NOT_VISIBLE)

    if action == Action.ADD_COMMENT:
        # Status first: unapproved reports refuse comments from every caller
        if resource.status != ReportStatus.approved:
            return Decision.deny(DenyReason.REPORT_NOT_APPROVED)
        if not is_authenticated(identity):
            return Decision.deny(DenyReason.UNAUTHENTICATED)
        return Decision.allow()

    if action in (Action.CREATE_REPORT, Action.UPDATE_OWN_PROFILE):
        if not is_authenticated(identity):
            return Decision.deny(DenyReason.UNAUTHENTICATED)
        return Decision.allow()

    if action in ADMIN_ACTIONS:
        if not is_authenticated(identity):
            return Decision.deny(DenyReason.UNAUTHENTICATED)
        if not identity.is_admin:
            return Decision.deny(DenyReason.ADMIN_REQUIRED)
        if action in SELF_PROTECTED_ACTIONS and resource == identity.id:
            return Decision.deny(DenyReason.SELF_MODIFICATION)
        return Decision.allow()

    raise ValueError(f"Unknown action: {action}")


def enforce(decision: Decision, action: Action) -> None:
    """Raise the error matching a denial. Allowed decisions pass through."""
    if decision.allowed:
        return
    logger.info("Denied %s: %s", action.value, decision.reason.value)
    if decision.reason == DenyReason.UNAUTHENTICATED:
        raise Unauthenticated(decision.reason.value)
    if decision.reason == DenyReason.REPORT_NOT_VISIBLE:
        raise NotFound(decision.reason.value)
    raise Forbidden(decision.reason.value)


def narrow_filter(identity: Optional[Identity], requested: ReportFilters) -> Tuple[ReportFilters, Decision]:
    """Return the filters actually applied to a report search.

    Admins get what they asked for; ``status=None`` means every status.
    Everyone else only ever sees Approved reports. Asking for another status
    is denied and narrowed to Approved.
    """
    if is_admin(identity):
        return requested, Decision.allow()

    effective = requested.model_copy(update={"status": ReportStatus.approved})
    if requested.status not in (None, ReportStatus.approved):
        return effective, Decision.deny(DenyReason.STATUS_FILTER_NOT_PERMITTED)
    return effective, Decision.allow()
