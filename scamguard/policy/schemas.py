"""
Actions the access policy decides on, and its decision type.
"""

from pydantic import BaseModel
from enum import Enum
from typing import Optional


class Action(str, Enum):
    LIST_REPORTS = "list_reports"
    VIEW_REPORT = "view_report"
    CREATE_REPORT = "create_report"
    SET_REPORT_STATUS = "set_report_status"
    DELETE_REPORT = "delete_report"
    VIEW_COMMENTS = "view_comments"
    ADD_COMMENT = "add_comment"
    LIST_USERS = "list_users"
    SET_USER_ROLE = "set_user_role"
    SET_USER_BAN = "set_user_ban"
    UPDATE_OWN_PROFILE = "update_own_profile"
    MANAGE_ADVERTISEMENT = "manage_advertisement"


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    ADMIN_REQUIRED = "admin_required"
    REPORT_NOT_VISIBLE = "report_not_visible"
    REPORT_NOT_APPROVED = "report_not_approved"
    SELF_MODIFICATION = "self_modification"
    STATUS_FILTER_NOT_PERMITTED = "status_filter_not_permitted"


class Decision(BaseModel):
    allowed: bool
    reason: Optional[DenyReason] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Decision":
        return cls(allowed=False, reason=reason)
