"""
Comments on reports. A comment can only be added while its report is
Approved, and is never edited afterwards. The author's user id is always
stored; ``is_anonymous`` only hides it when the comment is displayed.
"""

import logging
from typing import List, Optional
from scamguard.authentication.schemas import Identity
from scamguard.comments import schemas
from scamguard.core.errors import NotFound
from scamguard.policy import rules
from scamguard.policy.schemas import Action
from scamguard.reports import utils as report_utils
from scamguard.storage import utils as store
from scamguard.users import utils as user_utils

logger = logging.getLogger(__name__)

COMMENTS = "comments"


def _to_comment(row: dict, author_identifier: Optional[str]) -> schemas.Comment:
    return schemas.Comment(
        id=row["id"],
        report_id=row["report_id"],
        text=row["text"],
        created_at=row["created_at"],
        is_anonymous=row["is_anonymous"],
        author_identifier=None if row["is_anonymous"] else author_identifier,
    )


def list_comments(report_id: str, identity: Optional[Identity]) -> List[schemas.Comment]:
    """Comments of a visible report, oldest first."""
    report = report_utils.get_report(report_id)
    if not report:
        raise NotFound("report_missing")
    rules.enforce(rules.authorize(identity, Action.VIEW_COMMENTS, report), Action.VIEW_COMMENTS)

    rows = sorted(store.select(COMMENTS, lambda c: c["report_id"] == report_id),
                  key=lambda c: (c["created_at"], c["id"]))
    identifiers = {p.id: p.identifier for p in user_utils.load_profiles()}
    return [_to_comment(r, identifiers.get(r["user_id"])) for r in rows]


def add_comment(report_id: str, payload: schemas.CommentCreate, identity: Optional[Identity]) -> schemas.Comment:
    report = report_utils.get_report(report_id)
    if not report:
        raise NotFound("report_missing")
    rules.enforce(rules.authorize(identity, Action.ADD_COMMENT, report), Action.ADD_COMMENT)

    row = store.insert(COMMENTS, {
        "report_id": report_id,
        "user_id": identity.id,
        "text": payload.text,
        "is_anonymous": payload.is_anonymous,
    })
    logger.info("Comment %s added to report %s", row["id"], report_id)
    return _to_comment(row, identity.identifier)


def delete_for_report(report_id: str) -> int:
    """Remove every comment of a report. Only used by the report delete cascade."""
    return store.delete_where(COMMENTS, lambda c: c["report_id"] == report_id)
