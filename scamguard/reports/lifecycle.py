"""
Report lifecycle: creation, moderation (status transitions) and deletion.

    Pending  -> Approved | Rejected
    Approved -> Rejected
    Rejected -> Approved

Every report starts Pending. Admins move it to Approved or Rejected and may
switch between those two to correct mistakes; nothing goes back to Pending.
Status is only ever written through ``set_status``.
"""

import os, re, uuid, logging
from typing import List, Optional
from scamguard.authentication.schemas import Identity
from scamguard.comments import utils as comment_utils
from scamguard.core.config import settings
from scamguard.core.errors import NotFound, ProviderUnavailable, ValidationFailed
from scamguard.policy import rules
from scamguard.policy.schemas import Action
from scamguard.reports import schemas, utils
from scamguard.reports.schemas import ReportStatus
from scamguard.storage import blobs, utils as store

logger = logging.getLogger(__name__)

TRANSITIONS = {
    ReportStatus.pending: {ReportStatus.approved, ReportStatus.rejected},
    ReportStatus.approved: {ReportStatus.rejected},
    ReportStatus.rejected: {ReportStatus.approved},
}

UNSAFE_FILENAME_CHARS = re.compile(r'[^A-Za-z0-9._-]')


def can_transition(current: ReportStatus, new: ReportStatus) -> bool:
    return new == current or new in TRANSITIONS[current]


def _safe_filename(filename: str) -> str:
    name = UNSAFE_FILENAME_CHARS.sub("_", os.path.basename(filename or "")).strip("._")
    return name or "evidence"


def _validate_evidence(files: List[schemas.EvidenceUpload]) -> None:
    if len(files) > settings.MAX_EVIDENCE_FILES:
        raise ValidationFailed(f"You can upload a maximum of {settings.MAX_EVIDENCE_FILES} files.")
    for f in files:
        if not f.data:
            raise ValidationFailed(f"Evidence file {f.filename!r} is empty.")
        if len(f.data) > settings.MAX_UPLOAD_BYTES:
            raise ValidationFailed(f"Evidence file {f.filename!r} is too large.")


def get_visible_report(report_id: str, identity: Optional[Identity]) -> schemas.Report:
    """Non-admins get NotFound for anything that is not Approved."""
    report = utils.get_report(report_id)
    if not report:
        raise NotFound("report_missing")
    rules.enforce(rules.authorize(identity, Action.VIEW_REPORT, report), Action.VIEW_REPORT)
    return report


def create_report(
    payload: schemas.ReportCreate,
    files: List[schemas.EvidenceUpload],
    identity: Optional[Identity],
) -> schemas.Report:
    """Upload evidence blobs, then insert the report and evidence rows together."""
    rules.enforce(rules.authorize(identity, Action.CREATE_REPORT), Action.CREATE_REPORT)
    _validate_evidence(files)

    uploaded: List[str] = []
    evidence: List[dict] = []
    try:
        for f in files:
            path = f"{identity.id}/{uuid.uuid4().hex}_{_safe_filename(f.filename)}"
            blobs.upload(blobs.EVIDENCE_BUCKET, path, f.data)
            uploaded.append(path)
            evidence.append({
                "file_path": path,
                "original_name": f.filename,
                "mime_type": f.content_type,
                "size": len(f.data),
            })
    except ProviderUnavailable as e:
        blobs.flag_orphans(blobs.EVIDENCE_BUCKET, uploaded, "report creation aborted during evidence upload")
        raise ProviderUnavailable(
            f"evidence upload failed: {e.reason}",
            partial_completion={"report_created": False, "orphaned_blobs": uploaded},
        )

    try:
        report = utils.insert_report(payload, identity, evidence)
    except ProviderUnavailable as e:
        blobs.flag_orphans(blobs.EVIDENCE_BUCKET, uploaded, "report metadata insert failed")
        raise ProviderUnavailable(
            f"report insert failed: {e.reason}",
            partial_completion={"report_created": False, "orphaned_blobs": uploaded},
        )

    logger.info("Report %s submitted by %s with %d evidence file(s)", report.id, identity.id, len(evidence))
    return report


def set_status(report_id: str, new_status: ReportStatus, identity: Optional[Identity]) -> schemas.Report:
    """Move a report to ``new_status``. Setting the current status is a no-op."""
    rules.enforce(rules.authorize(identity, Action.SET_REPORT_STATUS), Action.SET_REPORT_STATUS)

    report = utils.get_report(report_id)
    if not report:
        raise NotFound("report_missing")
    if report.status == new_status:
        return report
    if not can_transition(report.status, new_status):
        raise ValidationFailed(f"A report cannot move from {report.status.value} to {new_status.value}.")

    updated = utils.update_report_status(report_id, new_status)
    if not updated:
        raise NotFound("report_missing")
    logger.info("Report %s moved from %s to %s by %s",
                report_id, report.status.value, new_status.value, identity.id)
    return updated


def delete_report(report_id: str, identity: Optional[Identity]) -> None:
    """Delete a report with its comments, evidence rows and evidence blobs.

    The rows go in one transaction. Blobs are removed afterwards; blobs that
    cannot be removed are flagged as orphans rather than failing the delete.
    """
    rules.enforce(rules.authorize(identity, Action.DELETE_REPORT), Action.DELETE_REPORT)

    report = utils.get_report(report_id)
    if not report:
        raise NotFound("report_missing")
    paths = [e.file_path for e in report.evidence_files]

    with store.transaction(utils.REPORTS, utils.EVIDENCE_FILES, comment_utils.COMMENTS):
        comments_removed = comment_utils.delete_for_report(report_id)
        store.delete_where(utils.EVIDENCE_FILES, lambda e: e["report_id"] == report_id)
        store.delete_where(utils.REPORTS, lambda r: r["id"] == report_id)

    try:
        blobs.remove(blobs.EVIDENCE_BUCKET, paths)
    except ProviderUnavailable as e:
        remaining = (e.partial_completion or {}).get("failed_paths", paths)
        blobs.flag_orphans(blobs.EVIDENCE_BUCKET, remaining, f"report {report_id} deleted: {e.reason}")

    logger.info("Report %s deleted by %s (%d comment(s), %d evidence file(s))",
                report_id, identity.id, comments_removed, len(paths))
