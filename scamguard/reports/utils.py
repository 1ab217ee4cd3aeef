"""
Utility functions for loading, saving, and joining report data in the
persistent store. No access control happens here; see ``lifecycle`` and
``query`` for the checked operations.
"""

from collections import defaultdict
from typing import Callable, Dict, List, Optional
from scamguard.authentication.schemas import Identity
from scamguard.reports import schemas
from scamguard.storage import blobs, utils as store

REPORTS = "reports"
EVIDENCE_FILES = "evidence_files"


def _to_evidence(row: dict) -> schemas.EvidenceFile:
    return schemas.EvidenceFile(
        id=row["id"],
        file_path=row["file_path"],
        original_name=row["original_name"],
        mime_type=row.get("mime_type"),
        size=row["size"],
        public_url=blobs.public_url(blobs.EVIDENCE_BUCKET, row["file_path"]),
    )


def _evidence_by_report() -> Dict[str, List[schemas.EvidenceFile]]:
    grouped = defaultdict(list)
    for row in sorted(store.load_collection(EVIDENCE_FILES), key=lambda r: r["created_at"]):
        grouped[row["report_id"]].append(_to_evidence(row))
    return grouped


def to_report(row: dict, evidence: List[schemas.EvidenceFile]) -> schemas.Report:
    return schemas.Report(**row, evidence_files=evidence)


def load_reports(predicate: Optional[Callable[[dict], bool]] = None) -> List[schemas.Report]:
    """Return matching reports with their evidence joined, in store order."""
    rows = store.select(REPORTS, predicate)
    if not rows:
        return []
    evidence = _evidence_by_report()
    return [to_report(r, evidence.get(r["id"], [])) for r in rows]


def get_report(report_id: str) -> Optional[schemas.Report]:
    """Fetch specific report by ID."""
    row = store.get(REPORTS, report_id)
    if not row:
        return None
    evidence = [
        _to_evidence(e)
        for e in sorted(store.select(EVIDENCE_FILES, lambda e: e["report_id"] == report_id), key=lambda e: e["created_at"])
    ]
    return to_report(row, evidence)


def insert_report(payload: schemas.ReportCreate, reporter: Identity, evidence: List[dict]) -> schemas.Report:
    """Insert a Pending report and its evidence rows together."""
    with store.transaction(REPORTS, EVIDENCE_FILES):
        row = store.insert(REPORTS, {
            "title": payload.title,
            "target_type": payload.target_type.value,
            "category": payload.category.value,
            "description": payload.description,
            "contact_info": payload.contact_info,
            "reported_by_id": reporter.id,
            "reporter_identifier": reporter.identifier,
            "status": schemas.ReportStatus.pending.value,
        })
        evidence_rows = [store.insert(EVIDENCE_FILES, {**e, "report_id": row["id"]}) for e in evidence]
    return to_report(row, [_to_evidence(e) for e in evidence_rows])


def update_report_status(report_id: str, status: schemas.ReportStatus) -> Optional[schemas.Report]:
    """Single write of the new status. Only the lifecycle calls this."""
    if store.update(REPORTS, report_id, {"status": status.value}) is None:
        return None
    return get_report(report_id)
