"""
Handles report submission, search, moderation and deletion.
Visibility and moderation rights come from the access policy: anonymous
callers and members see Approved reports only, admins see and moderate all.
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from typing import List, Optional
from scamguard.authentication.schemas import Identity
from scamguard.authentication.security import get_current_identity
from scamguard.reports import lifecycle, query, schemas

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/", response_model=List[schemas.Report])
def search_reports(
    keyword: Optional[str] = Query(None, description="Matches title or description"),
    target_type: Optional[str] = Query(None, description="Target type or 'All Types'"),
    category: Optional[str] = Query(None, description="Category or 'All Categories'"),
    report_status: Optional[str] = Query(None, alias="status", description="Status or 'All Statuses'"),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    """Search reports, newest first. Non-admins only ever get Approved reports."""
    filters = schemas.ReportFilters(
        keyword=keyword, target_type=target_type, category=category, status=report_status
    )
    return query.search(filters, identity)


@router.post("/", response_model=schemas.Report, status_code=status.HTTP_201_CREATED)
async def submit_report(
    title: str = Form(...),
    target_type: str = Form(...),
    category: str = Form(...),
    description: str = Form(...),
    contact_info: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    """Submit a new report with up to five evidence files (signed-in users)."""
    payload = schemas.ReportCreate(
        title=title,
        target_type=target_type,
        category=category,
        description=description,
        contact_info=contact_info,
    )
    uploads = [
        schemas.EvidenceUpload(filename=f.filename or "evidence", content_type=f.content_type, data=await f.read())
        for f in files or []
    ]
    return lifecycle.create_report(payload, uploads, identity)


@router.get("/{report_id}", response_model=schemas.Report)
def get_report(report_id: str, identity: Optional[Identity] = Depends(get_current_identity)):
    """Retrieve a specific report. Unapproved reports look missing to non-admins."""
    return lifecycle.get_visible_report(report_id, identity)


@router.patch("/{report_id}/status", response_model=schemas.Report)
def update_report_status(
    report_id: str,
    update: schemas.ReportStatusUpdate,
    identity: Optional[Identity] = Depends(get_current_identity),
):
    """Approve or reject a report (admin only)."""
    return lifecycle.set_status(report_id, update.status, identity)


@router.delete("/{report_id}")
def delete_report(report_id: str, identity: Optional[Identity] = Depends(get_current_identity)):
    """Delete a report with its comments and evidence (admin only)."""
    lifecycle.delete_report(report_id, identity)
    return {"message": f"Report {report_id} deleted."}
