from fastapi import APIRouter, Depends, status
from typing import List, Optional
from scamguard.authentication.schemas import Identity
from scamguard.authentication.security import get_current_identity
from scamguard.comments import schemas, utils

router = APIRouter(prefix="/reports", tags=["Comments"])


@router.get("/{report_id}/comments", response_model=List[schemas.Comment])
def list_comments(report_id: str, identity: Optional[Identity] = Depends(get_current_identity)):
    """Comments of a report the caller can see."""
    return utils.list_comments(report_id, identity)


@router.post("/{report_id}/comments", response_model=schemas.Comment, status_code=status.HTTP_201_CREATED)
def add_comment(report_id: str, comment: schemas.CommentCreate, identity: Optional[Identity] = Depends(get_current_identity)):
    """Comment on an Approved report (signed-in, non-banned users)."""
    return utils.add_comment(report_id, comment, identity)
