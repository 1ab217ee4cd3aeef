"""
Defines the data models and enums for scam reports.
"""

from pydantic import BaseModel, field_validator
from enum import Enum
from typing import List, Optional

# Filter values meaning "no constraint"; never sent to the store
ALL_TYPES = "All Types"
ALL_CATEGORIES = "All Categories"
ALL_STATUSES = "All Statuses"


class ReportStatus(str, Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


class TargetType(str, Enum):
    business = "Business"
    person = "Person"
    company = "Company"
    website = "Website"
    other = "Other"


class ReportCategory(str, Enum):
    scam = "Scam"
    spam = "Spam"
    phishing = "Phishing"
    malware = "Malware"


class EvidenceFile(BaseModel):
    id: str
    file_path: str
    original_name: str
    mime_type: Optional[str] = None
    size: int
    public_url: Optional[str] = None


class Report(BaseModel):
    id: str
    title: str
    target_type: TargetType
    category: ReportCategory
    description: str
    reported_by_id: str
    created_at: str
    status: ReportStatus
    contact_info: Optional[str] = None
    evidence_files: List[EvidenceFile] = []
    reporter_identifier: Optional[str] = None


class ReportCreate(BaseModel):
    title: str
    target_type: TargetType
    category: ReportCategory
    description: str
    contact_info: Optional[str] = None

    @field_validator('title', 'description')
    @classmethod
    def not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('must not be empty')
        return v

    @field_validator('contact_info')
    @classmethod
    def blank_contact_is_none(cls, v):
        if v is None:
            return None
        return v.strip() or None


class EvidenceUpload(BaseModel):
    """An evidence file as received from the caller, before upload."""
    filename: str
    content_type: Optional[str] = None
    data: bytes


class ReportStatusUpdate(BaseModel):
    status: ReportStatus


class ReportFilters(BaseModel):
    keyword: Optional[str] = None
    target_type: Optional[TargetType] = None
    category: Optional[ReportCategory] = None
    status: Optional[ReportStatus] = None

    @field_validator('keyword', mode='before')
    @classmethod
    def blank_keyword_is_none(cls, v):
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @field_validator('target_type', mode='before')
    @classmethod
    def all_types_is_none(cls, v):
        return None if v in (None, "", ALL_TYPES) else v

    @field_validator('category', mode='before')
    @classmethod
    def all_categories_is_none(cls, v):
        return None if v in (None, "", ALL_CATEGORIES) else v

    @field_validator('status', mode='before')
    @classmethod
    def all_statuses_is_none(cls, v):
        return None if v in (None, "", ALL_STATUSES) else v
