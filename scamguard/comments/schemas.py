from pydantic import BaseModel, field_validator
from typing import Optional

MAX_COMMENT_LENGTH = 2000


class Comment(BaseModel):
    id: str
    report_id: str
    text: str
    created_at: str
    is_anonymous: bool = False
    author_identifier: Optional[str] = None  # None when anonymous


class CommentCreate(BaseModel):
    text: str
    is_anonymous: bool = False

    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Comment must not be empty')
        if len(v) > MAX_COMMENT_LENGTH:
            raise ValueError(f'Comment cannot exceed {MAX_COMMENT_LENGTH} characters')
        return v
