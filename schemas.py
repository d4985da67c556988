from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

MediaStatus = Literal["positive", "negative", "critical"]


def _sparse(values, limit=None):
    # drop blank entries, keep rank order
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, (list, tuple)):
        raise ValueError("must be a list of strings")
    cleaned = [str(v).strip() for v in values if v is not None and str(v).strip()]
    if limit is not None and len(cleaned) > limit:
        raise ValueError(f"at most {limit} entries allowed")
    return cleaned


# --- Report payloads (what a caller may submit) ---
class ReportPayload(BaseModel):
    month: str = Field(pattern=MONTH_PATTERN)

    class Config:
        # reject Infinity/NaN
        allow_inf_nan = False

    @field_validator("month", mode="before")
    @classmethod
    def strip_month(cls, v):
        return v.strip() if isinstance(v, str) else v


class SocialMediaReportIn(ReportPayload):
    follower_count: int = Field(ge=0, strict=True)
    post_count: int = Field(ge=0, strict=True)
    highest_engagement_link: str = ""
    lowest_engagement_link: str = ""


class MediaReportIn(ReportPayload):
    status: MediaStatus
    subject: str
    access_link: str = ""
    sources: List[str] = []

    @field_validator("subject")
    @classmethod
    def subject_required(cls, v):
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("sources", mode="before")
    @classmethod
    def drop_blank_sources(cls, v):
        return _sparse(v)


class WebsiteAnalyticsIn(ReportPayload):
    visitor_count: int = Field(ge=0, strict=True)
    page_views: int = Field(ge=0, strict=True)
    bounce_rate: float = Field(ge=0, le=100, strict=True)
    avg_session_duration: float = Field(ge=0, strict=True)
    conversions: int = Field(ge=0, strict=True)
    top_pages: List[str] = []

    @field_validator("top_pages", mode="before")
    @classmethod
    def drop_blank_pages(cls, v):
        return _sparse(v, limit=3)


class RPAReportIn(ReportPayload):
    incoming_mail_count: int = Field(ge=0, strict=True)
    distributed_mail_count: int = Field(ge=0, strict=True)
    top_units: List[str] = []

    @field_validator("top_units", mode="before")
    @classmethod
    def drop_blank_units(cls, v):
        return _sparse(v, limit=3)


# --- Report outputs ---
class ReportOut(BaseModel):
    id: str
    owner_id: str
    month: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SocialMediaReportOut(ReportOut):
    follower_count: int
    post_count: int
    highest_engagement_link: str = ""
    lowest_engagement_link: str = ""


class MediaReportOut(ReportOut):
    status: MediaStatus
    subject: str
    access_link: str = ""
    sources: List[str] = []


class WebsiteAnalyticsOut(ReportOut):
    visitor_count: int
    page_views: int
    bounce_rate: float
    avg_session_duration: float
    conversions: int
    top_pages: List[str] = []


class RPAReportOut(ReportOut):
    incoming_mail_count: int
    distributed_mail_count: int
    top_units: List[str] = []


# --- Profile Schemas ---
class ProfileOut(BaseModel):
    id: str
    email: str
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoleUpdate(BaseModel):
    role: str


# --- Dashboard Schemas ---
class DashboardStats(BaseModel):
    counts: Dict[str, int]
    total_users: Optional[int] = None


class SocialTrendPoint(BaseModel):
    month: str
    follower_count: int
    post_count: int
