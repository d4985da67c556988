import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, Float, DateTime, JSON, Text
from database import Base


def new_id():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


class Profile(Base):
    """
    One row per authenticated identity. The id is the auth provider's user id.
    """
    __tablename__ = "profiles"
    id = Column(String, primary_key=True, index=True)
    email = Column(String, index=True, nullable=False)
    role = Column(String, nullable=False, default="staff")   # admin | staff
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow)


class ReportMixin:
    id = Column(String, primary_key=True, default=new_id)
    owner_id = Column(String, index=True, nullable=False)
    month = Column(String(7), index=True, nullable=False)   # YYYY-MM
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow)


class SocialMediaReport(ReportMixin, Base):
    __tablename__ = "social_media_reports"
    follower_count = Column(Integer, nullable=False)
    post_count = Column(Integer, nullable=False)
    highest_engagement_link = Column(String, default="")
    lowest_engagement_link = Column(String, default="")


class MediaReport(ReportMixin, Base):
    __tablename__ = "media_reports"
    status = Column(String, nullable=False)        # positive | negative | critical
    subject = Column(Text, nullable=False)
    access_link = Column(String, default="")
    sources = Column(JSON, default=list)           # ordered, blanks dropped


class WebsiteAnalytics(ReportMixin, Base):
    __tablename__ = "website_analytics"
    visitor_count = Column(Integer, nullable=False)
    page_views = Column(Integer, nullable=False)
    bounce_rate = Column(Float, nullable=False)    # percent, 0..100
    avg_session_duration = Column(Float, nullable=False)   # minutes
    conversions = Column(Integer, nullable=False)
    top_pages = Column(JSON, default=list)


class RPAReport(ReportMixin, Base):
    """
    Mail-routing automation volumes for a month.
    """
    __tablename__ = "rpa_reports"
    incoming_mail_count = Column(Integer, nullable=False)
    distributed_mail_count = Column(Integer, nullable=False)
    top_units = Column(JSON, default=list)
