"""
Role-scoped data access for reports and profiles.

Every read and write goes through here. Visibility and mutation rights are
derived from (caller.role, caller.id, record.owner_id) and nothing else:
admins see and change everything, staff only what they own.
"""
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import models
import schemas
from errors import AuthorizationError, NotFoundError, StorageError, ValidationError
from identity import ROLES, Caller
from log_utils import get_logger

logger = get_logger("reports", "reports.log")

# never taken from a payload
PROTECTED_FIELDS = {"id", "owner_id", "created_at", "updated_at"}


@dataclass(frozen=True)
class ReportKind:
    name: str
    model: Type[models.Base]
    payload_schema: Type[BaseModel]
    out_schema: Type[BaseModel]


KINDS = {
    "social_media": ReportKind(
        "social_media", models.SocialMediaReport,
        schemas.SocialMediaReportIn, schemas.SocialMediaReportOut,
    ),
    "media": ReportKind(
        "media", models.MediaReport,
        schemas.MediaReportIn, schemas.MediaReportOut,
    ),
    "website_analytics": ReportKind(
        "website_analytics", models.WebsiteAnalytics,
        schemas.WebsiteAnalyticsIn, schemas.WebsiteAnalyticsOut,
    ),
    "rpa": ReportKind(
        "rpa", models.RPAReport,
        schemas.RPAReportIn, schemas.RPAReportOut,
    ),
}


def get_kind(name: str) -> ReportKind:
    kind = KINDS.get(name)
    if kind is None:
        raise NotFoundError(f"Unknown report kind: {name}")
    return kind


def owner_scope(query, model, caller: Caller):
    """Restrict a query on a report model to what the caller may see."""
    if caller.is_admin:
        return query
    return query.filter(model.owner_id == caller.id)


def validate_payload(schema: Type[BaseModel], payload: Any) -> BaseModel:
    if not isinstance(payload, Mapping):
        raise ValidationError("payload", "must be an object")
    try:
        return schema.model_validate(dict(payload))
    except PydanticValidationError as e:
        err = e.errors()[0]
        field = str(err["loc"][0]) if err["loc"] else "payload"
        raise ValidationError(field, err["msg"])


@contextmanager
def store_errors(db: Session, action: str):
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Storage failure during %s: %s", action, e)
        raise StorageError(f"Storage failure during {action}") from e


class ReportRepository:
    def __init__(self, db: Session, kind: ReportKind):
        self.db = db
        self.kind = kind
        self.model = kind.model

    def _authorize(self, caller: Caller, record, action: str):
        if caller.is_admin or record.owner_id == caller.id:
            return
        logger.warning(
            "Denied %s on %s/%s for %s (owner %s)",
            action, self.kind.name, record.id, caller.id, record.owner_id,
        )
        raise AuthorizationError(f"Not authorized to {action} this report")

    def _fetch(self, record_id: str):
        with store_errors(self.db, f"{self.kind.name} lookup"):
            return self.db.query(self.model).filter(self.model.id == record_id).first()

    def list(self, caller: Caller, month: Optional[str] = None, owner_id: Optional[str] = None):
        query = owner_scope(self.db.query(self.model), self.model, caller)
        if month:
            query = query.filter(self.model.month == month)
        if owner_id:
            query = query.filter(self.model.owner_id == owner_id)

        with store_errors(self.db, f"{self.kind.name} list"):
            return query.order_by(self.model.created_at.desc()).all()

    def get(self, caller: Caller, record_id: str):
        record = self._fetch(record_id)
        if not record:
            raise NotFoundError("Report not found")
        self._authorize(caller, record, "view")
        return record

    def create(self, caller: Caller, payload: Mapping[str, Any]):
        data = validate_payload(self.kind.payload_schema, payload)

        now = models.utcnow()
        record = self.model(
            **data.model_dump(),
            id=models.new_id(),
            owner_id=caller.id,
            created_at=now,
            updated_at=now,
        )
        with store_errors(self.db, f"{self.kind.name} create"):
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)

        logger.info("Created %s/%s for %s", self.kind.name, record.id, caller.id)
        return record

    def update(self, caller: Caller, record_id: str, payload: Mapping[str, Any]):
        record = self._fetch(record_id)
        if not record:
            raise NotFoundError("Report not found")
        self._authorize(caller, record, "update")

        if not isinstance(payload, Mapping):
            raise ValidationError("payload", "must be an object")

        fields = self.kind.payload_schema.model_fields
        merged = {name: getattr(record, name) for name in fields}
        merged.update(
            {k: v for k, v in payload.items() if k in fields and k not in PROTECTED_FIELDS}
        )
        data = validate_payload(self.kind.payload_schema, merged)

        with store_errors(self.db, f"{self.kind.name} update"):
            for name, value in data.model_dump().items():
                setattr(record, name, value)
            record.updated_at = models.utcnow()
            self.db.commit()
            self.db.refresh(record)

        logger.info("Updated %s/%s by %s", self.kind.name, record.id, caller.id)
        return record

    def delete(self, caller: Caller, record_id: str) -> None:
        record = self._fetch(record_id)
        if not record:
            # already gone
            return
        self._authorize(caller, record, "delete")

        with store_errors(self.db, f"{self.kind.name} delete"):
            self.db.delete(record)
            self.db.commit()

        logger.info("Deleted %s/%s by %s", self.kind.name, record_id, caller.id)


class ProfileRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, identity_id: str) -> Optional[models.Profile]:
        with store_errors(self.db, "profile lookup"):
            return self.db.query(models.Profile).filter(models.Profile.id == identity_id).first()

    def register(self, identity_id: str, email: str) -> models.Profile:
        """Create the sign-up profile (role staff). Existing profiles are returned as-is."""
        existing = self.get(identity_id)
        if existing:
            return existing

        now = models.utcnow()
        profile = models.Profile(
            id=identity_id,
            email=email,
            role="staff",
            created_at=now,
            updated_at=now,
        )
        with store_errors(self.db, "profile register"):
            self.db.add(profile)
            self.db.commit()
            self.db.refresh(profile)

        logger.info("Registered profile %s (%s)", identity_id, email)
        return profile

    def list(self, caller: Caller, role: Optional[str] = None, search: Optional[str] = None):
        if not caller.is_admin:
            raise AuthorizationError("Only admins can list users")

        query = self.db.query(models.Profile)
        if role:
            query = query.filter(models.Profile.role == role)
        if search:
            pattern = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            query = query.filter(models.Profile.email.ilike(f"%{pattern}%", escape="\\"))

        with store_errors(self.db, "profile list"):
            return query.order_by(models.Profile.created_at.desc()).all()

    def set_role(self, caller: Caller, target_id: str, new_role: str) -> models.Profile:
        if not caller.is_admin:
            logger.warning("Denied role change on %s by non-admin %s", target_id, caller.id)
            raise AuthorizationError("Only admins can change roles")
        if target_id == caller.id:
            raise ValidationError("role", "you cannot change your own role")
        if new_role not in ROLES:
            raise ValidationError("role", f"must be one of {', '.join(ROLES)}")

        profile = self.get(target_id)
        if not profile:
            raise NotFoundError("Profile not found")

        with store_errors(self.db, "role change"):
            profile.role = new_role
            profile.updated_at = models.utcnow()
            self.db.commit()
            self.db.refresh(profile)

        logger.info("Role of %s set to %s by %s", target_id, new_role, caller.id)
        return profile
