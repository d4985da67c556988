"""
Dashboard aggregations.

All counting happens in the database under the same ownership filter the
repository uses for listing, so staff never learn how many records other
people have.
"""
from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

import models
from identity import Caller
from repository import KINDS, owner_scope, store_errors

MEDIA_STATUSES = ("positive", "negative", "critical")


def count_by_kind(db: Session, caller: Caller) -> Dict[str, int]:
    counts = {}
    with store_errors(db, "count by kind"):
        for name, kind in KINDS.items():
            query = owner_scope(db.query(func.count(kind.model.id)), kind.model, caller)
            counts[name] = query.scalar() or 0
    return counts


def dashboard_stats(db: Session, caller: Caller) -> dict:
    stats = {"counts": count_by_kind(db, caller)}
    if caller.is_admin:
        with store_errors(db, "profile count"):
            stats["total_users"] = db.query(func.count(models.Profile.id)).scalar() or 0
    return stats


def media_status_breakdown(db: Session, caller: Caller) -> Dict[str, int]:
    model = models.MediaReport
    query = owner_scope(
        db.query(model.status, func.count(model.id)), model, caller
    ).group_by(model.status)

    with store_errors(db, "media status breakdown"):
        rows = query.all()

    breakdown = {status: 0 for status in MEDIA_STATUSES}
    for status, count in rows:
        breakdown[status] = count
    return breakdown


def social_media_trend(db: Session, caller: Caller) -> List[dict]:
    """Per-month follower and post totals, oldest month first."""
    model = models.SocialMediaReport
    query = owner_scope(
        db.query(
            model.month,
            func.sum(model.follower_count),
            func.sum(model.post_count),
        ),
        model,
        caller,
    ).group_by(model.month).order_by(model.month.asc())

    with store_errors(db, "social media trend"):
        rows = query.all()

    return [
        {
            "month": r[0],
            "follower_count": int(r[1] or 0),
            "post_count": int(r[2] or 0),
        }
        for r in rows
    ]
