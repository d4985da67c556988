from conftest import ANALYTICS, MEDIA, SOCIAL
from repository import KINDS, ReportRepository
import summaries


def seed(db, staff_a, staff_b):
    ReportRepository(db, KINDS["social_media"]).create(staff_a, SOCIAL)
    ReportRepository(db, KINDS["social_media"]).create(
        staff_a, dict(SOCIAL, month="2024-04", follower_count=900, post_count=8)
    )
    ReportRepository(db, KINDS["social_media"]).create(
        staff_b, dict(SOCIAL, follower_count=50, post_count=2)
    )
    ReportRepository(db, KINDS["media"]).create(staff_a, MEDIA)
    ReportRepository(db, KINDS["media"]).create(staff_b, dict(MEDIA, status="critical"))
    ReportRepository(db, KINDS["website_analytics"]).create(staff_b, ANALYTICS)


def test_count_by_kind_respects_ownership(db, staff_a, staff_b, admin):
    seed(db, staff_a, staff_b)

    assert summaries.count_by_kind(db, staff_a) == {
        "social_media": 2, "media": 1, "website_analytics": 0, "rpa": 0,
    }
    assert summaries.count_by_kind(db, admin) == {
        "social_media": 3, "media": 2, "website_analytics": 1, "rpa": 0,
    }


def test_dashboard_stats_total_users_for_admin_only(db, staff_a, staff_b, admin):
    assert "total_users" not in summaries.dashboard_stats(db, staff_a)
    assert summaries.dashboard_stats(db, admin)["total_users"] == 3


def test_media_status_breakdown(db, staff_a, staff_b, admin):
    seed(db, staff_a, staff_b)

    assert summaries.media_status_breakdown(db, staff_a) == {
        "positive": 1, "negative": 0, "critical": 0,
    }
    assert summaries.media_status_breakdown(db, admin) == {
        "positive": 1, "negative": 0, "critical": 1,
    }


def test_social_media_trend(db, staff_a, staff_b, admin):
    seed(db, staff_a, staff_b)

    assert summaries.social_media_trend(db, staff_a) == [
        {"month": "2024-04", "follower_count": 900, "post_count": 8},
        {"month": "2024-05", "follower_count": 1000, "post_count": 12},
    ]
    assert summaries.social_media_trend(db, admin)[-1] == {
        "month": "2024-05", "follower_count": 1050, "post_count": 14,
    }
