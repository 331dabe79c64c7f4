from datetime import datetime, timedelta, timezone

from foodiebot.models.sql_models import utcnow
from foodiebot.services.customers import CustomerDirectory


def test_utcnow_is_naive_utc():
    now = utcnow()
    reference = datetime.now(timezone.utc).replace(tzinfo=None)
    assert now.tzinfo is None
    assert abs(reference - now) < timedelta(seconds=5)


def test_last_seen_uses_utc_clock(db):
    before = utcnow()
    customer = CustomerDirectory(db).find_or_create("919855555555")
    after = utcnow()
    assert customer.last_seen.tzinfo is None
    assert before <= customer.last_seen <= after
