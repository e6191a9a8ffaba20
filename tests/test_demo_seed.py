from datetime import date
from decimal import Decimal

from greasedesk.models.booking import Booking
from greasedesk.models.group import Group
from greasedesk.models.group_billing import GroupBilling
from greasedesk.models.job_card import JobCard
from greasedesk.models.service_catalogue import ServiceCatalogue
from greasedesk.models.site import Site
from greasedesk.models.tax_rate import TaxRate
from greasedesk.models.user import User
from greasedesk.services.demo_seed import seed_demo
from tests.app_harness import build_session_factory


def _seed(db):
    return seed_demo(
        db,
        email="Demo@GreaseDesk.com",
        name="Lewis",
        password="greasedesk-demo",
        garage_name="AutoFix",
        site_name="AutoFix Birmingham",
        day=date(2025, 7, 1),
    )


def test_seed_is_idempotent():
    db = build_session_factory()()

    first = _seed(db)
    second = _seed(db)

    assert first.group_id == second.group_id
    assert first.site_id == second.site_id
    assert first.bookings_created == 3
    assert second.bookings_created == 0
    assert db.query(Group).count() == 1
    assert db.query(GroupBilling).count() == 1
    assert db.query(Site).count() == 1
    assert db.query(User).count() == 1
    assert db.query(Booking).count() == 3
    assert db.query(JobCard).count() == 1
    assert Decimal(db.query(TaxRate).one().percentage) == Decimal("20.00")
    assert Decimal(db.query(ServiceCatalogue).one().default_labour_rate) == Decimal("75.00")
    assert db.query(User).one().email == "demo@greasedesk.com"
    db.close()
