from __future__ import annotations

import pytest

from src.site_ledger.site_ledger.core.exceptions import SessionError
from src.site_ledger.site_ledger.payroll.service import WageReportService
from src.site_ledger.site_ledger.places.service import PlaceService
from src.site_ledger.site_ledger.records.service import RecordService
from src.site_ledger.site_ledger.sync.live_view import LiveWeeklyView


@pytest.fixture
def services(places_repo, records_repo):
    return (
        PlaceService(places_repo, records_repo),
        RecordService(records_repo, places_repo),
        WageReportService(places_repo, records_repo),
    )


def test_view_recomputes_on_record_and_rate_changes(services, places_repo, session):
    places, records, reports = services
    place = places.add_place(session, name="Block A", worker_rate=1000, labourer_rate=600)
    other = places.add_place(session, name="Block B", worker_rate=1, labourer_rate=1)
    totals = []

    with LiveWeeklyView(places_repo, reports, session, place.place_id, lambda r: totals.append(r.grand_total)) as view:
        assert view.is_open
        records.save_record(session, place.place_id, work_date="2025-03-03", workers=10, labourers=15)
        records.save_record(session, other.place_id, work_date="2025-03-03", workers=10)
        places.set_rates(session, place.place_id, worker_rate=2000, labourer_rate=600)

    assert totals == [0, 19000, 29000]
    assert view.latest.grand_total == 29000
    assert not view.is_open

    records.save_record(session, place.place_id, work_date="2025-03-04", workers=1)
    assert len(totals) == 3


def test_view_reports_none_after_place_deleted(services, places_repo, session):
    places, records, reports = services
    place = places.add_place(session, name="Block A", worker_rate=1000)
    records.save_record(session, place.place_id, work_date="2025-03-03", workers=1)
    received = []

    view = LiveWeeklyView(places_repo, reports, session, place.place_id, received.append).open()
    places.delete_place(session, place.place_id)
    view.close()

    assert received[0].grand_total == 1000
    assert received[-1] is None
    assert view.latest is None


def test_view_requires_session(services, places_repo):
    _, _, reports = services
    with pytest.raises(SessionError):
        LiveWeeklyView(places_repo, reports, None, "p1", lambda r: None)
