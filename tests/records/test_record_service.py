from __future__ import annotations

from datetime import date, datetime

import pytest

from src.site_ledger.site_ledger.core.enums import RatePolicy, SaveOutcome
from src.site_ledger.site_ledger.core.exceptions import SessionError, ValidationError
from src.site_ledger.site_ledger.payroll.service import WageReportService
from src.site_ledger.site_ledger.places.service import PlaceService
from src.site_ledger.site_ledger.records.model import AdditionalCost
from src.site_ledger.site_ledger.records.service import RecordService, clean_additional_costs


@pytest.fixture
def place(session, places_repo, records_repo, fixed_now):
    return PlaceService(places_repo, records_repo).add_place(
        session, name="Block A", worker_rate=1000, labourer_rate=600, now=fixed_now
    )


@pytest.fixture
def svc(places_repo, records_repo):
    return RecordService(records_repo, places_repo)


def test_first_save_creates_record(svc, session, place, fixed_now):
    result = svc.save_record(session, place.place_id, work_date="2025-03-05", workers=10, labourers=15, now=fixed_now)

    assert result.outcome == SaveOutcome.CREATED
    assert result.message == "Record added."
    rec = svc.get_record(session, place.place_id, result.record_id)
    assert rec.work_date == date(2025, 3, 5)
    assert (rec.workers, rec.labourers) == (10, 15)
    assert rec.created_at == fixed_now


def test_second_save_for_same_date_overwrites_and_keeps_id(svc, session, place):
    first = svc.save_record(
        session,
        place.place_id,
        work_date=date(2025, 3, 5),
        workers=10,
        labourers=15,
        additional_costs=[{"description": "Cement", "amount": 500}, {"description": "Sand", "amount": 300}],
        notes="rain in the evening",
    )
    second = svc.save_record(
        session,
        place.place_id,
        work_date="2025-03-05",
        workers=8,
        labourers=4,
        additional_costs=[{"description": "Water", "amount": 50}],
    )

    assert second.outcome == SaveOutcome.UPDATED
    assert second.record_id == first.record_id

    records = svc.list_records(session, place.place_id)
    assert len(records) == 1
    assert (records[0].workers, records[0].labourers) == (8, 4)
    assert records[0].additional_costs == (AdditionalCost("Water", 50.0),)
    assert records[0].notes is None


def test_saving_identical_input_twice_yields_one_record(svc, session, place):
    kwargs = dict(work_date="2025-03-05", workers=10, labourers=15, additional_costs=[{"description": "Tea", "amount": 80}])

    svc.save_record(session, place.place_id, **kwargs)
    svc.save_record(session, place.place_id, **kwargs)

    assert len(svc.list_records(session, place.place_id)) == 1


def test_blank_and_zero_costs_are_dropped_from_new_record(svc, session, place):
    result = svc.save_record(
        session,
        place.place_id,
        work_date="2025-03-05",
        workers=1,
        additional_costs=[
            {"description": "Cement", "amount": 500},
            {"description": "", "amount": 100},
            {"description": "   ", "amount": 100},
            {"description": "Free sample", "amount": 0},
            {"description": "Typo", "amount": "abc"},
            {"description": "Nails", "amount": "75.5"},
        ],
    )

    rec = svc.get_record(session, place.place_id, result.record_id)
    assert rec.additional_costs == (AdditionalCost("Cement", 500.0), AdditionalCost("Nails", 75.5))


def test_clean_additional_costs_accepts_models_and_ignores_junk():
    cleaned = clean_additional_costs([AdditionalCost(" Rope ", 20), "junk", None, {"amount": 5}])
    assert cleaned == (AdditionalCost("Rope", 20.0),)


def test_delete_removes_record_from_weekly_total_only(svc, session, place, places_repo, records_repo):
    keep_prev_week = svc.save_record(session, place.place_id, work_date="2025-02-26", workers=1)
    delete_me = svc.save_record(session, place.place_id, work_date="2025-03-04", workers=2)
    svc.save_record(session, place.place_id, work_date="2025-03-05", workers=3)

    reports = WageReportService(places_repo, records_repo)
    assert reports.weekly_total(svc.list_records(session, place.place_id), place.rates, week_of=date(2025, 3, 5)) == 5000

    assert svc.delete_record(session, place.place_id, delete_me.record_id) is True

    records = svc.list_records(session, place.place_id)
    assert reports.weekly_total(records, place.rates, week_of=date(2025, 3, 5)) == 3000
    assert reports.weekly_total(records, place.rates, week_of=date(2025, 2, 26)) == 1000
    assert svc.get_record(session, place.place_id, keep_prev_week.record_id) is not None


def test_delete_missing_record_is_noop(svc, session, place):
    assert svc.delete_record(session, place.place_id, "nope") is False


def test_save_for_unknown_place_returns_none(svc, session):
    assert svc.save_record(session, "missing", work_date="2025-03-05", workers=1) is None


def test_negative_counts_are_rejected(svc, session, place):
    with pytest.raises(ValidationError):
        svc.save_record(session, place.place_id, work_date="2025-03-05", workers=-1)


def test_non_numeric_counts_become_zero(svc, session, place):
    result = svc.save_record(session, place.place_id, work_date="2025-03-05", workers="", labourers=None)
    rec = svc.get_record(session, place.place_id, result.record_id)
    assert (rec.workers, rec.labourers) == (0, 0)


def test_malformed_date_is_rejected(svc, session, place):
    with pytest.raises(ValidationError):
        svc.save_record(session, place.place_id, work_date="05/03/2025", workers=1)


def test_missing_session_is_rejected(svc, place):
    with pytest.raises(SessionError):
        svc.save_record(None, place.place_id, work_date="2025-03-05", workers=1)


def test_records_listed_newest_first(svc, session, place):
    for day in ("2025-03-03", "2025-03-05", "2025-03-04"):
        svc.save_record(session, place.place_id, work_date=day, workers=1)

    assert [r.work_date.day for r in svc.list_records(session, place.place_id)] == [5, 4, 3]
    assert svc.get_record_for_date(session, place.place_id, "2025-03-04").work_date == date(2025, 3, 4)


def test_snapshot_policy_freezes_rates_at_creation(session, places_repo, records_repo, place):
    svc = RecordService(records_repo, places_repo, rate_policy=RatePolicy.SNAPSHOT)
    places = PlaceService(places_repo, records_repo)
    reports = WageReportService(places_repo, records_repo, rate_policy=RatePolicy.SNAPSHOT)

    result = svc.save_record(session, place.place_id, work_date="2025-03-03", workers=1, labourers=1)
    places.set_rates(session, place.place_id, worker_rate=2000, labourer_rate=900)
    svc.save_record(session, place.place_id, work_date="2025-03-03", workers=2, labourers=1)

    current = places.get_place(session, place.place_id)
    rec = svc.get_record(session, place.place_id, result.record_id)
    assert rec.rates_snapshot.worker_rate == 1000
    assert reports.daily_total(rec, current.rates) == 2 * 1000 + 600


def test_live_policy_reprices_history_with_current_rates(session, places_repo, records_repo, place, svc):
    places = PlaceService(places_repo, records_repo)
    reports = WageReportService(places_repo, records_repo)

    result = svc.save_record(session, place.place_id, work_date="2025-03-03", workers=1, labourers=1)
    places.set_rates(session, place.place_id, worker_rate=2000, labourer_rate=900, now=datetime(2025, 3, 10))

    rec = svc.get_record(session, place.place_id, result.record_id)
    assert rec.rates_snapshot is None
    assert reports.daily_total(rec, places.get_place(session, place.place_id).rates) == 2900


def test_delete_after_restart_finds_persisted_record():
    from src.site_ledger.site_ledger.container import build_container
    from src.site_ledger.site_ledger.storage.memory_store import MemoryStore
    from src.site_ledger.site_ledger.users.model import SessionUser

    backend = MemoryStore()
    session = SessionUser(owner_id="owner-1")

    first = build_container(backend=backend, write_workers=1)
    place = first.place_service.add_place(session, name="Block A", worker_rate=1000)
    saved = first.record_service.save_record(session, place.place_id, work_date="2025-03-03", workers=2)
    first.close()

    second = build_container(backend=backend, write_workers=1)
    try:
        assert second.record_service.delete_record(session, place.place_id, saved.record_id) is True
        second.store.flush(timeout=5)
        assert second.record_service.list_records(session, place.place_id) == []
    finally:
        second.close()

    assert not [k for k in backend.keys("") if saved.record_id in k]
