"""Example: using the service layer directly (no Flask).

Controllers are a thin layer; the business rules live in the services.
"""

from datetime import date

from src.site_ledger.site_ledger.container import build_container
from src.site_ledger.site_ledger.users.model import SessionUser


def main():
    container = build_container(storage_backend="memory")
    session = SessionUser(owner_id="example", display_name="Example")

    place = container.place_service.add_place(session, name="Riverside Block A", worker_rate=1000, labourer_rate=600)
    container.record_service.save_record(
        session,
        place.place_id,
        work_date=date(2025, 3, 3),
        workers=10,
        labourers=15,
        additional_costs=[{"description": "Sand", "amount": 500}],
    )

    report = container.report_service.build_history_report(session, place.place_id)
    for week in report.weeks:
        print(week.week_label, week.total)
    print(container.report_service.export_history_csv(report))
    container.close()


if __name__ == "__main__":
    main()
