from __future__ import annotations

from flask import Flask, g, jsonify

from ..common.datetime_utils import format_iso_date
from ..common.web import not_found, request_json, session_required
from ..container import Container
from ..payroll.model import HistoryReport, WeeklyBucket
from ..places.model import Rates
from ..payroll.service import WageReportService
from .model import DailyRecord


def record_to_json(record: DailyRecord, *, daily_total: float | None = None) -> dict:
    data = {
        "id": record.record_id,
        "placeId": record.place_id,
        "date": format_iso_date(record.work_date),
        "workers": record.workers,
        "labourers": record.labourers,
        "additionalCosts": [{"description": c.description, "amount": c.amount} for c in record.additional_costs],
        "notes": record.notes,
        "createdAt": record.created_at.isoformat() if record.created_at else None,
        "updatedAt": record.updated_at.isoformat() if record.updated_at else None,
    }
    if record.rates_snapshot is not None:
        data["ratesSnapshot"] = {
            "workerRate": record.rates_snapshot.worker_rate,
            "labourerRate": record.rates_snapshot.labourer_rate,
        }
    if daily_total is not None:
        data["dailyTotal"] = round(daily_total, 2)
    return data


def week_to_json(week: WeeklyBucket, reports: WageReportService, rates: Rates) -> dict:
    return {
        "weekKey": week.week_key,
        "weekLabel": week.week_label,
        "weekStart": format_iso_date(week.week_start),
        "weekEnd": format_iso_date(week.week_end),
        "total": round(week.total, 2),
        "records": [record_to_json(r, daily_total=reports.daily_total(r, rates)) for r in week.records],
    }


def history_to_json(report: HistoryReport, reports: WageReportService) -> dict:
    return {
        "placeId": report.place.place_id,
        "placeName": report.place.name,
        "grandTotal": round(report.grand_total, 2),
        "recordCount": report.record_count,
        "weeks": [week_to_json(w, reports, report.place.rates) for w in report.weeks],
    }


def register(app: Flask, container: Container) -> None:
    records = container.record_service
    reports = container.report_service
    places = container.place_service

    @app.route("/api/places/<place_id>/records", methods=["GET"], endpoint="list_records")
    @session_required
    def list_records(place_id: str):
        place = places.get_place(g.user_session, place_id)
        if not place:
            return not_found()
        items = records.list_records(g.user_session, place_id)
        return jsonify(
            {
                "success": True,
                "records": [record_to_json(r, daily_total=reports.daily_total(r, place.rates)) for r in items],
            }
        )

    @app.route("/api/places/<place_id>/records", methods=["POST"], endpoint="save_record")
    @session_required
    def save_record(place_id: str):
        data = request_json()
        result = records.save_record(
            g.user_session,
            place_id,
            work_date=data.get("date", ""),
            workers=data.get("workers", 0),
            labourers=data.get("labourers", 0),
            additional_costs=data.get("additionalCosts") or [],
            notes=data.get("notes"),
        )
        if not result:
            return not_found()
        return (
            jsonify({"success": True, "message": result.message, "id": result.record_id, "outcome": result.outcome.value}),
            201 if result.created else 200,
        )

    @app.route("/api/places/<place_id>/records/<record_id>", methods=["GET"], endpoint="get_record")
    @session_required
    def get_record(place_id: str, record_id: str):
        place = places.get_place(g.user_session, place_id)
        record = records.get_record(g.user_session, place_id, record_id) if place else None
        if not record:
            return not_found()
        return jsonify({"success": True, "record": record_to_json(record, daily_total=reports.daily_total(record, place.rates))})

    @app.route("/api/places/<place_id>/records/<record_id>", methods=["DELETE"], endpoint="delete_record")
    @session_required
    def delete_record(place_id: str, record_id: str):
        if not records.delete_record(g.user_session, place_id, record_id):
            return not_found()
        return jsonify({"success": True, "message": "Record deleted."})

    @app.route("/api/places/<place_id>/history", methods=["GET"], endpoint="place_history")
    @session_required
    def place_history(place_id: str):
        report = reports.build_history_report(g.user_session, place_id)
        if not report:
            return not_found()
        return jsonify({"success": True, "history": history_to_json(report, reports)})

    @app.route("/api/places/<place_id>/history.csv", methods=["GET"], endpoint="place_history_csv")
    @session_required
    def place_history_csv(place_id: str):
        report = reports.build_history_report(g.user_session, place_id)
        if not report:
            return not_found()

        csv_bytes = reports.export_history_csv(report).encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=history-{place_id}.csv"},
        )

    @app.route("/api/notifications", methods=["GET"], endpoint="notifications")
    @session_required
    def notifications():
        items = container.notifications.drain(g.user_session.owner_id)
        return jsonify(
            {
                "success": True,
                "notifications": [
                    {
                        "operation": n.operation,
                        "key": n.key,
                        "message": n.message,
                        "createdAt": n.created_at.isoformat(),
                    }
                    for n in items
                ],
            }
        )
