from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.datetime_utils import format_iso_date, parse_iso_date
from ..common.web import not_found, request_json, session_required
from ..container import Container
from ..payroll.model import PlaceSummary
from .model import Place

_PLACE_FIELDS = {"name": "name", "workerRate": "worker_rate", "labourerRate": "labourer_rate"}


def place_to_json(place: Place) -> dict:
    return {
        "id": place.place_id,
        "name": place.name,
        "workerRate": place.worker_rate,
        "labourerRate": place.labourer_rate,
        "createdAt": place.created_at.isoformat() if place.created_at else None,
        "updatedAt": place.updated_at.isoformat() if place.updated_at else None,
    }


def summary_to_json(summary: PlaceSummary) -> dict:
    return {
        "place": place_to_json(summary.place),
        "today": format_iso_date(summary.today),
        "hasTodayRecord": summary.has_today_record,
        "todayTotal": round(summary.today_total, 2),
        "weekTotal": round(summary.week_total, 2),
    }


def register(app: Flask, container: Container) -> None:
    places = container.place_service
    reports = container.report_service

    @app.route("/api/places", methods=["GET"], endpoint="list_places")
    @session_required
    def list_places():
        return jsonify({"success": True, "places": [place_to_json(p) for p in places.list_places(g.user_session)]})

    @app.route("/api/places", methods=["POST"], endpoint="create_place")
    @session_required
    def create_place():
        data = request_json()
        place = places.add_place(
            g.user_session,
            name=data.get("name", ""),
            worker_rate=data.get("workerRate", 0),
            labourer_rate=data.get("labourerRate", 0),
        )
        return jsonify({"success": True, "message": "Site added.", "place": place_to_json(place)}), 201

    @app.route("/api/places/<place_id>", methods=["GET"], endpoint="get_place")
    @session_required
    def get_place(place_id: str):
        place = places.get_place(g.user_session, place_id)
        if not place:
            return not_found()
        return jsonify({"success": True, "place": place_to_json(place)})

    @app.route("/api/places/<place_id>", methods=["PATCH"], endpoint="update_place")
    @session_required
    def update_place(place_id: str):
        data = request_json()
        changes = {attr: data[key] for key, attr in _PLACE_FIELDS.items() if key in data}
        place = places.update_place(g.user_session, place_id, **changes)
        if not place:
            return not_found()
        return jsonify({"success": True, "message": "Site updated.", "place": place_to_json(place)})

    @app.route("/api/places/<place_id>/rates", methods=["PUT"], endpoint="set_rates")
    @session_required
    def set_rates(place_id: str):
        data = request_json()
        place = places.set_rates(
            g.user_session,
            place_id,
            worker_rate=data.get("workerRate"),
            labourer_rate=data.get("labourerRate"),
        )
        if not place:
            return not_found()
        return jsonify({"success": True, "message": "Rates updated.", "place": place_to_json(place)})

    @app.route("/api/places/<place_id>", methods=["DELETE"], endpoint="delete_place")
    @session_required
    def delete_place(place_id: str):
        if not places.delete_place(g.user_session, place_id):
            return not_found()
        return jsonify({"success": True, "message": "Site deleted."})

    @app.route("/api/places/<place_id>/summary", methods=["GET"], endpoint="place_summary")
    @session_required
    def place_summary(place_id: str):
        today = request.args.get("today")
        summary = reports.place_summary(g.user_session, place_id, today=parse_iso_date(today) if today else None)
        if not summary:
            return not_found()
        return jsonify({"success": True, "summary": summary_to_json(summary)})

    @app.route("/api/data", methods=["DELETE"], endpoint="clear_data")
    @session_required
    def clear_data():
        removed = places.clear_data(g.user_session)
        return jsonify({"success": True, "message": "All data cleared.", "placesRemoved": removed})
