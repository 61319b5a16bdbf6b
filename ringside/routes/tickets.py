from flask import Blueprint, current_app, jsonify, request

from extensions import db
from models import StadiumExtended
from routes.content import cached_json
from services import tickets


tickets_bp = Blueprint("tickets", __name__)


@tickets_bp.route("/stadiums/<stadium_id>/tickets", methods=["GET"])
@cached_json
def get_ticket_config(stadium_id):
    if db.session.get(StadiumExtended, stadium_id) is None:
        return {"error": "Stadium not found"}, 404
    return dict(tickets.ticket_config(stadium_id), stadium_id=stadium_id)


@tickets_bp.route("/tickets", methods=["GET"])
@cached_json
def get_available_tickets():
    stadium_id = request.args.get("stadium_id")
    day = request.args.get("date")
    if not stadium_id or not day:
        return {"error": "stadium_id and date are required"}, 400
    try:
        available = tickets.available_tickets(stadium_id, day)
    except ValueError as exc:
        return {"error": str(exc)}, 400
    return dict(available, stadium_id=stadium_id, date=day)


@tickets_bp.route("/tickets/quote", methods=["POST"])
def quote():
    data = request.get_json() or {}
    try:
        price = tickets.calculate_price(
            data.get("stadium"), data.get("ticket_id"), data.get("ticket_type"), data.get("quantity"), data.get("date")
        )
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify({"quote": price.to_dict()})


@tickets_bp.route("/stadiums/<stadium_id>/tickets/<ticket_type>/<ticket_id>/dates/<day>", methods=["PUT"])
def adjust_ticket_for_date(stadium_id, ticket_type, ticket_id, day):
    data = request.get_json() or {}
    fields = ("enabled", "quantity", "name_override", "price_override")
    try:
        adjustment = tickets.set_adjustment(
            stadium_id, ticket_id, ticket_type, day, **{f: data[f] for f in fields if f in data}
        )
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    current_app.extensions["content_cache"].clear("tickets")
    return jsonify({"adjustment": adjustment.to_dict()})
