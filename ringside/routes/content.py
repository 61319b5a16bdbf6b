from datetime import datetime
from functools import wraps

from flask import Blueprint, current_app, jsonify, request

from extensions import db
from models import (
    HeroImage,
    Highlight,
    PromptPayQR,
    SpecialMatch,
    StadiumExtended,
    StadiumImageSchedule,
    UpcomingFightsBackground,
)
from services import payment_images


content_bp = Blueprint("content", __name__)


def _cache():
    return current_app.extensions["content_cache"]


def cached_json(view):
    """Serve the view's dict from the response cache, keyed by request path.

    A view may return ``(payload, status)``; only 200 payloads are cached.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        key = request.full_path.rstrip("?")
        cached = _cache().get(key)
        if cached is not None:
            return jsonify(cached)
        result = view(*args, **kwargs)
        if isinstance(result, tuple):
            payload, status = result
            return jsonify(payload), status
        _cache().set(key, result)
        return jsonify(result)

    return wrapper


def _required(data, fields):
    missing = [field for field in fields if not data.get(field)]
    if missing:
        return jsonify({"error": f"Missing fields: {', '.join(missing)}"}), 400
    return None


@content_bp.route("/hero", methods=["GET"])
@cached_json
def get_hero():
    hero = db.session.get(HeroImage, 1)
    return {"hero": hero.to_dict() if hero else None}


@content_bp.route("/hero", methods=["PUT"])
def update_hero():
    data = request.get_json() or {}
    failure = _required(data, ["image"])
    if failure:
        return failure

    hero = db.session.get(HeroImage, 1) or HeroImage(id=1)
    hero.image = data["image"]
    db.session.add(hero)
    db.session.commit()
    _cache().clear("/hero")
    return jsonify({"hero": hero.to_dict()})


@content_bp.route("/highlights", methods=["GET"])
@cached_json
def list_highlights():
    highlights = Highlight.query.order_by(Highlight.date.desc(), Highlight.id.desc()).all()
    return {"highlights": [h.to_dict() for h in highlights]}


@content_bp.route("/highlights", methods=["POST"])
def create_highlight():
    data = request.get_json() or {}
    failure = _required(data, ["title", "date", "image"])
    if failure:
        return failure

    highlight = Highlight(title=data["title"], date=data["date"], image=data["image"])
    db.session.add(highlight)
    db.session.commit()
    _cache().clear("highlights")
    return jsonify({"highlight": highlight.to_dict()}), 201


@content_bp.route("/stadiums", methods=["GET"])
@cached_json
def list_stadiums():
    stadiums = StadiumExtended.query.order_by(StadiumExtended.id.asc()).all()
    return {"stadiums": [s.to_dict() for s in stadiums]}


@content_bp.route("/stadiumSchedules", methods=["GET"])
@cached_json
def list_stadium_schedules():
    schedules = StadiumImageSchedule.query.order_by(StadiumImageSchedule.id.asc()).all()
    return {"schedules": [s.to_dict() for s in schedules]}


@content_bp.route("/specialMatches", methods=["GET"])
@cached_json
def list_special_matches():
    matches = SpecialMatch.query.order_by(SpecialMatch.date.asc()).all()
    return {"special_matches": [m.to_dict() for m in matches]}


@content_bp.route("/specialMatches", methods=["POST"])
def create_special_match():
    data = request.get_json() or {}
    failure = _required(data, ["stadium_id", "date", "name"])
    if failure:
        return failure

    match = SpecialMatch(stadium_id=data["stadium_id"], date=data["date"], name=data["name"], image=data.get("image"))
    db.session.add(match)
    db.session.commit()
    _cache().clear("specialMatches")
    return jsonify({"special_match": match.to_dict()}), 201


@content_bp.route("/upcomingFightsBackground", methods=["GET"])
@cached_json
def get_upcoming_fights_background():
    background = db.session.get(UpcomingFightsBackground, 1)
    return {"background": background.to_dict() if background else None}


@content_bp.route("/upcomingFightsBackground", methods=["PUT"])
def update_upcoming_fights_background():
    data = request.get_json() or {}
    failure = _required(data, ["image"])
    if failure:
        return failure

    background = db.session.get(UpcomingFightsBackground, 1) or UpcomingFightsBackground(id=1)
    background.image = data["image"]
    background.fallback = data.get("fallback")
    db.session.add(background)
    db.session.commit()
    _cache().clear("upcomingFightsBackground")
    return jsonify({"background": background.to_dict()})


@content_bp.route("/promptpay-qr", methods=["GET"])
def get_promptpay_qr():
    qr = db.session.get(PromptPayQR, 1)
    return jsonify({"promptpay_qr": qr.to_dict() if qr else None})


@content_bp.route("/stadiums/<stadium_id>/payment-images", methods=["GET"])
@cached_json
def list_payment_images(stadium_id):
    return {"images": [row.to_dict() for row in payment_images.list_images(stadium_id)]}


@content_bp.route("/stadiums/<stadium_id>/payment-images", methods=["POST"])
def create_payment_image(stadium_id):
    data = request.get_json() or {}
    failure = _required(data, ["image"])
    if failure:
        return failure

    try:
        row = payment_images.create_image(stadium_id, data["image"], data.get("days") or [])
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    _cache().clear("payment-images")
    return jsonify({"image": row.to_dict()}), 201


@content_bp.route("/stadiums/<stadium_id>/payment-image", methods=["GET"])
def payment_image_for_date(stadium_id):
    raw = request.args.get("date")
    if not raw:
        return jsonify({"error": "date is required"}), 400
    try:
        day = datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        return jsonify({"error": "date must be in YYYY-MM-DD format"}), 400
    row = payment_images.image_for_day(stadium_id, day)
    if row is None:
        return jsonify({"error": "No payment image for this date"}), 404
    return jsonify({"image": row.to_dict()})


@content_bp.route("/payment-images/<int:image_id>", methods=["PATCH"])
def update_payment_image(image_id):
    data = request.get_json() or {}
    try:
        row = payment_images.update_image(image_id, image=data.get("image"), days=data.get("days"))
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    if row is None:
        return jsonify({"error": "Payment image not found"}), 404
    _cache().clear("payment-images")
    return jsonify({"image": row.to_dict()})


@content_bp.route("/payment-images/<int:image_id>", methods=["DELETE"])
def delete_payment_image(image_id):
    if not payment_images.delete_image(image_id):
        return jsonify({"error": "Payment image not found"}), 404
    _cache().clear("payment-images")
    return jsonify({"message": "Payment image removed"})
