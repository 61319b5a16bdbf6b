import json
from datetime import date
from typing import List, Optional

from sqlalchemy import func

from extensions import db
from models import StadiumPaymentImage


def validate_days(days) -> List[int]:
    if not isinstance(days, list) or not all(isinstance(d, int) and not isinstance(d, bool) for d in days):
        raise ValueError("days must be a list of integers")
    if any(d < 0 or d > 6 for d in days):
        raise ValueError("days must be between 0 (Sunday) and 6 (Saturday)")
    return sorted(set(days))


def weekday_of(day: date) -> int:
    # 0 = Sunday, matching the stored day sets
    return (day.weekday() + 1) % 7


def list_images(stadium_id: str) -> List[StadiumPaymentImage]:
    return (
        StadiumPaymentImage.query.filter_by(stadium_id=stadium_id)
        .order_by(StadiumPaymentImage.created_at.asc(), StadiumPaymentImage.id.asc())
        .all()
    )


def create_image(stadium_id: str, image: str, days) -> StadiumPaymentImage:
    if not image:
        raise ValueError("image is required")
    row = StadiumPaymentImage(stadium_id=stadium_id, image=image, days=json.dumps(validate_days(days or [])))
    db.session.add(row)
    db.session.commit()
    return row


def update_image(image_id: int, image: Optional[str] = None, days=None) -> Optional[StadiumPaymentImage]:
    row = db.session.get(StadiumPaymentImage, image_id)
    if row is None:
        return None
    if image is not None:
        row.image = image
    if days is not None:
        row.days = json.dumps(validate_days(days))
    row.updated_at = func.current_timestamp()
    db.session.commit()
    return row


def delete_image(image_id: int) -> bool:
    row = db.session.get(StadiumPaymentImage, image_id)
    if row is None:
        return False
    db.session.delete(row)
    db.session.commit()
    return True


def image_for_day(stadium_id: str, day: date) -> Optional[StadiumPaymentImage]:
    weekday = weekday_of(day)
    for row in list_images(stadium_id):
        if weekday in row.day_list:
            return row
    return None
