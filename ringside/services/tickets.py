"""Ticket listings, per-date adjustments and server-side pricing."""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from extensions import db
from models import RegularTicket, SpecialTicket, TicketQuantityByDate
from services.payment_images import weekday_of


TICKET_MODELS = {
    "regular": RegularTicket,
    "special": SpecialTicket,
}

DATE_FORMAT = "%Y-%m-%d"


@dataclass
class PriceQuote:
    ticket_id: str
    ticket_type: str
    name: str
    unit_price: float
    quantity: int
    total_price: float

    def to_dict(self):
        return {
            "ticket_id": self.ticket_id,
            "ticket_type": self.ticket_type,
            "name": self.name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "total_price": self.total_price,
        }


def parse_date(value) -> date:
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), DATE_FORMAT).date()
    except ValueError:
        raise ValueError("date must be in YYYY-MM-DD format") from None


def ticket_model(ticket_type):
    try:
        return TICKET_MODELS[ticket_type]
    except KeyError:
        raise ValueError('ticket_type must be "regular" or "special"') from None


def ticket_config(stadium_id: str) -> dict:
    """Every configured ticket of a stadium, without date adjustments."""
    regular = RegularTicket.query.filter_by(stadium_id=stadium_id).order_by(RegularTicket.id.asc()).all()
    special = (
        SpecialTicket.query.filter_by(stadium_id=stadium_id)
        .order_by(SpecialTicket.date.asc(), SpecialTicket.id.asc())
        .all()
    )
    return {
        "regular_tickets": [t.to_dict() for t in regular],
        "special_tickets": [t.to_dict() for t in special],
    }


def find_ticket(stadium_id: str, ticket_id, ticket_type: str):
    model = ticket_model(ticket_type)
    try:
        ticket_pk = int(ticket_id)
    except (TypeError, ValueError):
        return None
    ticket = db.session.get(model, ticket_pk)
    if ticket is None or ticket.stadium_id != stadium_id:
        return None
    return ticket


def adjustment_for(stadium_id: str, ticket_id, ticket_type: str, day: date) -> Optional[TicketQuantityByDate]:
    return TicketQuantityByDate.query.filter_by(
        stadium_id=stadium_id,
        ticket_id=str(ticket_id),
        ticket_type=ticket_type,
        date=day.strftime(DATE_FORMAT),
    ).first()


def _for_date(ticket, ticket_type: str, day: date) -> Optional[dict]:
    """The ticket as sold on ``day``; ``None`` when disabled or sold out."""
    adjustment = adjustment_for(ticket.stadium_id, ticket.id, ticket_type, day)
    if adjustment is not None:
        if not adjustment.is_enabled:
            return None
        quantity = adjustment.quantity
    else:
        quantity = ticket.quantity
    if not quantity or quantity <= 0:
        return None

    data = ticket.to_dict()
    data["ticket_type"] = ticket_type
    data["quantity"] = quantity
    if adjustment is not None and adjustment.name_override:
        data["name"] = adjustment.name_override
    if adjustment is not None and adjustment.price_override is not None:
        data["price"] = adjustment.price_override
    return data


def available_tickets(stadium_id: str, day) -> dict:
    """Tickets on sale for ``day``.

    Regular tickets must list the weekday (0 = Sunday) in ``days``; special
    tickets must be dated ``day``. Per-date rows can disable a ticket or
    override its stock, name and price.
    """
    day = parse_date(day)
    weekday = weekday_of(day)

    regular = []
    for ticket in RegularTicket.query.filter_by(stadium_id=stadium_id).order_by(RegularTicket.id.asc()):
        if weekday not in ticket.to_dict()["days"]:
            continue
        data = _for_date(ticket, "regular", day)
        if data is not None:
            regular.append(data)

    special = []
    specials = SpecialTicket.query.filter_by(stadium_id=stadium_id, date=day.strftime(DATE_FORMAT)).order_by(
        SpecialTicket.id.asc()
    )
    for ticket in specials:
        data = _for_date(ticket, "special", day)
        if data is not None:
            special.append(data)

    return {"regular_tickets": regular, "special_tickets": special}


def calculate_price(stadium_id: str, ticket_id, ticket_type: str, quantity, day) -> PriceQuote:
    """Price a booking from stored ticket data; client totals are never trusted.

    Raises ``ValueError`` for bad input, an unknown ticket, a ticket not on
    sale that day, or too little stock.
    """
    ticket_model(ticket_type)
    try:
        quantity = int(quantity)
    except (TypeError, ValueError):
        raise ValueError("quantity must be a positive integer") from None
    if quantity < 1:
        raise ValueError("quantity must be a positive integer")
    day = parse_date(day)

    ticket = find_ticket(stadium_id, ticket_id, ticket_type)
    if ticket is None:
        raise ValueError("Ticket not found")

    on_sale = available_tickets(stadium_id, day)[f"{ticket_type}_tickets"]
    offer = next((t for t in on_sale if t["id"] == ticket.id), None)
    if offer is None:
        raise ValueError("Ticket is not on sale for this date")
    if offer["quantity"] < quantity:
        raise ValueError("Insufficient ticket quantity available")

    unit_price = float(offer["price"])
    return PriceQuote(
        ticket_id=str(ticket.id),
        ticket_type=ticket_type,
        name=offer["name"],
        unit_price=unit_price,
        quantity=quantity,
        total_price=unit_price * quantity,
    )


def reserve(stadium_id: str, ticket_id, ticket_type: str, day, quantity: int) -> TicketQuantityByDate:
    """Take ``quantity`` from the per-date stock, seeding it from the ticket.

    Leaves the change in the session for the caller to commit.
    """
    day = parse_date(day)
    ticket = find_ticket(stadium_id, ticket_id, ticket_type)
    if ticket is None:
        raise ValueError("Ticket not found")

    adjustment = adjustment_for(stadium_id, ticket.id, ticket_type, day)
    if adjustment is None:
        adjustment = TicketQuantityByDate(
            stadium_id=stadium_id,
            ticket_id=str(ticket.id),
            ticket_type=ticket_type,
            date=day.strftime(DATE_FORMAT),
            quantity=ticket.quantity,
            initial_quantity=ticket.quantity,
        )
        db.session.add(adjustment)
    if adjustment.quantity < quantity:
        raise ValueError("Insufficient ticket quantity available")
    adjustment.quantity -= quantity
    return adjustment


def set_adjustment(stadium_id: str, ticket_id, ticket_type: str, day, **changes) -> TicketQuantityByDate:
    """Create or update the per-date row.

    Accepts ``enabled``, ``quantity``, ``name_override`` and ``price_override``.
    """
    day = parse_date(day)
    ticket = find_ticket(stadium_id, ticket_id, ticket_type)
    if ticket is None:
        raise ValueError("Ticket not found")

    values = {}
    if "enabled" in changes:
        values["enabled"] = 1 if changes["enabled"] else 0
    if "quantity" in changes:
        try:
            values["quantity"] = int(changes["quantity"])
        except (TypeError, ValueError):
            raise ValueError("quantity must be an integer") from None
        if values["quantity"] < 0:
            raise ValueError("quantity must not be negative")
    if "name_override" in changes:
        values["name_override"] = changes["name_override"] or None
    if "price_override" in changes:
        price = changes["price_override"]
        if price is not None:
            try:
                price = float(price)
            except (TypeError, ValueError):
                raise ValueError("price_override must be a number") from None
            if price < 0:
                raise ValueError("price_override must not be negative")
        values["price_override"] = price

    adjustment = adjustment_for(stadium_id, ticket.id, ticket_type, day)
    if adjustment is None:
        adjustment = TicketQuantityByDate(
            stadium_id=stadium_id,
            ticket_id=str(ticket.id),
            ticket_type=ticket_type,
            date=day.strftime(DATE_FORMAT),
            quantity=ticket.quantity,
            initial_quantity=ticket.quantity,
            enabled=1,
        )
        db.session.add(adjustment)
    for field, value in values.items():
        setattr(adjustment, field, value)

    db.session.commit()
    return adjustment
