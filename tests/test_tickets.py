import pytest

from extensions import db
from models import RegularTicket, SpecialTicket, StadiumExtended, TicketQuantityByDate
from services import tickets


SATURDAY = "2025-11-08"
MONDAY = "2025-11-10"


@pytest.fixture
def stock(ctx):
    weekend = RegularTicket(stadium_id="rajadamnern", name="Ringside", price=3000, quantity=5, days="[0, 6]")
    daily = RegularTicket(
        stadium_id="rajadamnern", name="Standard", price=1500, quantity=20, days="[0, 1, 2, 3, 4, 5, 6]"
    )
    undated = RegularTicket(stadium_id="rajadamnern", name="Legacy", price=900, quantity=20, days=None)
    special = SpecialTicket(stadium_id="rajadamnern", name="Title Fight", price=5000, date=SATURDAY, quantity=2)
    other = RegularTicket(stadium_id="lumpinee", name="Ringside", price=2800, quantity=5, days="[6]")
    db.session.add_all([weekend, daily, undated, special, other, StadiumExtended(id="rajadamnern")])
    db.session.commit()
    return {"weekend": weekend.id, "daily": daily.id, "special": special.id, "other": other.id}


def names(listing, kind="regular_tickets"):
    return [t["name"] for t in listing[kind]]


def test_available_tickets_follow_weekday_and_date(stock):
    saturday = tickets.available_tickets("rajadamnern", SATURDAY)
    monday = tickets.available_tickets("rajadamnern", MONDAY)

    assert names(saturday) == ["Ringside", "Standard"]
    assert names(saturday, "special_tickets") == ["Title Fight"]
    assert names(monday) == ["Standard"]
    assert monday["special_tickets"] == []


def test_date_adjustments_override_name_price_and_stock(stock):
    tickets.set_adjustment(
        "rajadamnern", stock["daily"], "regular", SATURDAY, name_override="Promo", price_override=1000
    )
    tickets.set_adjustment("rajadamnern", stock["weekend"], "regular", SATURDAY, enabled=False)

    saturday = tickets.available_tickets("rajadamnern", SATURDAY)

    [promo] = saturday["regular_tickets"]
    assert (promo["id"], promo["name"], promo["price"], promo["quantity"]) == (stock["daily"], "Promo", 1000, 20)
    # Other dates keep the stored values
    assert tickets.available_tickets("rajadamnern", "2025-11-15")["regular_tickets"][0]["name"] == "Ringside"


def test_sold_out_date_is_hidden(stock):
    tickets.set_adjustment("rajadamnern", stock["special"], "special", SATURDAY, quantity=0)
    assert tickets.available_tickets("rajadamnern", SATURDAY)["special_tickets"] == []


def test_calculate_price_uses_stored_and_overridden_prices(stock):
    quote = tickets.calculate_price("rajadamnern", stock["weekend"], "regular", 2, SATURDAY)
    assert (quote.unit_price, quote.total_price, quote.name) == (3000, 6000, "Ringside")

    tickets.set_adjustment("rajadamnern", stock["weekend"], "regular", SATURDAY, price_override=2500)
    assert tickets.calculate_price("rajadamnern", stock["weekend"], "regular", "2", SATURDAY).total_price == 5000


@pytest.mark.parametrize(
    "stadium, ticket, ticket_type, quantity, day, message",
    [
        ("rajadamnern", "weekend", "vip", 1, SATURDAY, "ticket_type"),
        ("rajadamnern", "weekend", "regular", 0, SATURDAY, "positive"),
        ("rajadamnern", "weekend", "regular", 1, "08/11/2025", "YYYY-MM-DD"),
        ("rajadamnern", "other", "regular", 1, SATURDAY, "not found"),
        ("rajadamnern", "weekend", "regular", 1, MONDAY, "not on sale"),
        ("rajadamnern", "weekend", "regular", 6, SATURDAY, "Insufficient"),
    ],
)
def test_calculate_price_rejects(stock, stadium, ticket, ticket_type, quantity, day, message):
    with pytest.raises(ValueError, match=message):
        tickets.calculate_price(stadium, stock[ticket], ticket_type, quantity, day)


def test_reserve_seeds_date_row_from_ticket(stock):
    tickets.reserve("rajadamnern", stock["weekend"], "regular", SATURDAY, 2)
    db.session.commit()

    row = tickets.adjustment_for("rajadamnern", stock["weekend"], "regular", tickets.parse_date(SATURDAY))
    assert (row.quantity, row.initial_quantity) == (3, 5)
    assert db.session.get(RegularTicket, stock["weekend"]).quantity == 5

    with pytest.raises(ValueError, match="Insufficient"):
        tickets.reserve("rajadamnern", stock["weekend"], "regular", SATURDAY, 4)


def test_one_adjustment_row_per_ticket_and_date(stock):
    tickets.set_adjustment("rajadamnern", stock["daily"], "regular", SATURDAY, quantity=4)
    tickets.set_adjustment("rajadamnern", stock["daily"], "regular", SATURDAY, quantity=3)

    assert TicketQuantityByDate.query.count() == 1
    assert TicketQuantityByDate.query.one().quantity == 3


def test_ticket_endpoints_are_cached_until_adjusted(client, stock, app):
    url = f"/api/tickets?stadium_id=rajadamnern&date={SATURDAY}"
    assert names(client.get(url).get_json()) == ["Ringside", "Standard"]
    assert url in app.extensions["content_cache"].keys()
    assert app.extensions["content_cache"].ttl_for(url) == 30

    response = client.put(
        f"/api/stadiums/rajadamnern/tickets/regular/{stock['weekend']}/dates/{SATURDAY}", json={"enabled": False}
    )
    assert response.status_code == 200
    assert response.get_json()["adjustment"]["enabled"] is False

    assert names(client.get(url).get_json()) == ["Standard"]


def test_ticket_config_endpoint(client, stock):
    body = client.get("/api/stadiums/rajadamnern/tickets").get_json()
    assert names(body) == ["Ringside", "Standard", "Legacy"]
    assert names(body, "special_tickets") == ["Title Fight"]

    assert client.get("/api/stadiums/nowhere/tickets").status_code == 404


def test_ticket_query_validation(client, stock):
    assert client.get("/api/tickets?stadium_id=rajadamnern").status_code == 400
    assert client.get("/api/tickets?stadium_id=rajadamnern&date=tomorrow").status_code == 400


def test_quote_endpoint(client, stock):
    body = {
        "stadium": "rajadamnern",
        "ticket_id": stock["special"],
        "ticket_type": "special",
        "quantity": 2,
        "date": SATURDAY,
    }

    response = client.post("/api/tickets/quote", json=body)

    assert response.get_json()["quote"]["total_price"] == 10000
    assert client.post("/api/tickets/quote", json=dict(body, quantity=3)).status_code == 400
