"""Shared BDD fixtures and step definitions for order intake and status changes."""

import pytest
from ordering.order.intake import OrderIntake
from ordering.order.order import Order
from ordering.order.status import update_order_status
from protean import current_domain
from pytest_bdd import given, parsers, then, when
from shared.errors import InsufficientStock, InvalidPayload, RateLimited, StorefrontError


def _submit(payload, client_id="unknown"):
    try:
        return {"order": OrderIntake().place(payload, client_id=client_id), "error": None}
    except StorefrontError as exc:
        return {"order": None, "error": exc}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a chair with {stock:d} in stock"))
def _(add_product, rows, stock):
    add_product(rows.chair(stock=stock))


@given(parsers.cfparse('a sneaker with {stock:d} pair of "{color}" size "{size}" in stock'))
def _(add_product, rows, stock, color, size):
    add_product(
        {
            "id": rows.sneaker_id,
            "nom": "Basket Riad",
            "prix": 450.0,
            "has_colors": True,
            "couleurs": [{"nom": color, "tailles": [{"nom": size, "stock": stock}]}],
        }
    )


@given(parsers.cfparse("a pending order for {quantity:d} chairs"), target_fixture="placed")
@given(parsers.cfparse("a pending order for {quantity:d} chair"), target_fixture="placed")
def _(order_payload, rows, quantity):
    return OrderIntake().place(order_payload((rows.chair_id, quantity, None, None)))


@given(
    parsers.cfparse('a pending order for {chairs:d} chairs and {pairs:d} sneaker in "{color}" size "{size}"'),
    target_fixture="placed",
)
def _(order_payload, rows, chairs, pairs, color, size):
    return OrderIntake().place(
        order_payload(
            (rows.chair_id, chairs, None, None),
            (rows.sneaker_id, pairs, color, size),
        )
    )


@given(parsers.cfparse('client "{client_id}" has submitted {count:d} orders this minute'))
def _(client_id, count):
    for _ in range(count):
        with pytest.raises(InvalidPayload):
            OrderIntake().place({}, client_id=client_id)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("a customer orders {quantity:d} chairs"), target_fixture="outcome")
@when(parsers.cfparse("a customer orders {quantity:d} chair"), target_fixture="outcome")
def _(order_payload, rows, quantity):
    return _submit(order_payload((rows.chair_id, quantity, None, None)))


@when(
    parsers.cfparse("a customer orders {quantity:d} chair claiming a price of {price:g}"),
    target_fixture="outcome",
)
def _(order_payload, rows, quantity, price):
    payload = order_payload((rows.chair_id, quantity, None, None))
    payload["produits"][0]["prix"] = price
    return _submit(payload)


@when(
    parsers.cfparse('a customer orders {quantity:d} sneaker in "{color}" size "{size}"'),
    target_fixture="outcome",
)
def _(order_payload, rows, quantity, color, size):
    return _submit(order_payload((rows.sneaker_id, quantity, color, size)))


@when(parsers.cfparse('client "{client_id}" submits an order for {quantity:d} chair'), target_fixture="outcome")
def _(order_payload, rows, client_id, quantity):
    return _submit(order_payload((rows.chair_id, quantity, None, None)), client_id=client_id)


@when(parsers.cfparse('the order is moved to "{status}"'))
def _(placed, status):
    update_order_status(placed["id"], status)


@when(parsers.cfparse("the chair stock is reset to {stock:d}"))
def _(add_product, rows, stock):
    add_product(rows.chair(stock=stock))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the order is created")
def _(outcome):
    assert outcome["error"] is None, outcome["error"]
    assert outcome["order"]["statut"] == "En attente"


@then(parsers.cfparse("the order is refused with {available:d} available"))
def _(outcome, available):
    assert isinstance(outcome["error"], InsufficientStock)
    assert outcome["error"].available == available


@then(parsers.cfparse("the order total is {total:g}"))
def _(outcome, total):
    assert outcome["order"]["total"] == total


@then(parsers.cfparse("the submission is rejected with a retry delay of at most {seconds:d} seconds"))
def _(outcome, seconds):
    assert isinstance(outcome["error"], RateLimited)
    assert 0 < outcome["error"].retry_after <= seconds


@then(parsers.cfparse("the chair stock is {stock:d}"))
def _(stock_store, rows, stock):
    assert stock_store.fetch_product(rows.chair_id).counter.stock == stock


@then(parsers.cfparse('the "{color}" size "{size}" sneaker stock is {stock:d}'))
def _(stock_store, rows, color, size, stock):
    assert stock_store.fetch_product(rows.sneaker_id).color(color).counter.find(size).stock == stock


@then(parsers.cfparse('the order status is "{status}"'))
def _(placed, status):
    assert current_domain.repository_for(Order).get(placed["id"]).status == status


@then(parsers.cfparse('the customer is emailed about "{status}"'))
def _(notifier, status):
    assert notifier.calls_to("order_status_changed")[-1]["new_status"] == status
