"""Tests for clients.order_form -- the order form client."""

from __future__ import annotations

import asyncio
from decimal import Decimal

import httpx
import pytest
from pydantic import ValidationError as PydanticValidationError

from clients.order_form import (
    MODEL_FILE_REQUIRED,
    ModelAnalysis,
    OrderForm,
    OrderFormClient,
    OrderFormError,
)

BASE_URL = "http://print.local"


def _client(handler) -> OrderFormClient:
    return OrderFormClient(BASE_URL, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def _form(**overrides) -> OrderForm:
    fields = dict(customerName="Ada Lovelace", customerPhone="7325550100", deliveryMethod="meetup")
    fields.update(overrides)
    return OrderForm(**fields)


# ---------------------------------------------------------------------------
# Client-side validation
# ---------------------------------------------------------------------------


class TestOrderForm:
    def test_defaults(self):
        form = _form(deliveryMethod="meetup")
        assert form.city == "Monroe Township"
        assert form.state == "NJ"
        assert form.supportRemoval is False

    def test_delivery_requires_address(self):
        with pytest.raises(PydanticValidationError, match="Address information is required for delivery"):
            _form(deliveryMethod="delivery")

    def test_delivery_with_address(self):
        form = _form(deliveryMethod="delivery", streetAddress="12 Main St", zipCode="08831")
        assert form.form_fields()["zipCode"] == "08831"

    def test_short_phone(self):
        with pytest.raises(PydanticValidationError):
            _form(customerPhone="555")

    def test_unknown_delivery_method(self):
        with pytest.raises(PydanticValidationError):
            _form(deliveryMethod="pickup")

    def test_form_fields_are_strings(self):
        fields = _form(supportRemoval=True).form_fields()
        assert fields["supportRemoval"] == "true"
        assert all(isinstance(v, str) for v in fields.values())


class TestModelAnalysis:
    def test_live_total(self):
        analysis = ModelAnalysis(weight=35.0, printTime="1h 32m", baseCost=8.75)
        assert analysis.total_cost(False) == Decimal("8.75")
        assert analysis.total_cost(True) == Decimal("13.75")


# ---------------------------------------------------------------------------
# HTTP calls
# ---------------------------------------------------------------------------


class TestOrderFormClient:
    def test_analyze(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = request.content
            return httpx.Response(200, json={"weight": 35.0, "printTime": "1h 32m", "baseCost": 8.75})

        analysis = asyncio.run(_client(handler).analyze("bracket.stl", b"solid"))
        assert analysis == ModelAnalysis(weight=35.0, printTime="1h 32m", baseCost=8.75)
        assert seen["path"] == "/api/analyze-model"
        assert b'name="modelFile"; filename="bracket.stl"' in seen["body"]

    def test_submit(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = request.content
            return httpx.Response(200, json={"id": "abc", "status": "pending"})

        order = asyncio.run(_client(handler).submit(_form(), "bracket.stl", b"solid"))
        assert order == {"id": "abc", "status": "pending"}
        assert seen["path"] == "/api/orders"
        assert b'name="customerName"' in seen["body"]
        assert b"Ada Lovelace" in seen["body"]

    def test_submit_without_model_is_refused_locally(self):
        calls = []
        client = _client(lambda request: calls.append(request) or httpx.Response(200, json={}))
        with pytest.raises(OrderFormError) as exc:
            asyncio.run(client.submit(_form(), None, None))
        assert exc.value.message == MODEL_FILE_REQUIRED
        assert calls == []

    def test_server_message_is_surfaced(self):
        handler = lambda request: httpx.Response(400, json={"message": "Invalid file type. Only STL, OBJ, and 3MF files are allowed."})
        with pytest.raises(OrderFormError) as exc:
            asyncio.run(_client(handler).analyze("part.gcode", b"G1"))
        assert exc.value.status_code == 400
        assert exc.value.message.startswith("Invalid file type")

    def test_get_order_not_found(self):
        handler = lambda request: httpx.Response(404, json={"message": "Order not found"})
        with pytest.raises(OrderFormError) as exc:
            asyncio.run(_client(handler).get_order("missing"))
        assert exc.value.status_code == 404
        assert exc.value.message == "Order not found"
