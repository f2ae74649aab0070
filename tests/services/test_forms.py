"""Tests for form validation and payload building."""
from typing import Any

import pytest
import respx
from httpx import Response

from order_desk.schemas import Order, UserRole
from order_desk.services.forms import (
    FormValidationError,
    build_client_payload,
    build_client_update,
    build_order_payload,
    build_order_update,
    build_quick_edit_payload,
    build_user_payload,
    build_user_update,
)
from order_desk.services.resource_queries import ResourceQueries


class TestClientForm:
    def test__valid(self) -> None:
        payload = build_client_payload(
            "Ahmed", "12 Tahrir St", ["01012345678"], addresses=["7 Nile St"],
        )
        assert payload.addresses == ["12 Tahrir St", "7 Nile St"]

    def test__invalid_phone__keyed_by_field(self) -> None:
        with pytest.raises(FormValidationError) as exc_info:
            build_client_payload("Ahmed", "12 Tahrir St", ["0123"])
        assert "phone_numbers" in exc_info.value.errors
        assert exc_info.value.errors["phone_numbers"].startswith("Invalid phone number")

    def test__several_errors_reported_together(self) -> None:
        with pytest.raises(FormValidationError) as exc_info:
            build_client_payload(" ", " ", [])
        assert set(exc_info.value.errors) == {"name", "default_address", "phone_numbers"}
        assert exc_info.value.errors["name"] == "Client name is required"

    def test__update__rating_out_of_range(self) -> None:
        with pytest.raises(FormValidationError) as exc_info:
            build_client_update(rating=7)
        assert "rating" in exc_info.value.errors

    def test__update__partial(self) -> None:
        update = build_client_update(governorate="Giza")
        assert update.model_dump(by_alias=True, exclude_none=True) == {"governorate": "Giza"}


class TestOrderForm:
    def test__total_computed(self) -> None:
        payload = build_order_payload(
            "c1",
            [{"name": "Shirt", "price": 10, "quantity": 2}, {"name": "Cap", "price": 5, "quantity": 1}],
            delivery_fees=20,
        )
        assert payload.total == 45

    def test__blank_phone_and_address_omitted(self) -> None:
        payload = build_order_payload(
            "c1", [{"name": "Shirt", "price": 10}], client_phone=" ", client_address="",
        )
        body = payload.model_dump(by_alias=True, exclude_none=True)
        assert "clientPhone" not in body
        assert "clientAddress" not in body

    def test__item_error_path(self) -> None:
        with pytest.raises(FormValidationError) as exc_info:
            build_order_payload("c1", [{"name": "Shirt", "price": -1, "quantity": 1}])
        assert "items.0.price" in exc_info.value.errors

    def test__no_client(self) -> None:
        with pytest.raises(FormValidationError) as exc_info:
            build_order_payload("", [{"name": "Shirt", "price": 1}])
        assert exc_info.value.errors["client_id"] == "A client must be selected"

    def test__only_blank_rows(self) -> None:
        with pytest.raises(FormValidationError) as exc_info:
            build_order_payload("c1", [{"name": "", "price": 5}])
        assert exc_info.value.errors["items"] == "At least one item is required"


class TestOrderUpdateForm:
    def test__open_order__fees_change_recomputes_total(self, order_factory: Any) -> None:
        # One item of 130 plus 20 fees
        order = Order.model_validate(order_factory("o2", "c1", "pending", 150, 20))

        update = build_order_update(order, delivery_fees=40)

        assert update.total == 170
        assert update.items is not None
        assert update.items[0].name == "Shirt"

    def test__open_order__status_change(self, order_factory: Any) -> None:
        order = Order.model_validate(order_factory("o2", "c1", "pending"))
        update = build_order_update(order, status="shipped")
        assert update.model_dump(mode="json", by_alias=True, exclude_none=True) == {"status": "shipped"}

    def test__closed_order__only_notes_and_rating(self, order_factory: Any) -> None:
        order = Order.model_validate(order_factory("o1", "c1", "delivered"))

        with pytest.raises(FormValidationError) as exc_info:
            build_order_update(order, status="returned", notes="late")

        assert list(exc_info.value.errors) == ["status"]

    def test__closed_order__notes_allowed(self, order_factory: Any) -> None:
        order = Order.model_validate(order_factory("o1", "c1", "returned"))
        update = build_order_update(order, notes="refused at door", rating=2)
        assert update.notes == "refused at door"
        assert update.rating == 2

    def test__quick_edit__zero_rating_left_out(self) -> None:
        payload = build_quick_edit_payload("ok", 0)
        assert payload.model_dump(by_alias=True, exclude_none=True) == {"notes": "ok"}

    def test__quick_edit__rating_range(self) -> None:
        with pytest.raises(FormValidationError) as exc_info:
            build_quick_edit_payload("", 9)
        assert "rating" in exc_info.value.errors


class TestUserForm:
    def test__valid(self) -> None:
        payload = build_user_payload("Mona", "mona@example.com", "secret1", "admin")
        assert payload.role is UserRole.ADMIN

    def test__invalid_email_and_password(self) -> None:
        with pytest.raises(FormValidationError) as exc_info:
            build_user_payload("Mona", "mona", "123")
        assert set(exc_info.value.errors) == {"email", "password"}
        assert "Invalid form input" in str(exc_info.value)

    def test__update(self) -> None:
        assert build_user_update(name=" Mona ").name == "Mona"
        with pytest.raises(FormValidationError):
            build_user_update(email="bad")


class TestSubmission:
    """Invalid input is rejected before any request is made."""

    async def test__invalid_order__no_request(
        self, queries: ResourceQueries, mock_api: respx.MockRouter,
    ) -> None:
        route = mock_api.post("/orders").mock(return_value=Response(201, json={}))

        with pytest.raises(FormValidationError):
            await queries.create_order(build_order_payload("c1", []))

        assert not route.called
        assert mock_api.calls.call_count == 0

    async def test__invalid_client__no_request(
        self, queries: ResourceQueries, mock_api: respx.MockRouter,
    ) -> None:
        with pytest.raises(FormValidationError):
            await queries.create_client(build_client_payload("Ahmed", "12 Tahrir St", ["123"]))

        assert mock_api.calls.call_count == 0

    async def test__locked_order_edit__no_request(
        self, queries: ResourceQueries, mock_api: respx.MockRouter, order_factory: Any,
    ) -> None:
        order = Order.model_validate(order_factory("o1", "c1", "delivered"))

        with pytest.raises(FormValidationError):
            await queries.update_order("o1", build_order_update(order, delivery_fees=0))

        assert mock_api.calls.call_count == 0

    async def test__valid_order__sent(
        self,
        queries: ResourceQueries,
        mock_api: respx.MockRouter,
        order_factory: Any,
    ) -> None:
        route = mock_api.post("/orders").mock(
            return_value=Response(201, json=order_factory("o9", "c1", total=45, delivery_fees=20)),
        )

        order = await queries.create_order(
            build_order_payload("c1", [{"name": "Shirt", "price": 10, "quantity": 2}, {"name": "Cap", "price": 5}], 20),
        )

        assert route.called
        assert order.id == "o9"
