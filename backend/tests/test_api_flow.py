"""
End-to-end API tests for the order coordination endpoints.

Runs the FastAPI app against the per-test SQLite database seeded by the
restaurant fixture.
"""

import pytest


@pytest.fixture
def burger_line(restaurant):
    return {"menu_item_id": restaurant.burger.id, "quantity": 1}


def submit(client, items, plate_number="T1", order_type="dine_in"):
    return client.post(
        "/api/v1/orders",
        json={
            "restaurant_id": 1,
            "order_type": order_type,
            "plate_number": plate_number,
            "items": items,
        },
    )


@pytest.mark.api
class TestOrderEndpoints:
    """Cart submission through payment"""

    def test_health(self, client):
        response = client.get("/")
        assert response.status_code == 200

    def test_submit_and_fetch(self, client, burger_line):
        """Money is serialized as strings with three decimals"""
        response = submit(client, [burger_line])

        assert response.status_code == 201
        order = response.json()
        assert order["status"] == "new"
        assert order["subtotal"] == "2.000"
        assert order["total"] == "2.100"

        fetched = client.get(f"/api/v1/orders/{order['id']}").json()
        assert fetched["version"] == 1

    def test_list_open_orders(self, client, burger_line):
        submit(client, [burger_line])
        submit(client, [burger_line], plate_number="Sara", order_type="takeaway")

        response = client.get("/api/v1/orders", params={"restaurant_id": 1})

        assert [o["plate_number"] for o in response.json()] == ["T1", "Sara"]

    def test_validation_errors_carry_code(self, client, burger_line):
        response = submit(client, [burger_line], plate_number="")

        assert response.status_code == 400
        assert response.json()["error_code"] == "MISSING_IDENTIFIER"
        assert response.json()["path"] == "/api/v1/orders"

    def test_missing_order(self, client):
        response = client.get("/api/v1/orders/999")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_discount_tip_and_finalize(self, client, burger_line):
        order_id = submit(client, [burger_line]).json()["id"]

        discounted = client.post(
            f"/api/v1/orders/{order_id}/discounts", json={"name": "Staff", "amount": "0.500"}
        )
        assert discounted.json()["total"] == "1.600"

        tipped = client.put(f"/api/v1/orders/{order_id}/tip", json={"tip": "0.400"})
        assert tipped.json()["total"] == "2.000"

        response = client.post(
            f"/api/v1/orders/{order_id}/finalize",
            json={"payment_method": "cash", "tendered_amount": "5"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["change_due"] == "3.000"
        assert body["orders"][0]["status"] == "completed"
        assert body["table_cleared"] is True

    def test_short_tender_rejected(self, client, burger_line):
        order_id = submit(client, [burger_line]).json()["id"]

        response = client.post(
            f"/api/v1/orders/{order_id}/finalize",
            json={"payment_method": "cash", "tendered_amount": "1"},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INSUFFICIENT_TENDER"

    def test_price_preview(self, client, restaurant):
        response = client.post(
            "/api/v1/orders/pricing/preview",
            json={
                "restaurant_id": 1,
                "items": [
                    {
                        "menu_item_id": restaurant.burger.id,
                        "quantity": 3,
                        "modifier_names": ["Large"],
                    }
                ],
                "tendered_amount": "10",
            },
        )

        body = response.json()
        assert body["total"] == "7.875"
        assert body["change_due"] == "2.125"
        assert body["quick_cash"] == ["8.000", "10.000"]

    def test_checkout(self, client, burger_line):
        response = client.post(
            "/api/v1/orders/checkout",
            json={
                "restaurant_id": 1,
                "order_type": "takeaway",
                "plate_number": "Counter",
                "items": [burger_line],
                "payment_method": "card",
            },
        )

        assert response.status_code == 200
        assert response.json()["orders"][0]["payment_method"] == "card"


@pytest.mark.api
class TestKitchenEndpoints:
    def test_summaries_complete_and_expo(self, client, restaurant, burger_line):
        order_id = submit(client, [burger_line]).json()["id"]

        summaries = client.get("/api/v1/kitchen/summaries", params={"restaurant_id": 1}).json()
        assert summaries[0]["key"] == f"{restaurant.burger.id}-"
        assert summaries[0]["total_quantity"] == 1

        completed = client.post(
            f"/api/v1/kitchen/orders/{order_id}/complete", json={"line_index": 0}
        )
        assert completed.json()["status"] == "ready"

        expo = client.get("/api/v1/kitchen/expo", params={"restaurant_id": 1}).json()
        assert expo[0]["can_proceed_to_payment"] is True

    def test_bump(self, client, restaurant, burger_line):
        submit(client, [burger_line])
        submit(client, [burger_line], plate_number="T2")

        response = client.post(
            "/api/v1/kitchen/bump",
            json={"restaurant_id": 1, "key": f"{restaurant.burger.id}-"},
        )

        assert response.json()["items_completed"] == 2

    def test_live_updates(self, client, burger_line):
        """First message is the current state, then one per change"""
        with client.websocket_connect("/api/v1/kitchen/ws/1") as websocket:
            initial = websocket.receive_json()
            assert initial == {"type": "update", "data": []}

            submit(client, [burger_line])

            update = websocket.receive_json()
            assert update["data"][0]["total_quantity"] == 1

            websocket.send_text("ping")
            assert websocket.receive_json() == {"type": "pong"}


@pytest.mark.api
class TestFloorEndpoints:
    def test_floor_and_table_flow(self, client, restaurant, burger_line):
        submit(client, [burger_line])

        floor = client.get("/api/v1/floor/1").json()
        assert [t["status"] for t in floor["tables"]] == ["ordered", "available"]
        assert floor["occupancy_rate"] == 50.0

        selection = client.post(f"/api/v1/floor/1/tables/{restaurant.t1.id}/select", json={})
        assert selection.json()["action"] == "open_ticket"

        finalized = client.post(
            "/api/v1/floor/1/tables/T1/finalize", json={"payment_method": "card"}
        )
        assert finalized.json()["table_cleared"] is True

        selection = client.post(f"/api/v1/floor/1/tables/{restaurant.t1.id}/select", json={})
        assert selection.json()["action"] == "confirm_clear"

    def test_manual_status(self, client, restaurant):
        response = client.put(
            f"/api/v1/floor/1/tables/{restaurant.t2.id}/status",
            json={"manual_status": "seated"},
        )

        assert response.json()["status"] == "seated"


@pytest.mark.api
class TestReportEndpoints:
    def test_z_report(self, client, burger_line):
        order_id = submit(client, [burger_line]).json()["id"]
        client.post(f"/api/v1/orders/{order_id}/finalize", json={"payment_method": "card"})

        response = client.post(
            "/api/v1/reports/z-report", json={"restaurant_id": 1, "cash_counted": "0"}
        )

        assert response.status_code == 201
        report = response.json()
        assert report["total_orders"] == 1
        assert report["card_payments"] == "2.100"
        assert report["id"].endswith("-all")
