from __future__ import annotations

from fastapi.testclient import TestClient

from foh.api.main import app


def test_dine_in_order_to_settled_bill() -> None:
    with TestClient(app) as client:
        order_response = client.post(
            "/v1/orders",
            json={
                "orderType": "dine-in",
                "tableId": "tbl_003",
                "lines": [
                    {"itemId": "itm_butter_chicken", "quantity": 1},
                    {"itemId": "itm_butter_naan", "quantity": 2},
                ],
            },
            headers={"X-Staff-Id": "stf_001"},
        )
        assert order_response.status_code == 201
        order = order_response.json()
        assert order["total"]["amountCents"] == 47000

        table = client.get("/v1/tables/tbl_003").json()
        assert table["status"] == "occupied"
        assert table["currentOrderId"] == order["orderId"]

        for status in ("preparing", "served"):
            response = client.post(f"/v1/orders/{order['orderId']}/status", json={"status": status})
            assert response.status_code == 200
            assert response.json()["status"] == status

        bill_response = client.post(
            "/v1/bills",
            json={"orderId": order["orderId"], "taxPercent": "5", "discountPercent": "10"},
        )
        assert bill_response.status_code == 201
        bill = bill_response.json()
        assert bill["finalTotal"]["amountCents"] == 44650

        settle_response = client.post(
            f"/v1/bills/{bill['billId']}/settle",
            json={"paymentMethod": "upi", "tableId": "tbl_003"},
        )
        assert settle_response.status_code == 200
        assert settle_response.json()["paymentStatus"] == "paid"

        table = client.get("/v1/tables/tbl_003").json()
        assert table["status"] == "available"
        assert table["currentOrderId"] is None

        summary = client.get("/v1/analytics/today").json()
        assert summary["revenue"]["amountCents"] == 44650
        assert summary["orderCount"] == 1
        assert summary["customersServed"] == 1
        assert summary["activeTables"] == 0


def test_only_one_active_bill_per_order() -> None:
    with TestClient(app) as client:
        order_id = client.post(
            "/v1/orders",
            json={
                "orderType": "takeaway",
                "customerName": "Asha",
                "lines": [{"itemId": "itm_sweet_lassi", "quantity": 2}],
            },
        ).json()["orderId"]

        first = client.post("/v1/bills", json={"orderId": order_id})
        second = client.post("/v1/bills", json={"orderId": order_id})

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error"]["code"] == "BILL_ALREADY_EXISTS"

        failed = client.post(f"/v1/bills/{first.json()['billId']}/fail")
        assert failed.json()["paymentStatus"] == "failed"
        assert client.post("/v1/bills", json={"orderId": order_id}).status_code == 201


def test_menu_is_served_from_cache_after_first_read() -> None:
    with TestClient(app) as client:
        first = client.get("/v1/menu")
        assert first.status_code == 200
        assert {"Starters", "Main Course", "Breads"} <= set(first.json()["categories"])

        not_modified = client.get("/v1/menu", headers={"If-None-Match": first.headers["etag"]})
        assert not_modified.status_code == 304


def test_order_lines_keep_the_order_they_were_entered_in() -> None:
    entered = ["itm_dal_makhani", "itm_butter_naan", "itm_sweet_lassi"]
    with TestClient(app) as client:
        response = client.post(
            "/v1/orders",
            json={
                "orderType": "takeaway",
                "customerName": "Asha",
                "lines": [{"itemId": item_id, "quantity": 1} for item_id in entered],
            },
        )
        assert response.status_code == 201
        order = response.json()
        assert [line["itemId"] for line in order["lines"]] == entered

        fetched = client.get(f"/v1/orders/{order['orderId']}").json()
        assert [line["itemId"] for line in fetched["lines"]] == entered
