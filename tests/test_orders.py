import base64
import json

import pytest
import requests
from bson import ObjectId

from houseplans_backend.mongo_config import collection
from orders import services
from orders.models import ORDERS, amount_in_paise
from orders.services import PHONEPE_PAY_PATH, phonepe_checksum

from .helpers import (
    PHONEPE_SALT_INDEX,
    PHONEPE_SALT_KEY,
    auth,
    make_order,
    make_product,
    razorpay_signature,
    send_json,
    stored,
)


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code
        self.text = json.dumps(payload)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(response=self)

    def json(self):
        return self.payload


def order_payload(product, **overrides):
    payload = {
        "orderItems": [{"productId": str(product["_id"]), "name": "Modern Villa", "quantity": 1, "price": 1499}],
        "shippingAddress": {"name": "Asha", "email": "Asha@Example.com", "phone": "9876543210", "location": "Pune"},
        "paymentMethod": "Razorpay",
        "itemsPrice": 1499,
        "taxPrice": 0,
        "shippingPrice": 0,
        "totalPrice": 1499,
    }
    payload.update(overrides)
    return payload


def callback(client, body, signature=None):
    encoded = base64.b64encode(json.dumps(body).encode()).decode()
    signature = signature or phonepe_checksum(encoded, PHONEPE_SALT_KEY, PHONEPE_SALT_INDEX)
    return send_json(client, "post", "/api/orders/phonepe-callback", {"response": encoded}, HTTP_X_VERIFY=signature)


# --- Order creation and lookup ---

def test_guest_can_place_an_order(client):
    product = make_product("Modern Villa", ["https://files.test/villa.pdf"])

    response = send_json(client, "post", "/api/orders", order_payload(product))

    assert response.status_code == 201
    body = response.json()
    assert body["orderId"].startswith("HPF-") and len(body["orderId"]) == 12
    assert body["isPaid"] is False
    assert body["downloadableFiles"] == []
    assert body["totalPrice"] == 1499.0
    assert "user" not in body
    saved = collection(ORDERS).find_one({"orderId": body["orderId"]})
    assert saved["orderItems"][0]["productId"] == product["_id"]


def test_signed_in_order_belongs_to_the_buyer(client, user):
    product = make_product("Modern Villa", [])

    response = send_json(client, "post", "/api/orders", order_payload(product), user=user)

    assert response.status_code == 201
    assert response.json()["user"] == str(user["_id"])


def test_order_without_items_is_rejected(client):
    response = send_json(client, "post", "/api/orders", {"orderItems": [], "paymentMethod": "Razorpay"})

    assert response.status_code == 400
    assert response.json() == {"message": "No order items"}


def test_order_requires_shipping_contact(client):
    product = make_product("Modern Villa", [])
    payload = order_payload(product, shippingAddress={"name": "Asha"})

    response = send_json(client, "post", "/api/orders", payload)

    assert response.status_code == 400
    assert collection(ORDERS).count_documents({}) == 0


def test_my_orders_expand_purchased_products(client, user):
    product = make_product("Modern Villa", ["https://files.test/villa.pdf"])
    mine = make_order(product, user=user["_id"])
    make_order(product)

    response = client.get("/api/orders/myorders", **auth(user))

    assert response.status_code == 200
    orders = response.json()
    assert [o["_id"] for o in orders] == [str(mine["_id"])]
    assert orders[0]["orderItems"][0]["productId"]["name"] == "Modern Villa"
    assert orders[0]["orderItems"][0]["productId"]["planFile"] == ["https://files.test/villa.pdf"]


def test_track_order_needs_the_shipping_email(client):
    order = make_order(make_product("Duplex", []))

    found = client.get(f"/api/orders/track/{order['orderId'].lower()}", {"email": "ASHA@example.com"})
    wrong = client.get(f"/api/orders/track/{order['orderId']}", {"email": "someone@example.com"})

    assert found.status_code == 200
    assert found.json()["_id"] == str(order["_id"])
    assert wrong.status_code == 404


def test_paypal_client_id_requires_login(client, user):
    assert client.get("/api/orders/paypal/client-id").status_code == 401
    response = client.get("/api/orders/paypal/client-id", **auth(user))
    assert response.json() == {"clientId": "paypal-client-id"}


# --- Razorpay ---

def test_create_razorpay_order_sends_amount_in_paise(client, monkeypatch):
    order = make_order(make_product("Duplex", []), totalPrice=1499.5)
    sent = {}

    def fake_post(url, auth=None, json=None, timeout=None, **kwargs):
        sent.update(url=url, auth=auth, json=json)
        return FakeResponse({"id": "order_rzp_1", "currency": "INR", "amount": json["amount"]})

    monkeypatch.setattr(services.requests, "post", fake_post)

    response = client.post(f"/api/orders/{order['_id']}/create-razorpay-order")

    assert response.status_code == 200
    assert response.json() == {"orderId": "order_rzp_1", "currency": "INR", "amount": 149950}
    assert sent["url"] == "https://api.razorpay.com/v1/orders"
    assert sent["auth"] == ("rzp_test_key", "rzp_test_secret")
    assert sent["json"] == {"amount": 149950, "currency": "INR", "receipt": str(order["_id"])}


def test_create_razorpay_order_reports_provider_failure(client, monkeypatch):
    order = make_order(make_product("Duplex", []))

    def failing_post(*args, **kwargs):
        raise requests.exceptions.ConnectionError("down")

    monkeypatch.setattr(services.requests, "post", failing_post)

    response = client.post(f"/api/orders/{order['_id']}/create-razorpay-order")

    assert response.status_code == 500
    assert response.json() == {"message": "Could not create Razorpay order"}


def test_verify_payment_marks_order_paid(client, user):
    product = make_product("Modern Villa", ["https://files.test/villa.pdf"])
    order = make_order(product, user=user["_id"])
    data = {
        "razorpay_order_id": "order_rzp_1",
        "razorpay_payment_id": "pay_rzp_1",
        "razorpay_signature": razorpay_signature("order_rzp_1", "pay_rzp_1"),
    }

    response = send_json(client, "post", f"/api/orders/{order['_id']}/verify-payment", data, user=user)

    assert response.status_code == 200
    body = response.json()
    assert body["isPaid"] is True
    assert body["paymentResult"]["id"] == "pay_rzp_1"
    assert body["paymentResult"]["email_address"] == user["email"]
    assert body["downloadableFiles"] == [{"productName": "Modern Villa", "fileUrl": "https://files.test/villa.pdf"}]


def test_signature_mismatch_leaves_order_untouched(client):
    order = make_order(make_product("Modern Villa", ["https://files.test/villa.pdf"]))
    before = stored(order)
    data = {"razorpay_order_id": "order_rzp_1", "razorpay_payment_id": "pay_rzp_1", "razorpay_signature": "forged"}

    response = send_json(client, "post", f"/api/orders/{order['_id']}/verify-payment", data)

    assert response.status_code == 400
    assert response.json() == {"message": "Payment verification failed"}
    assert stored(order) == before


def test_verify_payment_for_unknown_order_is_404(client):
    response = send_json(client, "post", f"/api/orders/{ObjectId()}/verify-payment", {})

    assert response.status_code == 404
    assert response.json() == {"message": "Order not found"}


# --- PayPal ---

def test_pay_with_paypal_trusts_client_payload_by_default(client):
    order = make_order(make_product("Modern Villa", []))
    data = {
        "id": "PAY-1", "status": "COMPLETED", "update_time": "now", "payer": {"email_address": "p@x.y"},
        "email": "asha@example.com",
    }

    response = send_json(client, "put", f"/api/orders/{order['_id']}/pay-with-paypal", data)

    assert response.status_code == 200
    assert response.json()["paymentResult"] == {
        "id": "PAY-1", "status": "COMPLETED", "update_time": "now", "email_address": "p@x.y",
    }


def test_pay_with_paypal_can_be_disabled(client, settings):
    settings.PAYPAL_ASSERTION_POLICY = "reject"
    order = make_order(make_product("Modern Villa", []))
    before = stored(order)

    response = send_json(
        client, "put", f"/api/orders/{order['_id']}/pay-with-paypal", {"id": "PAY-1", "email": "asha@example.com"}
    )

    assert response.status_code == 400
    assert stored(order) == before


def test_pay_with_paypal_verify_policy_checks_paypal(client, settings, monkeypatch):
    settings.PAYPAL_ASSERTION_POLICY = "verify"
    monkeypatch.setattr(
        services.PayPalService,
        "get_order_details",
        lambda self, paypal_order_id: {"id": paypal_order_id, "status": "APPROVED"},
    )
    order = make_order(make_product("Modern Villa", []))
    data = {"id": "PAY-9", "payer": {}, "email": "asha@example.com"}

    response = send_json(client, "put", f"/api/orders/{order['_id']}/pay-with-paypal", data)

    assert response.status_code == 400
    assert stored(order)["isPaid"] is False


@pytest.mark.parametrize("email", [None, "someone@example.com"])
def test_guest_paypal_confirmation_needs_the_checkout_email(client, email):
    order = make_order(make_product("Modern Villa", []))
    before = stored(order)

    response = send_json(
        client, "put", f"/api/orders/{order['_id']}/pay-with-paypal", {"id": "PAY-1", "payer": {}, "email": email}
    )

    assert response.status_code == 401
    assert stored(order) == before


def test_paypal_confirmation_for_an_account_order(client, user, make_user):
    order = make_order(make_product("Modern Villa", []), user=user["_id"])
    data = {"id": "PAY-2", "status": "COMPLETED", "payer": {}, "email": "asha@example.com"}
    path = f"/api/orders/{order['_id']}/pay-with-paypal"

    assert send_json(client, "put", path, data).status_code == 401
    assert send_json(client, "put", path, data, user=make_user()).status_code == 403
    assert stored(order)["isPaid"] is False

    paid = send_json(client, "put", path, {"id": "PAY-2", "status": "COMPLETED", "payer": {}}, user=user)
    assert paid.json()["isPaid"] is True


# --- PhonePe ---

def test_create_phonepe_payment_signs_and_stores_transaction(client, monkeypatch):
    order = make_order(make_product("Modern Villa", []), totalPrice=250.0)
    sent = {}

    def fake_post(url, headers=None, json=None, timeout=None, **kwargs):
        sent.update(url=url, headers=headers, json=json)
        return FakeResponse({"data": {"instrumentResponse": {"redirectInfo": {"url": "https://pay.test/abc"}}}})

    monkeypatch.setattr(services.requests, "post", fake_post)

    response = client.post(f"/api/orders/{order['_id']}/create-phonepe-payment")

    assert response.status_code == 200
    assert response.json() == {"redirectUrl": "https://pay.test/abc"}

    transaction_id = stored(order)["merchantTransactionId"]
    assert transaction_id.startswith("M-")
    encoded = sent["json"]["request"]
    payload = json.loads(base64.b64decode(encoded))
    assert payload["merchantTransactionId"] == transaction_id
    assert payload["merchantUserId"] == order["orderId"]
    assert payload["amount"] == amount_in_paise(order) == 25000
    assert payload["paymentInstrument"] == {"type": "PAY_PAGE"}
    assert sent["url"].endswith(PHONEPE_PAY_PATH)
    assert sent["headers"]["X-VERIFY"] == phonepe_checksum(
        encoded, PHONEPE_SALT_KEY, PHONEPE_SALT_INDEX, PHONEPE_PAY_PATH
    )


def test_create_phonepe_payment_reports_provider_failure(client, monkeypatch):
    order = make_order(make_product("Modern Villa", []))
    monkeypatch.setattr(services.requests, "post", lambda *a, **k: FakeResponse({"message": "bad"}, 500))

    response = client.post(f"/api/orders/{order['_id']}/create-phonepe-payment")

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to create PhonePe payment"}


def test_phonepe_success_callback_confirms_payment(client):
    order = make_order(make_product("Modern Villa", ["https://files.test/villa.pdf"]), merchantTransactionId="M-1")

    response = callback(client, {
        "code": "PAYMENT_SUCCESS",
        "data": {"merchantTransactionId": "M-1", "transactionId": "T-100"},
    })

    assert response.status_code == 200
    paid = stored(order)
    assert paid["isPaid"] is True
    assert paid["paymentResult"]["id"] == "T-100"
    assert paid["paymentResult"]["status"] == "PAYMENT_SUCCESS"
    assert paid["paymentResult"]["email_address"] == "asha@example.com"
    assert len(paid["downloadableFiles"]) == 1


def test_phonepe_failure_callback_is_acknowledged_and_order_stays_unpaid(client):
    order = make_order(make_product("Modern Villa", []), merchantTransactionId="M-2")
    before = stored(order)

    response = callback(client, {"code": "PAYMENT_ERROR", "data": {"merchantTransactionId": "M-2"}})

    assert response.status_code == 200
    assert response.json() == {"message": "Callback received"}
    assert stored(order) == before


def test_phonepe_callback_with_bad_checksum_is_rejected(client):
    order = make_order(make_product("Modern Villa", []), merchantTransactionId="M-3")
    before = stored(order)

    response = callback(
        client,
        {"code": "PAYMENT_SUCCESS", "data": {"merchantTransactionId": "M-3"}},
        signature="deadbeef###1",
    )

    assert response.status_code == 400
    assert stored(order) == before


def test_phonepe_callback_for_unknown_transaction_is_acknowledged(client):
    response = callback(client, {"code": "PAYMENT_SUCCESS", "data": {"merchantTransactionId": "M-missing"}})

    assert response.status_code == 200
    assert response.json() == {"message": "Callback received"}


# --- Admin ---

def test_admin_mark_as_paid(client, admin):
    order = make_order(make_product("Modern Villa", []))

    response = send_json(client, "put", f"/api/orders/{order['_id']}/mark-as-paid", user=admin)

    assert response.status_code == 200
    result = response.json()["paymentResult"]
    assert result["status"] == "COMPLETED_BY_ADMIN"
    assert result["id"].startswith(f"admin-{admin['_id']}-")
    assert result["email_address"] == "asha@example.com"


def test_admin_override_on_paid_order_keeps_original_payment(client, admin):
    order = make_order(make_product("Modern Villa", []))
    data = {
        "razorpay_order_id": "order_rzp_1",
        "razorpay_payment_id": "pay_rzp_1",
        "razorpay_signature": razorpay_signature("order_rzp_1", "pay_rzp_1"),
    }
    send_json(client, "post", f"/api/orders/{order['_id']}/verify-payment", data)
    paid = stored(order)

    response = send_json(client, "put", f"/api/orders/{order['_id']}/mark-as-paid", user=admin)

    assert response.status_code == 200
    assert stored(order) == paid
    assert stored(order)["paymentResult"]["id"] == "pay_rzp_1"


def test_mark_as_paid_is_admin_only(client, user):
    order = make_order(make_product("Modern Villa", []))

    response = send_json(client, "put", f"/api/orders/{order['_id']}/mark-as-paid", user=user)

    assert response.status_code == 403
    assert response.json() == {"message": "Not authorized as an admin"}
    assert stored(order)["isPaid"] is False


def test_all_orders_expand_the_buyer(client, admin, user):
    make_order(make_product("Modern Villa", []), user=user["_id"])

    response = client.get("/api/orders/all", **auth(admin))

    assert response.status_code == 200
    buyer = response.json()[0]["user"]
    assert buyer == {"_id": str(user["_id"]), "name": user["name"], "email": user["email"]}


def test_admin_deletes_order(client, admin):
    order = make_order(make_product("Modern Villa", []))

    response = client.delete(f"/api/orders/{order['_id']}", **auth(admin))

    assert response.json() == {"message": "Order removed successfully"}
    assert collection(ORDERS).count_documents({}) == 0


@pytest.mark.parametrize("total, paise", [(0, 0), (10, 1000), (99.99, 9999), (1499.5, 149950)])
def test_amount_in_paise(total, paise):
    assert amount_in_paise({"totalPrice": total}) == paise


def test_order_item_products_must_be_object_ids(client):
    payload = order_payload({"_id": "not-an-id"})

    response = send_json(client, "post", "/api/orders", payload)

    assert response.status_code == 400
    assert collection(ORDERS).count_documents({}) == 0
