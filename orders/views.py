import logging
import uuid

import requests
from django.conf import settings
from pymongo import DESCENDING

from accounts.authentication import protect, soft_protect
from accounts.models import USERS
from accounts.permissions import ADMIN, is_admin
from catalog.models import PRODUCTS, PROFESSIONAL_PLANS
from houseplans_backend.documents import expand_refs, insert, update_fields
from houseplans_backend.http import (
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    UpstreamError,
    ValidationError,
    json_response,
    lookup_object_id,
    message_response,
    parse_object_id,
    read_payload,
    to_float,
    to_int,
)
from houseplans_backend.mongo_config import collection

from .models import ORDERS, REQUIRED_SHIPPING_FIELDS, TOTAL_FIELDS, amount_in_paise, generate_order_id
from .payments import (
    AdminOverride,
    PayPalClientAssertion,
    PhonePeCallbackVerifier,
    RazorpaySignatureVerifier,
    confirm_payment,
)
from .services import PhonePeService, RazorpayService

logger = logging.getLogger(__name__)


def get_order_or_404(order_id):
    order = collection(ORDERS).find_one({"_id": lookup_object_id(order_id, "Order not found")})
    if not order:
        raise NotFound("Order not found")
    return order


def payer_email(request, order):
    """The signed-in buyer's email, or the checkout email for guest orders."""
    if request.account:
        return request.account.get("email")
    return (order.get("shippingAddress") or {}).get("email")


def ensure_payer(request, order, data):
    """
    Client-asserted payments must come from the buyer: the signed-in owner (or
    an admin), or, for guest orders, a caller quoting the checkout email.
    """
    account = request.account
    if account:
        if order.get("user") and order["user"] != account["_id"] and not is_admin(account):
            raise PermissionDenied("Not authorized to pay for this order")
        return
    checkout_email = ((order.get("shippingAddress") or {}).get("email") or "").lower()
    quoted = str(data.get("email") or "").strip().lower()
    if order.get("user") or not checkout_email or quoted != checkout_email:
        raise NotAuthenticated("Not authorized, no token")


def _order_item(item):
    if not isinstance(item, dict) or not item.get("productId") or not item.get("name"):
        raise ValidationError("Each order item needs a productId and a name")
    return {
        "productId": parse_object_id(item["productId"], "Invalid product ID in order items"),
        "name": item["name"],
        "quantity": to_int(item.get("quantity"), 1),
        "price": to_float(item.get("price"), 0),
        "image": item.get("image"),
        "size": item.get("size"),
    }


@soft_protect
def add_order_items(request):
    data = read_payload(request)
    items = data.get("orderItems")
    if not items or not isinstance(items, list):
        raise ValidationError("No order items")

    shipping = data.get("shippingAddress") or {}
    if not isinstance(shipping, dict) or any(not shipping.get(f) for f in REQUIRED_SHIPPING_FIELDS):
        raise ValidationError("Shipping name, email and phone are required")
    if not data.get("paymentMethod"):
        raise ValidationError("Payment method is required")

    order = {
        "orderId": generate_order_id(),
        "user": request.account["_id"] if request.account else None,
        "orderItems": [_order_item(item) for item in items],
        "shippingAddress": {
            "name": shipping["name"],
            "email": shipping["email"],
            "phone": shipping["phone"],
            "location": shipping.get("location"),
        },
        "paymentMethod": data["paymentMethod"],
        "isPaid": False,
        "downloadableFiles": [],
    }
    order.update({field: to_float(data.get(field), 0.0) for field in TOTAL_FIELDS})

    created = insert(ORDERS, order)
    logger.info(f"Order {created['orderId']} created for {created.get('user') or 'guest'}")
    return json_response(created, status=201)


def _with_item_products(orders):
    ids = {item["productId"] for order in orders for item in order.get("orderItems", [])}
    found = {}
    for collection_name in (PRODUCTS, PROFESSIONAL_PLANS):
        missing = [i for i in ids if i not in found]
        if missing:
            for doc in collection(collection_name).find({"_id": {"$in": missing}}, {"name": 1, "planFile": 1}):
                found[doc["_id"]] = doc
    for order in orders:
        for item in order.get("orderItems", []):
            item["productId"] = found.get(item["productId"], item["productId"])
    return orders


@protect()
def get_my_orders(request):
    orders = list(collection(ORDERS).find({"user": request.account["_id"]}).sort("createdAt", DESCENDING))
    return json_response(_with_item_products(orders))


def track_order(request, order_id):
    email = (request.GET.get("email") or "").strip().lower()
    order = collection(ORDERS).find_one({"orderId": order_id.strip().upper()})
    if not order or not email or (order.get("shippingAddress") or {}).get("email", "").lower() != email:
        raise NotFound("Order not found")
    return json_response(order)


@protect()
def get_paypal_client_id(request):
    return json_response({"clientId": settings.PAYPAL_CLIENT_ID})


@soft_protect
def create_razorpay_order(request, order_id):
    order = get_order_or_404(order_id)
    try:
        razorpay_order = RazorpayService().create_order(
            amount=amount_in_paise(order), currency="INR", receipt=str(order["_id"])
        )
    except requests.exceptions.RequestException:
        logger.exception(f"Razorpay order creation failed for {order['orderId']}")
        raise UpstreamError("Could not create Razorpay order")

    logger.info(f"Razorpay order {razorpay_order['id']} created for {order['orderId']}")
    return json_response({
        "orderId": razorpay_order["id"],
        "currency": razorpay_order["currency"],
        "amount": razorpay_order["amount"],
    })


@soft_protect
def verify_razorpay_payment(request, order_id):
    data = read_payload(request)
    order = get_order_or_404(order_id)
    result = RazorpaySignatureVerifier().verify(data, payer_email(request, order))
    return json_response(confirm_payment(order["_id"], result))


@soft_protect
def pay_with_paypal(request, order_id):
    data = read_payload(request)
    order = get_order_or_404(order_id)
    ensure_payer(request, order, data)
    result = PayPalClientAssertion().verify(data)
    return json_response(confirm_payment(order["_id"], result))


@soft_protect
def create_phonepe_payment(request, order_id):
    order = get_order_or_404(order_id)
    service = PhonePeService()

    merchant_transaction_id = f"M-{uuid.uuid4()}"
    update_fields(ORDERS, order["_id"], {"merchantTransactionId": merchant_transaction_id})

    merchant_user_id = str(request.account["_id"]) if request.account else order["orderId"]
    payload = service.build_payload(
        merchant_transaction_id=merchant_transaction_id,
        merchant_user_id=merchant_user_id,
        amount=amount_in_paise(order),
        redirect_url=f"{settings.FRONTEND_URL}/dashboard/orders?orderId={order['_id']}",
        callback_url=f"{settings.BACKEND_URL}/api/orders/phonepe-callback",
        mobile_number=(order.get("shippingAddress") or {}).get("phone"),
    )
    try:
        redirect_url = service.create_payment(payload)
    except (requests.exceptions.RequestException, KeyError, TypeError, ValueError):
        logger.exception(f"PhonePe payment creation failed for {order['orderId']}")
        raise UpstreamError("Failed to create PhonePe payment")
    return json_response({"redirectUrl": redirect_url})


def phonepe_callback(request):
    data = read_payload(request)
    verifier = PhonePeCallbackVerifier()
    decoded = verifier.verify(data.get("response"), request.headers.get("X-VERIFY"))

    merchant_transaction_id = (decoded.get("data") or {}).get("merchantTransactionId")
    order = collection(ORDERS).find_one({"merchantTransactionId": merchant_transaction_id}) if merchant_transaction_id else None
    if order is None:
        logger.error(f"PhonePe callback for unknown transaction {merchant_transaction_id}")
        return message_response("Callback received")

    if not verifier.succeeded(decoded):
        logger.warning(f"PhonePe payment for order {order['orderId']} not successful: {decoded.get('code')}")
        return message_response("Callback received")

    email = (order.get("shippingAddress") or {}).get("email")
    confirm_payment(order["_id"], verifier.result(decoded, email))
    return message_response("Payment confirmed")


@protect(ADMIN)
def get_all_orders(request):
    orders = list(collection(ORDERS).find({}).sort("createdAt", DESCENDING))
    expand_refs(orders, "user", USERS, {"name": 1, "email": 1})
    return json_response(orders)


def remove_order(order_id):
    order = get_order_or_404(order_id)
    collection(ORDERS).delete_one({"_id": order["_id"]})
    logger.info(f"Order {order['orderId']} deleted")


def mark_paid_by_admin(admin, order_id):
    order = get_order_or_404(order_id)
    return confirm_payment(order["_id"], AdminOverride().verify(admin, order))


@protect(ADMIN)
def delete_order(request, order_id):
    remove_order(order_id)
    return message_response("Order removed successfully")


@protect(ADMIN)
def update_order_to_paid_by_admin(request, order_id):
    return json_response(mark_paid_by_admin(request.account, order_id))
