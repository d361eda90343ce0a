"""
Payment confirmation.

Each provider has its own verifier that turns a raw "payment succeeded"
signal into a ``VerifiedResult`` or raises ``PaymentVerificationError``.
``confirm_payment`` is the only place an order becomes paid:

    result = RazorpaySignatureVerifier().verify(request_data, payer_email)
    order = confirm_payment(order["_id"], result)

The unpaid -> paid transition is a single conditional write keyed on
``isPaid: False``, so a second confirmation (sequential or concurrent) finds
nothing to update and returns the stored order untouched.
"""

import base64
import binascii
import hashlib
import hmac
import json
import logging
from dataclasses import asdict, dataclass

import requests
from bson import ObjectId
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from pymongo import ReturnDocument

from catalog.models import PRODUCTS, PROFESSIONAL_PLANS, plan_files, product_name
from houseplans_backend.documents import update_fields, utcnow
from houseplans_backend.http import NotFound, PaymentVerificationError, UpstreamError, ValidationError
from houseplans_backend.mongo_config import collection

from .models import ORDERS, PaymentStatus
from .services import PayPalService, phonepe_checksum

logger = logging.getLogger(__name__)

PAYPAL_POLICIES = ("trust", "verify", "reject")


@dataclass(frozen=True)
class VerifiedResult:
    id: str
    status: str
    update_time: str
    email_address: str | None = None

    def as_document(self):
        return asdict(self)


def _timestamp():
    return utcnow().isoformat()


def _epoch_millis():
    return int(utcnow().timestamp() * 1000)


class RazorpaySignatureVerifier:
    """``hex(HMAC-SHA256(key_secret, "<order_id>|<payment_id>"))`` must equal the client signature."""

    def __init__(self, key_secret=None):
        self.key_secret = key_secret or settings.RAZORPAY_KEY_SECRET
        if not self.key_secret:
            raise ImproperlyConfigured("RAZORPAY_KEY_SECRET is not configured.")

    def expected_signature(self, razorpay_order_id, razorpay_payment_id):
        message = f"{razorpay_order_id}|{razorpay_payment_id}".encode()
        return hmac.new(self.key_secret.encode(), message, hashlib.sha256).hexdigest()

    def verify(self, data, payer_email=None):
        order_id = data.get("razorpay_order_id")
        payment_id = data.get("razorpay_payment_id")
        signature = data.get("razorpay_signature")
        if not order_id or not payment_id or not signature:
            raise PaymentVerificationError()

        expected = self.expected_signature(order_id, payment_id)
        if not hmac.compare_digest(expected, str(signature)):
            logger.warning(f"Razorpay signature mismatch for payment {payment_id}")
            raise PaymentVerificationError()

        return VerifiedResult(
            id=payment_id,
            status=PaymentStatus.COMPLETED.value,
            update_time=_timestamp(),
            email_address=payer_email,
        )


class PayPalClientAssertion:
    """
    The PayPal checkout posts its capture result from the browser, unsigned.
    What happens to it is a per-deployment choice (``PAYPAL_ASSERTION_POLICY``):

    - ``trust``: accept the client payload as is.
    - ``verify``: look the PayPal order up server side, it must be COMPLETED.
    - ``reject``: the path is disabled.
    """

    def __init__(self, policy=None, service_class=PayPalService):
        self.policy = (policy or settings.PAYPAL_ASSERTION_POLICY).lower()
        if self.policy not in PAYPAL_POLICIES:
            raise ImproperlyConfigured(f"Unknown PAYPAL_ASSERTION_POLICY '{self.policy}'.")
        self.service_class = service_class

    def verify(self, data):
        if self.policy == "reject":
            logger.warning("PayPal client assertion received while the path is disabled")
            raise PaymentVerificationError("PayPal payment confirmation is disabled")

        payer = data.get("payer") or {}
        if not data.get("id") or not isinstance(payer, dict):
            raise ValidationError("Invalid PayPal payment payload")

        result = VerifiedResult(
            id=data["id"],
            status=data.get("status"),
            update_time=data.get("update_time"),
            email_address=payer.get("email_address"),
        )
        if self.policy == "trust":
            return result

        try:
            details = self.service_class().get_order_details(data["id"])
        except requests.exceptions.RequestException:
            logger.exception(f"Could not look up PayPal order {data['id']}")
            raise UpstreamError("Could not verify PayPal payment")

        if details.get("status") != PaymentStatus.COMPLETED.value:
            logger.warning(f"PayPal order {data['id']} is {details.get('status')}, not COMPLETED")
            raise PaymentVerificationError()

        email = (details.get("payer") or {}).get("email_address") or result.email_address
        return VerifiedResult(
            id=details["id"],
            status=details["status"],
            update_time=details.get("update_time") or result.update_time or _timestamp(),
            email_address=email,
        )


class PhonePeCallbackVerifier:
    """
    Server-to-server callback: ``{"response": <base64 json>}`` with
    ``X-VERIFY = sha256(response + saltKey) + "###" + saltIndex``.
    """

    def __init__(self, salt_key=None, salt_index=None):
        self.salt_key = salt_key or settings.PHONEPE_SALT_KEY
        self.salt_index = salt_index or settings.PHONEPE_SALT_INDEX
        if not self.salt_key:
            raise ImproperlyConfigured("PHONEPE_SALT_KEY is not configured.")

    def verify(self, encoded_response, x_verify):
        """Returns the decoded callback body; raises when the checksum does not match."""
        if not encoded_response or not x_verify:
            raise PaymentVerificationError()

        expected = phonepe_checksum(encoded_response, self.salt_key, self.salt_index)
        if not hmac.compare_digest(expected, str(x_verify)):
            logger.warning("PhonePe callback checksum mismatch")
            raise PaymentVerificationError()

        try:
            decoded = json.loads(base64.b64decode(encoded_response))
        except (binascii.Error, ValueError):
            raise ValidationError("Invalid callback payload")
        if not isinstance(decoded, dict):
            raise ValidationError("Invalid callback payload")
        return decoded

    @staticmethod
    def succeeded(decoded):
        return decoded.get("code") == PaymentStatus.PAYMENT_SUCCESS.value

    @staticmethod
    def result(decoded, payer_email=None):
        data = decoded.get("data") or {}
        return VerifiedResult(
            id=data.get("transactionId") or data.get("merchantTransactionId"),
            status=decoded["code"],
            update_time=_timestamp(),
            email_address=payer_email,
        )


class AdminOverride:
    """Manual confirmation by an administrator, no provider involved."""

    def verify(self, admin, order):
        return VerifiedResult(
            id=f"admin-{admin['_id']}-{_epoch_millis()}",
            status=PaymentStatus.COMPLETED_BY_ADMIN.value,
            update_time=_timestamp(),
            email_address=(order.get("shippingAddress") or {}).get("email"),
        )


def _find_purchasable(product_id):
    if not ObjectId.is_valid(str(product_id)):
        return None
    oid = ObjectId(str(product_id))
    for collection_name in (PRODUCTS, PROFESSIONAL_PLANS):
        doc = collection(collection_name).find_one({"_id": oid}, {"name": 1, "Name": 1, "planName": 1, "planFile": 1})
        if doc:
            return doc
    return None


def downloadable_files(order_items):
    """
    One ``{productName, fileUrl}`` per line item whose product has at least
    one plan file; missing products and products without files are skipped.
    """
    files = []
    for item in order_items:
        product = _find_purchasable(item.get("productId"))
        if product is None:
            logger.warning(f"Ordered product {item.get('productId')} no longer exists, skipping its files")
            continue
        urls = plan_files(product)
        if urls:
            files.append({"productName": product_name(product), "fileUrl": urls[0]})
    return files


def confirm_payment(order_id, result):
    """
    Marks the order paid with `result` unless it already is, then attaches
    the buyer's downloadable files. Returns the current order.
    """
    now = utcnow()
    paid = collection(ORDERS).find_one_and_update(
        {"_id": order_id, "isPaid": False},
        {"$set": {"isPaid": True, "paidAt": now, "paymentResult": result.as_document(), "updatedAt": now}},
        return_document=ReturnDocument.AFTER,
    )
    if paid is None:
        order = collection(ORDERS).find_one({"_id": order_id})
        if order is None:
            raise NotFound("Order not found")
        logger.info(f"Order {order.get('orderId')} is already paid, confirmation {result.id} ignored")
        return order

    logger.info(f"Order {paid.get('orderId')} marked paid ({result.status}, {result.id})")
    files = downloadable_files(paid.get("orderItems", []))
    return update_fields(ORDERS, order_id, {"downloadableFiles": files})
