import secrets
import string

from django.db import models

from houseplans_backend.mongo_config import collection

ORDERS = "orders"

ORDER_ID_PREFIX = "HPF-"
ORDER_ID_ALPHABET = string.digits + string.ascii_uppercase
ORDER_ID_LENGTH = 8


class PaymentStatus(models.TextChoices):
    COMPLETED = "COMPLETED", "Completed"
    COMPLETED_BY_ADMIN = "COMPLETED_BY_ADMIN", "Completed by admin"
    PAYMENT_SUCCESS = "PAYMENT_SUCCESS", "Payment success"


REQUIRED_SHIPPING_FIELDS = ["name", "email", "phone"]

TOTAL_FIELDS = ["itemsPrice", "taxPrice", "shippingPrice", "totalPrice"]


def generate_order_id():
    """Public order id, ``HPF-`` followed by 8 characters of 0-9A-Z, unique among orders."""
    while True:
        order_id = ORDER_ID_PREFIX + "".join(secrets.choice(ORDER_ID_ALPHABET) for _ in range(ORDER_ID_LENGTH))
        if not collection(ORDERS).find_one({"orderId": order_id}, {"_id": 1}):
            return order_id


def amount_in_paise(order):
    return int(round(float(order.get("totalPrice") or 0) * 100))
