import hashlib
import hmac
import json

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test.client import BOUNDARY, MULTIPART_CONTENT, encode_multipart

from accounts.services import generate_token
from catalog.models import PRODUCTS, PROFESSIONAL_PLANS
from houseplans_backend.documents import insert
from houseplans_backend.mongo_config import collection
from orders.models import ORDERS, generate_order_id

RAZORPAY_SECRET = "rzp_test_secret"
PHONEPE_SALT_KEY = "phonepe-test-salt"
PHONEPE_SALT_INDEX = "1"


def auth(user):
    return {"HTTP_AUTHORIZATION": f"Bearer {generate_token(user['_id'])}"}


def send_json(client, method, path, data=None, user=None, **extra):
    headers = auth(user) if user else {}
    headers.update(extra)
    body = json.dumps(data if data is not None else {})
    return getattr(client, method)(path, body, content_type="application/json", **headers)


def send_form(client, method, path, data, user=None):
    """Multipart body for verbs the test client only sends raw (PUT, PATCH)."""
    headers = auth(user) if user else {}
    return getattr(client, method)(path, encode_multipart(BOUNDARY, data), content_type=MULTIPART_CONTENT, **headers)


def upload(name="file.png", content=b"data", content_type="image/png"):
    return SimpleUploadedFile(name, content, content_type=content_type)


def razorpay_signature(order_id, payment_id, secret=RAZORPAY_SECRET):
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


def make_product(name, plan_files, collection_name=PRODUCTS, **fields):
    field = "planName" if collection_name == PROFESSIONAL_PLANS else "name"
    return insert(collection_name, {field: name, "price": 999.0, "planFile": plan_files, **fields})


def make_order(*products, **fields):
    order = {
        "orderId": generate_order_id(),
        "orderItems": [{"productId": p["_id"], "name": "item", "quantity": 1, "price": 999.0} for p in products],
        "shippingAddress": {"name": "Asha", "email": "asha@example.com", "phone": "9876543210"},
        "paymentMethod": "Razorpay",
        "isPaid": False,
        "downloadableFiles": [],
        "totalPrice": 999.0,
    }
    order.update(fields)
    return insert(ORDERS, order)


def stored(order):
    return collection(ORDERS).find_one({"_id": order["_id"]})
