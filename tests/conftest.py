import mongomock
import pytest
from django.test import Client

from accounts.models import USERS, ApprovalStatus, Role
from accounts.services import hash_password
from houseplans_backend import firebase_config, mongo_config
from houseplans_backend.documents import insert

from .helpers import PHONEPE_SALT_INDEX, PHONEPE_SALT_KEY, RAZORPAY_SECRET


@pytest.fixture(autouse=True)
def app_settings(settings):
    settings.JWT_SECRET = "test-jwt-secret"
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
    settings.RAZORPAY_KEY_ID = "rzp_test_key"
    settings.RAZORPAY_KEY_SECRET = RAZORPAY_SECRET
    settings.PAYPAL_CLIENT_ID = "paypal-client-id"
    settings.PAYPAL_CLIENT_SECRET = "paypal-client-secret"
    settings.PAYPAL_ASSERTION_POLICY = "trust"
    settings.PHONEPE_MERCHANT_ID = "MERCHANTUAT"
    settings.PHONEPE_SALT_KEY = PHONEPE_SALT_KEY
    settings.PHONEPE_SALT_INDEX = PHONEPE_SALT_INDEX
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
    settings.ADMIN_NOTIFICATION_EMAIL = "admin@houseplanfiles.test"
    settings.DEBUG = False
    return settings


@pytest.fixture(autouse=True)
def mongo(monkeypatch):
    db = mongomock.MongoClient(tz_aware=True)["houseplans_test"]
    mongo_config.ensure_indexes(db)
    monkeypatch.setattr(mongo_config, "db", db)
    return db


@pytest.fixture(autouse=True)
def uploaded(monkeypatch):
    """Keys of every file pushed to object storage during the test."""
    keys = []

    def fake_upload(key, fileobj, content_type=None):
        keys.append(key)
        return f"https://storage.test/{key}"

    monkeypatch.setattr(firebase_config, "upload_blob", fake_upload)
    return keys


@pytest.fixture
def client():
    return Client()


@pytest.fixture
def make_user():
    counter = iter(range(1, 10_000))

    def _make(role=Role.USER.value, **fields):
        n = next(counter)
        doc = {
            "name": f"{role.title()} {n}",
            "email": f"{role.lower()}{n}@example.com",
            "password": hash_password("secret123"),
            "phone": f"98765{n:05d}",
            "role": role,
            "isApproved": True,
            "status": ApprovalStatus.APPROVED.value,
        }
        doc.update(fields)
        return insert(USERS, doc)

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(Role.ADMIN.value)


@pytest.fixture
def professional(make_user):
    return make_user(Role.PROFESSIONAL.value, profession="Architect", city="Pune", experience="5")


@pytest.fixture
def seller(make_user):
    return make_user(Role.SELLER.value, name=None, businessName="Stone Works", city="Jaipur")
