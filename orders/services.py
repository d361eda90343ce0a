import base64
import hashlib
import json
import logging

import requests
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)

PHONEPE_PAY_PATH = "/pg/v1/pay"


def phonepe_checksum(payload, salt_key, salt_index, path=""):
    """
    X-VERIFY value used by PhonePe in both directions:
    ``sha256(payload + path + saltKey) + "###" + saltIndex``.
    """
    digest = hashlib.sha256(f"{payload}{path}{salt_key}".encode()).hexdigest()
    return f"{digest}###{salt_index}"


# --- Razorpay Service ---

class RazorpayService:
    """
    A service class for the Razorpay Orders API.
    """
    def __init__(self):
        self.key_id = settings.RAZORPAY_KEY_ID
        self.key_secret = settings.RAZORPAY_KEY_SECRET
        self.base_url = settings.RAZORPAY_API_BASE

        logger.info(f"RAZORPAY_KEY_ID loaded: {bool(self.key_id)}")
        logger.info(f"RAZORPAY_KEY_SECRET status: {'Loaded' if self.key_secret else 'NOT Loaded'}")

        if not all([self.key_id, self.key_secret, self.base_url]):
            raise ImproperlyConfigured("Razorpay settings are not configured properly.")

    def create_order(self, amount, currency, receipt):
        """
        Creates a Razorpay order for `amount` (smallest currency unit).
        """
        payload = {"amount": amount, "currency": currency, "receipt": receipt}
        try:
            response = requests.post(
                f"{self.base_url}/v1/orders",
                auth=(self.key_id, self.key_secret),
                json=payload,
                timeout=settings.PAYMENT_HTTP_TIMEOUT,
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            logger.error(f"Razorpay API Error: {e.response.status_code} - {e.response.text}")
            raise


# --- PhonePe Service ---

class PhonePeService:
    """
    A service class for the PhonePe standard checkout (PAY_PAGE) API.
    """
    def __init__(self):
        self.merchant_id = settings.PHONEPE_MERCHANT_ID
        self.salt_key = settings.PHONEPE_SALT_KEY
        self.salt_index = settings.PHONEPE_SALT_INDEX
        self.base_url = settings.PHONEPE_API_URL

        logger.info(f"PHONEPE_MERCHANT_ID loaded: {bool(self.merchant_id)}")
        logger.info(f"PHONEPE_SALT_KEY status: {'Loaded' if self.salt_key else 'NOT Loaded'}")

        if not all([self.merchant_id, self.salt_key, self.salt_index, self.base_url]):
            raise ImproperlyConfigured("PhonePe settings are not configured properly.")

    def build_payload(self, merchant_transaction_id, merchant_user_id, amount, redirect_url, callback_url, mobile_number):
        return {
            "merchantId": self.merchant_id,
            "merchantTransactionId": merchant_transaction_id,
            "merchantUserId": merchant_user_id,
            "amount": amount,
            "redirectUrl": redirect_url,
            "redirectMode": "REDIRECT",
            "callbackUrl": callback_url,
            "mobileNumber": mobile_number,
            "paymentInstrument": {"type": "PAY_PAGE"},
        }

    def create_payment(self, payload):
        """
        Posts the signed payload and returns the pay page URL the buyer is
        redirected to.
        """
        encoded = base64.b64encode(json.dumps(payload).encode()).decode()
        headers = {
            "accept": "application/json",
            "Content-Type": "application/json",
            "X-VERIFY": phonepe_checksum(encoded, self.salt_key, self.salt_index, PHONEPE_PAY_PATH),
        }
        logger.info(f"Creating PhonePe payment for transaction {payload['merchantTransactionId']}")
        try:
            response = requests.post(
                f"{self.base_url}{PHONEPE_PAY_PATH}",
                headers=headers,
                json={"request": encoded},
                timeout=settings.PAYMENT_HTTP_TIMEOUT,
            )
            response.raise_for_status()
            return response.json()["data"]["instrumentResponse"]["redirectInfo"]["url"]
        except requests.exceptions.HTTPError as e:
            logger.error(f"PhonePe API Error: {e.response.status_code} - {e.response.text}")
            raise


# --- PayPal Service ---

class PayPalService:
    """
    Read-only PayPal client used to double-check a buyer's capture before
    an order is marked paid.
    """
    def __init__(self):
        self.credentials = (settings.PAYPAL_CLIENT_ID, settings.PAYPAL_CLIENT_SECRET)
        self.base_url = settings.PAYPAL_API_BASE

        logger.info(f"PayPal credentials loaded: {all(self.credentials)}")

        if not all([*self.credentials, self.base_url]):
            raise ImproperlyConfigured("PayPal settings are not configured properly.")

    def get_access_token(self):
        response = requests.post(
            f"{self.base_url}/v1/oauth2/token",
            auth=self.credentials,
            data={"grant_type": "client_credentials"},
            timeout=settings.PAYMENT_HTTP_TIMEOUT,
        )
        response.raise_for_status()
        return response.json()["access_token"]

    def get_order_details(self, paypal_order_id):
        """Fetches the checkout order so its status can be compared with the client's claim."""
        headers = {"Authorization": f"Bearer {self.get_access_token()}"}
        try:
            response = requests.get(
                f"{self.base_url}/v2/checkout/orders/{paypal_order_id}",
                headers=headers,
                timeout=settings.PAYMENT_HTTP_TIMEOUT,
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            logger.error(f"Failed to fetch PayPal order {paypal_order_id}: {e.response.status_code} - {e.response.text}")
            raise
