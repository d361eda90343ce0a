import logging

from pymongo import DESCENDING

from accounts.authentication import protect, soft_protect
from accounts.models import USERS, Role
from accounts.permissions import ADMIN, SELLER, is_admin, owns
from houseplans_backend.documents import expand_refs, insert, update_fields
from houseplans_backend.http import (
    NotAuthenticated,
    NotFound,
    ValidationError,
    json_response,
    lookup_object_id,
    read_payload,
)
from houseplans_backend.mongo_config import collection

from .models import REQUIRED_INQUIRY_FIELDS, SELLER_INQUIRIES, SELLER_PRODUCTS, SellerInquiryStatus

logger = logging.getLogger(__name__)


def _inquiry_for(request, inquiry_id, action):
    """Loads an inquiry the acting seller owns; admins may open any."""
    account = request.account
    if account.get("role") not in (Role.SELLER.value, Role.ADMIN.value):
        raise NotAuthenticated("Not authorized for this action")
    inquiry = collection(SELLER_INQUIRIES).find_one({"_id": lookup_object_id(inquiry_id, "Inquiry not found")})
    if not inquiry:
        raise NotFound("Inquiry not found")
    if not is_admin(account) and not owns(account, inquiry.get("seller")):
        raise NotAuthenticated(f"Not authorized to {action} this inquiry")
    return inquiry


@soft_protect
def create_seller_inquiry(request):
    data = read_payload(request)
    if any(not data.get(f) for f in REQUIRED_INQUIRY_FIELDS):
        raise ValidationError("Please fill all required fields.")

    product = collection(SELLER_PRODUCTS).find_one(
        {"_id": lookup_object_id(data["productId"], "Product not found")}, {"seller": 1}
    )
    if not product:
        raise NotFound("Product not found")

    inquiry = insert(SELLER_INQUIRIES, {
        "product": product["_id"],
        "seller": product.get("seller"),
        "user": request.account["_id"] if request.account else None,
        "name": data["name"],
        "email": data["email"],
        "phone": data["phone"],
        "message": data["message"],
        "status": SellerInquiryStatus.PENDING.value,
    })
    logger.info(f"Seller inquiry {inquiry['_id']} created for product {product['_id']}")
    return json_response(inquiry, status=201)


@protect(SELLER)
def list_my_seller_inquiries(request):
    inquiries = list(
        collection(SELLER_INQUIRIES).find({"seller": request.account["_id"]}).sort("createdAt", DESCENDING)
    )
    expand_refs(inquiries, "product", SELLER_PRODUCTS, {"name": 1, "image": 1})
    return json_response(inquiries)


@protect(ADMIN)
def list_all_seller_inquiries(request):
    inquiries = list(collection(SELLER_INQUIRIES).find({}).sort("createdAt", DESCENDING))
    expand_refs(inquiries, "product", SELLER_PRODUCTS, {"name": 1})
    expand_refs(inquiries, "seller", USERS, {"businessName": 1})
    return json_response(inquiries)


@protect()
def get_seller_inquiry(request, inquiry_id):
    inquiry = _inquiry_for(request, inquiry_id, "view")
    docs = [inquiry]
    expand_refs(docs, "product", SELLER_PRODUCTS, None)
    expand_refs(docs, "seller", USERS, {"businessName": 1, "email": 1, "phone": 1})
    expand_refs(docs, "user", USERS, {"name": 1, "email": 1})
    return json_response(inquiry)


@protect()
def update_seller_inquiry_status(request, inquiry_id):
    inquiry = _inquiry_for(request, inquiry_id, "update")
    status = read_payload(request).get("status")
    if not status:
        return json_response(inquiry)
    if status not in SellerInquiryStatus.values:
        raise ValidationError("Invalid status value.")
    return json_response(update_fields(SELLER_INQUIRIES, inquiry["_id"], {"status": status}))
