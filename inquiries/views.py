import logging

from django.core.exceptions import ValidationError as EmailValidationError
from django.core.validators import validate_email
from pymongo import DESCENDING

from accounts.authentication import protect, soft_protect
from accounts.models import USERS
from accounts.permissions import ADMIN
from houseplans_backend.documents import expand_refs, insert, update_fields
from houseplans_backend.http import (
    NotFound,
    ValidationError,
    json_response,
    lookup_object_id,
    message_response,
    read_payload,
    to_float,
)
from houseplans_backend.mail import notify_admin
from houseplans_backend.mongo_config import collection
from houseplans_backend.uploads import first, store_uploads

from .models import (
    CONTACTABLE_ROLES,
    CORPORATE_INQUIRIES,
    CORPORATE_REQUIRED,
    INQUIRIES,
    CorporateStatus,
    InquiryStatus,
    RequestStatus,
)

logger = logging.getLogger(__name__)


def _get(collection_name, doc_id, message):
    doc = collection(collection_name).find_one({"_id": lookup_object_id(doc_id, message)})
    if not doc:
        raise NotFound(message)
    return doc


def _newest_first(collection_name):
    return list(collection(collection_name).find({}).sort("createdAt", DESCENDING))


def _delete(collection_name, doc_id, not_found, removed):
    doc = _get(collection_name, doc_id, not_found)
    collection(collection_name).delete_one({"_id": doc["_id"]})
    logger.info(f"Deleted {collection_name} {doc['_id']}")
    return message_response(removed)


# --- Inquiries to sellers and contractors ---

@soft_protect
def create_inquiry(request):
    data = read_payload(request)
    required = ["recipient", "recipientInfo", "senderName", "senderEmail", "senderWhatsapp", "requirements"]
    if any(not data.get(f) for f in required):
        raise ValidationError("Please fill all required fields.")

    recipient = collection(USERS).find_one(
        {"_id": lookup_object_id(data["recipient"], "The professional you are trying to contact does not exist.")},
        {"role": 1},
    )
    if not recipient or recipient.get("role") not in CONTACTABLE_ROLES:
        raise NotFound("The professional you are trying to contact does not exist.")

    inquiry = insert(INQUIRIES, {
        "recipient": recipient["_id"],
        "recipientInfo": data["recipientInfo"],
        "senderName": data["senderName"],
        "senderEmail": data["senderEmail"],
        "senderWhatsapp": data["senderWhatsapp"],
        "requirements": data["requirements"],
        "status": InquiryStatus.NEW.value,
        "senderUser": request.account["_id"] if request.account else None,
    })
    notify_admin(
        "New inquiry received",
        f"{data['senderName']} ({data['senderEmail']}) sent an inquiry:\n\n{data['requirements']}",
    )
    return json_response(inquiry, status=201)


@protect(ADMIN)
def list_inquiries(request):
    inquiries = _newest_first(INQUIRIES)
    expand_refs(inquiries, "recipient", USERS, {"name": 1, "businessName": 1, "role": 1, "email": 1})
    return json_response(inquiries)


@protect(ADMIN)
def update_inquiry_status(request, inquiry_id):
    inquiry = _get(INQUIRIES, inquiry_id, "Inquiry not found")
    status = read_payload(request).get("status")
    if status not in InquiryStatus.values:
        raise ValidationError("Invalid status provided.")
    return json_response(update_fields(INQUIRIES, inquiry["_id"], {"status": status}))


@protect(ADMIN)
def delete_inquiry(request, inquiry_id):
    return _delete(INQUIRIES, inquiry_id, "Inquiry not found", "Inquiry removed successfully")


# --- Corporate inquiries ---

def submit_corporate_inquiry(request):
    data = read_payload(request)
    if any(not data.get(f) for f in CORPORATE_REQUIRED):
        raise ValidationError("Please fill all required fields")
    try:
        validate_email(data["workEmail"])
    except EmailValidationError:
        raise ValidationError("Please provide a valid work email")

    stored = store_uploads(request, {"projectBrief": 1})
    fields = {f: data[f] for f in CORPORATE_REQUIRED}
    fields.update(status=CorporateStatus.NEW.value, projectBriefUrl=first(stored, "projectBrief"))
    inquiry = insert(CORPORATE_INQUIRIES, fields)

    notify_admin(
        "New corporate inquiry",
        f"{data['contactPerson']} from {data['companyName']} ({data['workEmail']}) asked about "
        f"{data['projectType']}:\n\n{data['projectDetails']}",
    )
    return message_response(
        "Inquiry submitted successfully. We will get back to you shortly.", status=201, inquiry=inquiry
    )


@protect(ADMIN)
def list_corporate_inquiries(request):
    return json_response(_newest_first(CORPORATE_INQUIRIES))


@protect(ADMIN)
def get_corporate_inquiry(request, inquiry_id):
    return json_response(_get(CORPORATE_INQUIRIES, inquiry_id, "Inquiry not found"))


@protect(ADMIN)
def update_corporate_inquiry(request, inquiry_id):
    inquiry = _get(CORPORATE_INQUIRIES, inquiry_id, "Inquiry not found")
    data = read_payload(request)
    changes = {f: data[f] for f in CORPORATE_REQUIRED + ["status"] if data.get(f)}
    if "status" in changes and changes["status"] not in CorporateStatus.values:
        raise ValidationError("Invalid status provided.")
    return json_response(update_fields(CORPORATE_INQUIRIES, inquiry["_id"], changes))


@protect(ADMIN)
def delete_corporate_inquiry(request, inquiry_id):
    return _delete(CORPORATE_INQUIRIES, inquiry_id, "Inquiry not found", "Inquiry removed successfully")


# --- Customization, standard and premium requests ---

def create_request(request, kind):
    data = read_payload(request)
    if kind.missing(data):
        raise ValidationError("Please fill all required fields.")

    fields = kind.document(data)
    for field in kind.numeric:
        fields[field] = to_float(data[field])
    if kind.upload_field:
        stored = store_uploads(request, {kind.upload_field: 1})
        fields[f"{kind.upload_field}Url"] = first(stored, kind.upload_field)
    fields["status"] = RequestStatus.PENDING.value

    created = insert(kind.collection_name, fields)
    notify_admin(
        f"New {kind.label.lower()}",
        f"{data.get('name')} submitted a {kind.label.lower()} ({created['_id']}).",
    )
    return message_response(kind.message, status=201, request=created)


@protect(ADMIN)
def list_requests(request, kind):
    return json_response(_newest_first(kind.collection_name))


@protect(ADMIN)
def update_request(request, request_id, kind):
    doc = _get(kind.collection_name, request_id, "Request not found.")
    data = read_payload(request)
    changes = {f: data[f] for f in ("status", "adminNotes") if data.get(f)}
    if "status" in changes and changes["status"] not in RequestStatus.values:
        raise ValidationError("Invalid status provided.")
    return json_response(update_fields(kind.collection_name, doc["_id"], changes))


@protect(ADMIN)
def delete_request(request, request_id, kind):
    return _delete(kind.collection_name, request_id, "Request not found.", "Request deleted successfully.")
