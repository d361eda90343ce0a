from django.db import models

from accounts.models import Role

INQUIRIES = "inquiries"
CORPORATE_INQUIRIES = "corporateinquiries"
CUSTOMIZATION_REQUESTS = "customizationrequests"
STANDARD_REQUESTS = "standardrequests"
PREMIUM_REQUESTS = "premiumrequests"

# Roles that can be contacted through the public inquiry form.
CONTACTABLE_ROLES = {Role.SELLER.value, Role.CONTRACTOR.value}


class InquiryStatus(models.TextChoices):
    NEW = "New", "New"
    CONTACTED = "Contacted", "Contacted"
    CLOSED = "Closed", "Closed"


class CorporateStatus(models.TextChoices):
    NEW = "New", "New"
    CONTACTED = "Contacted", "Contacted"
    IN_PROGRESS = "In Progress", "In Progress"
    CLOSED = "Closed", "Closed"


class RequestStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    CONTACTED = "Contacted", "Contacted"
    IN_PROGRESS = "In Progress", "In Progress"
    COMPLETED = "Completed", "Completed"
    CANCELLED = "Cancelled", "Cancelled"


class RequestKind:
    """
    One family of public service requests: where it is stored, which form
    fields it takes and how it is announced to the admins.
    """

    def __init__(self, collection_name, label, required, optional=(), renamed=None, upload_field=None,
                 numeric=(), message="Request submitted successfully! Our team will contact you shortly."):
        self.collection_name = collection_name
        self.label = label
        self.required = list(required)
        self.optional = list(optional)
        self.renamed = renamed or {}
        self.upload_field = upload_field
        self.numeric = list(numeric)
        self.message = message

    def document(self, data):
        doc = {}
        for field in self.required + self.optional:
            value = data.get(field)
            if value in (None, ""):
                continue
            doc[self.renamed.get(field, field)] = value
        return doc

    def missing(self, data):
        return [f for f in self.required if data.get(f) in (None, "")]


CUSTOMIZATION = RequestKind(
    CUSTOMIZATION_REQUESTS,
    "Customization request",
    required=["country", "requestType", "name", "email", "whatsappNumber"],
    optional=[
        "width", "length", "roomWidth", "roomLength", "facingDirection", "planForFloor",
        "elevationType", "designFor", "description",
    ],
    renamed={"country": "countryName"},
    upload_field="referenceFile",
)

STANDARD = RequestKind(
    STANDARD_REQUESTS,
    "Standard request",
    required=["packageName", "name", "whatsapp", "city", "totalArea", "projectDetails"],
    optional=["plotSize", "floors", "spaceType", "preferredStyle"],
    numeric=["totalArea"],
)

PREMIUM = RequestKind(
    PREMIUM_REQUESTS,
    "Premium request",
    required=["packageName", "name", "whatsapp", "city", "totalArea", "projectDetails"],
    optional=["plotSize", "floors", "spaceType", "preferredStyle"],
    numeric=["totalArea"],
    message="Premium request submitted successfully! Our team will contact you shortly.",
)

CORPORATE_REQUIRED = ["companyName", "contactPerson", "workEmail", "phoneNumber", "projectType", "projectDetails"]
