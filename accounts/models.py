from django.db import models

USERS = "users"


class Role(models.TextChoices):
    USER = "user", "User"
    PROFESSIONAL = "professional", "Professional"
    SELLER = "seller", "Seller"
    CONTRACTOR = "Contractor", "Contractor"
    ADMIN = "admin", "Admin"


class ApprovalStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    APPROVED = "Approved", "Approved"
    REJECTED = "Rejected", "Rejected"


# Roles whose accounts need admin approval before they can log in.
MODERATED_ROLES = {Role.PROFESSIONAL.value, Role.SELLER.value, Role.CONTRACTOR.value}

ROLE_FIELDS = {
    Role.USER.value: ["name"],
    Role.PROFESSIONAL.value: ["name", "profession", "city", "experience"],
    Role.SELLER.value: ["businessName", "address", "city", "materialType"],
    Role.CONTRACTOR.value: ["name", "companyName", "address", "city", "experience", "profession"],
    Role.ADMIN.value: ["name"],
}

ROLE_FIELD_LABELS = {
    "name": "Full Name",
    "profession": "Profession",
    "city": "City",
    "experience": "Experience",
    "businessName": "Business Name",
    "address": "Address",
    "materialType": "Material Type",
    "companyName": "Company Name",
}

UPLOAD_FIELDS = {"photo": 1, "businessCertification": 1, "shopImage": 1}

UPLOAD_TARGETS = {
    "photo": "photoUrl",
    "businessCertification": "businessCertificationUrl",
    "shopImage": "shopImageUrl",
}

WITHOUT_PASSWORD = {"password": 0}


def display_name(user):
    return user.get("name") or user.get("businessName") or user.get("companyName")
