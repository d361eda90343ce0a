from django.db import models

PRODUCTS = "products"
PROFESSIONAL_PLANS = "professionalplans"


class ProductStatus(models.TextChoices):
    PUBLISHED = "Published", "Published"
    PENDING_REVIEW = "Pending Review", "Pending Review"
    DRAFT = "Draft", "Draft"


class PlanStatus(models.TextChoices):
    PENDING_REVIEW = "Pending Review", "Pending Review"
    APPROVED = "Approved", "Approved"
    REJECTED = "Rejected", "Rejected"


class Direction(models.TextChoices):
    NORTH = "North", "North"
    SOUTH = "South", "South"
    EAST = "East", "East"
    WEST = "West", "West"
    NORTH_EAST = "North-East", "North-East"
    NORTH_WEST = "North-West", "North-West"
    SOUTH_EAST = "South-East", "South-East"
    SOUTH_WEST = "South-West", "South-West"


class PlanType(models.TextChoices):
    FLOOR_PLANS = "Floor Plans", "Floor Plans"
    FLOOR_PLAN_3D = "Floor Plan + 3D Elevations", "Floor Plan + 3D Elevations"
    ELEVATIONS_3D = "3D Elevations", "3D Elevations"
    INTERIOR_DESIGNS = "Interior Designs", "Interior Designs"
    CONSTRUCTION_PRODUCTS = "Construction Products", "Construction Products"
    DOWNLOADS = "Downloads", "Downloads"


class PropertyType(models.TextChoices):
    RESIDENTIAL = "Residential", "Residential"
    COMMERCIAL = "Commercial", "Commercial"
    RENTAL = "Rental", "Rental"


PRODUCT_UPLOADS = {"mainImage": 1, "galleryImages": 5, "planFile": 10, "headerImage": 1}
PLAN_UPLOADS = {"mainImage": 1, "galleryImages": 5, "planFile": 1, "headerImage": 1}

# Fields an author may change through the update endpoint.
PRODUCT_EDITABLE_FIELDS = [
    "name", "description", "plotSize", "city", "bathrooms", "kitchen", "floors", "direction",
    "planType", "propertyType", "youtubeLink", "productNo",
]
PRODUCT_NUMERIC_FIELDS = ["price", "salePrice", "plotArea", "rooms", "taxRate"]

PLAN_EDITABLE_FIELDS = [
    "description", "category", "plotSize", "bathrooms", "kitchen", "floors", "youtubeLink", "productNo",
    "direction", "planType",
]
PLAN_NUMERIC_FIELDS = ["price", "salePrice", "plotArea", "rooms"]


def effective_price(product):
    if product.get("isSale") and (product.get("salePrice") or 0) > 0:
        return product["salePrice"]
    return product.get("price", 0)


def product_name(product):
    """Display name across native products, imported legacy rows and professional plans."""
    return product.get("name") or product.get("Name") or product.get("planName") or "Untitled"


def plan_files(product):
    """Plan files as a list; older professional plans hold a single URL string."""
    files = product.get("planFile") or []
    return [files] if isinstance(files, str) else list(files)
