from django.db import models

SELLER_PRODUCTS = "sellerproducts"
SELLER_INQUIRIES = "sellerinquiries"
BRANDS = "brands"
CATEGORIES = "categories"

SELLER_PRODUCT_UPLOADS = {"image": 1, "images": 5}

REQUIRED_FIELDS = ["name", "brand", "category", "price", "city"]

REQUIRED_INQUIRY_FIELDS = ["productId", "name", "email", "phone", "message"]

SELLER_PROFILE = {"businessName": 1, "photoUrl": 1}


class SellerInquiryStatus(models.TextChoices):
    PENDING = "Pending"
    CONTACTED = "Contacted"
    CLOSED = "Closed"
