from django.urls import include, path

from carts.urls import cart_patterns, wishlist_patterns
from catalog.urls import media_patterns, plan_patterns, product_patterns
from content.urls import blog_patterns, gallery_patterns
from inquiries.urls import (
    corporate_patterns,
    customization_patterns,
    inquiry_patterns,
    premium_patterns,
    standard_patterns,
)
from sellers.urls import inquiry_patterns as seller_inquiry_patterns

# App routes start with '/' so each resource root has no trailing slash (APPEND_SLASH is off).
urlpatterns = [
    path('api/users', include('accounts.urls')),
    path('api/products', include(product_patterns)),
    path('api/media', include(media_patterns)),
    path('api/professional-plans', include(plan_patterns)),
    path('api/seller/products', include('sellers.urls')),
    path('api/sellerinquiries', include(seller_inquiry_patterns)),
    path('api/cart', include(cart_patterns)),
    path('api/wishlist', include(wishlist_patterns)),
    path('api/orders', include('orders.urls')),
    path('api/inquiries', include(inquiry_patterns)),
    path('api/corporate-inquiries', include(corporate_patterns)),
    path('api/customize', include(customization_patterns)),
    path('api/standard-requests', include(standard_patterns)),
    path('api/premium-requests', include(premium_patterns)),
    path('api/blogs', include(blog_patterns)),
    path('api/gallery', include(gallery_patterns)),
    path('api/admin', include('dashboard.urls')),
]

handler404 = 'houseplans_backend.middleware.not_found'
handler500 = 'houseplans_backend.middleware.server_error'
