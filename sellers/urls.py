from django.urls import path

from houseplans_backend.http import methods

from . import inquiry_views, views

urlpatterns = [
    path('/public', methods(GET=views.list_public_seller_products), name='public-seller-products'),
    path('/brands', methods(GET=views.list_brands), name='seller-brands'),
    path('/categories', methods(GET=views.list_categories), name='seller-categories'),
    path('/myproducts', methods(GET=views.list_my_seller_products), name='my-seller-products'),
    path('', methods(POST=views.create_seller_product), name='seller-products'),
    path(
        '/<str:product_id>',
        methods(PUT=views.update_seller_product, DELETE=views.delete_seller_product),
        name='seller-product-detail',
    ),
]

inquiry_patterns = [
    path('', methods(POST=inquiry_views.create_seller_inquiry), name='seller-inquiries'),
    path('/my', methods(GET=inquiry_views.list_my_seller_inquiries), name='my-seller-inquiries'),
    path('/all', methods(GET=inquiry_views.list_all_seller_inquiries), name='all-seller-inquiries'),
    path('/<str:inquiry_id>', methods(GET=inquiry_views.get_seller_inquiry), name='seller-inquiry-detail'),
    path(
        '/<str:inquiry_id>/status',
        methods(PUT=inquiry_views.update_seller_inquiry_status),
        name='seller-inquiry-status',
    ),
]
