from django.urls import path

from houseplans_backend.http import methods

from . import plan_views, views

product_patterns = [
    path('', methods(GET=views.list_products, POST=views.create_product), name='products'),
    path('/admin', methods(GET=views.list_admin_products), name='admin-products'),
    path('/myproducts', methods(GET=views.list_my_products), name='my-products'),
    path('/<str:product_id>/reviews', methods(POST=views.create_product_review), name='product-reviews'),
    path(
        '/<str:product_id>',
        methods(GET=views.get_product, PUT=views.update_product, DELETE=views.delete_product),
        name='product-detail',
    ),
]

media_patterns = [
    path('/products', methods(GET=views.list_media_products), name='media-products'),
]

plan_patterns = [
    path('', methods(GET=plan_views.list_approved_plans, POST=plan_views.create_plan), name='plans'),
    path('/myplans', methods(GET=plan_views.list_my_plans), name='my-plans'),
    path('/<str:plan_id>/reviews', methods(POST=plan_views.create_plan_review), name='plan-reviews'),
    path(
        '/<str:plan_id>',
        methods(GET=plan_views.get_plan, PUT=plan_views.update_plan, DELETE=plan_views.delete_plan),
        name='plan-detail',
    ),
]
