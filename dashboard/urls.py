from django.urls import path

from houseplans_backend.http import methods
from orders import views as order_views

from . import views

urlpatterns = [
    path('/summary', methods(GET=views.summary), name='admin-summary'),
    path('/users', methods(GET=views.list_users), name='admin-users'),
    path('/users/<str:user_id>', methods(PUT=views.update_user, DELETE=views.delete_user), name='admin-user-detail'),
    path('/orders', methods(GET=order_views.get_all_orders), name='admin-orders'),
    path('/orders/<str:order_id>', methods(DELETE=views.delete_order), name='admin-order-detail'),
    path('/orders/<str:order_id>/pay', methods(PUT=views.pay_order), name='admin-order-pay'),
    path('/products', methods(GET=views.list_products), name='admin-all-products'),
    path('/professional-plans', methods(GET=views.list_professional_plans), name='admin-plans'),
    path('/professional-plans/<str:plan_id>', methods(DELETE=views.delete_professional_plan), name='admin-plan-detail'),
    path('/professional-plans/<str:plan_id>/status', methods(PUT=views.update_plan_status), name='admin-plan-status'),
    path('/requests-inquiries', methods(GET=views.requests_and_inquiries), name='admin-requests-inquiries'),
    path('/reports-data', methods(GET=views.reports_data), name='admin-reports'),
    path('/notifications/counts', methods(GET=views.notification_counts), name='admin-notification-counts'),
]
