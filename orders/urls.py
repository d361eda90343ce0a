from django.urls import path

from houseplans_backend.http import methods

from . import views

urlpatterns = [
    path('', methods(POST=views.add_order_items), name='orders'),
    path('/myorders', methods(GET=views.get_my_orders), name='my-orders'),
    path('/all', methods(GET=views.get_all_orders), name='all-orders'),
    path('/track/<str:order_id>', methods(GET=views.track_order), name='track-order'),
    path('/paypal/client-id', methods(GET=views.get_paypal_client_id), name='paypal-client-id'),
    path('/phonepe-callback', methods(POST=views.phonepe_callback), name='phonepe-callback'),
    path('/<str:order_id>/create-razorpay-order', methods(POST=views.create_razorpay_order), name='create-razorpay-order'),
    path('/<str:order_id>/verify-payment', methods(POST=views.verify_razorpay_payment), name='verify-payment'),
    path('/<str:order_id>/pay-with-paypal', methods(PUT=views.pay_with_paypal), name='pay-with-paypal'),
    path('/<str:order_id>/create-phonepe-payment', methods(POST=views.create_phonepe_payment), name='create-phonepe-payment'),
    path('/<str:order_id>/mark-as-paid', methods(PUT=views.update_order_to_paid_by_admin), name='mark-order-paid'),
    path('/<str:order_id>', methods(DELETE=views.delete_order), name='order-detail'),
]
