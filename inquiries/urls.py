from django.urls import path

from houseplans_backend.http import methods

from . import views
from .models import CUSTOMIZATION, PREMIUM, STANDARD

inquiry_patterns = [
    path('', methods(GET=views.list_inquiries, POST=views.create_inquiry), name='inquiries'),
    path('/<str:inquiry_id>/status', methods(PUT=views.update_inquiry_status), name='inquiry-status'),
    path('/<str:inquiry_id>', methods(DELETE=views.delete_inquiry), name='inquiry-detail'),
]

corporate_patterns = [
    path(
        '',
        methods(GET=views.list_corporate_inquiries, POST=views.submit_corporate_inquiry),
        name='corporate-inquiries',
    ),
    path(
        '/<str:inquiry_id>',
        methods(
            GET=views.get_corporate_inquiry,
            PUT=views.update_corporate_inquiry,
            DELETE=views.delete_corporate_inquiry,
        ),
        name='corporate-inquiry-detail',
    ),
]


def request_patterns(kind, prefix):
    return [
        path('', methods(GET=views.list_requests, POST=views.create_request), {'kind': kind}, name=prefix),
        path(
            '/<str:request_id>',
            methods(PUT=views.update_request, DELETE=views.delete_request),
            {'kind': kind},
            name=f'{prefix}-detail',
        ),
    ]


customization_patterns = request_patterns(CUSTOMIZATION, 'customization-requests')
standard_patterns = request_patterns(STANDARD, 'standard-requests')
premium_patterns = request_patterns(PREMIUM, 'premium-requests')
