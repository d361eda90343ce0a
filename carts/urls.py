from django.urls import path

from houseplans_backend.http import methods

from . import views

cart_patterns = [
    path(
        '',
        methods(GET=views.get_cart, POST=views.add_or_update_cart_item, DELETE=views.clear_cart),
        name='cart',
    ),
    path('/<str:product_id>', methods(DELETE=views.remove_cart_item), name='cart-item'),
]

wishlist_patterns = [
    path('', methods(GET=views.get_wishlist), name='wishlist'),
    path('/add', methods(POST=views.add_to_wishlist), name='wishlist-add'),
    path('/merge', methods(POST=views.merge_wishlist), name='wishlist-merge'),
    path('/remove/<str:product_id>', methods(DELETE=views.remove_from_wishlist), name='wishlist-remove'),
]
