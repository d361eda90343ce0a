from django.urls import path

from houseplans_backend.http import methods

from . import views

urlpatterns = [
    path('/register', methods(POST=views.register_user), name='register-user'),
    path('/login', methods(POST=views.login_user), name='login-user'),
    path('/profile', methods(GET=views.get_profile), name='user-profile'),
    path('/admin/create', methods(POST=views.create_user_by_admin), name='create-user-by-admin'),
    path('/stats', methods(GET=views.user_stats), name='user-stats'),
    path('/store/<str:seller_id>', methods(GET=views.seller_public_profile), name='seller-public-profile'),
    path('', methods(GET=views.list_users), name='list-users'),
    path('/<str:user_id>', methods(GET=views.get_user, PUT=views.update_user, DELETE=views.delete_user), name='user-detail'),
]
