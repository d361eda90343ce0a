from django.urls import path

from houseplans_backend.http import methods

from . import views

blog_patterns = [
    path('', methods(GET=views.list_published_posts, POST=views.create_post), name='blogs'),
    path('/all', methods(GET=views.list_all_posts), name='all-blogs'),
    path('/slug/<str:slug>', methods(GET=views.get_post_by_slug), name='blog-by-slug'),
    path('/<str:post_id>', methods(PUT=views.update_post, DELETE=views.delete_post), name='blog-detail'),
]

gallery_patterns = [
    path('', methods(GET=views.list_gallery_items, POST=views.create_gallery_item), name='gallery'),
    path('/<str:item_id>', methods(DELETE=views.delete_gallery_item), name='gallery-detail'),
]
