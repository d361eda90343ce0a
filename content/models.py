import re

from django.db import models

BLOG_POSTS = "blogposts"
GALLERIES = "galleries"

DEFAULT_AUTHOR = "Admin"
DEFAULT_GALLERY_CATEGORY = "General"


class PostStatus(models.TextChoices):
    PUBLISHED = "Published", "Published"
    DRAFT = "Draft", "Draft"


def format_slug(slug):
    """``"My New Post!"`` -> ``"my-new-post"``"""
    if not slug:
        return ""
    slug = re.sub(r"[^a-z0-9\s-]", "", slug.lower())
    slug = re.sub(r"\s+", "-", slug)
    return re.sub(r"-+", "-", slug)
