import logging

from pymongo import DESCENDING

from accounts.authentication import protect
from accounts.permissions import ADMIN
from houseplans_backend.documents import insert, update_fields
from houseplans_backend.http import (
    NotFound,
    ValidationError,
    json_response,
    lookup_object_id,
    message_response,
    parse_object_id,
    read_payload,
)
from houseplans_backend.mongo_config import collection
from houseplans_backend.uploads import first, store_uploads

from .models import BLOG_POSTS, DEFAULT_AUTHOR, DEFAULT_GALLERY_CATEGORY, GALLERIES, PostStatus, format_slug

logger = logging.getLogger(__name__)


def _get_post(post_id):
    post = collection(BLOG_POSTS).find_one({"_id": lookup_object_id(post_id, "Blog post not found")})
    if not post:
        raise NotFound("Blog post not found")
    return post


def list_published_posts(request):
    posts = collection(BLOG_POSTS).find({"status": PostStatus.PUBLISHED.value}).sort("createdAt", DESCENDING)
    return json_response(list(posts))


def get_post_by_slug(request, slug):
    post = collection(BLOG_POSTS).find_one({"slug": slug})
    if not post:
        raise NotFound("Blog post not found")
    return json_response(post)


@protect(ADMIN)
def list_all_posts(request):
    return json_response(list(collection(BLOG_POSTS).find({}).sort("createdAt", DESCENDING)))


@protect(ADMIN)
def create_post(request):
    data = read_payload(request)
    if any(not data.get(f) for f in ("title", "slug", "description", "content")):
        raise ValidationError("Title, Slug, Description, and Content are required.")
    if not request.FILES.get("mainImage"):
        raise ValidationError("Main image is required.")

    slug = format_slug(data["slug"])
    if not slug:
        raise ValidationError("Slug must contain letters or numbers.")
    if collection(BLOG_POSTS).find_one({"slug": slug}):
        raise ValidationError("This slug is already in use. Please choose a unique one.")

    stored = store_uploads(request, {"mainImage": 1})
    post = insert(BLOG_POSTS, {
        "title": data["title"],
        "slug": slug,
        "description": data["description"],
        "content": data["content"],
        "author": data.get("author") or DEFAULT_AUTHOR,
        "status": data.get("status") or PostStatus.DRAFT.value,
        "mainImage": first(stored, "mainImage"),
    })
    logger.info(f"Blog post '{slug}' created")
    return json_response(post, status=201)


@protect(ADMIN)
def update_post(request, post_id):
    post = _get_post(post_id)
    data = read_payload(request)
    changes = {f: data[f] for f in ("title", "description", "content", "author", "status") if data.get(f)}

    if data.get("slug"):
        slug = format_slug(data["slug"])
        if collection(BLOG_POSTS).find_one({"slug": slug, "_id": {"$ne": post["_id"]}}):
            raise ValidationError("This slug is already in use by another post.")
        changes["slug"] = slug

    stored = store_uploads(request, {"mainImage": 1})
    if stored.get("mainImage"):
        changes["mainImage"] = first(stored, "mainImage")

    return json_response(update_fields(BLOG_POSTS, post["_id"], changes))


@protect(ADMIN)
def delete_post(request, post_id):
    post = _get_post(post_id)
    collection(BLOG_POSTS).delete_one({"_id": post["_id"]})
    logger.info(f"Blog post '{post.get('slug')}' deleted")
    return message_response("Blog post removed")


@protect(ADMIN)
def create_gallery_item(request):
    data = read_payload(request)
    if not data.get("title"):
        raise ValidationError("Title is required.")
    if not request.FILES.get("image"):
        raise ValidationError("Image is required.")

    stored = store_uploads(request, {"image": 1})
    related = data.get("relatedProduct")
    item = insert(GALLERIES, {
        "title": data["title"],
        "altText": data.get("altText") or data["title"],
        "category": data.get("category") or DEFAULT_GALLERY_CATEGORY,
        "relatedProduct": parse_object_id(related, "Invalid related product ID") if related else None,
        "imageUrl": first(stored, "image"),
    })
    return json_response(item, status=201)


def list_gallery_items(request):
    return json_response(list(collection(GALLERIES).find({}).sort("createdAt", DESCENDING)))


@protect(ADMIN)
def delete_gallery_item(request, item_id):
    item = collection(GALLERIES).find_one({"_id": lookup_object_id(item_id, "Image not found.")})
    if not item:
        raise NotFound("Image not found.")
    collection(GALLERIES).delete_one({"_id": item["_id"]})
    return message_response("Gallery image deleted successfully.")
