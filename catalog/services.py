import logging

from bs4 import BeautifulSoup

from houseplans_backend.documents import update_fields, utcnow
from houseplans_backend.http import NotFound, ValidationError, to_float
from houseplans_backend.mongo_config import collection

logger = logging.getLogger(__name__)

SEO_DESCRIPTION_LENGTH = 160


def clean_html_text(html_content):
    """Convert HTML to plain text, removing tags and cleaning up spacing."""
    if not html_content:
        return ""
    soup = BeautifulSoup(html_content, "html.parser")
    for script in soup(["script", "style"]):
        script.decompose()
    return " ".join(soup.get_text(separator=" ").split())


def build_seo(data, name, description):
    keywords = data.get("seoKeywords") or ""
    if isinstance(keywords, str):
        keywords = [k.strip() for k in keywords.split(",") if k.strip()]
    return {
        "title": data.get("seoTitle") or name,
        "description": data.get("seoDescription") or clean_html_text(description)[:SEO_DESCRIPTION_LENGTH],
        "keywords": keywords,
        "altText": data.get("seoAltText") or name,
    }


def numeric_fields(data, fields):
    return {f: to_float(data[f]) for f in fields if data.get(f) not in (None, "")}


def add_review(collection_name, doc_id, account, data, label):
    """
    Appends one review per user and recomputes ``rating`` / ``numReviews``.
    """
    rating, comment = data.get("rating"), data.get("comment")
    if not rating or not comment:
        raise ValidationError("Rating and comment are required")

    doc = collection(collection_name).find_one({"_id": doc_id}, {"reviews": 1})
    if not doc:
        raise NotFound(f"{label} not found")

    reviews = doc.get("reviews", [])
    if any(str(r.get("user")) == str(account["_id"]) for r in reviews):
        raise ValidationError(f"{label} already reviewed by this user")

    now = utcnow()
    reviews.append({
        "name": account.get("name"),
        "rating": to_float(rating),
        "comment": comment,
        "user": account["_id"],
        "createdAt": now,
        "updatedAt": now,
    })
    update_fields(collection_name, doc_id, {
        "reviews": reviews,
        "numReviews": len(reviews),
        "rating": sum(r["rating"] for r in reviews) / len(reviews),
    })
    logger.info(f"Review added to {collection_name} {doc_id} by {account['_id']}")
