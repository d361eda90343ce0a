"""
Filter assembly for catalog listings.

Every optional query parameter contributes one clause; clauses are ANDed by
presence. Imported WooCommerce rows keep their legacy field names
(``Name``, ``SKU``, ``Categories``, ``Tags``), so free text and category
buckets are matched against both spellings.
"""

import re

from pymongo import ASCENDING, DESCENDING

from houseplans_backend.http import ValidationError, pagination, to_float

from .models import ProductStatus

SEARCH_FIELDS = ["name", "Name", "productNo", "SKU", "description", "city"]

CATEGORY_FIELDS = ["category", "Categories", "planType", "Tags"]

CATEGORY_BUCKETS = {
    "floor-plans": r"floor\s*plan",
    "3d-elevations": r"elevation",
    "interior-designs": r"interior",
    "construction-products": r"construction",
    "downloads": r"download",
    "residential": r"residential|house|villa|bungalow",
    "commercial": r"commercial|office|shop|complex",
    "duplex": r"duplex",
    "modern": r"modern",
}

EXACT_FILTERS = ["country", "direction", "propertyType", "planType"]

SORTS = {
    "price_asc": [("price", ASCENDING), ("_id", ASCENDING)],
    "price_desc": [("price", DESCENDING), ("_id", DESCENDING)],
    "newest": [("createdAt", DESCENDING), ("_id", DESCENDING)],
}

DEFAULT_PAGE_SIZE = 12


def icontains(value):
    return {"$regex": re.escape(value.strip()), "$options": "i"}


def search_clause(term):
    return {"$or": [{field: icontains(term)} for field in SEARCH_FIELDS]}


def category_clause(category):
    pattern = CATEGORY_BUCKETS.get(category.strip().lower(), re.escape(category.strip()))
    return {"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in CATEGORY_FIELDS]}


def parse_budget(budget):
    """
    ``"5000-20000"`` -> (5000, 20000), ``"50000+"`` -> (50000, None),
    ``"-3000"`` -> (None, 3000).
    """
    budget = budget.strip().replace(",", "")
    if budget.endswith("+"):
        return to_float(budget[:-1]), None
    if "-" not in budget:
        raise ValidationError(f"Invalid budget: {budget}")
    low, high = budget.split("-", 1)
    return to_float(low), to_float(high)


def range_clause(low, high):
    bounds = {}
    if low is not None:
        bounds["$gte"] = low
    if high is not None:
        bounds["$lte"] = high
    return bounds


def build_product_filter(params, public=True):
    clauses = []

    term = params.get("search") or params.get("keyword")
    if term and term.strip():
        clauses.append(search_clause(term))

    category = params.get("category")
    if category and category.strip() and category.lower() != "all":
        clauses.append(category_clause(category))

    if params.get("budget"):
        low, high = parse_budget(params["budget"])
    else:
        low, high = to_float(params.get("minPrice")), to_float(params.get("maxPrice"))
    price = range_clause(low, high)
    if price:
        clauses.append({"price": price})

    area = range_clause(to_float(params.get("minArea")), to_float(params.get("maxArea")))
    if area:
        clauses.append({"plotArea": area})

    for field in EXACT_FILTERS:
        value = params.get(field)
        if value and value.lower() != "all":
            clauses.append({field: value})

    if public:
        clauses.append({"status": ProductStatus.PUBLISHED.value})

    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


def sort_spec(params):
    return SORTS.get(params.get("sort") or "newest", SORTS["newest"])


def fetch_page(coll, query, params, projection=None, page_param="page", default_size=DEFAULT_PAGE_SIZE):
    """Runs the count + paginated fetch pair for one listing."""
    page, size = pagination(params, page_param, default_size)
    count = coll.count_documents(query)
    docs = list(coll.find(query, projection).sort(sort_spec(params)).skip(size * (page - 1)).limit(size))
    return docs, page, size, count
