"""
Read-only aggregates behind the admin dashboard and reports pages.
"""

from datetime import timedelta

from accounts.models import USERS, ApprovalStatus, Role
from catalog.models import PRODUCTS, PROFESSIONAL_PLANS, PlanStatus
from houseplans_backend.documents import as_utc, expand_refs, utcnow
from houseplans_backend.mongo_config import collection
from inquiries.models import (
    CORPORATE_INQUIRIES,
    CUSTOMIZATION_REQUESTS,
    INQUIRIES,
    PREMIUM_REQUESTS,
    STANDARD_REQUESTS,
    CorporateStatus,
    InquiryStatus,
    RequestStatus,
)
from orders.models import ORDERS

SALES_WINDOW_DAYS = 30
RECENT_ORDERS = 5
TOP_PRODUCTS = 5


def paid_revenue():
    result = list(collection(ORDERS).aggregate([
        {"$match": {"isPaid": True}},
        {"$group": {"_id": None, "total": {"$sum": "$totalPrice"}}},
    ]))
    return result[0]["total"] if result else 0


def customer_count():
    return collection(USERS).count_documents({"role": Role.USER.value})


def dashboard_summary():
    recent = list(collection(ORDERS).find({}).sort("createdAt", -1).limit(RECENT_ORDERS))
    expand_refs(recent, "user", USERS, {"name": 1})
    approved_plans = collection(PROFESSIONAL_PLANS).count_documents(
        {"status": {"$in": [PlanStatus.APPROVED.value, "Published"]}}
    )
    return {
        "totalOrders": collection(ORDERS).count_documents({}),
        "totalRevenue": paid_revenue(),
        "totalCustomers": customer_count(),
        "totalProducts": collection(PRODUCTS).count_documents({}) + approved_plans,
        "recentOrders": recent,
    }


def daily_sales(days=SALES_WINDOW_DAYS):
    """Paid sales per calendar day (UTC) for orders placed in the last `days` days."""
    since = utcnow() - timedelta(days=days)
    totals = {}
    paid = collection(ORDERS).find({"isPaid": True}, {"createdAt": 1, "totalPrice": 1}).sort("createdAt", 1)
    for order in paid:
        created = as_utc(order.get("createdAt"))
        if created is None or created < since:
            continue
        day = created.strftime("%Y-%m-%d")
        totals[day] = totals.get(day, 0) + (order.get("totalPrice") or 0)
    return [{"date": day, "sales": sales} for day, sales in totals.items()]


def top_products(limit=TOP_PRODUCTS):
    rows = collection(ORDERS).aggregate([
        {"$match": {"isPaid": True}},
        {"$unwind": "$orderItems"},
        {"$group": {"_id": "$orderItems.name", "sales": {"$sum": "$orderItems.quantity"}}},
        {"$sort": {"sales": -1}},
        {"$limit": limit},
    ])
    return [{"name": row["_id"], "sales": row["sales"]} for row in rows]


def reports_data():
    net_sales = paid_revenue()
    orders = collection(ORDERS).count_documents({})
    return {
        "summary": {
            "netSales": net_sales,
            "orders": orders,
            "customers": customer_count(),
            "avgOrderValue": net_sales / orders if orders else 0,
        },
        "salesOverTime": daily_sales(),
        "topProducts": top_products(),
    }


def _newest_first(collection_name):
    return list(collection(collection_name).find({}).sort("createdAt", -1))


def requests_and_inquiries():
    return {
        "customization": _newest_first(CUSTOMIZATION_REQUESTS),
        "standard": _newest_first(STANDARD_REQUESTS),
        "premium": _newest_first(PREMIUM_REQUESTS),
        "corporate": _newest_first(CORPORATE_INQUIRIES),
        "generalInquiries": _newest_first(INQUIRIES),
    }


def notification_counts():
    pending = {"status": RequestStatus.PENDING.value}
    customization = collection(CUSTOMIZATION_REQUESTS).count_documents(pending)
    standard = collection(STANDARD_REQUESTS).count_documents(pending)
    premium = collection(PREMIUM_REQUESTS).count_documents(pending)
    corporate = collection(CORPORATE_INQUIRIES).count_documents({"status": CorporateStatus.NEW.value})
    general = collection(INQUIRIES).count_documents({"status": InquiryStatus.NEW.value})
    return {
        "newUsers": collection(USERS).count_documents({"status": ApprovalStatus.PENDING.value}),
        "requests": {
            "customization": customization,
            "standard": standard,
            "premium": premium,
            "total": customization + standard + premium,
        },
        "inquiries": {
            "corporate": corporate,
            "sellerContractor": general,
            "total": corporate + general,
        },
    }
