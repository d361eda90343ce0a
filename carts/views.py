import logging

from accounts.authentication import protect
from catalog.models import PRODUCTS
from houseplans_backend.http import NotFound, ValidationError, json_response, lookup_object_id, message_response, read_payload, to_int
from houseplans_backend.mongo_config import collection

from .models import CARTS, WISHLISTS
from .services import cart_line, get_or_create, save_items, wishlist_item, with_products, without_item

logger = logging.getLogger(__name__)


@protect()
def get_cart(request):
    return json_response(with_products(get_or_create(CARTS, request.account["_id"])))


@protect()
def add_or_update_cart_item(request):
    data = read_payload(request)
    product_id = data.get("productId")
    product = collection(PRODUCTS).find_one({"_id": lookup_object_id(product_id, "Product not found")})
    if not product:
        raise NotFound("Product not found")
    quantity = max(to_int(data.get("quantity"), 1), 1)

    cart = get_or_create(CARTS, request.account["_id"])
    items = cart.get("items", [])
    for item in items:
        if str(item["productId"]) == str(product["_id"]):
            item["quantity"] = quantity
            break
    else:
        items.append(cart_line(product, quantity, data.get("size")))

    updated = save_items(CARTS, cart, items)
    return json_response(with_products(updated), status=201)


@protect()
def remove_cart_item(request, product_id):
    cart = collection(CARTS).find_one({"user": request.account["_id"]})
    if not cart:
        raise NotFound("Cart not found")
    return json_response(save_items(CARTS, cart, without_item(cart.get("items", []), product_id)))


@protect()
def clear_cart(request):
    cart = collection(CARTS).find_one({"user": request.account["_id"]})
    if not cart:
        return message_response("Cart is already empty")
    save_items(CARTS, cart, [])
    return message_response("Cart cleared successfully")


@protect()
def get_wishlist(request):
    return json_response(get_or_create(WISHLISTS, request.account["_id"]))


@protect()
def add_to_wishlist(request):
    product_id = read_payload(request).get("productId")
    if not product_id:
        raise ValidationError("Product ID is required")
    item = wishlist_item(product_id)
    if item is None:
        raise NotFound("Product or Plan not found")

    wishlist = get_or_create(WISHLISTS, request.account["_id"])
    items = wishlist.get("items", [])
    if any(str(i["productId"]) == str(product_id) for i in items):
        return json_response(wishlist)
    return json_response(save_items(WISHLISTS, wishlist, items + [item]), status=201)


@protect()
def remove_from_wishlist(request, product_id):
    wishlist = collection(WISHLISTS).find_one({"user": request.account["_id"]})
    if not wishlist:
        raise NotFound("Wishlist not found")
    return json_response(save_items(WISHLISTS, wishlist, without_item(wishlist.get("items", []), product_id)))


@protect()
def merge_wishlist(request):
    local_items = read_payload(request).get("localWishlistItems")
    if not isinstance(local_items, list):
        raise ValidationError("Invalid local wishlist data")

    wishlist = get_or_create(WISHLISTS, request.account["_id"])
    items = wishlist.get("items", [])
    present = {str(i["productId"]) for i in items}
    for local in local_items:
        product_id = local.get("id") or local.get("productId") if isinstance(local, dict) else None
        if not product_id or str(product_id) in present:
            continue
        item = wishlist_item(product_id)
        if item:
            items.append(item)
            present.add(str(product_id))

    logger.info(f"Merged {len(local_items)} local wishlist items for {request.account['_id']}")
    return json_response(save_items(WISHLISTS, wishlist, items))
