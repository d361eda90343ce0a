from houseplans_backend.documents import insert
from houseplans_backend.mongo_config import collection
from populate_categories import collect_names, populate_categories
from sellers.models import BRANDS, CATEGORIES, SELLER_PRODUCTS
from sellers.services import find_or_create

from .helpers import auth, send_json, upload


def seller_form(**overrides):
    form = {
        "name": " Granite Slab ",
        "brand": "Rajasthan Stone",
        "category": "Flooring",
        "price": "1200",
        "countInStock": "40",
        "city": "Jaipur",
        "image": upload("slab.jpg", content_type="image/jpeg"),
    }
    form.update(overrides)
    return form


def test_seller_creates_an_approved_product(client, seller):
    response = client.post("/api/seller/products", seller_form(), **auth(seller))

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Granite Slab"
    assert body["countInStock"] == 40
    assert body["isApproved"] is True
    assert body["seller"] == str(seller["_id"])
    assert collection(BRANDS).count_documents({"name": "Rajasthan Stone"}) == 1
    assert collection(CATEGORIES).count_documents({"name": "Flooring"}) == 1


def test_seller_product_requires_city_and_image(client, seller):
    no_city = client.post("/api/seller/products", seller_form(city=""), **auth(seller))
    form = seller_form()
    del form["image"]
    no_image = client.post("/api/seller/products", form, **auth(seller))

    assert no_city.json() == {"message": "Please fill all required fields, including city"}
    assert no_image.json() == {"message": "Main product image is required."}


def test_pending_seller_cannot_list_products(client, make_user):
    pending = make_user("seller", businessName="New Shop", isApproved=False, status="Pending")

    response = client.post("/api/seller/products", seller_form(), **auth(pending))

    assert response.status_code == 403


def test_brand_names_are_recorded_once_regardless_of_case():
    assert find_or_create(BRANDS, "Asian Paints") is True
    assert find_or_create(BRANDS, "asian paints ") is False
    assert find_or_create(BRANDS, "") is False
    assert [b["name"] for b in collection(BRANDS).find({})] == ["Asian Paints"]


def test_only_the_owner_updates_or_deletes(client, seller, make_user):
    product = insert(SELLER_PRODUCTS, {"name": "Tiles", "seller": seller["_id"], "price": 10.0, "countInStock": 3})
    other = make_user("seller", businessName="Other Shop")

    denied = send_json(client, "put", f"/api/seller/products/{product['_id']}", {"name": "Mine now"}, user=other)
    assert denied.status_code == 401
    assert denied.json() == {"message": "You are not authorized to update this product."}

    updated = send_json(
        client, "put", f"/api/seller/products/{product['_id']}", {"price": "12.5", "brand": "Kajaria"}, user=seller
    )
    assert updated.json()["price"] == 12.5
    assert collection(BRANDS).count_documents({}) == 1

    deleted = client.delete(f"/api/seller/products/{product['_id']}", **auth(seller))
    assert deleted.json() == {"message": "Product removed successfully."}


def test_public_storefront_filters_city_and_expands_seller(client, seller):
    insert(SELLER_PRODUCTS, {"name": "Marble", "city": "Jaipur", "isApproved": True, "seller": seller["_id"]})
    insert(SELLER_PRODUCTS, {"name": "Bricks", "city": "Jaipur North", "isApproved": True, "seller": seller["_id"]})
    insert(SELLER_PRODUCTS, {"name": "Hidden", "city": "Jaipur", "isApproved": False, "seller": seller["_id"]})

    body = client.get("/api/seller/products/public", {"city": "jaipur"}).json()

    assert [p["name"] for p in body["products"]] == ["Marble"]
    assert body["totalProducts"] == 1
    assert body["products"][0]["seller"]["businessName"] == "Stone Works"


def test_public_storefront_caps_page_size(client, seller, monkeypatch):
    monkeypatch.setattr("houseplans_backend.http.MAX_PAGE_SIZE", 2)
    for name in ("Marble", "Granite", "Slate"):
        insert(SELLER_PRODUCTS, {"name": name, "isApproved": True, "seller": seller["_id"]})

    body = client.get("/api/seller/products/public", {"limit": "500"}).json()

    assert len(body["products"]) == 2
    assert body["pages"] == 2


def test_brands_and_categories_sorted(client, seller):
    for name in ("Zed", "Alpha"):
        find_or_create(BRANDS, name)
    find_or_create(CATEGORIES, "Paint")

    brands = client.get("/api/seller/products/brands", **auth(seller)).json()
    categories = client.get("/api/seller/products/categories", **auth(seller)).json()

    assert [b["name"] for b in brands] == ["Alpha", "Zed"]
    assert [c["name"] for c in categories] == ["Paint"]


def test_my_products(client, seller):
    insert(SELLER_PRODUCTS, {"name": "Mine", "seller": seller["_id"]})
    insert(SELLER_PRODUCTS, {"name": "Not mine"})

    products = client.get("/api/seller/products/myproducts", **auth(seller)).json()

    assert [p["name"] for p in products] == ["Mine"]


def test_collect_names_keeps_first_spelling():
    brands, categories = collect_names([
        {"brand": "Jaquar", "category": "Bath"},
        {"brand": "jaquar", "category": " Tiles "},
        {"brand": None},
    ])

    assert brands == ["Jaquar"]
    assert categories == ["Bath", "Tiles"]


def test_populate_categories_backfills_lookup_collections():
    insert(SELLER_PRODUCTS, {"name": "Tap", "brand": "Jaquar", "category": "Bath"})
    insert(SELLER_PRODUCTS, {"name": "Basin", "brand": "Hindware", "category": "Bath"})
    find_or_create(BRANDS, "jaquar")

    populate_categories()

    assert sorted(b["name"] for b in collection(BRANDS).find({})) == ["Hindware", "jaquar"]
    assert [c["name"] for c in collection(CATEGORIES).find({})] == ["Bath"]
