import pytest
from bson import ObjectId

from houseplans_backend.documents import insert
from houseplans_backend.mongo_config import collection
from sellers.models import SELLER_INQUIRIES, SELLER_PRODUCTS

from .helpers import auth, send_json


@pytest.fixture
def slab(seller):
    return insert(SELLER_PRODUCTS, {
        "name": "Granite Slab", "image": "https://img.test/slab.jpg", "seller": seller["_id"],
    })


def lead(product, **overrides):
    data = {
        "productId": str(product["_id"]),
        "name": "Kiran",
        "email": "kiran@example.com",
        "phone": "9000000000",
        "message": "Need 40 slabs delivered to Pune",
    }
    data.update(overrides)
    return data


def test_guest_inquiry_is_addressed_to_the_products_seller(client, slab, seller):
    response = send_json(client, "post", "/api/sellerinquiries", lead(slab))

    assert response.status_code == 201
    body = response.json()
    assert body["seller"] == str(seller["_id"])
    assert body["product"] == str(slab["_id"])
    assert body["status"] == "Pending"
    assert "user" not in body


def test_signed_in_inquiry_records_the_sender(client, slab, user):
    response = send_json(client, "post", "/api/sellerinquiries", lead(slab), user=user)

    assert response.json()["user"] == str(user["_id"])


def test_inquiry_needs_an_existing_product_and_all_fields(client, slab):
    missing = send_json(client, "post", "/api/sellerinquiries", lead(slab, productId=str(ObjectId())))
    incomplete = send_json(client, "post", "/api/sellerinquiries", lead(slab, phone=""))

    assert missing.status_code == 404
    assert missing.json() == {"message": "Product not found"}
    assert incomplete.status_code == 400
    assert collection(SELLER_INQUIRIES).count_documents({}) == 0


def test_seller_sees_only_their_own_inquiries(client, slab, seller, make_user):
    other_seller = make_user("seller", businessName="Tile Hub")
    tiles = insert(SELLER_PRODUCTS, {"name": "Tiles", "seller": other_seller["_id"]})
    send_json(client, "post", "/api/sellerinquiries", lead(slab))
    send_json(client, "post", "/api/sellerinquiries", lead(tiles))

    mine = client.get("/api/sellerinquiries/my", **auth(seller)).json()

    assert len(mine) == 1
    assert mine[0]["product"] == {"_id": str(slab["_id"]), "name": "Granite Slab", "image": "https://img.test/slab.jpg"}


def test_admin_lists_every_inquiry(client, slab, admin, user):
    send_json(client, "post", "/api/sellerinquiries", lead(slab))

    listed = client.get("/api/sellerinquiries/all", **auth(admin)).json()

    assert listed[0]["seller"]["businessName"] == "Stone Works"
    assert listed[0]["product"]["name"] == "Granite Slab"
    assert client.get("/api/sellerinquiries/all", **auth(user)).status_code == 403


def test_owning_seller_or_admin_opens_and_updates_an_inquiry(client, slab, seller, admin):
    inquiry = send_json(client, "post", "/api/sellerinquiries", lead(slab)).json()
    path = f"/api/sellerinquiries/{inquiry['_id']}"

    opened = client.get(path, **auth(seller)).json()
    assert opened["seller"]["businessName"] == "Stone Works"
    assert opened["product"]["name"] == "Granite Slab"

    contacted = send_json(client, "put", f"{path}/status", {"status": "Contacted"}, user=seller)
    assert contacted.json()["status"] == "Contacted"
    closed = send_json(client, "put", f"{path}/status", {"status": "Closed"}, user=admin)
    assert closed.json()["status"] == "Closed"
    assert send_json(client, "put", f"{path}/status", {"status": "Lost"}, user=admin).status_code == 400


@pytest.mark.parametrize("role", ["seller", "user"])
def test_other_accounts_are_refused(client, slab, make_user, role):
    inquiry = send_json(client, "post", "/api/sellerinquiries", lead(slab)).json()
    outsider = make_user(role, businessName="Tile Hub")

    viewed = client.get(f"/api/sellerinquiries/{inquiry['_id']}", **auth(outsider))
    updated = send_json(client, "put", f"/api/sellerinquiries/{inquiry['_id']}/status", {"status": "Closed"}, user=outsider)

    assert viewed.status_code == updated.status_code == 401
    assert collection(SELLER_INQUIRIES).find_one({})["status"] == "Pending"


def test_unknown_inquiry(client, admin):
    assert client.get(f"/api/sellerinquiries/{ObjectId()}", **auth(admin)).status_code == 404
