"""Tests for material donations and the boutique."""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from afrisoutien.models.boutique import BoutiqueItem
from afrisoutien.models.user import User


async def _item(db: AsyncSession, admin: User, status: str = "available", category: str = "vetements"):
    item = BoutiqueItem(
        title="Manteau",
        description="Manteau chaud taille M",
        category=category,
        status=status,
        published_by_admin_id=admin.id,
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


def _order(item_id: int) -> dict:
    return {
        "itemId": item_id,
        "requesterName": "Moussa",
        "requesterEmail": "moussa@example.com",
        "requestReason": "Pour l'hiver",
    }


async def test_offer_material_donation(async_client: AsyncClient):
    """Anyone can offer goods; they wait for verification."""
    resp = await async_client.post(
        "/api/material-donations",
        json={
            "donorName": "Ibrahim",
            "donorContact": "+226 70 00 00 00",
            "title": "Vélo",
            "description": "Vélo enfant",
            "pickupLocation": "Ouagadougou",
        },
    )
    assert resp.status_code == 201
    assert resp.json()["status"] == "pending_verification"


async def test_material_donation_validation(async_client: AsyncClient):
    resp = await async_client.post("/api/material-donations", json={"title": "Vélo"})
    assert resp.status_code == 422


async def test_list_items_filters(
    async_client: AsyncClient, db_session: AsyncSession, admin_user: User
):
    coat = await _item(db_session, admin_user)
    book = await _item(db_session, admin_user, category="livres")
    await _item(db_session, admin_user, status="given")

    resp = await async_client.get("/api/boutique/items")
    assert {i["id"] for i in resp.json()} == {coat.id, book.id}

    books = await async_client.get("/api/boutique/items", params={"category": "livres"})
    assert [i["id"] for i in books.json()] == [book.id]

    given = await async_client.get("/api/boutique/items", params={"status": "given"})
    assert len(given.json()) == 1


async def test_get_item(async_client: AsyncClient, db_session: AsyncSession, admin_user: User):
    item = await _item(db_session, admin_user)
    assert (await async_client.get(f"/api/boutique/items/{item.id}")).status_code == 200
    assert (await async_client.get("/api/boutique/items/9999")).status_code == 404


async def test_order_requires_auth(
    async_client: AsyncClient, db_session: AsyncSession, admin_user: User
):
    item = await _item(db_session, admin_user)
    resp = await async_client.post("/api/boutique/orders", json=_order(item.id))
    assert resp.status_code == 401


async def test_order_item(
    async_client: AsyncClient, db_session: AsyncSession, admin_user: User, donor: User, donor_headers
):
    item = await _item(db_session, admin_user)

    resp = await async_client.post("/api/boutique/orders", json=_order(item.id), headers=donor_headers)
    assert resp.status_code == 201
    order = resp.json()
    assert order["status"] == "pending_approval"
    assert order["userId"] == donor.id

    mine = await async_client.get("/api/users/me/orders", headers=donor_headers)
    assert [o["id"] for o in mine.json()] == [order["id"]]


async def test_order_unavailable_or_missing_item(
    async_client: AsyncClient, db_session: AsyncSession, admin_user: User, donor_headers
):
    reserved = await _item(db_session, admin_user, status="reserved")

    unavailable = await async_client.post(
        "/api/boutique/orders", json=_order(reserved.id), headers=donor_headers
    )
    assert unavailable.status_code == 400
    assert unavailable.json()["message"] == "Item is not available"

    missing = await async_client.post("/api/boutique/orders", json=_order(9999), headers=donor_headers)
    assert missing.status_code == 404
