"""Tests for the admin back-office: moderation, users, reports, audit trail."""

from decimal import Decimal

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from afrisoutien.models.boutique import BoutiqueItem, BoutiqueOrder, MaterialDonation
from afrisoutien.models.campaign import Campaign, FinancialDonation
from afrisoutien.models.user import Role, User
from afrisoutien.services.audit import AuditAction


async def _add(db: AsyncSession, *objects):
    db.add_all(objects)
    await db.commit()
    for obj in objects:
        await db.refresh(obj)
    return objects


def _campaign(owner: User, status: str = "pending", **extra) -> Campaign:
    values = {
        "title": "Cantine scolaire",
        "description": "Repas pour 200 élèves",
        "goal_amount": Decimal("100000"),
    }
    values.update(extra)
    return Campaign(user_id=owner.id, status=status, **values)


def _material() -> MaterialDonation:
    return MaterialDonation(
        donor_name="Ibrahim",
        donor_contact="ibrahim@example.com",
        title="Vélo",
        description="Vélo enfant",
        pickup_location="Bamako",
        image_urls=["https://img.example/velo.jpg"],
    )


# ── Campaign moderation ─────────────────────────────────────────────
async def test_pending_campaigns_and_approval(
    async_client: AsyncClient, db_session: AsyncSession, donor: User, admin_headers, fresh_audit_log
):
    pending, approved = await _add(db_session, _campaign(donor), _campaign(donor, "approved"))

    resp = await async_client.get("/api/admin/campaigns/pending", headers=admin_headers)
    assert [c["id"] for c in resp.json()] == [pending.id]

    everything = await async_client.get("/api/admin/campaigns", headers=admin_headers)
    assert {c["id"] for c in everything.json()} == {pending.id, approved.id}

    change = await async_client.put(
        f"/api/admin/campaigns/{pending.id}/status",
        json={"status": "approved"},
        headers=admin_headers,
    )
    assert change.status_code == 200
    assert change.json()["status"] == "approved"

    public = await async_client.get("/api/campaigns")
    assert len(public.json()) == 2

    entry = fresh_audit_log.latest()[0]
    assert entry.action == AuditAction.CHANGE_CAMPAIGN_STATUS
    assert entry.resource_id == pending.id
    assert entry.details == {"from": "pending", "to": "approved"}


async def test_campaign_status_is_validated(
    async_client: AsyncClient, db_session: AsyncSession, donor: User, admin_headers
):
    (campaign,) = await _add(db_session, _campaign(donor))

    bad = await async_client.put(
        f"/api/admin/campaigns/{campaign.id}/status",
        json={"status": "hacked"},
        headers=admin_headers,
    )
    assert bad.status_code == 400

    missing = await async_client.put(
        "/api/admin/campaigns/9999/status", json={"status": "approved"}, headers=admin_headers
    )
    assert missing.status_code == 404


async def test_delete_campaign_with_donations(
    async_client: AsyncClient, db_session: AsyncSession, donor: User, admin_headers
):
    (campaign,) = await _add(db_session, _campaign(donor, "approved"))
    await _add(
        db_session,
        FinancialDonation(
            campaign_id=campaign.id, amount=Decimal("100"), payment_operator="wave"
        ),
    )

    resp = await async_client.delete(f"/api/admin/campaigns/{campaign.id}", headers=admin_headers)
    assert resp.status_code == 200
    assert (await async_client.get(f"/api/campaigns/{campaign.id}")).status_code == 404

    again = await async_client.delete(f"/api/admin/campaigns/{campaign.id}", headers=admin_headers)
    assert again.status_code == 404


# ── Material donations ──────────────────────────────────────────────
async def test_publish_material_donation(
    async_client: AsyncClient, db_session: AsyncSession, admin_user: User, admin_headers
):
    (donation,) = await _add(db_session, _material())

    pending = await async_client.get("/api/admin/material-donations/pending", headers=admin_headers)
    assert [d["id"] for d in pending.json()] == [donation.id]

    resp = await async_client.post(
        f"/api/admin/material-donations/{donation.id}/publish",
        json={"title": "Vélo enfant", "description": "Bon état", "category": "loisirs"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    item = resp.json()
    assert item["sourceDonationId"] == donation.id
    assert item["publishedByAdminId"] == admin_user.id
    assert item["status"] == "available"
    assert item["imageUrls"] == ["https://img.example/velo.jpg"]

    await db_session.refresh(donation)
    assert donation.status == "published_in_store"

    shop = await async_client.get("/api/boutique/items")
    assert [i["id"] for i in shop.json()] == [item["id"]]

    still_pending = await async_client.get(
        "/api/admin/material-donations/pending", headers=admin_headers
    )
    assert still_pending.json() == []


async def test_reject_material_donation(
    async_client: AsyncClient, db_session: AsyncSession, admin_headers
):
    (donation,) = await _add(db_session, _material())

    resp = await async_client.delete(f"/api/admin/donations/{donation.id}", headers=admin_headers)
    assert resp.status_code == 200

    listing = await async_client.get("/api/admin/donations", headers=admin_headers)
    assert listing.json()[0]["status"] == "rejected"

    missing = await async_client.delete("/api/admin/donations/9999", headers=admin_headers)
    assert missing.status_code == 404


# ── Boutique orders ─────────────────────────────────────────────────
async def test_order_status_records_handling_admin(
    async_client: AsyncClient, db_session: AsyncSession, admin_user: User, donor: User, admin_headers
):
    (item,) = await _add(
        db_session,
        BoutiqueItem(
            title="Manteau", description="Taille M", category="vetements",
            published_by_admin_id=admin_user.id,
        ),
    )
    (order,) = await _add(
        db_session,
        BoutiqueOrder(
            user_id=donor.id, item_id=item.id, requester_name="Awa",
            requester_email=donor.email, request_reason="Hiver",
        ),
    )

    pending = await async_client.get("/api/admin/boutique/orders/pending", headers=admin_headers)
    assert [o["id"] for o in pending.json()] == [order.id]

    bad = await async_client.put(
        f"/api/admin/boutique/orders/{order.id}/status", json={"status": "lost"}, headers=admin_headers
    )
    assert bad.status_code == 400

    resp = await async_client.put(
        f"/api/admin/boutique/orders/{order.id}/status",
        json={"status": "approved"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"
    assert resp.json()["handledByAdminId"] == admin_user.id


# ── Users ───────────────────────────────────────────────────────────
async def test_list_users_hides_secrets(async_client: AsyncClient, donor: User, admin_headers):
    resp = await async_client.get("/api/admin/users", headers=admin_headers)
    assert resp.status_code == 200
    assert {u["email"] for u in resp.json()} == {donor.email, "admin@afrisoutien.com"}
    assert all("passwordHash" not in u for u in resp.json())


async def test_change_role(async_client: AsyncClient, donor: User, admin_headers, fresh_audit_log):
    bad = await async_client.put(
        f"/api/admin/users/{donor.id}/role", json={"role": "superuser"}, headers=admin_headers
    )
    assert bad.status_code == 400
    assert bad.json()["message"] == "Invalid role"

    resp = await async_client.put(
        f"/api/admin/users/{donor.id}/role", json={"role": "beneficiary"}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["role"] == "beneficiary"
    assert fresh_audit_log.security()[0].action == AuditAction.CHANGE_USER_ROLE

    missing = await async_client.put(
        "/api/admin/users/9999/role", json={"role": "donor"}, headers=admin_headers
    )
    assert missing.status_code == 404


async def test_promoted_user_gets_admin_access(
    async_client: AsyncClient, donor: User, donor_headers, admin_headers
):
    assert (await async_client.get("/api/admin/users", headers=donor_headers)).status_code == 403

    await async_client.put(
        f"/api/admin/users/{donor.id}/role", json={"role": "admin"}, headers=admin_headers
    )
    assert (await async_client.get("/api/admin/users", headers=donor_headers)).status_code == 200


async def test_change_verification_flag(async_client: AsyncClient, donor: User, admin_headers):
    resp = await async_client.put(
        f"/api/admin/users/{donor.id}/status", json={"isVerified": True}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["isVerified"] is True


async def test_soft_delete_user(
    async_client: AsyncClient, db_session: AsyncSession, make_user, admin_headers
):
    victim = await make_user("victim@example.com", Role.BENEFICIARY, is_verified=True)

    resp = await async_client.delete(f"/api/admin/users/{victim.id}", headers=admin_headers)
    assert resp.status_code == 200

    await db_session.refresh(victim)
    assert victim.email == f"deleted_{victim.id}_victim@example.com"
    assert victim.is_verified is False

    login = await async_client.post(
        "/api/auth/login", json={"email": "victim@example.com", "password": "password123"}
    )
    assert login.status_code == 401


async def test_soft_delete_fits_long_email(
    async_client: AsyncClient, db_session: AsyncSession, make_user, admin_headers
):
    email = "a" * 238 + "@example.com"
    victim = await make_user(email)

    resp = await async_client.delete(f"/api/admin/users/{victim.id}", headers=admin_headers)
    assert resp.status_code == 200

    await db_session.refresh(victim)
    assert len(victim.email) == 255
    assert victim.email.startswith(f"deleted_{victim.id}_aaa")


async def test_admin_cannot_delete_self(async_client: AsyncClient, admin_user: User, admin_headers):
    resp = await async_client.delete(f"/api/admin/users/{admin_user.id}", headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Cannot delete your own account"


# ── Dashboard & reports ─────────────────────────────────────────────
async def test_stats(
    async_client: AsyncClient, db_session: AsyncSession, donor: User, admin_headers
):
    await _add(
        db_session,
        _campaign(donor, "active", current_amount=Decimal("2500")),
        _campaign(donor, "pending"),
        _material(),
    )

    resp = await async_client.get("/api/admin/stats", headers=admin_headers)
    assert resp.status_code == 200
    stats = resp.json()
    assert stats["totalUsers"] == 2
    assert stats["totalCampaigns"] == 2
    assert stats["activeCampaigns"] == 1
    assert stats["pendingCampaigns"] == 1
    assert stats["totalDonations"] == 1
    assert stats["recentUsers"] == 2
    assert Decimal(stats["totalAmount"]) == Decimal("2500")


async def test_recent_activity(
    async_client: AsyncClient, db_session: AsyncSession, donor: User, admin_headers
):
    await _add(db_session, _campaign(donor), _material())

    resp = await async_client.get("/api/admin/recent-activity", headers=admin_headers)
    descriptions = [a["description"] for a in resp.json()]
    assert "Nouvelle campagne: Cantine scolaire" in descriptions
    assert "Don matériel proposé: Vélo" in descriptions
    assert len(descriptions) == 3


async def test_financial_report(
    async_client: AsyncClient, db_session: AsyncSession, donor: User, admin_headers
):
    (campaign,) = await _add(db_session, _campaign(donor, "approved"))
    await _add(
        db_session,
        FinancialDonation(campaign_id=campaign.id, amount=Decimal("3000"),
                          payment_operator="orange_money", status="completed"),
        FinancialDonation(campaign_id=campaign.id, amount=Decimal("1000"),
                          payment_operator="wave", status="completed"),
        FinancialDonation(campaign_id=campaign.id, amount=Decimal("500"),
                          payment_operator="wave", status="failed"),
    )

    report = (await async_client.get("/api/admin/reports/financial", headers=admin_headers)).json()
    assert Decimal(report["totalCollected"]) == Decimal("4000")
    assert report["completedDonations"] == 2
    assert report["failedDonations"] == 1
    assert report["pendingDonations"] == 0
    assert report["paymentMethods"] == {"orange_money": 50, "wave": 50}


async def test_users_report(async_client: AsyncClient, donor: User, admin_headers):
    report = (await async_client.get("/api/admin/reports/users", headers=admin_headers)).json()
    assert report["totalUsers"] == 2
    assert report["verificationRate"] == 50
    assert report["roleDistribution"] == {"beneficiaries": 0, "donors": 1, "admins": 1}
    assert report["weeklyActivity"]["newRegistrations"] == 2


async def test_campaigns_report(
    async_client: AsyncClient, db_session: AsyncSession, donor: User, admin_headers
):
    await _add(
        db_session,
        _campaign(donor, "completed", category="education", current_amount=Decimal("100000")),
        _campaign(donor, "approved", category="health"),
    )

    report = (await async_client.get("/api/admin/reports/campaigns", headers=admin_headers)).json()
    assert report["totalCampaigns"] == 2
    assert report["successRate"] == 50
    assert report["averageGoalAchievement"] == 50
    assert report["categoryPerformance"] == {"education": 1, "health": 1}
    assert report["trends"]["campaignCreation"] == 2


async def test_monthly_report(async_client: AsyncClient, donor: User, admin_headers):
    report = (await async_client.get("/api/admin/reports/monthly", headers=admin_headers)).json()
    assert report["newUsers"] == 2
    assert report["successfulCampaigns"] == 0


# ── Audit trail ─────────────────────────────────────────────────────
async def test_audit_logs(async_client: AsyncClient, donor: User, donor_headers, admin_headers):
    await async_client.get("/api/admin/users", headers=donor_headers)
    await async_client.get("/api/admin/users", headers=admin_headers)

    logs = (await async_client.get("/api/admin/logs", headers=admin_headers)).json()
    assert [e["action"] for e in logs] == ["list_users", "admin_access_denied"]
    assert logs[1]["userEmail"] == donor.email
    assert logs[1]["success"] is False

    security = (await async_client.get("/api/admin/logs/security", headers=admin_headers)).json()
    assert [e["action"] for e in security] == ["admin_access_denied"]

    limited = (await async_client.get("/api/admin/logs?limit=1", headers=admin_headers)).json()
    assert len(limited) == 1
