import uuid

from src.printcost.core.permissions import SYSTEM_READ, PermissionKey
from src.printcost.crud.crud_role import role as crud_role
from src.printcost.services.admin_service import growth_percent

API = "/api/v1/admin"


async def test_regular_user_is_forbidden(client, make_user, headers_for):
    headers = headers_for(await make_user(role="user"))
    response = await client.get(f"{API}/users", headers=headers)
    assert response.status_code == 403


async def test_admin_panel_requires_authentication(client):
    response = await client.get(f"{API}/metrics")
    assert response.status_code == 401


async def test_list_users_with_sheet_counts(client, make_user, headers_for):
    admin = await make_user(email="admin@example.com", role="admin")
    maker = await make_user(email="maker@example.com", plan_tier="basic")
    await client.post("/api/v1/sheets", json={"name": "One"}, headers=headers_for(maker))
    await client.post("/api/v1/sheets", json={"name": "Two"}, headers=headers_for(maker))

    response = await client.get(f"{API}/users", params={"plan_tier": "basic"}, headers=headers_for(admin))

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["total_pages"] == 1
    assert body["items"][0]["email"] == "maker@example.com"
    assert body["items"][0]["sheet_count"] == 2


async def test_search_and_paginate_users(client, make_user, headers_for):
    admin = await make_user(email="admin@example.com", role="admin")
    for i in range(3):
        await make_user(email=f"printer{i}@example.com")

    response = await client.get(
        f"{API}/users", params={"search": "printer", "limit": 2, "page": 2}, headers=headers_for(admin)
    )

    body = response.json()
    assert body["total"] == 3
    assert body["total_pages"] == 2
    assert body["page"] == 2
    assert len(body["items"]) == 1


async def test_update_user_plan_is_audited(client, make_user, headers_for):
    admin = await make_user(email="admin@example.com", role="admin")
    maker = await make_user(email="maker@example.com")
    headers = headers_for(admin)

    response = await client.put(f"{API}/users/{maker.id}", json={"plan_tier": "premium"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["plan_tier"] == "premium"

    logs = (await client.get(f"{API}/logs", params={"action": "UPDATE_USER"}, headers=headers)).json()
    assert logs["total"] == 1
    entry = logs["items"][0]
    assert entry["admin_id"] == str(admin.id)
    assert entry["target_id"] == str(maker.id)
    assert entry["details"] == {"plan_tier": "premium"}


async def test_update_unknown_user_is_not_found(client, make_user, headers_for):
    admin = await make_user(email="admin@example.com", role="admin")
    response = await client.put(
        f"{API}/users/{uuid.uuid4()}", json={"name": "Nobody"}, headers=headers_for(admin)
    )
    assert response.status_code == 404


async def test_deactivate_user(client, make_user, headers_for):
    admin = await make_user(email="admin@example.com", role="admin")
    maker = await make_user(email="maker@example.com")

    response = await client.delete(f"{API}/users/{maker.id}", headers=headers_for(admin))

    assert response.status_code == 200
    assert response.json()["status"] == "inactive"
    login = await client.post(
        "/api/v1/auth/login", json={"email": "maker@example.com", "password": "secret123"}
    )
    assert login.status_code == 401


async def test_admin_cannot_deactivate_self(client, make_user, headers_for):
    admin = await make_user(email="admin@example.com", role="admin")
    response = await client.delete(f"{API}/users/{admin.id}", headers=headers_for(admin))
    assert response.status_code == 400


async def test_role_change_invalidates_cached_permissions(app, client, seeded_db, make_user, headers_for):
    admin = await make_user(email="admin@example.com", role="admin")
    maker = await make_user(email="maker@example.com", role="user")
    cache = app.state.permission_service.cache

    # Prime the cache with the maker's current permissions
    assert (await client.get(f"{API}/plans", headers=headers_for(maker))).status_code == 403
    assert cache.get(maker.id) is not None

    moderator = await crud_role.get_by_name(seeded_db, name="moderator")
    response = await client.put(
        f"{API}/users/{maker.id}/role", json={"role_id": str(moderator.id)}, headers=headers_for(admin)
    )
    assert response.status_code == 200
    assert cache.get(maker.id) is None

    assert (await client.get(f"{API}/plans", headers=headers_for(maker))).status_code == 200


async def test_create_role_and_replace_permissions(app, client, make_user, headers_for):
    admin = await make_user(email="admin@example.com", role="admin")
    headers = headers_for(admin)
    permissions = (await client.get(f"{API}/permissions", headers=headers)).json()
    by_key = {f"{p['module']}.{p['action']}": p["id"] for p in permissions}

    created = await client.post(
        f"{API}/roles",
        json={"name": "auditor", "description": "Reads reports", "permission_ids": [by_key["system.read"]]},
        headers=headers,
    )
    assert created.status_code == 201
    role = created.json()
    assert [p["action"] for p in role["permissions"]] == ["read"]

    app.state.permission_service.cache.set(uuid.uuid4(), {SYSTEM_READ})
    updated = await client.put(
        f"{API}/roles/{role['id']}/permissions",
        json={"permission_ids": [by_key["sheets.read"], by_key["system.read"]]},
        headers=headers,
    )
    assert updated.status_code == 200
    assert sorted(f"{p['module']}.{p['action']}" for p in updated.json()["permissions"]) == [
        "sheets.read",
        "system.read",
    ]
    # Role edits drop every cached permission set
    assert len(app.state.permission_service.cache) == 0

    roles = (await client.get(f"{API}/roles", headers=headers)).json()
    assert "auditor" in {r["name"] for r in roles}


async def test_unknown_permission_id_is_not_found(client, make_user, headers_for):
    admin = await make_user(email="admin@example.com", role="admin")
    response = await client.post(
        f"{API}/roles",
        json={"name": "broken", "permission_ids": [str(uuid.uuid4())]},
        headers=headers_for(admin),
    )
    assert response.status_code == 404


async def test_parameters_read_and_update(client, make_user, headers_for):
    admin = await make_user(email="admin@example.com", role="admin")
    headers = headers_for(admin)

    current = (await client.get(f"{API}/parameters", headers=headers)).json()
    assert current["currency"] == "BRL"
    assert current["backup_retention_days"] == 30

    response = await client.put(
        f"{API}/parameters", json={"cost_per_hour": "75", "support_email": "help@example.com"}, headers=headers
    )
    assert response.status_code == 200
    assert float(response.json()["cost_per_hour"]) == 75
    assert response.json()["support_email"] == "help@example.com"

    quote = await client.post(
        "/api/v1/sheets/quote", json={"weight_grams": 1000, "print_hours": 1, "config": {"profit_margin_percent": 0}},
        headers=headers,
    )
    # 80.00 material + 0.13 energy + 15.00 labor at the new hourly rate
    assert quote.json()["final_price"] == "95.13"


async def test_parameters_reject_unknown_keys(client, make_user, headers_for):
    admin = await make_user(email="admin@example.com", role="admin")
    response = await client.put(f"{API}/parameters", json={"tax_rate": 5}, headers=headers_for(admin))
    assert response.status_code == 422


async def test_plans_and_formulas_for_moderator(client, make_user, headers_for):
    moderator = await make_user(email="mod@example.com", role="moderator")
    headers = headers_for(moderator)

    plans = (await client.get(f"{API}/plans", headers=headers)).json()
    formulas = (await client.get(f"{API}/formulas", headers=headers)).json()

    assert {p["tier"] for p in plans} == {"free", "basic", "premium"}
    assert formulas[0]["name"] == "material_cost"


async def test_metrics(client, make_user, headers_for):
    admin = await make_user(email="admin@example.com", role="admin")
    await make_user(email="gone@example.com", status="inactive")
    await client.post("/api/v1/sheets", json={}, headers=headers_for(admin))

    response = await client.get(f"{API}/metrics", params={"period_days": 7}, headers=headers_for(admin))

    assert response.status_code == 200
    body = response.json()
    assert body["total_users"] == 2
    assert body["active_users"] == 1
    assert body["new_signups"] == 2
    assert body["total_sheets"] == 1
    assert body["recent_sheets"] == 1
    assert body["period_days"] == 7


def test_growth_percent():
    assert str(growth_percent(new_signups=1, total_users=4)) == "33.3"
    assert str(growth_percent(new_signups=0, total_users=10)) == "0.0"
    assert str(growth_percent(new_signups=5, total_users=5)) == "0.0"


def test_permission_key_constant():
    assert SYSTEM_READ == PermissionKey("system", "read")


async def test_moderator_cannot_change_anything(client, make_user, headers_for):
    moderator = await make_user(email="mod@example.com", role="moderator")
    maker = await make_user(email="maker@example.com")
    headers = headers_for(moderator)

    assert (await client.get(f"{API}/parameters", headers=headers)).status_code == 200
    response = await client.put(f"{API}/parameters", json={"cost_per_hour": "1"}, headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Permission denied, requires users.admin"
    response = await client.delete(f"{API}/users/{maker.id}", headers=headers)
    assert response.status_code == 403
