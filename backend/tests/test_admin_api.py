"""
Integration tests for the admin API.
"""

import pytest


@pytest.mark.asyncio
async def test_health_and_root(client):
    health = await client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"
    assert health.json()["realtime_streams"] == 0
    assert health.json()["redis"] == "ok"

    root = await client.get("/")
    assert root.status_code == 200


@pytest.mark.asyncio
async def test_admin_endpoints_require_token(client):
    response = await client.get("/v1/admin/packages")

    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["error_code"] == "ERR_UNAUTHORIZED"


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(client):
    response = await client.get("/v1/admin/packages", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_admin_endpoints_reject_non_admin(client, user_headers):
    for path in ("/v1/admin/packages", "/v1/admin/tracking-numbers", "/v1/admin/locations",
                 "/v1/admin/products", "/v1/admin/activities", "/v1/admin/stats"):
        response = await client.get(path, headers=user_headers)
        assert response.status_code == 403, path


@pytest.mark.asyncio
async def test_unknown_user_in_token_is_rejected(client, make_token):
    headers = {"Authorization": f"Bearer {make_token('ghost_user', 'admin')}"}

    response = await client.get("/v1/admin/packages", headers=headers)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_role_comes_from_directory_not_token(client, make_token):
    headers = {"Authorization": f"Bearer {make_token('demo_user_123', 'admin')}"}

    response = await client.get("/v1/admin/packages", headers=headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_auth_cookie_is_accepted(client, make_token):
    client.cookies.set("auth-token", make_token("admin_user_456", "admin"))

    response = await client.get("/v1/admin/packages")

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_list_packages_with_stats(client, admin_headers):
    response = await client.get("/v1/admin/packages", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalCount"] == 3
    assert {p["trackingNumber"] for p in data["packages"]} == {"SC1234567890", "SC0987654321", "SC1122334455"}
    assert data["stats"]["byStatus"]["delivered"] == 1
    assert data["stats"]["byStatus"]["in_transit"] == 1
    assert data["stats"]["byStatus"]["exception"] == 0


@pytest.mark.asyncio
async def test_update_status_action(client, admin_headers, seeded_state):
    events = []
    seeded_state.bus.subscribe("admin:packages", events.append)

    response = await client.post("/v1/admin/packages", headers=admin_headers, json={
        "action": "update_status",
        "trackingNumber": "SC1234567890",
        "newStatus": "out_for_delivery",
        "reason": "Loaded on van",
    })

    assert response.status_code == 200
    assert response.json()["success"] is True
    package = seeded_state.store.get_package_by_tracking_number("SC1234567890")
    assert package.status.value == "out_for_delivery"
    latest = seeded_state.store.list_activities_for("SC1234567890")[-1]
    assert latest.created_by == "admin_user_456"
    assert latest.metadata["reason"] == "Loaded on van"
    assert [e.type for e in events] == ["status_changed"]


@pytest.mark.asyncio
async def test_update_status_unknown_package(client, admin_headers):
    response = await client.post("/v1/admin/packages", headers=admin_headers, json={
        "action": "update_status", "trackingNumber": "SC0000000000", "newStatus": "delivered",
    })

    assert response.status_code == 404
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_update_status_missing_fields(client, admin_headers):
    response = await client.post("/v1/admin/packages", headers=admin_headers, json={
        "action": "update_status", "trackingNumber": "SC1234567890",
    })

    assert response.status_code == 400
    assert "newStatus" in response.json()["message"]


@pytest.mark.asyncio
async def test_update_status_invalid_status(client, admin_headers):
    response = await client.post("/v1/admin/packages", headers=admin_headers, json={
        "action": "update_status", "trackingNumber": "SC1234567890", "newStatus": "teleported",
    })

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_and_missing_action(client, admin_headers):
    unknown = await client.post("/v1/admin/packages", headers=admin_headers, json={"action": "explode"})
    missing = await client.post("/v1/admin/packages", headers=admin_headers, json={"trackingNumber": "SC1"})

    assert unknown.status_code == 400
    assert missing.status_code == 400


@pytest.mark.asyncio
async def test_add_event_action(client, admin_headers, seeded_state):
    response = await client.post("/v1/admin/packages", headers=admin_headers, json={
        "action": "add_event",
        "trackingNumber": "SC1122334455",
        "description": "Awaiting pickup window",
        "location": "New York, NY",
    })

    assert response.status_code == 200
    latest = seeded_state.store.list_activities_for("SC1122334455")[-1]
    assert latest.description == "Awaiting pickup window"
    assert latest.status.value == "pending"


@pytest.mark.asyncio
async def test_tracking_number_lifecycle(client, admin_headers, seeded_state):
    location_ids = [loc.id for loc in seeded_state.store.list_locations()]
    product_id = seeded_state.store.list_products()[0].id

    created = await client.post("/v1/admin/tracking-numbers", headers=admin_headers, json={
        "action": "create",
        "productId": product_id,
        "senderLocationId": location_ids[0],
        "recipientLocationId": location_ids[1],
        "recipientName": "Dana Scully",
        "priority": "express",
        "cost": 42.5,
    })
    assert created.status_code == 200
    package = created.json()["data"]
    assert package["trackingNumber"].startswith("SC")
    assert package["createdBy"] == "admin_user_456"

    updated = await client.post("/v1/admin/tracking-numbers", headers=admin_headers, json={
        "action": "update", "id": package["id"], "status": "picked_up", "notes": "Signature required",
    })
    assert updated.status_code == 200
    assert updated.json()["data"]["status"] == "picked_up"
    assert updated.json()["data"]["notes"] == "Signature required"

    activity = await client.post("/v1/admin/tracking-numbers", headers=admin_headers, json={
        "action": "add_activity",
        "trackingNumberId": package["id"],
        "type": "location_updated",
        "location": "Chicago, IL",
        "description": "Arrived at Chicago hub",
    })
    assert activity.status_code == 200
    assert activity.json()["data"]["type"] == "location_updated"

    history = await client.get(
        "/v1/admin/activities", headers=admin_headers, params={"trackingNumber": package["trackingNumber"]}
    )
    assert [a["type"] for a in history.json()["data"]] == ["created", "status_changed", "location_updated"]

    searched = await client.get("/v1/admin/tracking-numbers", headers=admin_headers, params={"q": "scully"})
    assert searched.json()["total"] == 1
    assert searched.json()["data"][0]["currentLocation"] == "Chicago, IL"

    deleted = await client.post("/v1/admin/tracking-numbers", headers=admin_headers, json={
        "action": "delete", "id": package["id"],
    })
    assert deleted.status_code == 200
    assert seeded_state.store.get_package_by_id(package["id"]) is None


@pytest.mark.asyncio
async def test_tracking_number_create_requires_references(client, admin_headers):
    response = await client.post("/v1/admin/tracking-numbers", headers=admin_headers, json={
        "action": "create", "recipientName": "Nobody",
    })

    assert response.status_code == 400
    message = response.json()["message"]
    assert "productId" in message
    assert "senderLocationId" in message


@pytest.mark.asyncio
async def test_tracking_number_update_requires_id_and_existing_package(client, admin_headers):
    no_id = await client.post("/v1/admin/tracking-numbers", headers=admin_headers, json={
        "action": "update", "notes": "x",
    })
    missing = await client.post("/v1/admin/tracking-numbers", headers=admin_headers, json={
        "action": "delete", "id": "pkg_missing",
    })
    no_package = await client.post("/v1/admin/tracking-numbers", headers=admin_headers, json={
        "action": "add_activity", "trackingNumberId": "pkg_missing",
    })

    assert no_id.status_code == 400
    assert missing.status_code == 404
    assert no_package.status_code == 404


@pytest.mark.asyncio
async def test_tracking_numbers_filters_and_limit(client, admin_headers):
    by_status = await client.get("/v1/admin/tracking-numbers", headers=admin_headers, params={"status": "delivered"})
    limited = await client.get("/v1/admin/tracking-numbers", headers=admin_headers, params={"limit": 1})
    by_priority = await client.get("/v1/admin/tracking-numbers", headers=admin_headers, params={"priority": "overnight"})

    assert [p["trackingNumber"] for p in by_status.json()["data"]] == ["SC0987654321"]
    assert len(limited.json()["data"]) == 1
    assert limited.json()["total"] == 3
    assert "stats" in limited.json()
    assert [p["trackingNumber"] for p in by_priority.json()["data"]] == ["SC1122334455"]


@pytest.mark.asyncio
async def test_location_crud(client, admin_headers, seeded_state):
    events = []
    seeded_state.bus.subscribe("admin:locations", events.append)

    created = await client.post("/v1/admin/locations", headers=admin_headers, json={
        "action": "create",
        "name": "Chicago Depot",
        "type": "pickup",
        "address": {"street": "9 Lake St", "city": "Chicago", "state": "IL", "zipCode": "60601"},
    })
    assert created.status_code == 200
    location = created.json()["data"]
    assert location["address"]["zipCode"] == "60601"

    fetched = await client.get(f"/v1/admin/locations/{location['id']}", headers=admin_headers)
    assert fetched.json()["data"]["name"] == "Chicago Depot"

    updated = await client.post("/v1/admin/locations", headers=admin_headers, json={
        "action": "update", "id": location["id"], "name": "Chicago North Depot",
    })
    assert updated.json()["data"]["name"] == "Chicago North Depot"

    by_type = await client.get("/v1/admin/locations", headers=admin_headers, params={"type": "pickup"})
    assert by_type.json()["total"] == 1

    deleted = await client.post("/v1/admin/locations", headers=admin_headers, json={
        "action": "delete", "id": location["id"],
    })
    assert deleted.status_code == 200

    gone = await client.get(f"/v1/admin/locations/{location['id']}", headers=admin_headers)
    assert gone.status_code == 404
    assert [e.type for e in events] == ["location_created", "location_updated", "location_deleted"]


@pytest.mark.asyncio
async def test_location_create_missing_fields(client, admin_headers):
    response = await client.post("/v1/admin/locations", headers=admin_headers, json={"action": "create"})

    assert response.status_code == 400
    assert response.json()["message"].startswith("Missing required fields")


@pytest.mark.asyncio
async def test_product_crud(client, admin_headers):
    created = await client.post("/v1/admin/products", headers=admin_headers, json={
        "action": "create",
        "sku": "FRG-001",
        "name": "Fragile Goods",
        "category": "Fragile",
        "pricing": {"baseCost": 14.5},
    })
    assert created.status_code == 200
    product = created.json()["data"]
    assert product["pricing"]["baseCost"] == 14.5

    searched = await client.get("/v1/admin/products", headers=admin_headers, params={"q": "frg"})
    assert [p["sku"] for p in searched.json()["data"]] == ["FRG-001"]

    updated = await client.post("/v1/admin/products", headers=admin_headers, json={
        "action": "update", "id": product["id"], "description": "Handle with care",
    })
    assert updated.json()["data"]["description"] == "Handle with care"

    missing = await client.post("/v1/admin/products", headers=admin_headers, json={
        "action": "update", "id": "prod_missing", "name": "x",
    })
    assert missing.status_code == 404

    deleted = await client.post("/v1/admin/products", headers=admin_headers, json={
        "action": "delete", "id": product["id"],
    })
    assert deleted.status_code == 200

    listed = await client.get("/v1/admin/products", headers=admin_headers)
    assert listed.json()["total"] == 2


@pytest.mark.asyncio
async def test_recent_activities(client, admin_headers):
    response = await client.get("/v1/admin/activities", headers=admin_headers, params={"limit": 3})

    body = response.json()
    assert len(body["data"]) == 3
    assert body["total"] == 8


@pytest.mark.asyncio
async def test_dashboard_stats_and_reseed(client, admin_headers, seeded_state):
    await client.post("/v1/admin/packages", headers=admin_headers, json={
        "action": "update_status", "trackingNumber": "SC1122334455", "newStatus": "exception",
    })

    stats = await client.get("/v1/admin/stats", headers=admin_headers)
    data = stats.json()["data"]
    assert data["stats"]["exceptionCount"] == 1
    assert data["stats"]["total"] == 3
    assert len(data["recentPackages"]) == 3

    reseeded = await client.post("/v1/admin/seed", headers=admin_headers)
    assert reseeded.status_code == 200
    assert reseeded.json()["data"]["packages"] == 3
    assert seeded_state.store.get_package_by_tracking_number("SC1122334455").status.value == "pending"


@pytest.mark.asyncio
async def test_public_tracking_lookup(client):
    response = await client.get("/v1/tracking/sc1234567890")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["package"]["status"] == "in_transit"
    assert [a["type"] for a in data["activities"]] == ["created", "status_changed", "status_changed"]

    missing = await client.get("/v1/tracking/SC0000000000")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_realtime_requires_admin(client, user_headers, make_token):
    anonymous = await client.get("/v1/admin/realtime")
    as_user = await client.get("/v1/admin/realtime", headers=user_headers)
    query_token = await client.get("/v1/admin/realtime", params={"token": make_token("demo_user_123", "demo")})

    assert anonymous.status_code == 401
    assert as_user.status_code == 403
    assert query_token.status_code == 403


@pytest.mark.asyncio
async def test_forward_only_policy_over_http(seeded_state, mock_redis, admin_headers):
    from httpx import AsyncClient, ASGITransport

    from backend.app.main import create_app
    from backend.app.services.status_engine import forward_only_transitions

    seeded_state.engine.transition_validator = forward_only_transitions
    app = create_app(seeded_state)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/v1/admin/packages", headers=admin_headers, json={
            "action": "update_status", "trackingNumber": "SC0987654321", "newStatus": "in_transit",
        })

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_TRANSITION"


@pytest.mark.asyncio
async def test_tracking_number_update_rejects_null_for_required_field(client, admin_headers, seeded_state):
    package = seeded_state.store.get_package_by_tracking_number("SC1234567890")
    events = []
    seeded_state.bus.subscribe("admin:packages", events.append)

    response = await client.post("/v1/admin/tracking-numbers", headers=admin_headers, json={
        "action": "update", "id": package.id, "cost": None,
    })

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "cost" in body["message"]
    assert seeded_state.store.get_package_by_id(package.id).cost == package.cost
    assert events == []


@pytest.mark.asyncio
async def test_location_update_rejects_null_for_required_field(client, admin_headers, seeded_state):
    location = seeded_state.store.list_locations()[0]

    response = await client.post("/v1/admin/locations", headers=admin_headers, json={
        "action": "update", "id": location.id, "name": None,
    })

    assert response.status_code == 400
    assert "name" in response.json()["message"]
    assert seeded_state.store.get_location_by_id(location.id).name == location.name


@pytest.mark.asyncio
async def test_product_delete_unknown_id(client, admin_headers, seeded_state):
    before = seeded_state.store.list_products()

    response = await client.post("/v1/admin/products", headers=admin_headers, json={
        "action": "delete", "id": "prod_missing",
    })

    assert response.status_code == 404
    assert response.json()["success"] is False
    assert seeded_state.store.list_products() == before
