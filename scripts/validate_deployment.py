"""
Pre-Deploy and Smoke Test Script.

Runs the application in-process and executes a full smoke test:
1. Health Check
2. Admin Stats Check
3. Package Creation -> Status Updates -> Public Tracking Verification

Usage:
    python -m scripts.validate_deployment
"""

import sys

from fastapi.testclient import TestClient

from backend.app.main import create_app
from backend.app.core.jwt import create_access_token
from backend.app.services.seed import DEMO_USERS

app = create_app()
client = TestClient(app)


def print_step(step, msg):
    print(f"[{step}] {msg}")


def fail(msg):
    print(f"❌ FAILURE: {msg}")
    sys.exit(1)


def success(msg):
    print(f"✅ {msg}")


def main():
    print("🚀 Starting Deployment Validation...")

    # 1. Health Check
    print_step("PRE-DEPLOY", "Checking /health...")
    response = client.get("/health")
    if response.status_code != 200 or response.json().get("status") != "healthy":
        fail(f"Health check returned {response.status_code}: {response.text}")
    success("Health check passed")

    # 2. Admin Auth
    print_step("AUTH", "Generating Admin Token...")
    admin = next(u for u in DEMO_USERS if u.role.value == "admin")
    admin_token = create_access_token(
        data={"sub": admin.email, "user_id": admin.id, "role": admin.role.value}
    )
    headers = {"Authorization": f"Bearer {admin_token}"}

    print_step("ADMIN", "Fetching dashboard stats...")
    response = client.get("/v1/admin/stats", headers=headers)
    if response.status_code != 200:
        fail(f"Stats endpoint returned {response.status_code}: {response.text}")
    stats = response.json()["data"]["stats"]
    success(f"Stats reachable ({stats['total']} packages, {stats['totalRevenue']} revenue)")

    # 3. Package flow
    print_step("FLOW", "Creating package...")
    locations = client.get("/v1/admin/locations", headers=headers).json()["data"]
    products = client.get("/v1/admin/products", headers=headers).json()["data"]
    if len(locations) < 2 or not products:
        fail("Demo catalogue missing; set SEED_DEMO_DATA=true")

    response = client.post("/v1/admin/tracking-numbers", headers=headers, json={
        "action": "create",
        "productId": products[0]["id"],
        "senderLocationId": locations[0]["id"],
        "recipientLocationId": locations[1]["id"],
        "recipientName": "Smoke Test",
        "cost": 12.5,
    })
    if response.status_code != 200:
        fail(f"Package creation failed: {response.text}")
    tracking_number = response.json()["data"]["trackingNumber"]
    success(f"Created {tracking_number}")

    for status in ("picked_up", "in_transit", "out_for_delivery", "delivered"):
        print_step("FLOW", f"Moving {tracking_number} to {status}...")
        response = client.post("/v1/admin/packages", headers=headers, json={
            "action": "update_status",
            "trackingNumber": tracking_number,
            "newStatus": status,
            "reason": "Deployment smoke test",
        })
        if response.status_code != 200:
            fail(f"Status update to {status} failed: {response.text}")
    success("Status chain applied")

    print_step("VERIFY", "Checking public tracking...")
    response = client.get(f"/v1/tracking/{tracking_number}")
    if response.status_code != 200:
        fail(f"Tracking lookup failed: {response.text}")
    data = response.json()["data"]
    if data["package"]["status"] != "delivered":
        fail(f"Expected delivered, got {data['package']['status']}")
    if len(data["activities"]) != 5:
        fail(f"Expected 5 activities, got {len(data['activities'])}")
    if not data["package"].get("actualDeliveryDate"):
        fail("Delivery date not recorded")
    success("Tracking history complete")

    print_step("CLEANUP", "Deleting smoke test package...")
    client.post("/v1/admin/tracking-numbers", headers=headers, json={
        "action": "delete", "id": data["package"]["id"],
    })

    print("🎉 Deployment validation passed")


if __name__ == "__main__":
    main()
