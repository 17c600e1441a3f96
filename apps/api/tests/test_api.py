"""HTTP-level tests: authentication, error bodies and the main routes."""

import pytest

from medhub.core.config import settings
from medhub.core.security import create_session_token
from medhub.db.enums import DisputeType, Role, ServiceRequestStatus
from medhub.services import dispute_service, service_request_service

pytestmark = pytest.mark.asyncio


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_missing_token_is_401(client):
    response = await client.get("/equipment")

    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHENTICATED"


async def test_garbage_token_is_401(client):
    response = await client.get(
        "/equipment", headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == 401


async def test_user_without_org_gets_no_active_organization(client, make_user, caller_for, auth_for):
    auth = auth_for(caller_for(make_user()))

    response = await client.get("/equipment", headers=auth.headers)

    assert response.status_code == 403
    assert response.json()["code"] == "NO_ACTIVE_ORGANIZATION"


async def test_equipment_round_trip(client, hospital_member, other_hospital_owner, auth_for):
    created = await client.post(
        "/equipment", json={"name": "Máy siêu âm"}, headers=auth_for(hospital_member).headers
    )
    assert created.status_code == 201
    equipment_id = created.json()["id"]

    hidden = await client.get(
        f"/equipment/{equipment_id}", headers=auth_for(other_hospital_owner).headers
    )
    assert hidden.status_code == 404
    assert hidden.json()["code"] == "NOT_FOUND"


async def test_approval_gate_over_http(
    client, make_user, caller_for, hospital_org, hospital_member, hospital_owner, auth_for
):
    created = await client.post(
        "/service-requests",
        json={"title": "Sửa máy thở"},
        headers=auth_for(hospital_member).headers,
    )
    request_id = created.json()["id"]

    own = await client.patch(
        f"/service-requests/{request_id}/status",
        json={"status": "quoted"},
        headers=auth_for(hospital_member).headers,
    )
    assert own.status_code == 403
    body = own.json()
    assert body["code"] == "FORBIDDEN"
    assert body["details"]["reason"] == "self_action"
    assert body["message"] == f"{body['message_vi']} ({body['message_en']})"

    other = caller_for(make_user(hospital_org, Role.MEMBER), hospital_org)
    denied = await client.patch(
        f"/service-requests/{request_id}/status",
        json={"status": "quoted"},
        headers=auth_for(other).headers,
    )
    assert denied.json()["details"]["reason"] == "insufficient_role"

    approved = await client.patch(
        f"/service-requests/{request_id}/status",
        json={"status": "quoted"},
        headers=auth_for(hospital_owner).headers,
    )
    assert approved.status_code == 200
    assert approved.json()["status"] == "quoted"

    invalid = await client.patch(
        f"/service-requests/{request_id}/status",
        json={"status": "completed"},
        headers=auth_for(hospital_owner).headers,
    )
    assert invalid.status_code == 409
    assert invalid.json()["code"] == "INVALID_TRANSITION"


async def test_audit_listing_requires_approver(
    client, hospital_member, hospital_admin, auth_for
):
    await client.post(
        "/equipment", json={"name": "Máy đo SpO2"}, headers=auth_for(hospital_member).headers
    )

    denied = await client.get("/audit", headers=auth_for(hospital_member).headers)
    assert denied.status_code == 403

    listing = await client.get("/audit", headers=auth_for(hospital_admin).headers)
    assert listing.status_code == 200
    assert listing.json()["total"] == 1


async def test_admin_routes_require_platform_admin(client, hospital_owner, platform_admin, auth_for):
    denied = await client.get("/admin/providers", headers=auth_for(hospital_owner).headers)
    assert denied.status_code == 403
    assert denied.json()["details"]["reason"] == "platform_role_required"

    onboarded = await client.post(
        "/admin/organizations",
        json={
            "name": "Bệnh viện Đà Nẵng",
            "slug": "bv-da-nang",
            "org_type": "hospital",
            "owner_email": "owner@bvdn.vn",
        },
        headers=auth_for(platform_admin).headers,
    )
    assert onboarded.status_code == 201
    assert onboarded.json()["status"] == "trial"

    status = await client.get(
        "/admin/automation/status", headers=auth_for(platform_admin).headers
    )
    assert status.status_code == 200
    assert all(item["last_run"] is None for item in status.json())


async def test_internal_endpoint_secret(client, monkeypatch):
    wrong = await client.post(
        "/internal/scheduled/checkStockLevels", headers={"X-Internal-Secret": "nope"}
    )
    assert wrong.status_code == 403
    assert wrong.json()["code"] == "FORBIDDEN"

    unknown = await client.post(
        "/internal/scheduled/sendBirthdayCards",
        headers={"X-Internal-Secret": "test-internal-secret"},
    )
    assert unknown.status_code == 404
    assert unknown.json()["code"] == "NOT_FOUND"

    ok = await client.post(
        "/internal/scheduled/checkStockLevels",
        headers={"X-Internal-Secret": "test-internal-secret"},
    )
    assert ok.status_code == 200
    assert ok.json()["rule_name"] == "checkStockLevels"
    assert ok.json()["affected_count"] == 0

    monkeypatch.setattr(settings, "INTERNAL_SECRET", "")
    unconfigured = await client.post(
        "/internal/scheduled/checkStockLevels", headers={"X-Internal-Secret": "anything"}
    )
    assert unconfigured.status_code == 501
    assert unconfigured.json()["code"] == "HTTP_501"


async def test_malformed_input_gets_validation_code(client, hospital_member, auth_for):
    auth = auth_for(hospital_member)

    response = await client.patch(
        "/equipment/not-a-uuid/status", json={"status": "bogus"}, headers=auth.headers
    )

    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "VALIDATION"
    assert body["message"] == f"{body['message_vi']} ({body['message_en']})"
    error_types = {error["type"] for error in body["details"]["errors"]}
    assert {"uuid_parsing", "enum"} <= error_types


async def test_unknown_route_keeps_error_shape(client):
    response = await client.get("/no-such-route")

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


async def test_token_with_malformed_org_claim_is_401(client, hospital_member):
    token = create_session_token(user_id=hospital_member.user_id, org_id="not-a-uuid")

    response = await client.get("/equipment", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHENTICATED"


async def test_admin_arbitration_routes(
    client, db, auth_for, platform_admin, hospital_member
):
    service_request = service_request_service.create_service_request(
        db, hospital_member, "Sửa máy lọc máu"
    )
    service_request.status = ServiceRequestStatus.COMPLETED.value
    db.commit()
    dispute = dispute_service.create_dispute(
        db,
        hospital_member,
        service_request.id,
        DisputeType.QUALITY,
        "Kỹ thuật viên không hoàn thành việc thay thế linh kiện",
    )
    dispute_service.escalate_dispute(
        db, hospital_member, dispute.id, "Nhà cung cấp không phản hồi sau 5 ngày"
    )
    admin = auth_for(platform_admin)

    queue = await client.get("/admin/disputes/escalated", headers=admin.headers)
    assert queue.status_code == 200
    assert [item["id"] for item in queue.json()] == [str(dispute.id)]

    member = auth_for(hospital_member)
    denied = await client.post(
        f"/admin/disputes/{dispute.id}/resolve",
        json={"resolution": "dismiss", "reason": "Nhà cung cấp đã làm đúng hợp đồng"},
        headers=member.headers,
    )
    assert denied.status_code == 403

    resolved = await client.post(
        f"/admin/disputes/{dispute.id}/resolve",
        json={"resolution": "dismiss", "reason": "Nhà cung cấp đã làm đúng hợp đồng"},
        headers=admin.headers,
    )
    assert resolved.status_code == 200
    assert resolved.json()["status"] == "resolved"
