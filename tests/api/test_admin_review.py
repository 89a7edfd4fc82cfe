"""Tests for the admin review endpoints under /api/v1/verification."""
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from truckmate.models import RequestStatus, VerificationStatus
from tests.api.conftest import bearer, license_files, make_mock_result, profile_form
from tests.fakes import DRIVER_SUBJECT, OTHER_DRIVER_SUBJECT

PENDING_URL = "/api/v1/verification/pending"
ALL_URL = "/api/v1/verification/all"
STATS_URL = "/api/v1/verification/stats"


def _process_url(request_id) -> str:
    return f"/api/v1/verification/{request_id}/process"


async def _submit(client, make_id_token, subject=DRIVER_SUBJECT, name="Ravi Kumar"):
    headers = bearer(make_id_token(subject, name=name, email=f"{subject}@example.com"))
    response = await client.post(
        "/api/v1/profile/driver",
        headers=headers,
        data=profile_form(name=name),
        files=license_files(),
    )
    assert response.status_code == 201
    return response.json()["profile"]


def _pending_id(fake_db, subject=DRIVER_SUBJECT):
    return next(
        r["id"] for r in fake_db.request_rows(subject) if r["status"] == RequestStatus.PENDING
    )


class TestListPending:

    async def test_empty(self, client):
        response = await client.get(PENDING_URL)

        assert response.status_code == 200
        assert response.json() == []

    async def test_newest_first_with_details(self, client, make_id_token):
        await _submit(client, make_id_token, DRIVER_SUBJECT, "Ravi Kumar")
        await _submit(client, make_id_token, OTHER_DRIVER_SUBJECT, "Anil Singh")

        items = (await client.get(PENDING_URL)).json()

        assert [i["driverId"] for i in items] == [OTHER_DRIVER_SUBJECT, DRIVER_SUBJECT]
        item = items[1]
        assert item["status"] == "pending"
        assert item["priority"] == "medium"
        assert item["driver"]["found"] is True
        assert item["driver"]["name"] == "Ravi Kumar"
        assert item["driver"]["email"] == f"{DRIVER_SUBJECT}@example.com"
        assert item["driver"]["phone"] == "N/A"
        assert item["profile"]["licenseNumber"] == "MH12-2019-0001234"
        assert item["profile"]["knownTruckTypes"] == ["container", "trailer"]
        assert item["documents"]["licensePhotoFront"].endswith(".jpg")

    async def test_decided_requests_excluded(self, client, make_id_token, fake_db):
        await _submit(client, make_id_token)
        await client.patch(_process_url(_pending_id(fake_db)), json={"action": "approved"})

        assert (await client.get(PENDING_URL)).json() == []


class TestListAll:

    async def test_includes_history(self, client, make_id_token):
        await _submit(client, make_id_token)
        headers = bearer(make_id_token(DRIVER_SUBJECT))
        await client.patch(
            "/api/v1/profile/driver", headers=headers, data={"name": "Ravi K."}
        )

        items = (await client.get(ALL_URL)).json()

        assert [i["status"] for i in items] == ["pending", "cancelled"]
        assert items[1]["notes"] == "superseded by profile update"


class TestProcessRequest:

    async def test_approve(self, client, make_id_token, fake_db, mock_admin):
        profile = await _submit(client, make_id_token)
        request_id = _pending_id(fake_db)

        response = await client.patch(
            _process_url(request_id), json={"action": "approved", "notes": "All good"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Driver approved successfully",
            "requestId": str(request_id),
            "profileId": profile["id"],
            "status": "approved",
        }
        row = fake_db.profile_rows()[0]
        assert row["verification_status"] == VerificationStatus.APPROVED
        assert row["approved_by"] == str(mock_admin.id)

        headers = bearer(make_id_token(DRIVER_SUBJECT))
        access = (await client.get("/api/v1/verification/check-access", headers=headers)).json()
        assert access["canAccessJobs"] is True

    async def test_reject_sets_reason(self, client, make_id_token, fake_db):
        await _submit(client, make_id_token)

        response = await client.patch(
            _process_url(_pending_id(fake_db)),
            json={"action": "rejected", "notes": "License photo unreadable"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Driver rejected successfully"
        row = fake_db.profile_rows()[0]
        assert row["rejection_reason"] == "License photo unreadable"
        assert row["resubmission_count"] == 1

    async def test_reject_without_notes(self, client, make_id_token, fake_db):
        await _submit(client, make_id_token)

        await client.patch(_process_url(_pending_id(fake_db)), json={"action": "rejected"})

        assert fake_db.profile_rows()[0]["rejection_reason"] == "No specific reason provided"

    async def test_second_decision_conflicts(self, client, make_id_token, fake_db):
        await _submit(client, make_id_token)
        request_id = _pending_id(fake_db)
        await client.patch(_process_url(request_id), json={"action": "approved"})

        response = await client.patch(
            _process_url(request_id), json={"action": "rejected", "notes": "oops"}
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ALREADY_PROCESSED"
        assert fake_db.profile_rows()[0]["verification_status"] == VerificationStatus.APPROVED

    async def test_invalid_action(self, client, make_id_token, fake_db):
        await _submit(client, make_id_token)

        response = await client.patch(
            _process_url(_pending_id(fake_db)), json={"action": "suspend"}
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_unknown_request(self, client):
        response = await client.patch(_process_url(uuid4()), json={"action": "approved"})
        assert response.status_code == 404

    async def test_malformed_request_id(self, client):
        response = await client.patch(_process_url("not-a-uuid"), json={"action": "approved"})
        assert response.status_code == 422


class TestStats:

    async def test_counts(self, client, make_id_token, fake_db):
        await _submit(client, make_id_token, DRIVER_SUBJECT)
        await _submit(client, make_id_token, OTHER_DRIVER_SUBJECT, "Anil Singh")
        await client.patch(
            _process_url(_pending_id(fake_db, OTHER_DRIVER_SUBJECT)),
            json={"action": "rejected"},
        )

        response = await client.get(STATS_URL)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "stats": {"pending": 1, "approved": 0, "rejected": 1, "cancelled": 0, "total": 2},
        }


class TestAdminAuth:

    async def test_missing_token(self, unauthenticated_client):
        response = await unauthenticated_client.get(PENDING_URL)

        assert response.status_code == 401
        assert response.json()["message"] == "Admin authentication required"

    async def test_valid_admin_token(self, unauthenticated_client, mock_session, mock_admin, valid_token):
        mock_session.execute = AsyncMock(return_value=make_mock_result(scalar_value=mock_admin))

        response = await unauthenticated_client.get(STATS_URL, headers=bearer(valid_token))

        assert response.status_code == 200

    async def test_expired_admin_token(self, unauthenticated_client, expired_token):
        response = await unauthenticated_client.get(PENDING_URL, headers=bearer(expired_token))
        assert response.status_code == 401

    async def test_inactive_admin(self, unauthenticated_client, mock_session, valid_token):
        mock_session.execute = AsyncMock(return_value=make_mock_result(scalar_value=None))

        response = await unauthenticated_client.get(PENDING_URL, headers=bearer(valid_token))

        assert response.status_code == 401

    async def test_driver_token_is_not_admin(self, unauthenticated_client, make_id_token):
        response = await unauthenticated_client.get(
            PENDING_URL, headers=bearer(make_id_token())
        )
        assert response.status_code == 401
