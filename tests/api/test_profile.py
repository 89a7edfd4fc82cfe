"""Tests for /api/v1/profile/driver endpoints."""
import pytest

from truckmate.models import RequestStatus, User, UserRole, VerificationStatus
from tests.api.conftest import bearer, license_files, profile_form
from tests.fakes import DRIVER_SUBJECT

URL = "/api/v1/profile/driver"


async def _submit(client, headers, **form):
    return await client.post(
        URL, headers=headers, data=profile_form(**form), files=license_files()
    )


class TestSubmitProfile:

    async def test_first_submission_created(self, client, driver_headers, fake_db):
        response = await _submit(client, driver_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Profile submitted for verification"
        assert data["requiresVerification"] is True
        profile = data["profile"]
        assert profile["userId"] == DRIVER_SUBJECT
        assert profile["verificationStatus"] == "pending"
        assert profile["profileCompleted"] is True
        assert profile["knownTruckTypes"] == ["container", "trailer"]
        assert profile["age"] == 34
        assert profile["licensePhotoFront"].startswith("http://test/uploads/drivers/licenses/")
        assert profile["licensePhotoFront"].endswith(".jpg")
        assert profile["licensePhotoBack"].endswith(".png")
        assert len(fake_db.request_rows(DRIVER_SUBJECT)) == 1

    async def test_assigns_driver_role(self, client, driver_headers, fake_db):
        await _submit(client, driver_headers)

        user = next(iter(fake_db.tables["users"].values()))
        assert user["subject_id"] == DRIVER_SUBJECT
        assert user["role"] == UserRole.DRIVER

    async def test_documents_written_to_storage(self, client, driver_headers, storage):
        response = await _submit(client, driver_headers)

        url = response.json()["profile"]["licensePhotoFront"]
        assert storage.path_for(url).read_bytes() == b"front-image"

    async def test_comma_separated_truck_types(self, client, driver_headers):
        response = await _submit(client, driver_headers, knownTruckTypes="tanker, flatbed")
        assert response.json()["profile"]["knownTruckTypes"] == ["tanker", "flatbed"]

    async def test_repeat_submission_behaves_as_update(self, client, driver_headers, fake_db):
        await _submit(client, driver_headers)

        response = await client.post(URL, headers=driver_headers, data={"location": "Mumbai"})

        assert response.status_code == 200
        assert response.json()["message"] == "Profile updated successfully"
        assert len(fake_db.request_rows(DRIVER_SUBJECT)) == 1

    async def test_empty_first_submission_rejected(self, client, driver_headers, fake_db):
        response = await client.post(URL, headers=driver_headers, data={"age": ""})

        assert response.status_code == 422
        body = response.json()
        assert body["message"] == "Missing required profile fields"
        assert {d["field"] for d in body["error"]["details"]} == {
            "name", "known_truck_types", "license_photo_front", "license_photo_back",
        }
        assert fake_db.profile_rows() == []
        assert fake_db.request_rows() == []

    async def test_first_submission_without_license_photos(
        self, client, driver_headers, fake_db, storage
    ):
        response = await client.post(
            URL,
            headers=driver_headers,
            data=profile_form(),
            files={"profilePhoto": ("me.jpg", b"selfie", "image/jpeg")},
        )

        assert response.status_code == 422
        assert [d["field"] for d in response.json()["error"]["details"]] == [
            "license_photo_back", "license_photo_front",
        ]
        assert fake_db.profile_rows() == []
        assert not any(p.is_file() for p in storage.root.rglob("*"))

    async def test_rejected_submission_keeps_role_unassigned(self, client, driver_headers, fake_db):
        await client.post(URL, headers=driver_headers, data={"name": "Ravi"})

        user = next(iter(fake_db.tables["users"].values()))
        assert user["role"] == UserRole.UNASSIGNED

    async def test_non_image_rejected(self, client, driver_headers, fake_db):
        response = await client.post(
            URL,
            headers=driver_headers,
            data=profile_form(),
            files={"licensePhotoFront": ("license.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["error"]["details"][0]["field"] == "licensePhotoFront"
        assert fake_db.profile_rows() == []

    async def test_invalid_age_rejected(self, client, driver_headers, fake_db, storage):
        response = await _submit(client, driver_headers, age="12")

        assert response.status_code == 422
        assert response.json()["message"] == "Invalid profile data"
        assert fake_db.profile_rows() == []
        assert not any(p.is_file() for p in storage.root.rglob("*"))

    async def test_owner_forbidden(self, client, driver_headers, fake_db):
        uow = fake_db.uow()
        await uow.users.add(User(
            subject_id=DRIVER_SUBJECT,
            name="Fleet Owner",
            phone="+919800000009",
            role=UserRole.OWNER,
            registration_completed=True,
        ))
        await uow.commit()

        response = await _submit(client, driver_headers)

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"
        assert fake_db.profile_rows() == []

    async def test_requires_token(self, client):
        response = await client.post(URL, data=profile_form())

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    async def test_expired_token(self, client, identity_verifier):
        token = identity_verifier.issue(DRIVER_SUBJECT, exp=1)

        response = await client.post(URL, headers=bearer(token), data=profile_form())

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_EXPIRED"


class TestUpdateProfile:

    async def test_non_critical_update(self, client, driver_headers, fake_db):
        await _submit(client, driver_headers)

        response = await client.patch(
            URL, headers=driver_headers, data={"location": "Mumbai", "age": "35"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["requiresVerification"] is False
        assert data["message"] == "Profile updated successfully"
        assert data["profile"]["location"] == "Mumbai"
        assert data["profile"]["name"] == "Ravi Kumar"

    async def test_critical_update_resubmits(self, client, driver_headers, fake_db):
        await _submit(client, driver_headers)

        response = await client.patch(
            URL,
            headers=driver_headers,
            files={"licensePhotoBack": ("back2.png", b"new-back", "image/png")},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["requiresVerification"] is True
        assert data["message"] == (
            "Profile updated and resubmitted for verification due to critical changes"
        )
        statuses = [r["status"] for r in fake_db.request_rows(DRIVER_SUBJECT)]
        assert statuses == [RequestStatus.CANCELLED, RequestStatus.PENDING]

    async def test_profile_photo_is_not_critical(self, client, driver_headers):
        await _submit(client, driver_headers)

        response = await client.patch(
            URL,
            headers=driver_headers,
            files={"profilePhoto": ("me.webp", b"selfie", "image/webp")},
        )

        data = response.json()
        assert data["requiresVerification"] is False
        assert data["profile"]["profilePhoto"].endswith(".webp")


class TestGetProfile:

    async def test_not_found(self, client, driver_headers):
        response = await client.get(URL, headers=driver_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Profile not found"

    async def test_returns_profile(self, client, driver_headers):
        await _submit(client, driver_headers)

        response = await client.get(URL, headers=driver_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["userId"] == DRIVER_SUBJECT
        assert data["verificationStatus"] == VerificationStatus.PENDING.value
        assert data["licenseExpiryDate"] == "2030-06-30"


class TestAvailability:

    AVAILABILITY_URL = "/api/v1/profile/availability"

    async def _approve(self, client, headers, fake_db, make_workflow):
        await _submit(client, headers)
        request_id = fake_db.request_rows(DRIVER_SUBJECT)[-1]["id"]
        await make_workflow().decide(request_id, "approved", "admin-0001")

    async def test_approved_driver_toggles(self, client, driver_headers, fake_db, make_workflow):
        await self._approve(client, driver_headers, fake_db, make_workflow)

        response = await client.patch(
            self.AVAILABILITY_URL, headers=driver_headers, json={"isAvailable": True}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["isAvailable"] is True
        assert data["message"] == "You are now available for jobs"
        user = next(iter(fake_db.tables["users"].values()))
        assert user["is_available"] is True

        me = await client.get("/api/v1/auth/me", headers=driver_headers)
        assert me.json()["user"]["isAvailable"] is True

    async def test_pending_driver_blocked(self, client, driver_headers, fake_db):
        await _submit(client, driver_headers)

        response = await client.patch(
            self.AVAILABILITY_URL, headers=driver_headers, json={"isAvailable": True}
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "VERIFICATION_PENDING"
        user = next(iter(fake_db.tables["users"].values()))
        assert user["is_available"] is False

    async def test_owner_forbidden(self, client, driver_headers, fake_db):
        uow = fake_db.uow()
        await uow.users.add(User(
            subject_id=DRIVER_SUBJECT,
            name="Fleet Owner",
            phone="+919800000009",
            role=UserRole.OWNER,
            registration_completed=True,
        ))
        await uow.commit()

        response = await client.patch(
            self.AVAILABILITY_URL, headers=driver_headers, json={"isAvailable": True}
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Only drivers can change availability"

    async def test_missing_flag(self, client, driver_headers, fake_db, make_workflow):
        await self._approve(client, driver_headers, fake_db, make_workflow)

        response = await client.patch(self.AVAILABILITY_URL, headers=driver_headers, json={})

        assert response.status_code == 422
