"""
Driver profile endpoints.

Profile fields arrive as multipart form data together with optional
photo uploads. Photos are stored first; the resulting URLs are handed to
the verification workflow, which decides whether the edit needs a new
admin review.

Verified drivers also toggle their job availability here.
"""
import logging
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from pydantic import ValidationError as PydanticValidationError

from truckmate.core.dependencies import (
    get_accounts,
    get_current_user,
    get_storage,
    get_workflow,
    require_job_access,
)
from truckmate.core.errors import NotFoundError, ValidationError
from truckmate.models import User
from truckmate.schemas.profile import (
    AvailabilityResponse,
    AvailabilityUpdate,
    DriverProfileFields,
    DriverProfileResponse,
    ProfileSubmissionResponse,
)
from truckmate.services.accounts import AccountService
from truckmate.services.storage import FOLDER_LICENSES, FOLDER_PROFILE_PHOTOS, BlobStorage
from truckmate.services.verification import SubmissionResult, VerificationWorkflow

router = APIRouter()
logger = logging.getLogger(__name__)

MESSAGE_SUBMITTED = "Profile submitted for verification"
MESSAGE_RESUBMITTED = "Profile updated and resubmitted for verification due to critical changes"
MESSAGE_UPDATED = "Profile updated successfully"

# Upload form field -> (profile document field, storage folder)
_DOCUMENT_UPLOADS = {
    "profilePhoto": ("profile_photo", FOLDER_PROFILE_PHOTOS),
    "licensePhotoFront": ("license_photo_front", FOLDER_LICENSES),
    "licensePhotoBack": ("license_photo_back", FOLDER_LICENSES),
}


def _parse_fields(raw: dict[str, Any]) -> dict[str, Any]:
    supplied = {key: value for key, value in raw.items() if value is not None}
    try:
        return DriverProfileFields.model_validate(supplied).changes()
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid profile data",
            details=[
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ],
        )


async def _store_documents(
    storage: BlobStorage,
    uploads: dict[str, Optional[UploadFile]],
) -> dict[str, str]:
    """Validate every upload, then store them. Returns field -> URL."""
    pending: list[tuple[str, str, bytes, UploadFile]] = []
    for form_field, upload in uploads.items():
        if upload is None or not upload.filename:
            continue
        data = await upload.read()
        storage.validate(data, upload.content_type, field=form_field)
        document_field, folder = _DOCUMENT_UPLOADS[form_field]
        pending.append((document_field, folder, data, upload))

    documents: dict[str, str] = {}
    try:
        for document_field, folder, data, upload in pending:
            documents[document_field] = await storage.store(
                data, folder, upload.filename, upload.content_type
            )
    except Exception:
        await _discard(storage, documents)
        raise
    return documents


async def _discard(storage: BlobStorage, documents: dict[str, str]) -> None:
    for url in documents.values():
        try:
            await storage.delete(url)
        except Exception:
            logger.exception(f"Failed to remove orphaned upload {url}")


def _submission_message(result: SubmissionResult) -> str:
    if result.created:
        return MESSAGE_SUBMITTED
    if result.verification_triggered:
        return MESSAGE_RESUBMITTED
    return MESSAGE_UPDATED


async def _submit(
    user: User,
    fields: dict[str, Any],
    uploads: dict[str, Optional[UploadFile]],
    response: Response,
    workflow: VerificationWorkflow,
    accounts: AccountService,
    storage: BlobStorage,
) -> ProfileSubmissionResponse:
    await accounts.become_driver(user)
    changes = _parse_fields(fields)
    documents = await _store_documents(storage, uploads)

    try:
        result = await workflow.submit_or_update_profile(user.subject_id, changes, documents)
    except Exception:
        await _discard(storage, documents)
        raise

    if result.created:
        response.status_code = status.HTTP_201_CREATED
    return ProfileSubmissionResponse(
        profile=DriverProfileResponse.model_validate(result.profile),
        requires_verification=result.verification_triggered,
        message=_submission_message(result),
    )


async def _profile_form(
    name: Annotated[Optional[str], Form()] = None,
    license_number: Annotated[Optional[str], Form(alias="licenseNumber")] = None,
    license_expiry_date: Annotated[Optional[str], Form(alias="licenseExpiryDate")] = None,
    known_truck_types: Annotated[Optional[list[str]], Form(alias="knownTruckTypes")] = None,
    experience: Annotated[Optional[str], Form()] = None,
    gender: Annotated[Optional[str], Form()] = None,
    age: Annotated[Optional[str], Form()] = None,
    location: Annotated[Optional[str], Form()] = None,
) -> dict[str, Any]:
    """Collect the multipart profile fields (validated later as a whole)."""
    return {
        "name": name,
        "license_number": license_number,
        "license_expiry_date": license_expiry_date or None,
        "known_truck_types": known_truck_types,
        "experience": experience,
        "gender": gender,
        "age": age or None,
        "location": location,
    }


async def _profile_uploads(
    profile_photo: Annotated[Optional[UploadFile], File(alias="profilePhoto")] = None,
    license_photo_front: Annotated[Optional[UploadFile], File(alias="licensePhotoFront")] = None,
    license_photo_back: Annotated[Optional[UploadFile], File(alias="licensePhotoBack")] = None,
) -> dict[str, Optional[UploadFile]]:
    return {
        "profilePhoto": profile_photo,
        "licensePhotoFront": license_photo_front,
        "licensePhotoBack": license_photo_back,
    }


@router.post("/driver", response_model=ProfileSubmissionResponse)
async def submit_driver_profile(
    response: Response,
    user: Annotated[User, Depends(get_current_user)],
    fields: Annotated[dict, Depends(_profile_form)],
    uploads: Annotated[dict, Depends(_profile_uploads)],
    workflow: Annotated[VerificationWorkflow, Depends(get_workflow)],
    accounts: Annotated[AccountService, Depends(get_accounts)],
    storage: Annotated[BlobStorage, Depends(get_storage)],
) -> ProfileSubmissionResponse:
    """
    Submit the driver profile for verification.

    Returns 201 when the profile is created. Submitting again behaves like
    an update.
    """
    return await _submit(user, fields, uploads, response, workflow, accounts, storage)


@router.patch("/driver", response_model=ProfileSubmissionResponse)
async def update_driver_profile(
    response: Response,
    user: Annotated[User, Depends(get_current_user)],
    fields: Annotated[dict, Depends(_profile_form)],
    uploads: Annotated[dict, Depends(_profile_uploads)],
    workflow: Annotated[VerificationWorkflow, Depends(get_workflow)],
    accounts: Annotated[AccountService, Depends(get_accounts)],
    storage: Annotated[BlobStorage, Depends(get_storage)],
) -> ProfileSubmissionResponse:
    """
    Partially update the driver profile.

    Only supplied fields change. Changing the name, truck types or either
    license photo sends the profile back to admin review.
    """
    return await _submit(user, fields, uploads, response, workflow, accounts, storage)


@router.get("/driver", response_model=DriverProfileResponse)
async def get_driver_profile(
    user: Annotated[User, Depends(get_current_user)],
    workflow: Annotated[VerificationWorkflow, Depends(get_workflow)],
) -> DriverProfileResponse:
    profile = await workflow.get_profile(user.subject_id)
    if profile is None:
        raise NotFoundError("Profile not found")
    return DriverProfileResponse.model_validate(profile)


@router.patch("/availability", response_model=AvailabilityResponse)
async def update_availability(
    body: AvailabilityUpdate,
    user: Annotated[User, Depends(require_job_access)],
    accounts: Annotated[AccountService, Depends(get_accounts)],
) -> AvailabilityResponse:
    """Toggle whether a verified driver is available for jobs."""
    user = await accounts.set_availability(user, body.is_available)
    state = "available" if user.is_available else "unavailable"
    return AvailabilityResponse(
        message=f"You are now {state} for jobs",
        is_available=user.is_available,
    )
