"""Driver-facing verification endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, status

from truckmate.core.dependencies import get_current_user, get_gate, get_workflow
from truckmate.models import User, VerificationStatus
from truckmate.schemas.verification import (
    AccessCheckResponse,
    ResubmitResponse,
    VerificationRequestInfo,
    VerificationStatusResponse,
)
from truckmate.services.verification import AccessGate, VerificationWorkflow

router = APIRouter()

NO_PROFILE = "no_profile"


@router.get("/status", response_model=VerificationStatusResponse)
async def get_verification_status(
    user: Annotated[User, Depends(get_current_user)],
    workflow: Annotated[VerificationWorkflow, Depends(get_workflow)],
) -> VerificationStatusResponse:
    """Current verification state and the most recent review request."""
    profile = await workflow.get_profile(user.subject_id)
    if profile is None:
        return VerificationStatusResponse(
            profile_exists=False,
            verification_status=NO_PROFILE,
            can_access_jobs=False,
            profile_completed=False,
        )

    latest = await workflow.latest_request(user.subject_id)
    return VerificationStatusResponse(
        profile_exists=True,
        verification_status=profile.verification_status.value,
        can_access_jobs=profile.is_approved,
        profile_completed=profile.profile_completed,
        verification_request=VerificationRequestInfo.from_request(latest) if latest else None,
    )


@router.get("/check-access", response_model=AccessCheckResponse)
async def check_access(
    user: Annotated[User, Depends(get_current_user)],
    gate: Annotated[AccessGate, Depends(get_gate)],
) -> AccessCheckResponse:
    """Whether the user may open job endpoints, and why not."""
    decision = await gate.authorize(user.subject_id)
    profile_status = decision.verification_status
    if profile_status is None:
        profile = await gate.profiles.get_by_user_id(user.subject_id)
        profile_status = profile.verification_status if profile else None

    return AccessCheckResponse(
        can_access_jobs=decision.allowed,
        verification_status=(
            VerificationStatus(profile_status).value if profile_status else NO_PROFILE
        ),
        message=decision.message,
        code=decision.code.value if decision.code else None,
    )


@router.post(
    "/resubmit",
    response_model=ResubmitResponse,
    status_code=status.HTTP_201_CREATED,
)
async def resubmit_verification(
    user: Annotated[User, Depends(get_current_user)],
    workflow: Annotated[VerificationWorkflow, Depends(get_workflow)],
) -> ResubmitResponse:
    """Send a rejected profile back for review without changing it."""
    request = await workflow.resubmit(user.subject_id)
    return ResubmitResponse(request_id=request.id)
