"""
Admin review endpoints.

Admins list verification requests and approve or reject pending ones.
Every decision goes through the verification workflow, which updates the
request and the driver profile together.
"""
import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from truckmate.core.dependencies import get_current_admin, get_workflow
from truckmate.models import Admin
from truckmate.schemas.verification import (
    ProcessRequest,
    ProcessResponse,
    ReviewItemResponse,
    StatsCounts,
    StatsResponse,
)
from truckmate.services.verification import ReviewListing, VerificationWorkflow

router = APIRouter()
logger = logging.getLogger(__name__)


async def _render(listing: ReviewListing) -> list[ReviewItemResponse]:
    return [ReviewItemResponse.model_validate(item) async for item in listing]


@router.get("/pending", response_model=list[ReviewItemResponse])
async def list_pending_requests(
    admin: Annotated[Admin, Depends(get_current_admin)],
    workflow: Annotated[VerificationWorkflow, Depends(get_workflow)],
) -> list[ReviewItemResponse]:
    """Pending requests, newest first, with driver and profile details."""
    return await _render(workflow.list_pending())


@router.get("/all", response_model=list[ReviewItemResponse])
async def list_all_requests(
    admin: Annotated[Admin, Depends(get_current_admin)],
    workflow: Annotated[VerificationWorkflow, Depends(get_workflow)],
) -> list[ReviewItemResponse]:
    """Every request in any status, newest first (review history)."""
    return await _render(workflow.list_all())


@router.get("/stats", response_model=StatsResponse)
async def get_verification_stats(
    admin: Annotated[Admin, Depends(get_current_admin)],
    workflow: Annotated[VerificationWorkflow, Depends(get_workflow)],
) -> StatsResponse:
    return StatsResponse(stats=StatsCounts.from_stats(await workflow.stats()))


@router.patch("/{request_id}/process", response_model=ProcessResponse)
async def process_request(
    request_id: UUID,
    body: ProcessRequest,
    admin: Annotated[Admin, Depends(get_current_admin)],
    workflow: Annotated[VerificationWorkflow, Depends(get_workflow)],
) -> ProcessResponse:
    """
    Approve or reject a pending request.

    Rejection notes become the driver's rejection reason. A request can be
    decided only once; later attempts get 409.
    """
    result = await workflow.decide(request_id, body.action, str(admin.id), body.notes)
    return ProcessResponse(
        message=f"Driver {result.request.status.value} successfully",
        request_id=result.request.id,
        profile_id=result.profile.id,
        status=result.request.status,
    )
