"""
Admin console overview endpoints: driver directory and dashboard counts.
"""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from truckmate.core.dependencies import get_current_admin, get_directory, get_workflow
from truckmate.models import Admin
from truckmate.schemas.directory import (
    DashboardResponse,
    DashboardStatistics,
    DirectoryUser,
    DriverListResponse,
)
from truckmate.schemas.verification import StatsCounts
from truckmate.services.directory import UserDirectory
from truckmate.services.verification import VerificationWorkflow

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/drivers", response_model=DriverListResponse)
async def list_drivers(
    admin: Annotated[Admin, Depends(get_current_admin)],
    directory: Annotated[UserDirectory, Depends(get_directory)],
) -> DriverListResponse:
    """Every driver, newest first, with profile details where submitted."""
    entries = await directory.drivers()
    return DriverListResponse(drivers=[DirectoryUser.from_entry(e) for e in entries])


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    admin: Annotated[Admin, Depends(get_current_admin)],
    directory: Annotated[UserDirectory, Depends(get_directory)],
    workflow: Annotated[VerificationWorkflow, Depends(get_workflow)],
) -> DashboardResponse:
    """
    User counts, verification counts and sign-ups from the last 7 days.

    ``activeDrivers`` counts drivers currently marked available.
    """
    dashboard = await directory.dashboard()
    counts = dashboard.counts
    return DashboardResponse(
        statistics=DashboardStatistics(
            total_users=counts.total_users,
            total_drivers=counts.total_drivers,
            total_owners=counts.total_owners,
            active_drivers=counts.active_drivers,
        ),
        verification=StatsCounts.from_stats(await workflow.stats()),
        recent_users=[DirectoryUser.from_entry(e) for e in dashboard.recent_users],
    )
