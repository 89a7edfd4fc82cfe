"""
Driver verification workflow.

State machine for ``DriverProfile.verification_status``::

    (none) --submit--> pending
    pending --approve--> approved
    pending --reject--> rejected
    rejected --resubmit / critical edit--> pending
    approved --critical edit--> pending

``decide`` is the only transition out of ``pending``. Every mutating
operation holds the driver's lock from its first read until commit and
either commits profile and request changes together or rolls both back.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Mapping, Optional, Union
from uuid import UUID

from truckmate.core.errors import (
    AlreadyProcessedError,
    NotFoundError,
    PreconditionFailedError,
    ValidationError,
)
from truckmate.core.locks import KeyedLock
from truckmate.models import (
    DriverProfile,
    RequestPriority,
    RequestStatus,
    ReviewAction,
    User,
    VerificationRequest,
    VerificationStatus,
)
from truckmate.repositories.base import UnitOfWork
from truckmate.services.verification.policy import (
    CRITICAL_FIELDS,
    DOCUMENT_FIELDS,
    PROFILE_FIELDS,
    changed_critical_fields,
    missing_required_fields,
    normalize_truck_types,
)
from truckmate.services.verification.types import (
    DecisionResult,
    ReviewItem,
    SubmissionResult,
    VerificationStats,
)

logger = logging.getLogger(__name__)

SUPERSEDED_NOTE = "superseded by profile update"
DEFAULT_REJECTION_REASON = "No specific reason provided"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReviewListing:
    """Lazy, restartable view over verification requests.

    Every ``async for`` runs a fresh scan (newest first) and joins each
    request with its driver and profile as it goes. Missing related records
    yield placeholder summaries rather than dropping the request.
    """

    def __init__(self, uow: UnitOfWork, status: Optional[RequestStatus] = None):
        self._uow = uow
        self.status = status

    async def __aiter__(self) -> AsyncIterator[ReviewItem]:
        users: dict[str, Optional[User]] = {}
        async for request in self._uow.requests.scan(self.status):
            if request.driver_id not in users:
                users[request.driver_id] = await self._uow.users.get_by_subject(
                    request.driver_id
                )
            profile = None
            if request.profile_id is not None:
                profile = await self._uow.profiles.get(request.profile_id)
            yield ReviewItem.build(request, users[request.driver_id], profile)

    async def to_list(self) -> list[ReviewItem]:
        return [item async for item in self]


class VerificationWorkflow:
    """Orchestrates profile submission, resubmission and admin decisions."""

    def __init__(
        self,
        uow: UnitOfWork,
        locks: KeyedLock,
        *,
        clock: Callable[[], datetime] = utcnow,
        critical_fields: frozenset[str] = CRITICAL_FIELDS,
    ):
        self.uow = uow
        self.locks = locks
        self.clock = clock
        self.critical_fields = critical_fields

    @asynccontextmanager
    async def _driver_transaction(self, driver_id: str) -> AsyncIterator[None]:
        async with self.locks.acquire(driver_id):
            try:
                yield
                await self.uow.commit()
            except Exception:
                await self.uow.rollback()
                raise

    # ------------------------------------------------------------------
    # Driver-facing operations
    # ------------------------------------------------------------------

    async def submit_or_update_profile(
        self,
        user_id: str,
        fields: Mapping[str, Any],
        documents: Optional[Mapping[str, Optional[str]]] = None,
    ) -> SubmissionResult:
        """Create or partially update a driver profile.

        Only keys present in ``fields``/``documents`` overwrite stored
        values. The first submission always opens a review cycle; later
        edits open one only when a critical field changes value.

        Raises:
            ValidationError: Unknown field or document names, or a first
                submission missing a required field. Nothing is written.
        """
        changes = self._collect_changes(fields, documents or {})

        async with self._driver_transaction(user_id):
            now = self.clock()
            profile = await self.uow.profiles.get_by_user_id(user_id, for_update=True)

            if profile is None:
                self._require_fields(None, changes)
                profile = await self.uow.profiles.add(self._new_profile(user_id, changes, now))
                request = await self._open_review_cycle(profile, now)
                logger.info(
                    f"Driver {user_id} submitted profile, verification request {request.id} opened"
                )
                return SubmissionResult(profile, True, request, created=True)

            critical = changed_critical_fields(profile, changes, self.critical_fields)
            first_completion = not profile.profile_completed
            if first_completion:
                self._require_fields(profile, changes)
            updates = dict(changes)
            if critical or first_completion:
                updates.update(
                    profile_completed=True,
                    verification_status=VerificationStatus.PENDING,
                    rejection_reason=None,
                    verification_requested_at=now,
                )

            profile = await self.uow.profiles.update(profile, updates)

            if not (critical or first_completion):
                logger.info(
                    f"Driver {user_id} updated non-critical fields {sorted(changes)}, "
                    f"status stays {profile.verification_status.value}"
                )
                return SubmissionResult(profile, False)

            request = await self._open_review_cycle(profile, now)
            logger.info(
                f"Driver {user_id} changed critical fields {sorted(critical)}, "
                f"verification request {request.id} opened"
            )
            return SubmissionResult(profile, True, request)

    async def resubmit(self, user_id: str) -> VerificationRequest:
        """Open a new review cycle for a rejected profile, documents unchanged.

        Raises:
            NotFoundError: No profile for ``user_id``.
            PreconditionFailedError: Profile incomplete, not rejected, or a
                request is already pending. Nothing is written.
        """
        async with self._driver_transaction(user_id):
            profile = await self.uow.profiles.get_by_user_id(user_id, for_update=True)
            if profile is None:
                raise NotFoundError(
                    "Driver profile not found",
                    details={"condition": "profile_exists"},
                )
            if not profile.profile_completed:
                raise PreconditionFailedError(
                    "Complete your driver profile before resubmitting",
                    condition="profile_completed",
                )
            if profile.verification_status != VerificationStatus.REJECTED:
                raise PreconditionFailedError(
                    "Can only resubmit rejected verifications",
                    condition="status_rejected",
                )

            pending = await self.uow.requests.get_pending_for_driver(user_id, for_update=True)
            if pending is not None:
                raise PreconditionFailedError(
                    "You already have a pending verification request",
                    condition="no_pending_request",
                    details={
                        "condition": "no_pending_request",
                        "existingRequestId": str(pending.id),
                    },
                )

            now = self.clock()
            request = await self.uow.requests.add(self._snapshot_request(profile))
            await self.uow.profiles.update(profile, {
                "verification_status": VerificationStatus.PENDING,
                "rejection_reason": None,
                "verification_requested_at": now,
            })
            logger.info(f"Driver {user_id} resubmitted, verification request {request.id} opened")
            return request

    async def get_profile(self, user_id: str) -> Optional[DriverProfile]:
        return await self.uow.profiles.get_by_user_id(user_id)

    async def latest_request(self, user_id: str) -> Optional[VerificationRequest]:
        return await self.uow.requests.latest_for_driver(user_id)

    # ------------------------------------------------------------------
    # Admin-facing operations
    # ------------------------------------------------------------------

    def list_pending(self) -> ReviewListing:
        return ReviewListing(self.uow, RequestStatus.PENDING)

    def list_all(self) -> ReviewListing:
        return ReviewListing(self.uow)

    async def stats(self) -> VerificationStats:
        counts = await self.uow.requests.count_by_status()
        return VerificationStats(
            pending=counts.get(RequestStatus.PENDING, 0),
            approved=counts.get(RequestStatus.APPROVED, 0),
            rejected=counts.get(RequestStatus.REJECTED, 0),
            cancelled=counts.get(RequestStatus.CANCELLED, 0),
        )

    async def decide(
        self,
        request_id: UUID,
        action: Union[ReviewAction, str],
        admin_id: str,
        notes: Optional[str] = None,
    ) -> DecisionResult:
        """Approve or reject a pending request and update the driver's profile.

        Raises:
            ValidationError: ``action`` is not approved/rejected.
            NotFoundError: Unknown request, or its profile no longer exists.
            AlreadyProcessedError: The request is not pending.
        """
        try:
            action = ReviewAction(action)
        except ValueError:
            raise ValidationError(
                "Invalid action. Must be 'approved' or 'rejected'",
                details={"field": "action", "allowed": [a.value for a in ReviewAction]},
            )

        request = await self.uow.requests.get(request_id)
        if request is None:
            raise NotFoundError("Verification request not found")
        driver_id = request.driver_id

        async with self._driver_transaction(driver_id):
            # Same lock order as profile edits: profile row, then request row.
            profile = await self.uow.profiles.get_by_user_id(driver_id, for_update=True)
            request = await self.uow.requests.get(request_id, for_update=True)
            if request is None:
                raise NotFoundError("Verification request not found")
            if request.status != RequestStatus.PENDING:
                raise AlreadyProcessedError()
            if profile is None:
                raise NotFoundError(
                    "Driver profile not found",
                    details={"profileId": str(request.profile_id) if request.profile_id else None},
                )

            now = self.clock()
            notes = (notes or "").strip()
            request = await self.uow.requests.update(request, {
                "status": action.request_status,
                "processed_by": admin_id,
                "processed_at": now,
                "notes": notes,
            })

            profile_changes: dict[str, Any] = {"verification_status": action.verification_status}
            if action == ReviewAction.APPROVED:
                profile_changes.update(
                    approved_by=admin_id,
                    approved_at=now,
                    rejection_reason=None,
                )
            else:
                profile_changes.update(
                    rejection_reason=notes or DEFAULT_REJECTION_REASON,
                    resubmission_count=(profile.resubmission_count or 0) + 1,
                )
            profile = await self.uow.profiles.update(profile, profile_changes)

            logger.info(
                f"Admin {admin_id} {action.value} verification request {request.id} "
                f"for driver {driver_id}"
            )
            return DecisionResult(request=request, profile=profile)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _collect_changes(
        self,
        fields: Mapping[str, Any],
        documents: Mapping[str, Optional[str]],
    ) -> dict[str, Any]:
        unknown = (set(fields) - PROFILE_FIELDS) | (set(documents) - DOCUMENT_FIELDS)
        if unknown:
            raise ValidationError(
                "Unknown profile fields",
                details=[{"field": name, "message": "Unknown field"} for name in sorted(unknown)],
            )

        changes = dict(fields)
        if "known_truck_types" in changes:
            changes["known_truck_types"] = normalize_truck_types(changes["known_truck_types"])
        changes.update({name: url for name, url in documents.items() if url})
        return changes

    @staticmethod
    def _require_fields(current: Optional[DriverProfile], changes: Mapping[str, Any]) -> None:
        missing = missing_required_fields(current, changes)
        if missing:
            raise ValidationError(
                "Missing required profile fields",
                details=[{"field": name, "message": "Field required"} for name in missing],
            )

    @staticmethod
    def _new_profile(user_id: str, changes: Mapping[str, Any], now: datetime) -> DriverProfile:
        values = {"known_truck_types": []}
        values.update(changes)
        return DriverProfile(
            user_id=user_id,
            **values,
            profile_completed=True,
            verification_status=VerificationStatus.PENDING,
            verification_requested_at=now,
            resubmission_count=0,
        )

    @staticmethod
    def _snapshot_request(profile: DriverProfile) -> VerificationRequest:
        return VerificationRequest(
            driver_id=profile.user_id,
            profile_id=profile.id,
            status=RequestStatus.PENDING,
            priority=RequestPriority.MEDIUM,
            **{f"snapshot_{name}": url for name, url in profile.documents().items()},
        )

    async def _open_review_cycle(
        self, profile: DriverProfile, now: datetime
    ) -> VerificationRequest:
        """Cancel the driver's pending request, if any, and open a new one."""
        pending = await self.uow.requests.get_pending_for_driver(profile.user_id, for_update=True)
        if pending is not None:
            await self.uow.requests.update(pending, {
                "status": RequestStatus.CANCELLED,
                "processed_at": now,
                "notes": SUPERSEDED_NOTE,
            })
            logger.info(f"Verification request {pending.id} cancelled: {SUPERSEDED_NOTE}")
        return await self.uow.requests.add(self._snapshot_request(profile))
