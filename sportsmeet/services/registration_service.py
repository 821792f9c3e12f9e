"""
Registration ledger: joining and leaving activities.
"""
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..clock import utcnow
from ..errors import DuplicateError, InvalidStateError, NotFoundError
from ..locks import activity_lock
from ..models.registration import Registration, RegistrationStatus
from .activity_service import ActivityService
from .base import BaseService


class RegistrationService(BaseService):
    """Service for registration operations."""

    def __init__(self, db: Session) -> None:
        super().__init__(db)
        self.activities = ActivityService(db)

    def find_confirmed(self, user_id: int, activity_id: int) -> Optional[Registration]:
        return (
            self.db.query(Registration)
            .filter(
                Registration.user_id == user_id,
                Registration.activity_id == activity_id,
                Registration.status == RegistrationStatus.CONFIRMED,
            )
            .populate_existing()
            .first()
        )

    def join(self, user_id: int, activity_id: int, notes: Optional[str] = None) -> Registration:
        """Register a user for an activity and take one seat.

        Raises:
            NotFoundError: Activity absent or deleted.
            CapacityError: No seat left.
            InvalidStateError: Activity not open or already started.
            DuplicateError: User already holds a confirmed registration.
        """
        with activity_lock(activity_id):
            try:
                with self.unit_of_work():
                    activity = self.activities.load_for_update(activity_id)
                    self.activities.ensure_joinable(activity, utcnow())

                    if self.find_confirmed(user_id, activity_id):
                        raise DuplicateError("You are already registered for this activity")

                    registration = Registration(
                        user_id=user_id,
                        activity_id=activity_id,
                        status=RegistrationStatus.CONFIRMED,
                        notes=notes,
                    )
                    self.db.add(registration)
                    self.activities.adjust_participants(activity_id, +1)
            except IntegrityError:
                raise DuplicateError("You are already registered for this activity")

        self.db.refresh(registration)
        self.log.info("Registration confirmed", user_id=user_id, activity_id=activity_id)
        return registration

    def cancel(self, user_id: int, activity_id: int) -> Registration:
        """Cancel a confirmed registration and release its seat.

        Raises:
            NotFoundError: No confirmed registration, or the activity is gone.
            InvalidStateError: Activity already started, or the seat was paid
                for through an order (cancel or refund the order instead).
        """
        with activity_lock(activity_id), self.unit_of_work():
            registration = self.find_confirmed(user_id, activity_id)
            if not registration:
                raise NotFoundError("Registration")

            activity = self.activities.load_for_update(activity_id, include_deleted=True)
            if activity.has_started(utcnow()):
                raise InvalidStateError("Activity has already started; registration cannot be cancelled")
            if registration.order_id is not None:
                raise InvalidStateError("This registration was paid for; cancel or refund the order instead")

            registration.status = RegistrationStatus.CANCELLED
            self.activities.adjust_participants(activity_id, -1)

        self.db.refresh(registration)
        self.log.info("Registration cancelled", user_id=user_id, activity_id=activity_id)
        return registration

    def list_for_user(self, user_id: int) -> List[Registration]:
        return (
            self.db.query(Registration)
            .filter(Registration.user_id == user_id)
            .order_by(Registration.created_at.desc(), Registration.id.desc())
            .all()
        )

    def list_for_activity(self, activity_id: int) -> List[Registration]:
        return self.activities.list_registrations(activity_id)

    def is_registered(self, user_id: int, activity_id: int) -> bool:
        return self.find_confirmed(user_id, activity_id) is not None
