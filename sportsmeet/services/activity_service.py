"""
Activity catalog: creation, search, ownership-checked edits and the seat
counter primitive shared by the registration and order ledgers.
"""
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_, update
from sqlalchemy.orm import Session

from ..clock import as_utc, utcnow
from ..errors import (
    CapacityError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ..locks import activity_lock
from ..logging_config import service_logger, timed
from ..models.activity import Activity, ActivityStatus
from ..models.registration import Registration, RegistrationStatus
from ..schemas.activity import ActivityCreate, ActivitySearch, ActivityUpdate
from .base import BaseService

# Canonical category -> every spelling accepted for it
CATEGORY_ALIASES: Dict[str, Tuple[str, ...]] = {
    "football": ("football", "soccer", "足球"),
    "basketball": ("basketball", "篮球"),
    "tennis": ("tennis", "网球"),
    "badminton": ("badminton", "羽毛球"),
    "table tennis": ("table tennis", "ping pong", "乒乓球"),
    "swimming": ("swimming", "游泳"),
    "running": ("running", "跑步"),
    "fitness": ("fitness", "gym", "健身"),
}

# Derived schedule status filter values
STATUS_OPEN = "open"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"

STATUS_ALIASES: Dict[str, str] = {
    "open": STATUS_OPEN,
    "registration_open": STATUS_OPEN,
    "报名中": STATUS_OPEN,
    "in_progress": STATUS_IN_PROGRESS,
    "进行中": STATUS_IN_PROGRESS,
    "completed": STATUS_COMPLETED,
    "已结束": STATUS_COMPLETED,
}

# Fields the owner may still change once the activity has started
EDITABLE_AFTER_START = frozenset({"description", "image_url"})

# Optional fields an explicit null clears
CLEARABLE_FIELDS = frozenset({"image_url", "requirements"})


def escape_like(term: str) -> str:
    """Make LIKE wildcards in user input match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def expand_category(category: str) -> List[str]:
    """Return every alias in the synonym group containing ``category``."""
    needle = category.strip().lower()
    for aliases in CATEGORY_ALIASES.values():
        if needle in aliases:
            return list(aliases)
    return [needle]


def schedule_status(activity: Activity, now: datetime) -> str:
    """Status derived from the schedule window, independent of the stored status."""
    if now < activity.start_time:
        return STATUS_OPEN
    if now <= activity.end_time:
        return STATUS_IN_PROGRESS
    return STATUS_COMPLETED


def validate_schedule(start_time: datetime, end_time: datetime, now: datetime) -> None:
    if start_time >= end_time:
        raise ValidationError("Start time must be earlier than end time")
    if start_time <= now:
        raise ValidationError("Start time must be in the future")


class ActivityService(BaseService):
    """Service for activity catalog operations."""

    def __init__(self, db: Session) -> None:
        super().__init__(db)

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def get(self, activity_id: int) -> Activity:
        """Return a non-deleted activity.

        Raises:
            NotFoundError: If the activity does not exist or was deleted.
        """
        activity = (
            self.db.query(Activity)
            .filter(Activity.id == activity_id, Activity.is_active.is_(True))
            .first()
        )
        if not activity:
            raise NotFoundError("Activity")
        return activity

    @timed(service_logger)
    def list(self, search: ActivitySearch, now: Optional[datetime] = None) -> Tuple[List[Activity], int]:
        """Search non-deleted activities, newest first. Returns (page, total)."""
        now = now or utcnow()
        query = self.db.query(Activity).filter(Activity.is_active.is_(True))

        if search.search:
            pattern = f"%{escape_like(search.search)}%"
            query = query.filter(
                or_(
                    Activity.title.like(pattern, escape="\\"),
                    Activity.description.like(pattern, escape="\\"),
                )
            )

        if search.category:
            query = query.filter(func.lower(Activity.category).in_(expand_category(search.category)))

        if search.status:
            derived = STATUS_ALIASES.get(search.status.strip().lower())
            if derived is None:
                raise ValidationError(f"Unknown status filter: {search.status}")
            if derived == STATUS_OPEN:
                query = query.filter(Activity.start_time > now)
            elif derived == STATUS_IN_PROGRESS:
                query = query.filter(Activity.start_time <= now, Activity.end_time >= now)
            else:
                query = query.filter(Activity.end_time < now)

        # Overlap with [start_date, end_date]; either bound may be open
        range_start = as_utc(search.start_date)
        range_end = as_utc(search.end_date)
        if range_start and range_end and range_start > range_end:
            raise ValidationError("start_date must not be after end_date")
        if range_end is not None:
            query = query.filter(Activity.start_time <= range_end)
        if range_start is not None:
            query = query.filter(Activity.end_time >= range_start)

        total = query.count()
        activities = (
            query.order_by(Activity.created_at.desc(), Activity.id.desc())
            .offset((search.page - 1) * search.limit)
            .limit(search.limit)
            .all()
        )
        return activities, total

    def list_by_creator(self, user_id: int) -> List[Activity]:
        return (
            self.db.query(Activity)
            .filter(Activity.creator_id == user_id, Activity.is_active.is_(True))
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .all()
        )

    def list_registrations(self, activity_id: int) -> List[Registration]:
        """Confirmed registrations of an activity, newest first."""
        self.get(activity_id)
        return (
            self.db.query(Registration)
            .filter(
                Registration.activity_id == activity_id,
                Registration.status == RegistrationStatus.CONFIRMED,
            )
            .order_by(Registration.created_at.desc(), Registration.id.desc())
            .all()
        )

    # ------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------

    def create(self, data: ActivityCreate, owner_id: int) -> Activity:
        now = utcnow()
        start_time = as_utc(data.start_time)
        end_time = as_utc(data.end_time)
        validate_schedule(start_time, end_time, now)

        activity = Activity(
            title=data.title,
            description=data.description,
            location=data.location,
            category=data.category,
            requirements=data.requirements,
            image_url=data.image_url,
            start_time=start_time,
            end_time=end_time,
            price=data.price,
            max_participants=data.max_participants,
            current_participants=0,
            status=ActivityStatus.ACTIVE,
            creator_id=owner_id,
        )
        with self.unit_of_work():
            self.db.add(activity)
        self.db.refresh(activity)
        self.log.info("Activity created", activity_id=activity.id, creator_id=owner_id)
        return activity

    def update(self, activity_id: int, patch: ActivityUpdate, requester_id: int) -> Activity:
        """Apply an owner's partial update.

        Raises:
            NotFoundError: Activity absent or deleted.
            ForbiddenError: Requester is not the creator.
            InvalidStateError: Restricted fields changed after start, or
                capacity lowered below the current participant count.
            ValidationError: Patched schedule is out of order or in the past.
        """
        changes = {
            k: v
            for k, v in patch.model_dump(exclude_unset=True).items()
            if v is not None or k in CLEARABLE_FIELDS
        }
        for key in ("start_time", "end_time"):
            if key in changes:
                changes[key] = as_utc(changes[key])

        with activity_lock(activity_id), self.unit_of_work():
            activity = self.load_for_update(activity_id)
            if activity.creator_id != requester_id:
                raise ForbiddenError("Only the activity creator can modify this activity")

            now = utcnow()
            if activity.has_started(now):
                restricted = sorted(set(changes) - EDITABLE_AFTER_START)
                if restricted:
                    raise InvalidStateError(
                        "Activity has already started; only description and image can be changed"
                    )

            if "start_time" in changes or "end_time" in changes:
                validate_schedule(
                    changes.get("start_time", activity.start_time),
                    changes.get("end_time", activity.end_time),
                    now,
                )

            if changes.get("max_participants", activity.max_participants) < activity.current_participants:
                raise InvalidStateError(
                    "Maximum participants cannot be lower than the current participant count"
                )

            for key, value in changes.items():
                setattr(activity, key, value)

        self.db.refresh(activity)
        self.log.info("Activity updated", activity_id=activity_id, fields=sorted(changes))
        return activity

    def delete(self, activity_id: int, requester_id: int) -> None:
        """Soft-delete an activity owned by the requester."""
        with activity_lock(activity_id), self.unit_of_work():
            activity = self.load_for_update(activity_id)
            if activity.creator_id != requester_id:
                raise ForbiddenError("Only the activity creator can delete this activity")
            activity.is_active = False
        self.log.info("Activity deleted", activity_id=activity_id)

    # ------------------------------------------------------------
    # Capacity primitives (callers hold activity_lock and a unit of work)
    # ------------------------------------------------------------

    def load_for_update(self, activity_id: int, include_deleted: bool = False) -> Activity:
        """Fetch the current row, locking it where the database supports it."""
        query = self.db.query(Activity).filter(Activity.id == activity_id)
        if not include_deleted:
            query = query.filter(Activity.is_active.is_(True))
        activity = query.with_for_update().populate_existing().first()
        if not activity:
            raise NotFoundError("Activity")
        return activity

    def ensure_joinable(self, activity: Activity, now: datetime) -> None:
        """Admission checks shared by join, order creation and payment."""
        if activity.status != ActivityStatus.ACTIVE:
            raise InvalidStateError("Activity is not open for registration")
        if activity.is_full():
            raise CapacityError()
        if activity.has_started(now):
            raise InvalidStateError("Activity has already started")

    def adjust_participants(self, activity_id: int, delta: int) -> Activity:
        """Atomically move the seat counter by ``delta``.

        The bounds check lives in the UPDATE's WHERE clause, so the statement
        either applies within ``[0, max_participants]`` or touches no row.

        Raises:
            CapacityError: If the counter would exceed the maximum or go negative.
        """
        self.db.flush()
        new_count = Activity.current_participants + delta
        result = self.db.execute(
            update(Activity)
            .where(
                Activity.id == activity_id,
                new_count >= 0,
                new_count <= Activity.max_participants,
            )
            .values(current_participants=new_count)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            if delta > 0:
                raise CapacityError()
            raise CapacityError("Participant count cannot go negative")

        activity = self.db.get(Activity, activity_id, populate_existing=True)
        self.log.debug(
            "Participant count adjusted",
            activity_id=activity_id,
            delta=delta,
            current=activity.current_participants,
        )
        return activity
