"""
Activity catalog routes.
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_required_user
from ..config import get_settings
from ..database import get_db
from ..models.activity import Activity
from ..models.registration import Registration
from ..models.user import User
from ..responses import paginated, success
from ..schemas.activity import ActivityCreate, ActivityResponse, ActivitySearch, ActivityUpdate
from ..schemas.registration import AttendeeResponse
from ..services.activity_service import ActivityService

settings = get_settings()

router = APIRouter(prefix="/api/activities", tags=["activities"])


def activity_to_dict(activity: Activity) -> dict:
    return ActivityResponse.model_validate(activity).model_dump(mode="json")


def attendee_to_dict(registration: Registration) -> dict:
    return AttendeeResponse.model_validate(registration).model_dump(mode="json")


@router.post("")
def create_activity(
    activity_data: ActivityCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Create a new activity owned by the current user."""
    activity = ActivityService(db).create(activity_data, current_user.id)
    return success(activity_to_dict(activity), "Activity created")


@router.get("")
def list_activities(
    search: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
):
    """Search activities with keyword, category, schedule status and date range filters."""
    filters = ActivitySearch(
        search=search,
        category=category,
        status=status,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    activities, total = ActivityService(db).list(filters)
    return success(paginated([activity_to_dict(a) for a in activities], total, page, limit))


@router.get("/my/created")
def my_activities(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Activities created by the current user."""
    activities = ActivityService(db).list_by_creator(current_user.id)
    return success([activity_to_dict(a) for a in activities])


@router.get("/{activity_id}")
def get_activity(activity_id: int, db: Session = Depends(get_db)):
    """Get a single activity."""
    activity = ActivityService(db).get(activity_id)
    return success(activity_to_dict(activity))


@router.put("/{activity_id}")
def update_activity(
    activity_id: int,
    update: ActivityUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Update an activity (creator only)."""
    activity = ActivityService(db).update(activity_id, update, current_user.id)
    return success(activity_to_dict(activity), "Activity updated")


@router.delete("/{activity_id}")
def delete_activity(
    activity_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Soft-delete an activity (creator only)."""
    ActivityService(db).delete(activity_id, current_user.id)
    return success(message="Activity deleted")


@router.get("/{activity_id}/registrations")
def activity_registrations(activity_id: int, db: Session = Depends(get_db)):
    """Confirmed attendees of an activity."""
    registrations = ActivityService(db).list_registrations(activity_id)
    return success([attendee_to_dict(r) for r in registrations])
