"""
Registration routes: join and leave activities.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_required_user
from ..database import get_db
from ..models.registration import Registration
from ..models.user import User
from ..responses import success
from ..schemas.registration import AttendeeResponse, RegistrationCreate, RegistrationResponse
from ..services.registration_service import RegistrationService

router = APIRouter(prefix="/api/registrations", tags=["registrations"])


def registration_to_dict(registration: Registration) -> dict:
    return RegistrationResponse.model_validate(registration).model_dump(mode="json")


@router.post("")
def join_activity(
    data: RegistrationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Register the current user for an activity."""
    registration = RegistrationService(db).join(current_user.id, data.activity_id, data.notes)
    return success(registration_to_dict(registration), "Registration successful")


@router.delete("/activity/{activity_id}")
def cancel_registration(
    activity_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Cancel the current user's registration for an activity."""
    registration = RegistrationService(db).cancel(current_user.id, activity_id)
    return success(registration_to_dict(registration), "Registration cancelled")


@router.get("/my")
def my_registrations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """All registrations of the current user, newest first."""
    registrations = RegistrationService(db).list_for_user(current_user.id)
    return success([registration_to_dict(r) for r in registrations])


@router.get("/activity/{activity_id}")
def activity_registrations(activity_id: int, db: Session = Depends(get_db)):
    """Confirmed registrations of an activity."""
    registrations = RegistrationService(db).list_for_activity(activity_id)
    return success([AttendeeResponse.model_validate(r).model_dump(mode="json") for r in registrations])


@router.get("/check/{activity_id}")
def check_registration(
    activity_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Whether the current user holds a confirmed registration."""
    registered = RegistrationService(db).is_registered(current_user.id, activity_id)
    return success({"activity_id": activity_id, "is_registered": registered})
