"""
Comment routes: feedback and ratings on activities.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_required_user
from ..config import get_settings
from ..database import get_db
from ..models.comment import Comment
from ..models.user import User
from ..responses import paginated, success
from ..schemas.comment import CommentCreate, CommentResponse
from ..services.comment_service import CommentService

settings = get_settings()

router = APIRouter(prefix="/api/comments", tags=["comments"])


def comment_to_dict(comment: Comment) -> dict:
    return CommentResponse.model_validate(comment).model_dump(mode="json")


@router.post("")
def create_comment(
    data: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Comment on (and optionally rate) an activity."""
    comment = CommentService(db).create(current_user.id, data.activity_id, data.content, data.rating)
    return success(comment_to_dict(comment), "Comment posted")


@router.get("/activity/{activity_id}")
def activity_comments(
    activity_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
):
    """Comments on an activity, newest first, with the average rating."""
    comments, total, average = CommentService(db).list(activity_id, page, limit)
    return success(
        paginated([comment_to_dict(c) for c in comments], total, page, limit, average_rating=average)
    )


@router.get("/my")
def my_comments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Comments written by the current user."""
    comments = CommentService(db).list_for_user(current_user.id)
    return success([comment_to_dict(c) for c in comments])


@router.get("/stats/{activity_id}")
def rating_stats(activity_id: int, db: Session = Depends(get_db)):
    """Average rating and 1-5 star histogram for an activity."""
    stats = CommentService(db).rating_stats(activity_id)
    return success(stats.model_dump())


@router.delete("/{comment_id}")
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Delete one's own comment."""
    CommentService(db).delete(comment_id, current_user.id)
    return success(message="Comment deleted")
