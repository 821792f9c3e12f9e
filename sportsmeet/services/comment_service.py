"""
Comment ledger: per-user feedback and ratings for activities.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import DuplicateError, ForbiddenError, NotFoundError, ValidationError
from ..models.comment import Comment
from ..schemas.comment import RatingStats
from .activity_service import ActivityService
from .base import BaseService


def round_rating(value) -> float:
    """Average rating rounded to one decimal; 0 when nothing is rated."""
    if value is None:
        return 0.0
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class CommentService(BaseService):
    """Service for comment operations."""

    def __init__(self, db: Session) -> None:
        super().__init__(db)
        self.activities = ActivityService(db)

    def create(
        self,
        user_id: int,
        activity_id: int,
        content: str,
        rating: Optional[int] = None,
    ) -> Comment:
        """Add a user's single comment on an activity.

        Raises:
            NotFoundError: Activity absent or deleted.
            ValidationError: Rating outside 1-5.
            DuplicateError: The user already commented on this activity.
        """
        self.activities.get(activity_id)

        if rating is not None and not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")

        existing = (
            self.db.query(Comment)
            .filter(Comment.user_id == user_id, Comment.activity_id == activity_id)
            .first()
        )
        if existing:
            raise DuplicateError("You have already commented on this activity")

        comment = Comment(user_id=user_id, activity_id=activity_id, content=content, rating=rating)
        try:
            with self.unit_of_work():
                self.db.add(comment)
        except IntegrityError:
            raise DuplicateError("You have already commented on this activity")

        self.db.refresh(comment)
        self.log.info("Comment created", comment_id=comment.id, activity_id=activity_id)
        return comment

    def list(self, activity_id: int, page: int = 1, limit: int = 10) -> Tuple[List[Comment], int, float]:
        """Return (page of comments newest first, total, average rating)."""
        query = self.db.query(Comment).filter(Comment.activity_id == activity_id)
        total = query.count()
        comments = (
            query.order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        average = (
            self.db.query(func.avg(Comment.rating))
            .filter(Comment.activity_id == activity_id)
            .scalar()
        )
        return comments, total, round_rating(average)

    def list_for_user(self, user_id: int) -> List[Comment]:
        return (
            self.db.query(Comment)
            .filter(Comment.user_id == user_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .all()
        )

    def rating_stats(self, activity_id: int) -> RatingStats:
        rows = (
            self.db.query(Comment.rating, func.count(Comment.id))
            .filter(Comment.activity_id == activity_id)
            .group_by(Comment.rating)
            .all()
        )
        distribution = {star: 0 for star in range(1, 6)}
        total_comments = 0
        rated = 0
        rating_sum = 0
        for rating, count in rows:
            total_comments += count
            if rating is None:
                continue
            distribution[rating] = count
            rated += count
            rating_sum += rating * count

        return RatingStats(
            average_rating=round_rating(rating_sum / rated) if rated else 0.0,
            total_comments=total_comments,
            rating_distribution=distribution,
        )

    def delete(self, comment_id: int, user_id: int) -> None:
        """Delete a comment; only its author may do so."""
        comment = self.db.query(Comment).filter(Comment.id == comment_id).first()
        if not comment:
            raise NotFoundError("Comment")
        if comment.user_id != user_id:
            raise ForbiddenError("Only the author can delete this comment")

        with self.unit_of_work():
            self.db.delete(comment)
        self.log.info("Comment deleted", comment_id=comment_id)
