"""
Order ledger: pending orders, payment, cancellation and refund.

Paying an order, confirming the registration and taking the seat happen in
one transaction; refunding reverses all three in one transaction.
"""
import secrets
import time
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..clock import utcnow
from ..errors import DuplicateError, InvalidStateError, NotFoundError
from ..locks import activity_lock
from ..models.order import Order, OrderStatus, PaymentStatus
from ..models.registration import Registration, RegistrationStatus
from ..schemas.order import OrderStats
from .activity_service import ActivityService
from .base import BaseService
from .registration_service import RegistrationService

ORDER_NUMBER_ATTEMPTS = 5


class OrderNumberCollision(Exception):
    """Generated order number already exists."""


def generate_order_number() -> str:
    """ORD + epoch milliseconds + three random digits."""
    return f"ORD{int(time.time() * 1000)}{secrets.randbelow(1000):03d}"


class OrderService(BaseService):
    """Service for order operations."""

    def __init__(self, db: Session) -> None:
        super().__init__(db)
        self.activities = ActivityService(db)
        self.registrations = RegistrationService(db)

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def get_by_number(self, order_number: str, user_id: int) -> Order:
        """Return an order owned by ``user_id``.

        Raises:
            NotFoundError: No such order, or it belongs to someone else.
        """
        order = (
            self.db.query(Order)
            .filter(Order.order_number == order_number, Order.user_id == user_id)
            .populate_existing()
            .first()
        )
        if not order:
            raise NotFoundError("Order")
        return order

    def list_for_user(self, user_id: int, status: Optional[str] = None) -> List[Order]:
        query = self.db.query(Order).filter(Order.user_id == user_id)
        if status:
            query = query.filter(Order.status == status)
        return query.order_by(Order.created_at.desc(), Order.id.desc()).all()

    def stats(self, user_id: int) -> OrderStats:
        rows = (
            self.db.query(Order.status, func.count(Order.id))
            .filter(Order.user_id == user_id)
            .group_by(Order.status)
            .all()
        )
        counts = {status: count for status, count in rows}
        paid_total = (
            self.db.query(func.coalesce(func.sum(Order.amount), 0))
            .filter(Order.user_id == user_id, Order.status == OrderStatus.PAID)
            .scalar()
        )
        return OrderStats(
            total_orders=sum(counts.values()),
            pending_orders=counts.get(OrderStatus.PENDING, 0),
            paid_orders=counts.get(OrderStatus.PAID, 0),
            cancelled_orders=counts.get(OrderStatus.CANCELLED, 0),
            refunded_orders=counts.get(OrderStatus.REFUNDED, 0),
            total_amount=float(Decimal(str(paid_total)).quantize(Decimal("0.01"))),
        )

    # ------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------

    def create(self, user_id: int, activity_id: int, notes: Optional[str] = None) -> Order:
        """Open a pending order for an activity.

        Raises:
            NotFoundError: Activity absent or deleted.
            CapacityError: No seat left.
            InvalidStateError: Activity not open or already started, or no
                unique order number could be allocated.
            DuplicateError: A pending order exists, or the user is already registered.
        """
        for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
            try:
                order = self._create_once(user_id, activity_id, notes)
            except OrderNumberCollision:
                self.log.warning("Order number collision, retrying", attempt=attempt)
                continue
            self.log.info(
                "Order created",
                order_number=order.order_number,
                user_id=user_id,
                activity_id=activity_id,
            )
            return order
        raise InvalidStateError("Could not allocate a unique order number, please retry")

    def _create_once(self, user_id: int, activity_id: int, notes: Optional[str]) -> Order:
        order_number = generate_order_number()
        with activity_lock(activity_id):
            try:
                with self.unit_of_work():
                    activity = self.activities.load_for_update(activity_id)
                    self.activities.ensure_joinable(activity, utcnow())

                    if self._find_pending(user_id, activity_id):
                        raise DuplicateError("You already have a pending order for this activity")
                    if self.registrations.find_confirmed(user_id, activity_id):
                        raise DuplicateError("You are already registered for this activity")
                    if self._number_taken(order_number):
                        raise OrderNumberCollision(order_number)

                    order = Order(
                        order_number=order_number,
                        user_id=user_id,
                        activity_id=activity_id,
                        activity_title=activity.title,
                        amount=activity.price,
                        status=OrderStatus.PENDING,
                        payment_status=PaymentStatus.PENDING,
                        notes=notes,
                    )
                    self.db.add(order)
            except IntegrityError:
                if self._number_taken(order_number):
                    raise OrderNumberCollision(order_number)
                raise DuplicateError("You already have a pending order for this activity")

        self.db.refresh(order)
        return order

    def pay(self, order_number: str, user_id: int) -> Order:
        """Pay a pending order: order paid, registration confirmed, seat taken.

        The activity is re-validated at pay time. Nothing changes unless all
        three effects succeed.

        Raises:
            NotFoundError: Order or activity missing.
            InvalidStateError: Order not pending, activity not open or started.
            CapacityError: No seat left.
            DuplicateError: User already holds a confirmed registration.
        """
        activity_id = self.get_by_number(order_number, user_id).activity_id
        with activity_lock(activity_id):
            try:
                with self.unit_of_work():
                    order = self.get_by_number(order_number, user_id)
                    if order.status != OrderStatus.PENDING:
                        raise InvalidStateError(f"Order cannot be paid in status '{order.status}'")

                    now = utcnow()
                    activity = self.activities.load_for_update(activity_id)
                    self.activities.ensure_joinable(activity, now)
                    if self.registrations.find_confirmed(user_id, activity_id):
                        raise DuplicateError("You are already registered for this activity")

                    order.status = OrderStatus.PAID
                    order.payment_status = PaymentStatus.SUCCESS
                    order.paid_at = now
                    self.db.add(
                        Registration(
                            user_id=user_id,
                            activity_id=activity_id,
                            order_id=order.id,
                            status=RegistrationStatus.CONFIRMED,
                            notes=order.notes,
                        )
                    )
                    self.activities.adjust_participants(activity_id, +1)
            except IntegrityError:
                raise DuplicateError("You are already registered for this activity")

        self.db.refresh(order)
        self.log.info("Order paid", order_number=order_number, user_id=user_id, activity_id=activity_id)
        return order

    def cancel(self, order_number: str, user_id: int) -> Order:
        """Cancel an order. A pending order is simply cancelled; a paid one is
        refunded at any time, releasing its registration and seat.

        Raises:
            NotFoundError: Order missing.
            InvalidStateError: Order already cancelled or refunded.
        """
        activity_id = self.get_by_number(order_number, user_id).activity_id
        with activity_lock(activity_id), self.unit_of_work():
            order = self.get_by_number(order_number, user_id)
            if order.status == OrderStatus.PENDING:
                order.status = OrderStatus.CANCELLED
            elif order.status == OrderStatus.PAID:
                self._reverse_payment(order, before_start_only=False)
            else:
                raise InvalidStateError(f"Order is already {order.status}")

        self.db.refresh(order)
        self.log.info("Order cancelled", order_number=order_number, status=order.status)
        return order

    def refund(self, order_number: str, user_id: int) -> Order:
        """Refund a paid order before the activity starts.

        Raises:
            NotFoundError: Order missing.
            InvalidStateError: Order not paid, or the activity has started.
        """
        activity_id = self.get_by_number(order_number, user_id).activity_id
        with activity_lock(activity_id), self.unit_of_work():
            order = self.get_by_number(order_number, user_id)
            if order.status != OrderStatus.PAID:
                raise InvalidStateError("Only paid orders can be refunded")
            self._reverse_payment(order)

        self.db.refresh(order)
        self.log.info("Order refunded", order_number=order_number, user_id=user_id)
        return order

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _reverse_payment(self, order: Order, before_start_only: bool = True) -> None:
        activity = self.activities.load_for_update(order.activity_id, include_deleted=True)
        if before_start_only and activity.has_started(utcnow()):
            raise InvalidStateError("Activity has already started; refund is not possible")

        registration = (
            self.db.query(Registration)
            .filter(
                Registration.order_id == order.id,
                Registration.status == RegistrationStatus.CONFIRMED,
            )
            .first()
        ) or self.registrations.find_confirmed(order.user_id, order.activity_id)
        if registration is None:
            raise InvalidStateError("No confirmed registration is linked to this order")

        self.db.delete(registration)
        order.status = OrderStatus.REFUNDED
        order.payment_status = PaymentStatus.REFUNDED
        self.activities.adjust_participants(order.activity_id, -1)

    def _find_pending(self, user_id: int, activity_id: int) -> Optional[Order]:
        return (
            self.db.query(Order)
            .filter(
                Order.user_id == user_id,
                Order.activity_id == activity_id,
                Order.status == OrderStatus.PENDING,
            )
            .first()
        )

    def _number_taken(self, order_number: str) -> bool:
        return (
            self.db.query(Order.id).filter(Order.order_number == order_number).first()
            is not None
        )
