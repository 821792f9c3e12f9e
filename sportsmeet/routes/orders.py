"""
Order routes: create, pay, cancel and refund activity orders.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_required_user
from ..database import get_db
from ..models.order import Order
from ..models.user import User
from ..responses import success
from ..schemas.order import OrderCreate, OrderResponse
from ..services.order_service import OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])


def order_to_dict(order: Order) -> dict:
    return OrderResponse.model_validate(order).model_dump(mode="json")


@router.post("")
def create_order(
    data: OrderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Create a pending order for an activity."""
    order = OrderService(db).create(current_user.id, data.activity_id, data.notes)
    return success(order_to_dict(order), "Order created")


@router.get("/my")
def my_orders(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Orders of the current user, optionally filtered by status."""
    orders = OrderService(db).list_for_user(current_user.id, status)
    return success([order_to_dict(o) for o in orders])


@router.get("/stats/my")
def my_order_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Order counts per status and total amount paid."""
    stats = OrderService(db).stats(current_user.id)
    return success(stats.model_dump())


@router.get("/{order_number}")
def get_order(
    order_number: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Get one of the current user's orders."""
    order = OrderService(db).get_by_number(order_number, current_user.id)
    return success(order_to_dict(order))


@router.put("/{order_number}/pay")
def pay_order(
    order_number: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Pay a pending order and confirm the seat."""
    order = OrderService(db).pay(order_number, current_user.id)
    return success(order_to_dict(order), "Payment successful")


@router.put("/{order_number}/cancel")
def cancel_order(
    order_number: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Cancel a pending order, or refund a paid one."""
    order = OrderService(db).cancel(order_number, current_user.id)
    return success(order_to_dict(order), "Order cancelled")


@router.put("/{order_number}/refund")
def refund_order(
    order_number: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_required_user),
):
    """Refund a paid order before the activity starts."""
    order = OrderService(db).refund(order_number, current_user.id)
    return success(order_to_dict(order), "Refund successful")
