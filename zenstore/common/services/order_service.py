from datetime import datetime
from typing import Dict, List, Optional
from ..db.session import get_session
from ..errors import InvalidInput, NotFound
from ..models.order import ORDER_STATUSES, Order
from ..utils.dto import to_order_dto
from ..utils.validators import is_valid_email, is_valid_url
from .logging import log_event


class OrderService:
    """Interest request intake and admin follow-up backed by DB."""

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def create_interest_order(
        self,
        *,
        username: str,
        laptop_choice: str,
        phone_number: str,
        email: str,
        product_link: Optional[str] = None,
    ) -> Dict:
        fields = {
            "username": (username or "").strip(),
            "laptop_choice": (laptop_choice or "").strip(),
            "phone_number": (phone_number or "").strip(),
            "email": (email or "").strip(),
        }
        missing = [k for k, v in fields.items() if not v]
        if missing:
            raise InvalidInput(f"missing fields: {', '.join(missing)}")
        if not is_valid_email(fields["email"]):
            raise InvalidInput("invalid email address")
        link = (product_link or "").strip() or None
        if link and not is_valid_url(link):
            raise InvalidInput("invalid product link")

        with self._session_factory() as session:
            order = Order(status="pending", product_link=link, **fields)
            session.add(order)
            session.flush()
            result = to_order_dto(order)
        log_event("info", "order.created", order_id=result["id"], laptop_choice=result["laptop_choice"])
        return result

    def list_orders(self, *, status: Optional[str] = None) -> List[Dict]:
        with self._session_factory() as session:
            q = session.query(Order)
            if status:
                q = q.filter(Order.status == status)
            return [to_order_dto(o) for o in q.order_by(Order.created_at.desc(), Order.id.desc()).all()]

    def update_order(self, order_id: int, *, status: Optional[str] = None, notes: Optional[str] = None) -> Dict:
        if status is not None and status not in ORDER_STATUSES:
            raise InvalidInput(f"status must be one of {', '.join(ORDER_STATUSES)}")
        with self._session_factory() as session:
            o = session.get(Order, order_id)
            if not o:
                raise NotFound(f"order {order_id} not found")
            if status is not None:
                o.status = status
            if notes is not None:
                o.notes = notes
            o.updated_at = datetime.utcnow()
            session.flush()
            result = to_order_dto(o)
        log_event("info", "order.updated", order_id=order_id, status=result["status"])
        return result
