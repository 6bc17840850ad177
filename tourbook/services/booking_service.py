import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from tourbook.core import (
    BaseService,
    NotFoundError,
    AuthorizationError,
    BusinessLogicError,
    ConcurrencyConflictError,
)
from tourbook.infrastructure.repositories import BookingRepository
from tourbook.models import Booking
from tourbook.statuses import PaymentMethod, PaymentStatus
from .capacity_ledger import CapacityLedger, translate_conflicts
from .notification_service import (
    NotificationService,
    NEW_BOOKING,
    BOOKING_UPDATED,
    REFUND_REQUESTED,
    BOOKING_DELETED,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# One retry after the database aborts a seat write
RESERVE_ATTEMPTS = 2

# Payment statuses a customer may set on their own booking
CUSTOMER_STATUSES = {PaymentStatus.CANCELLED.value}

# Bookings in these states may be physically deleted
DELETABLE_STATUSES = {PaymentStatus.PENDING.value, PaymentStatus.CANCELLED.value}


class BookingService(BaseService):
    def __init__(self, session, ledger: Optional[CapacityLedger] = None):
        super().__init__(session)
        self.repository = BookingRepository(session)
        self.ledger = ledger or CapacityLedger(session)
        self.notifications = NotificationService(session)

    async def _commit_with_retry(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run *operation* and commit, retrying once on a concurrency conflict."""
        for attempt in range(1, RESERVE_ATTEMPTS + 1):
            try:
                result = await operation()
                async with translate_conflicts():
                    await self.session.commit()
                return result
            except ConcurrencyConflictError:
                await self.session.rollback()
                if attempt == RESERVE_ATTEMPTS:
                    raise
                logger.warning("Retrying booking write after concurrency conflict (attempt %s)", attempt)
            except Exception:
                await self.session.rollback()
                raise

    async def _notify(self, type: str, payload: Dict[str, Any]) -> None:
        """Record an admin notification; failures never undo the booking."""
        try:
            await self.notifications.create_notification(type, payload)
            await self.session.commit()
        except Exception as exc:
            logger.exception("Failed to record %s notification: %s", type, exc)
            await self.session.rollback()

    async def _get_for_user(self, booking_id: str, user_id: str, is_admin: bool) -> Booking:
        booking = await self.repository.get_with_details(booking_id)
        if not booking:
            raise NotFoundError("Booking", booking_id)
        if not is_admin and booking.user_id != user_id:
            raise AuthorizationError("Access denied")
        return booking

    async def list_bookings(
        self,
        user_id: str,
        is_admin: bool,
        *,
        filter_user_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Booking]:
        """Admins see every booking (optionally for one user); customers see their own"""
        owner = (filter_user_id or None) if is_admin else user_id
        return await self.repository.list_bookings(user_id=owner, skip=skip, limit=limit)

    async def get_booking(self, booking_id: str, user_id: str, is_admin: bool) -> Booking:
        return await self._get_for_user(booking_id, user_id, is_admin)

    async def create_booking(
        self,
        user_id: str,
        tour_date_id: str,
        adults: int,
        children: int = 0,
        payment_method: str = PaymentMethod.ONSITE.value,
        notes: Optional[str] = None,
    ) -> Booking:
        """Reserve seats for the current user and record a NEW_BOOKING notification"""

        async def _reserve() -> Booking:
            return await self.ledger.reserve(
                tour_date_id,
                adults,
                children,
                user_id=user_id,
                payment_method=payment_method,
                notes=notes,
            )

        booking = await self._commit_with_retry(_reserve)
        booking_id = booking.id

        await self._notify(NEW_BOOKING, {
            "bookingId": booking_id,
            "tourTitle": booking.tour_date.tour.title,
            "userId": user_id,
            "totalPrice": str(booking.total_price),
        })

        return await self.repository.get_with_details(booking_id)

    async def update_booking(
        self,
        booking_id: str,
        user_id: str,
        is_admin: bool,
        *,
        adults: Optional[int] = None,
        children: Optional[int] = None,
        payment_status: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Booking:
        """Apply party size, payment status and notes changes"""
        changes: List[str] = []

        async def _apply() -> Booking:
            changes.clear()
            booking = await self._get_for_user(booking_id, user_id, is_admin)

            status_changes = payment_status is not None and payment_status != booking.payment_status
            if status_changes and not is_admin and payment_status not in CUSTOMER_STATUSES:
                raise AuthorizationError("Only administrators can set this payment status")

            if adults is not None or children is not None:
                new_adults = adults if adults is not None else booking.adults
                new_children = children if children is not None else booking.children
                if (new_adults, new_children) != (booking.adults, booking.children):
                    await self.ledger.resize(booking, new_adults, new_children)
                    changes.extend(["adults", "children", "totalPrice"])

            if status_changes:
                await self.ledger.change_status(booking, payment_status)
                changes.append("paymentStatus")

            if notes is not None:
                booking.notes = notes
                changes.append("notes")
                await self.session.flush()

            return booking

        booking = await self._commit_with_retry(_apply)

        if changes:
            await self._notify(BOOKING_UPDATED, {"bookingId": booking_id, "changes": changes})

        return await self.repository.get_with_details(booking_id)

    async def delete_booking(
        self,
        booking_id: str,
        user_id: str,
        is_admin: bool,
        *,
        request_refund: bool = False,
    ) -> Optional[Booking]:
        """Cancel with a refund request, or delete an unpaid booking.

        Returns the cancelled booking for a refund request, None after a delete.
        """
        if request_refund:
            async def _cancel() -> Booking:
                booking = await self._get_for_user(booking_id, user_id, is_admin)
                return await self.ledger.change_status(booking, PaymentStatus.CANCELLED.value)

            booking = await self._commit_with_retry(_cancel)
            await self._notify(REFUND_REQUESTED, {
                "bookingId": booking_id,
                "tourTitle": booking.tour_date.tour.title,
                "amount": str(booking.total_price),
            })
            return await self.repository.get_with_details(booking_id)

        async def _delete() -> None:
            booking = await self._get_for_user(booking_id, user_id, is_admin)
            if booking.payment_status not in DELETABLE_STATUSES:
                raise BusinessLogicError(
                    f"A {booking.payment_status} booking cannot be deleted",
                    rule="booking_deletion"
                )
            await self.ledger.discard(booking)

        await self._commit_with_retry(_delete)
        await self._notify(BOOKING_DELETED, {"bookingId": booking_id})
        return None
