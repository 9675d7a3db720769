# services/rental_status_service.py
"""
Rental Status Aggregator - derives a rental's payment status from the calendar.

Billing cycle: rent is due on the 5th, with a grace period up to and
including the 10th. After the 10th an unpaid rental is late.

A paid rental is left alone by aging. It only becomes pending again when
its next payment date is reached (billing-cycle rollover) or through a
settlement event handled by the payment service.
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from models import Rental, RentalPaymentStatus
from services.errors import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)

DUE_DAY = 5
GRACE_END_DAY = 10


def compute_payment_status(day_of_month: int) -> RentalPaymentStatus:
     """
     Map a day of month to the status of an unpaid rental.

     - day < 5       -> pending (before due)
     - 5 <= day <= 10 -> pending (grace period)
     - day > 10      -> late
     """
     if day_of_month < DUE_DAY:
          return RentalPaymentStatus.PENDING
     if day_of_month <= GRACE_END_DAY:
          return RentalPaymentStatus.PENDING
     return RentalPaymentStatus.LATE


def next_due_date(month: str) -> date:
     """Due date of the cycle following a billed month ("2025-11" -> 2025-12-05)."""
     year, mon = (int(part) for part in month.split("-"))
     if mon == 12:
          return date(year + 1, 1, DUE_DAY)
     return date(year, mon + 1, DUE_DAY)


def first_due_date(start: date) -> date:
     """Due date of the first cycle: the 5th of the month after the start date."""
     return next_due_date(f"{start.year:04d}-{start.month:02d}")


def billing_month(due: date) -> str:
     """Month a due date bills for (2025-12-05 -> "2025-12")."""
     return f"{due.year:04d}-{due.month:02d}"


def current_cycle_month(rental: Rental) -> str:
     """The earliest unsettled month: the one next_payment_date is due for."""
     return billing_month(rental.next_payment_date)


def roll_over_billing_cycle(rental: Rental, today: date) -> bool:
     """Reset a paid rental to pending once its next payment date is reached."""
     if rental.payment_status != RentalPaymentStatus.PAID:
          return False
     if today < rental.next_payment_date:
          return False
     rental.payment_status = RentalPaymentStatus.PENDING
     logger.info("Rental %s rolled over to a new billing cycle (due %s)", rental.id, rental.next_payment_date)
     return True


def refresh_rental_status(rental: Rental, today: date) -> bool:
     """
     Recompute one rental's payment status in place.

     Returns:
          True if the stored status changed
     """
     previous = rental.payment_status
     roll_over_billing_cycle(rental, today)

     if rental.payment_status == RentalPaymentStatus.PAID:
          return False

     new_status = compute_payment_status(today.day)
     if rental.payment_status != new_status:
          rental.payment_status = new_status
     return rental.payment_status != previous


def _tenant_rentals_query(db: Session, tenant_id: int):
     return (
          db.query(Rental)
          .options(joinedload(Rental.house))
          .filter(Rental.tenant_id == tenant_id)
          .order_by(Rental.start_date.desc(), Rental.id.desc())
     )


def refresh_tenant_rentals(db: Session, tenant_id: int, today: Optional[date] = None) -> list[Rental]:
     """
     Recompute and persist payment status for every rental of a tenant.

     Args:
          db: SQLAlchemy database session
          tenant_id: ID of the tenant (users.id)
          today: Evaluation date (defaults to date.today())

     Returns:
          The tenant's rentals after recomputation, with house loaded

     Raises:
          NotFoundError: If the tenant has no rentals
          PersistenceError: If the rentals could not be read or written
     """
     today = today or date.today()
     try:
          rentals = _tenant_rentals_query(db, tenant_id).all()
          if not rentals:
               raise NotFoundError("No rentals found for this tenant.")

          changed = [rental for rental in rentals if refresh_rental_status(rental, today)]
          if changed:
               db.flush()
               logger.info(
                    "Updated payment status of %d rental(s) for tenant %s",
                    len(changed), tenant_id,
               )

          return _tenant_rentals_query(db, tenant_id).all()
     except SQLAlchemyError as e:
          db.rollback()
          logger.exception("Failed to refresh rentals for tenant %s", tenant_id)
          raise PersistenceError("Could not load rentals, please try again.") from e
