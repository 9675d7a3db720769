# services/payment_service.py
"""
Payment Record Engine - records rent payments and drives their settlement.

Creation rules:
1. The caller must be authenticated (request context present).
2. The rental must exist and belong to the caller.
3. Method is cash or mpesa; month is YYYY-MM; mpesa needs a phone number.
4. The amount is always the rental's amount, never client input.
5. Non-cash payments get a synthetic transaction id when none is supplied.
6. The month may not lie after the rental's current billing cycle; a
   settled payment for an earlier month (arrears) leaves the rental as is.

Outcome: cash waits for admin approval (pending); mpesa settles on
submission. Settlement is pending -> successful | failed, once.
"""
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from dependencies import RequestContext
from models import Payment, PaymentMethod, PaymentStatus, Rental, RentalPaymentStatus
from schemas.payment import PaymentCreateRequest
from services.errors import (
     AuthorizationError,
     DuplicatePaymentError,
     PaymentNotFound,
     PersistenceError,
     RentalNotFound,
     Unauthenticated,
     ValidationError,
)
from services.rental_status_service import current_cycle_month, next_due_date

logger = logging.getLogger(__name__)

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


# ---------------------------------------------------------------------------
# Settlement outcome
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Settled:
     """Payment is confirmed on submission."""
     kind: Literal["settled"] = "settled"
     status: PaymentStatus = PaymentStatus.SUCCESSFUL


@dataclass(frozen=True)
class PendingApproval:
     """Payment waits for an approval (admin for cash, gateway callback otherwise)."""
     kind: Literal["pending_approval"] = "pending_approval"
     status: PaymentStatus = PaymentStatus.PENDING


PaymentOutcome = Union[Settled, PendingApproval]


def settlement_outcome(method: PaymentMethod) -> PaymentOutcome:
     """Cash needs a human in the loop; mpesa is treated as settled on submission."""
     if method == PaymentMethod.CASH:
          return PendingApproval()
     return Settled()


@dataclass
class PaymentResult:
     payment: Payment
     outcome: PaymentOutcome


@dataclass
class SettlementResult:
     payment: Payment
     changed: bool


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _utcnow() -> datetime:
     return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_transaction_id(now: Optional[datetime] = None) -> str:
     """Time-based reference for display only; not a settlement key."""
     now = now or _utcnow()
     return f"TXN-{int(now.replace(tzinfo=timezone.utc).timestamp() * 1000)}"


def _parse_method(value: Optional[str]) -> PaymentMethod:
     if not value:
          raise ValidationError("Select a payment method.")
     try:
          return PaymentMethod(value.strip().lower())
     except ValueError:
          raise ValidationError(f"Unsupported payment method: {value}")


def _parse_month(value: Optional[str]) -> str:
     if not value:
          raise ValidationError("Select a month.")
     month = value.strip()
     if not MONTH_PATTERN.match(month):
          raise ValidationError("Month must be in YYYY-MM format.")
     return month


def _payment_query(db: Session):
     return db.query(Payment).options(
          joinedload(Payment.rental).joinedload(Rental.tenant),
          joinedload(Payment.rental).joinedload(Rental.house),
     )


def _settle_rental(rental: Rental, month: str) -> bool:
     """
     Settle the rental's current billing cycle.

     Only a payment for the month next_payment_date is due for marks the
     rental paid and advances the due date; arrears leave it untouched.
     """
     if month != current_cycle_month(rental):
          logger.info(
               "Payment for %s does not settle rental %s (current cycle %s)",
               month, rental.id, current_cycle_month(rental),
          )
          return False
     rental.payment_status = RentalPaymentStatus.PAID
     rental.next_payment_date = next_due_date(month)
     return True


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

def create_payment(
     db: Session,
     ctx: Optional[RequestContext],
     request: PaymentCreateRequest,
     now: Optional[datetime] = None
) -> PaymentResult:
     """
     Record a payment attempt for one of the caller's rentals.

     Returns:
          PaymentResult with the persisted payment and its outcome

     Raises:
          Unauthenticated: No principal on the request
          RentalNotFound: Rental absent
          AuthorizationError: Rental belongs to someone else
          ValidationError: Missing/invalid method, month or phone number
          DuplicatePaymentError: Month already paid or awaiting approval
          PersistenceError: Storage failure
     """
     if ctx is None:
          raise Unauthenticated("You must be logged in.")
     if request.rental_id is None:
          raise ValidationError("Rental details not found.")

     now = now or _utcnow()
     try:
          rental = db.get(Rental, request.rental_id)
          if not rental:
               raise RentalNotFound(f"Rental with ID {request.rental_id} not found")
          if rental.tenant_id != ctx.user_id:
               raise AuthorizationError("You do not have permission to pay for this rental")
          if not rental.is_active:
               raise ValidationError("This rental has ended.")

          method = _parse_method(request.method)
          month = _parse_month(request.month)
          phone_number = (request.phone_number or "").strip()
          if method == PaymentMethod.MPESA and not phone_number:
               raise ValidationError("Enter Mpesa phone number.")
          if month > current_cycle_month(rental):
               raise ValidationError(
                    f"Payments can only be made up to {current_cycle_month(rental)}."
               )

          existing = (
               db.query(Payment)
               .filter(
                    Payment.rental_id == rental.id,
                    Payment.month == month,
                    Payment.status != PaymentStatus.FAILED,
               )
               .first()
          )
          if existing:
               raise DuplicatePaymentError(
                    f"A payment for {month} is already {existing.status.value}."
               )

          transaction_id = None
          if method != PaymentMethod.CASH:
               transaction_id = (request.transaction_id or "").strip() or generate_transaction_id(now)

          outcome = settlement_outcome(method)
          payment = Payment(
               rental_id=rental.id,
               amount=rental.amount,
               method=method,
               phone_number=phone_number if method == PaymentMethod.MPESA else None,
               transaction_id=transaction_id,
               month=month,
               status=outcome.status,
               payment_date=now,
          )
          db.add(payment)
          if isinstance(outcome, Settled):
               _settle_rental(rental, month)
          db.flush()
     except SQLAlchemyError as e:
          db.rollback()
          logger.exception("Failed to record payment for rental %s", request.rental_id)
          raise PersistenceError("Payment could not be saved, please try again.") from e

     if request.amount is not None and request.amount != payment.amount:
          logger.warning(
               "Ignored client amount %s for rental %s; charged %s",
               request.amount, rental.id, payment.amount,
          )
     logger.info(
          "Recorded %s payment %s for rental %s (%s): %s",
          method.value, payment.id, rental.id, month, payment.status.value,
     )
     return PaymentResult(payment=payment, outcome=outcome)


# ---------------------------------------------------------------------------
# Settlement transitions
# ---------------------------------------------------------------------------

def _transition(db: Session, payment_id: int, target: PaymentStatus) -> SettlementResult:
     try:
          payment = db.query(Payment).filter(Payment.id == payment_id).with_for_update().first()
          if not payment:
               raise PaymentNotFound(f"Payment with ID {payment_id} not found")

          if payment.status == target:
               return SettlementResult(payment=payment, changed=False)
          if payment.is_terminal:
               raise ValidationError(
                    f"Payment is already {payment.status.value} and cannot become {target.value}."
               )

          if target == PaymentStatus.SUCCESSFUL:
               payment.mark_as_successful()
               _settle_rental(payment.rental, payment.month)
          else:
               payment.mark_as_failed()
          db.flush()
     except SQLAlchemyError as e:
          db.rollback()
          logger.exception("Failed to update payment %s", payment_id)
          raise PersistenceError("Payment could not be updated, please try again.") from e

     logger.info("Payment %s is now %s", payment.id, payment.status.value)
     return SettlementResult(payment=payment, changed=True)


def approve_payment(db: Session, payment_id: int) -> SettlementResult:
     """pending -> successful. Approving an already successful payment is a no-op."""
     return _transition(db, payment_id, PaymentStatus.SUCCESSFUL)


def reject_payment(db: Session, payment_id: int) -> SettlementResult:
     """pending -> failed. Rejecting an already failed payment is a no-op."""
     return _transition(db, payment_id, PaymentStatus.FAILED)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def get_payment(db: Session, ctx: RequestContext, payment_id: int) -> Payment:
     """Fetch one payment for its owner or an admin."""
     try:
          payment = _payment_query(db).filter(Payment.id == payment_id).first()
     except SQLAlchemyError as e:
          logger.exception("Failed to load payment %s", payment_id)
          raise PersistenceError("Could not load payment, please try again.") from e

     if not payment:
          raise PaymentNotFound(f"Payment with ID {payment_id} not found")
     if not ctx.can_access_tenant(payment.rental.tenant_id):
          raise AuthorizationError("You do not have permission to view this payment")
     return payment


def list_payments_for_tenant(db: Session, tenant_id: int) -> list[Payment]:
     """A tenant's payments, newest first."""
     return (
          _payment_query(db)
          .join(Payment.rental)
          .filter(Rental.tenant_id == tenant_id)
          .order_by(Payment.payment_date.desc(), Payment.id.desc())
          .all()
     )


def list_all_payments(db: Session) -> list[Payment]:
     return _payment_query(db).order_by(Payment.payment_date.desc(), Payment.id.desc()).all()
