# routers/payments.py
"""
Rental payment API.

Tenants submit payments for their rentals and poll them by id; admins
approve or reject cash payments. Approval/rejection is pushed to the
owning tenant's session over the notification hub.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from sqlalchemy.orm import Session

from database import get_session, commit_session
from dependencies import RequestContext, require_admin, verify_token
from models import Payment
from schemas.payment import (
     PaymentCreateRequest,
     PaymentCreateResponse,
     PaymentEnvelope,
     PaymentListResponse,
     PaymentResponse,
)
from services import payment_service
from services.notification_hub import (
     PAYMENT_APPROVED,
     PAYMENT_REJECTED,
     NotificationHub,
     get_notification_hub,
)
from services.payment_service import Settled
from services.receipt_service import build_receipt, receipt_filename, renderer

router = APIRouter(prefix="/api/payment", tags=["payments"])


def build_payment_response(payment: Payment) -> PaymentResponse:
     """
     Helper function to build PaymentResponse with tenant and house joined.
     """
     rental = payment.rental
     tenant = rental.tenant if rental else None
     house = rental.house if rental else None

     return PaymentResponse(
          id=payment.id,
          rental_id=payment.rental_id,
          amount=payment.amount,
          method=payment.method.value,
          phone_number=payment.phone_number,
          transaction_id=payment.transaction_id,
          month=payment.month,
          status=payment.status.value,
          payment_date=payment.payment_date,
          tenant_id=rental.tenant_id if rental else None,
          tenant_name=tenant.name if tenant else None,
          house_no=house.house_no if house else None,
     )


@router.post(
     "/add",
     response_model=PaymentCreateResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Submit a rent payment"
)
def add_payment(
     body: PaymentCreateRequest,
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(verify_token),
):
     """
     Record a payment for one of the tenant's rentals.

     - **rentalId**: rental being paid (must belong to the caller)
     - **method**: cash (pending admin approval) or mpesa (settled)
     - **month**: billing month, YYYY-MM
     - **phoneNumber**: required for mpesa

     The amount is always the rental amount.
     """
     result = payment_service.create_payment(db, ctx, body)
     commit_session(db)

     if isinstance(result.outcome, Settled):
          message = "Payment successful! Receipt ready below."
     else:
          message = "Your payment is pending admin approval."

     return PaymentCreateResponse(
          payment=build_payment_response(result.payment),
          outcome=result.outcome.kind,
          message=message,
     )


@router.get(
     "/my",
     response_model=PaymentListResponse,
     summary="List the caller's payments"
)
def my_payments(
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(verify_token),
):
     payments = payment_service.list_payments_for_tenant(db, ctx.user_id)
     return PaymentListResponse(payments=[build_payment_response(p) for p in payments])


@router.get(
     "/all",
     response_model=PaymentListResponse,
     summary="List all payments"
)
def all_payments(
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(require_admin),
):
     payments = payment_service.list_all_payments(db)
     return PaymentListResponse(payments=[build_payment_response(p) for p in payments])


@router.get(
     "/{payment_id}",
     response_model=PaymentEnvelope,
     summary="Get payment by ID"
)
def get_payment(
     payment_id: int,
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(verify_token),
):
     """
     Current state of one payment. This is the endpoint the reconciliation
     poll hits while a payment is pending.
     """
     payment = payment_service.get_payment(db, ctx, payment_id)
     return PaymentEnvelope(payment=build_payment_response(payment))


@router.patch(
     "/{payment_id}/approve",
     response_model=PaymentEnvelope,
     summary="Approve a pending payment"
)
def approve_payment(
     payment_id: int,
     background_tasks: BackgroundTasks,
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(require_admin),
     hub: NotificationHub = Depends(get_notification_hub),
):
     """
     Mark a pending payment successful and settle its rental.
     Approving an already successful payment changes nothing and pushes nothing.
     """
     result = payment_service.approve_payment(db, payment_id)
     commit_session(db)

     response = build_payment_response(result.payment)
     if result.changed:
          background_tasks.add_task(
               hub.publish, response.tenant_id, PAYMENT_APPROVED, response.model_dump(mode="json")
          )
     return PaymentEnvelope(payment=response)


@router.patch(
     "/{payment_id}/reject",
     response_model=PaymentEnvelope,
     summary="Reject a pending payment"
)
def reject_payment(
     payment_id: int,
     background_tasks: BackgroundTasks,
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(require_admin),
     hub: NotificationHub = Depends(get_notification_hub),
):
     result = payment_service.reject_payment(db, payment_id)
     commit_session(db)

     response = build_payment_response(result.payment)
     if result.changed:
          background_tasks.add_task(
               hub.publish, response.tenant_id, PAYMENT_REJECTED, response.model_dump(mode="json")
          )
     return PaymentEnvelope(payment=response)


@router.get(
     "/{payment_id}/receipt",
     response_class=Response,
     summary="Download the receipt of a successful payment"
)
def download_receipt(
     payment_id: int,
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(verify_token),
):
     payment = payment_service.get_payment(db, ctx, payment_id)
     receipt = build_receipt(payment)
     return Response(
          content=renderer.render(receipt),
          media_type="application/pdf",
          headers={"Content-Disposition": f"attachment; filename={receipt_filename(receipt)}"},
     )
