# routers/rentals.py
"""
Rental API routes.

Reading a tenant's rentals runs the status aggregator first, so the
payment status returned is always current for today's date.
"""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_session, commit_session
from dependencies import RequestContext, require_admin, verify_token
from models import Rental, RentalStatus
from schemas.rental import (
     HouseResponse,
     RentalCreate,
     RentalCreateResponse,
     RentalEnvelope,
     RentalResponse,
     RentalStatusEnum,
     RentalStatusUpdate,
     RentedTenantResponse,
)
from services.errors import AuthorizationError, ValidationError
from services.rental_service import RentalService
from services.rental_status_service import refresh_tenant_rentals

router = APIRouter(prefix="/api/rental", tags=["rentals"])


def build_rental_response(rental: Rental) -> RentalResponse:
     return RentalResponse(
          id=rental.id,
          tenant_id=rental.tenant_id,
          house_id=rental.house_id,
          start_date=rental.start_date,
          end_date=rental.end_date,
          amount=rental.amount,
          next_payment_date=rental.next_payment_date,
          payment_status=rental.payment_status.value,
          rental_status=rental.rental_status.value,
          house=HouseResponse.model_validate(rental.house) if rental.house else None,
          tenant_name=rental.tenant.name if rental.tenant else None,
     )


@router.post(
     "/add",
     response_model=RentalCreateResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Assign a house to a tenant"
)
def create_rental(
     body: RentalCreate,
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(require_admin),
):
     rental = RentalService.create_rental(db, body.tenant_id, body.house_id)
     commit_session(db)
     return RentalCreateResponse(
          message="Rental created successfully",
          rental=build_rental_response(rental),
     )


@router.get(
     "",
     response_model=List[RentalResponse],
     summary="List all rentals"
)
def list_rentals(
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(require_admin),
):
     return [build_rental_response(r) for r in RentalService.list_rentals(db)]


@router.get(
     "/tenants",
     response_model=List[RentedTenantResponse],
     summary="List tenants with an active rental"
)
def list_rented_tenants(
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(require_admin),
):
     return [
          RentedTenantResponse(id=user.id, name=user.name, email=user.email, house_no=house_no)
          for user, house_no in RentalService.list_rented_tenants(db)
     ]


@router.get(
     "/tenant/{tenant_id}",
     response_model=List[RentalResponse],
     summary="Get a tenant's rentals with refreshed payment status"
)
def get_tenant_rentals(
     tenant_id: int,
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(verify_token),
):
     """
     Recompute pending/late status for the tenant's unpaid rentals, persist
     any change and return the rentals with their house.

     **Role-based access:** tenants see their own rentals, admins any.
     """
     if not ctx.can_access_tenant(tenant_id):
          raise AuthorizationError("You do not have permission to view rentals for this tenant")

     rentals = refresh_tenant_rentals(db, tenant_id)
     commit_session(db)
     return [build_rental_response(r) for r in rentals]


@router.get(
     "/{rental_id}",
     response_model=RentalEnvelope,
     summary="Get rental by ID"
)
def get_rental(
     rental_id: int,
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(require_admin),
):
     return RentalEnvelope(rental=build_rental_response(RentalService.get_rental(db, rental_id)))


@router.put(
     "/{rental_id}/status",
     summary="Update rental status"
)
def update_rental_status(
     rental_id: int,
     body: RentalStatusUpdate,
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(require_admin),
):
     """
     End a rental (frees the house). Ended rentals cannot be reactivated.
     """
     if body.status == RentalStatusEnum.ENDED:
          RentalService.end_rental(db, rental_id)
     else:
          rental = db.get(Rental, rental_id)
          if rental is not None and rental.rental_status == RentalStatus.ENDED:
               raise ValidationError("An ended rental cannot be reactivated")
     commit_session(db)
     return {"message": f"Rental marked as {body.status.value}"}
