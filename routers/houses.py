# routers/houses.py
"""
House API routes: the inventory rentals are created from.
"""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_session, commit_session
from dependencies import RequestContext, require_admin, verify_token
from models import House, HouseAvailability
from schemas.rental import HouseCreate, HouseResponse, HouseUpdate
from services.errors import NotFoundError
from services.rental_service import RentalService

router = APIRouter(prefix="/api/house", tags=["houses"])


@router.post(
     "/add",
     response_model=HouseResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create a house"
)
def create_house(
     body: HouseCreate,
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(require_admin),
):
     house = House(house_no=body.house_no, price=body.price, availability=HouseAvailability.AVAILABLE)
     db.add(house)
     commit_session(db)
     return house


@router.get("", response_model=List[HouseResponse], summary="List houses")
def list_houses(
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(verify_token),
):
     return db.query(House).order_by(House.house_no).all()


@router.get("/available", response_model=List[HouseResponse], summary="List available houses")
def list_available_houses(
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(verify_token),
):
     return (
          db.query(House)
          .filter(House.availability == HouseAvailability.AVAILABLE)
          .order_by(House.house_no)
          .all()
     )


@router.get("/{house_id}", response_model=HouseResponse, summary="Get house by ID")
def get_house(
     house_id: int,
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(verify_token),
):
     house = db.get(House, house_id)
     if not house:
          raise NotFoundError("House not found")
     return house


@router.put("/edit/{house_id}", response_model=HouseResponse, summary="Edit a house")
def edit_house(
     house_id: int,
     body: HouseUpdate,
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(require_admin),
):
     house = RentalService.update_house(db, house_id, house_no=body.house_no, price=body.price)
     commit_session(db)
     return house


@router.delete("/delete/{house_id}", summary="Delete a house")
def delete_house(
     house_id: int,
     db: Session = Depends(get_session),
     ctx: RequestContext = Depends(require_admin),
):
     """
     Remove a house from the inventory. Houses with a rental, active or
     ended, are kept.
     """
     RentalService.delete_house(db, house_id)
     commit_session(db)
     return {"message": "House deleted successfully"}
