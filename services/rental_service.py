# services/rental_service.py
"""
Rental Service - assigning houses to tenants and ending rentals.

Keeps house availability in step with the rental lifecycle:
a house is rented exactly while it has an active rental.
"""
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from models import House, HouseAvailability, Rental, RentalPaymentStatus, RentalStatus, User
from services.errors import NotFoundError, ValidationError
from services.rental_status_service import first_due_date


class RentalService:
     """Service class for rental lifecycle business logic."""

     @staticmethod
     def create_rental(
          db: Session,
          tenant_id: int,
          house_id: int,
          start_date: Optional[date] = None
     ) -> Rental:
          """
          Create a rental for a tenant and mark the house as rented.

          The rental amount is the house price; the first payment is due
          on the 5th of the following month.

          Raises:
               NotFoundError: If the tenant or house doesn't exist
               ValidationError: If the house is already rented
          """
          tenant = db.get(User, tenant_id)
          if not tenant:
               raise NotFoundError("Tenant not found")

          house = db.get(House, house_id)
          if not house:
               raise NotFoundError("House not found")

          if house.availability == HouseAvailability.RENTED:
               raise ValidationError("This house is already rented")

          start_date = start_date or date.today()
          rental = Rental(
               tenant_id=tenant_id,
               house_id=house_id,
               start_date=start_date,
               amount=house.price,
               next_payment_date=first_due_date(start_date),
               rental_status=RentalStatus.ACTIVE,
               payment_status=RentalPaymentStatus.PENDING,
          )
          house.availability = HouseAvailability.RENTED

          db.add(rental)
          db.flush()
          return rental

     @staticmethod
     def end_rental(db: Session, rental_id: int, end_date: Optional[date] = None) -> Rental:
          """
          End a rental and free its house.

          Raises:
               NotFoundError: If the rental doesn't exist
          """
          rental = db.get(Rental, rental_id)
          if not rental:
               raise NotFoundError("Rental not found!!")

          if rental.rental_status == RentalStatus.ENDED:
               return rental

          rental.rental_status = RentalStatus.ENDED
          rental.end_date = end_date or date.today()
          if rental.house:
               rental.house.availability = HouseAvailability.AVAILABLE

          db.flush()
          return rental

     @staticmethod
     def get_rental(db: Session, rental_id: int) -> Rental:
          rental = (
               db.query(Rental)
               .options(joinedload(Rental.tenant), joinedload(Rental.house))
               .filter(Rental.id == rental_id)
               .first()
          )
          if not rental:
               raise NotFoundError("Rental not found!!")
          return rental

     @staticmethod
     def list_rentals(db: Session) -> list[Rental]:
          return (
               db.query(Rental)
               .options(joinedload(Rental.tenant), joinedload(Rental.house))
               .order_by(Rental.id.desc())
               .all()
          )

     @staticmethod
     def list_rented_tenants(db: Session) -> list[tuple[User, Optional[str]]]:
          """Tenants with an active rental, paired with their house number."""
          return (
               db.query(User, House.house_no)
               .join(Rental, Rental.tenant_id == User.id)
               .outerjoin(House, Rental.house_id == House.id)
               .filter(Rental.rental_status == RentalStatus.ACTIVE)
               .order_by(User.name, House.house_no)
               .all()
          )

     @staticmethod
     def update_house(
          db: Session,
          house_id: int,
          house_no: Optional[str] = None,
          price: Optional[Decimal] = None
     ) -> House:
          """
          Edit a house's number or price.

          Existing rentals keep the amount they were created with.

          Raises:
               NotFoundError: If the house doesn't exist
          """
          house = db.get(House, house_id)
          if not house:
               raise NotFoundError("House not found")
          if house_no is not None:
               house.house_no = house_no
          if price is not None:
               house.price = price
          db.flush()
          return house

     @staticmethod
     def delete_house(db: Session, house_id: int) -> None:
          """
          Delete a house no rental refers to.

          Raises:
               NotFoundError: If the house doesn't exist
               ValidationError: If the house has an active or past rental
          """
          house = db.get(House, house_id)
          if not house:
               raise NotFoundError("House not found")

          rentals = db.query(Rental).filter(Rental.house_id == house_id).all()
          if any(rental.is_active for rental in rentals):
               raise ValidationError("Cannot delete a house with an active rental")
          if rentals:
               raise ValidationError("Cannot delete a house with rental history")

          db.delete(house)
          db.flush()
