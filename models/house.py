# models/house.py
import enum

from sqlalchemy import Column, Integer, String, Numeric, Enum
from sqlalchemy.orm import relationship
from .base import Base, enum_values


class HouseAvailability(str, enum.Enum):
     AVAILABLE = "available"
     RENTED = "rented"


class House(Base):
     """
     House model - a rentable unit.
     availability mirrors whether the house has an active rental.
     """
     __tablename__ = "houses"

     id = Column(Integer, primary_key=True, autoincrement=True)
     house_no = Column(String(50), nullable=False)
     price = Column(Numeric(12, 2), nullable=False)
     availability = Column(
          Enum(HouseAvailability, name="house_availability", values_callable=enum_values, create_constraint=True),
          default=HouseAvailability.AVAILABLE,
          nullable=False,
          index=True,
     )

     # Relationships
     rentals = relationship("Rental", back_populates="house")

     def __repr__(self):
          return f"<House(id={self.id}, house_no='{self.house_no}', availability='{self.availability.value}')>"
