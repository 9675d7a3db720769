# models/rental.py
import enum

from sqlalchemy import Column, Integer, Numeric, Date, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from .base import Base, enum_values


class RentalPaymentStatus(str, enum.Enum):
     """Payment standing of a rental for the current billing cycle."""
     PENDING = "pending"
     PAID = "paid"
     LATE = "late"


class RentalStatus(str, enum.Enum):
     ACTIVE = "active"
     ENDED = "ended"


class Rental(Base):
     """
     Rental model - the link between a tenant and a house.

     amount is copied from the house price when the rental is created and is
     the only source of a payment's amount.
     """
     __tablename__ = "rentals"

     id = Column(Integer, primary_key=True, autoincrement=True)

     # Foreign keys
     tenant_id = Column(
          Integer,
          ForeignKey("users.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     house_id = Column(
          Integer,
          ForeignKey("houses.id"),
          nullable=False,
          index=True
     )

     # Lease period
     start_date = Column(Date, nullable=False)
     end_date = Column(Date, nullable=True)

     # Billing
     amount = Column(Numeric(12, 2), nullable=False)
     next_payment_date = Column(Date, nullable=False)
     payment_status = Column(
          Enum(RentalPaymentStatus, name="rental_payment_status", values_callable=enum_values, create_constraint=True),
          default=RentalPaymentStatus.PENDING,
          nullable=False,
     )
     rental_status = Column(
          Enum(RentalStatus, name="rental_status", values_callable=enum_values, create_constraint=True),
          default=RentalStatus.ACTIVE,
          nullable=False,
          index=True
     )

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, onupdate=func.now(), nullable=True)

     # Relationships
     tenant = relationship("User", back_populates="rentals")
     house = relationship("House", back_populates="rentals")
     payments = relationship("Payment", back_populates="rental", cascade="all, delete-orphan")

     def __repr__(self):
          return f"<Rental(id={self.id}, tenant_id={self.tenant_id}, house_id={self.house_id}, payment_status='{self.payment_status.value}')>"

     @property
     def is_active(self) -> bool:
          return self.rental_status == RentalStatus.ACTIVE
