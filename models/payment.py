# models/payment.py
import enum

from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from .base import Base, enum_values


class PaymentMethod(str, enum.Enum):
     CASH = "cash"
     MPESA = "mpesa"


class PaymentStatus(str, enum.Enum):
     """
     Settlement state of a payment.
     pending -> successful | failed; successful and failed are terminal.
     """
     PENDING = "pending"
     SUCCESSFUL = "successful"
     FAILED = "failed"

     @property
     def is_terminal(self) -> bool:
          return self is not PaymentStatus.PENDING


class Payment(Base):
     """
     Payment model - one attempt to pay a rental for a billing month.
     """
     __tablename__ = "payments"

     id = Column(Integer, primary_key=True, autoincrement=True)
     rental_id = Column(
          Integer,
          ForeignKey("rentals.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )

     amount = Column(Numeric(12, 2), nullable=False)
     method = Column(
          Enum(PaymentMethod, name="payment_method", values_callable=enum_values, create_constraint=True),
          nullable=False,
     )
     phone_number = Column(String(20), nullable=True)  # mpesa only
     transaction_id = Column(String(64), nullable=True)  # non-cash only
     month = Column(String(7), nullable=False, index=True)  # YYYY-MM
     status = Column(
          Enum(PaymentStatus, name="payment_status", values_callable=enum_values, create_constraint=True),
          default=PaymentStatus.PENDING,
          nullable=False,
          index=True
     )

     # Timestamps
     payment_date = Column(DateTime, nullable=False)
     updated_at = Column(DateTime, onupdate=func.now(), nullable=True)

     # Relationships
     rental = relationship("Rental", back_populates="payments")

     def __repr__(self):
          return f"<Payment(id={self.id}, rental_id={self.rental_id}, month='{self.month}', status='{self.status.value}')>"

     @property
     def is_terminal(self) -> bool:
          return PaymentStatus(self.status).is_terminal

     def mark_as_successful(self) -> None:
          """Mark the payment as settled."""
          self.status = PaymentStatus.SUCCESSFUL

     def mark_as_failed(self) -> None:
          """Mark the payment as failed."""
          self.status = PaymentStatus.FAILED
