# models/__init__.py
from .base import Base
from .user import User, UserRole
from .house import House, HouseAvailability
from .rental import Rental, RentalPaymentStatus, RentalStatus
from .payment import Payment, PaymentMethod, PaymentStatus

__all__ = [
     "Base",
     "User",
     "UserRole",
     "House",
     "HouseAvailability",
     "Rental",
     "RentalPaymentStatus",
     "RentalStatus",
     "Payment",
     "PaymentMethod",
     "PaymentStatus",
]
