# services/__init__.py
from .errors import (
     PaymentCoreError,
     ValidationError,
     DuplicatePaymentError,
     AuthorizationError,
     Unauthenticated,
     NotFoundError,
     RentalNotFound,
     PaymentNotFound,
     PersistenceError,
     DeliveryError,
)

__all__ = [
     "PaymentCoreError",
     "ValidationError",
     "DuplicatePaymentError",
     "AuthorizationError",
     "Unauthenticated",
     "NotFoundError",
     "RentalNotFound",
     "PaymentNotFound",
     "PersistenceError",
     "DeliveryError",
]
