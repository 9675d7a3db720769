from .payment import (
     PaymentCreateRequest,
     PaymentResponse,
     PaymentEnvelope,
     PaymentCreateResponse,
     PaymentListResponse,
)
from .rental import (
     HouseCreate,
     HouseUpdate,
     HouseResponse,
     RentalCreate,
     RentalStatusUpdate,
     RentalResponse,
     RentalCreateResponse,
     RentalEnvelope,
     RentedTenantResponse,
)

__all__ = [
     "PaymentCreateRequest",
     "PaymentResponse",
     "PaymentEnvelope",
     "PaymentCreateResponse",
     "PaymentListResponse",
     "HouseCreate",
     "HouseUpdate",
     "HouseResponse",
     "RentalCreate",
     "RentalStatusUpdate",
     "RentalResponse",
     "RentalCreateResponse",
     "RentalEnvelope",
     "RentedTenantResponse",
]
