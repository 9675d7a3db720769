# schemas/rental.py
"""
Pydantic schemas for rental and house API request/response validation.
"""
from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum


class HouseAvailabilityEnum(str, Enum):
     AVAILABLE = "available"
     RENTED = "rented"


class RentalPaymentStatusEnum(str, Enum):
     PENDING = "pending"
     PAID = "paid"
     LATE = "late"


class RentalStatusEnum(str, Enum):
     ACTIVE = "active"
     ENDED = "ended"


class HouseCreate(BaseModel):
     house_no: str = Field(..., alias="houseNo", min_length=1, max_length=50)
     price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)

     model_config = ConfigDict(
          populate_by_name=True,
          json_schema_extra={"example": {"houseNo": "A12", "price": 15000}}
     )


class HouseUpdate(BaseModel):
     """Partial update; availability follows the rentals and is not editable."""
     house_no: Optional[str] = Field(None, alias="houseNo", min_length=1, max_length=50)
     price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)

     model_config = ConfigDict(populate_by_name=True)


class HouseResponse(BaseModel):
     id: int
     house_no: str
     price: Decimal
     availability: HouseAvailabilityEnum

     model_config = ConfigDict(from_attributes=True)


class RentalCreate(BaseModel):
     tenant_id: int = Field(..., alias="tenantId", gt=0)
     house_id: int = Field(..., alias="houseId", gt=0)

     model_config = ConfigDict(
          populate_by_name=True,
          json_schema_extra={"example": {"tenantId": 4, "houseId": 2}}
     )


class RentalStatusUpdate(BaseModel):
     status: RentalStatusEnum


class RentalResponse(BaseModel):
     """Rental with its house joined."""
     id: int
     tenant_id: int
     house_id: int
     start_date: date
     end_date: Optional[date] = None
     amount: Decimal
     next_payment_date: date
     payment_status: RentalPaymentStatusEnum
     rental_status: RentalStatusEnum

     house: Optional[HouseResponse] = None
     tenant_name: Optional[str] = None

     model_config = ConfigDict(from_attributes=True)


class RentalCreateResponse(BaseModel):
     message: str
     rental: RentalResponse


class RentalEnvelope(BaseModel):
     rental: RentalResponse


class RentedTenantResponse(BaseModel):
     """A tenant with an active rental and the house they occupy."""
     id: int
     name: str
     email: str
     house_no: Optional[str] = None
