# schemas/payment.py
"""
Pydantic schemas for the rental payment API.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum


class PaymentMethodEnum(str, Enum):
     CASH = "cash"
     MPESA = "mpesa"


class PaymentStatusEnum(str, Enum):
     PENDING = "pending"
     SUCCESSFUL = "successful"
     FAILED = "failed"


class PaymentCreateRequest(BaseModel):
     """
     Request body for POST /api/payment/add.

     method/month/phone are checked by the payment service so that a bad
     value comes back as a readable 400 instead of a schema error.
     amount is accepted for compatibility but never used.
     """
     rental_id: Optional[int] = Field(None, alias="rentalId", description="Rental being paid")
     method: Optional[str] = Field(None, description="cash or mpesa")
     month: Optional[str] = Field(None, description="Billing month, YYYY-MM")
     phone_number: Optional[str] = Field(None, alias="phoneNumber", description="Mpesa phone number")
     transaction_id: Optional[str] = Field(None, alias="transactionId", max_length=64)
     amount: Optional[Decimal] = Field(None, description="Ignored: the rental amount is charged")

     model_config = ConfigDict(
          populate_by_name=True,
          json_schema_extra={
               "example": {
                    "rentalId": 1,
                    "method": "mpesa",
                    "month": "2025-11",
                    "phoneNumber": "0712345678",
               }
          }
     )


class PaymentResponse(BaseModel):
     """Schema for payment response."""
     id: int
     rental_id: int
     amount: Decimal
     method: PaymentMethodEnum
     phone_number: Optional[str] = None
     transaction_id: Optional[str] = None
     month: str
     status: PaymentStatusEnum
     payment_date: datetime

     # Related data
     tenant_id: Optional[int] = None
     tenant_name: Optional[str] = None
     house_no: Optional[str] = None

     model_config = ConfigDict(
          from_attributes=True,
          json_schema_extra={
               "example": {
                    "id": 12,
                    "rental_id": 1,
                    "amount": 15000.00,
                    "method": "cash",
                    "phone_number": None,
                    "transaction_id": None,
                    "month": "2025-11",
                    "status": "pending",
                    "payment_date": "2025-11-03T09:15:00",
                    "tenant_id": 4,
                    "tenant_name": "Jane Wanjiku",
                    "house_no": "A12",
               }
          }
     )


class PaymentEnvelope(BaseModel):
     payment: PaymentResponse


class PaymentCreateResponse(BaseModel):
     """Response for POST /api/payment/add."""
     payment: PaymentResponse
     outcome: str = Field(..., description="settled or pending_approval")
     message: str


class PaymentListResponse(BaseModel):
     payments: List[PaymentResponse]
