# utils/payment_client.py
"""
HTTP client for the tenant side of the payment API.

Used by the reconciliation poll to re-read a payment by id.
"""
import asyncio
import os
from typing import Optional

import requests
from dotenv import load_dotenv

load_dotenv()

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:10000/api")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "10"))


class PaymentClientError(Exception):
     def __init__(self, message: str, status_code: Optional[int] = None):
          super().__init__(message)
          self.status_code = status_code


class PaymentClient:
     def __init__(
          self,
          token: str,
          base_url: str = API_BASE_URL,
          timeout: float = API_TIMEOUT_SECONDS,
          session: Optional[requests.Session] = None,
     ):
          self.base_url = base_url.rstrip("/")
          self.timeout = timeout
          self.session = session or requests.Session()
          self.session.headers.update({"Authorization": f"Bearer {token}"})

     def get_payment(self, payment_id: int) -> dict:
          try:
               response = self.session.get(
                    f"{self.base_url}/payment/{payment_id}",
                    timeout=self.timeout,
               )
          except requests.RequestException as e:
               raise PaymentClientError(f"Payment service unreachable: {e}") from e

          if response.status_code != 200:
               raise PaymentClientError(
                    f"Payment lookup failed: {response.text}",
                    status_code=response.status_code,
               )
          return response.json()["payment"]

     async def fetch_payment(self, payment_id: int) -> dict:
          """Async wrapper so the poll loop never blocks the event loop."""
          return await asyncio.to_thread(self.get_payment, payment_id)
