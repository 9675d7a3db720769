# services/errors.py
"""
Error taxonomy for the payment core.

Services raise these; main.py maps each family to one HTTP status so the
client can render the right state without guessing.
"""


class PaymentCoreError(Exception):
     """Base class for all expected failures of the payment core."""
     status_code = 500

     def __init__(self, message: str):
          super().__init__(message)
          self.message = message


class ValidationError(PaymentCoreError):
     """Bad or missing input. User-correctable, surfaced verbatim."""
     status_code = 400


class DuplicatePaymentError(ValidationError):
     """A live payment already exists for the rental and month."""
     status_code = 409


class AuthorizationError(PaymentCoreError):
     """Caller is not the owner of the resource or lacks the role."""
     status_code = 403


class Unauthenticated(AuthorizationError):
     status_code = 401


class NotFoundError(PaymentCoreError):
     """Rental or payment absent. Rendered as an empty state."""
     status_code = 404


class RentalNotFound(NotFoundError):
     pass


class PaymentNotFound(NotFoundError):
     pass


class PersistenceError(PaymentCoreError):
     """Storage unavailable. Retried only by the caller's own action."""
     status_code = 503


class DeliveryError(PaymentCoreError):
     """Push delivery failed. Never surfaced; polling covers it."""
