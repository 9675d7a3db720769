# models/user.py
import enum

from sqlalchemy import Column, Integer, String, DateTime, Enum, func
from sqlalchemy.orm import relationship
from .base import Base, enum_values


class UserRole(str, enum.Enum):
     """Roles understood by the payment core."""
     ADMIN = "admin"
     TENANT = "tenant"


class User(Base):
     """
     User model - central authentication table.
     Only read here: tenant name on receipts and role for access checks.
     """
     __tablename__ = "users"

     id = Column(Integer, primary_key=True, autoincrement=True)
     name = Column(String(200), nullable=False)
     email = Column(String(255), unique=True, nullable=False, index=True)
     role = Column(
          Enum(UserRole, name="user_role", values_callable=enum_values, create_constraint=True),
          default=UserRole.TENANT,
          nullable=False,
     )
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     rentals = relationship("Rental", back_populates="tenant")

     def __repr__(self):
          return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
