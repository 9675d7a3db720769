# dependencies.py
"""
Auth collaborator: turns a Bearer JWT into a request-scoped principal.

The principal is passed explicitly into every core operation instead of
being read from ambient state.
"""
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from dotenv import load_dotenv

from models import UserRole

load_dotenv()
SECRET_KEY = os.getenv("JWT_SECRET", "")
ALGORITHM = "HS256"


@dataclass(frozen=True)
class RequestContext:
     """Authenticated principal of the current request."""
     user_id: int
     role: UserRole

     @property
     def is_admin(self) -> bool:
          return self.role == UserRole.ADMIN

     def can_access_tenant(self, tenant_id: int) -> bool:
          return self.is_admin or self.user_id == tenant_id


def create_access_token(user_id: int, role: str, expires_in: Optional[timedelta] = None) -> str:
     claims = {"id": user_id, "role": role}
     if expires_in is not None:
          claims["exp"] = datetime.now(timezone.utc) + expires_in
     return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> RequestContext:
     """
     Decode a JWT into a RequestContext.

     Raises:
          JWTError: signature invalid, token expired, or claims malformed
     """
     payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
     try:
          return RequestContext(user_id=int(payload["id"]), role=UserRole(payload.get("role", "tenant")))
     except (KeyError, TypeError, ValueError) as e:
          raise JWTError(f"Malformed token claims: {e}") from e


# Token Auth Dependency
def verify_token(request: Request) -> RequestContext:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
     token = auth.split(" ")[1]
     try:
          return decode_token(token)
     except JWTError:
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")


def require_admin(ctx: RequestContext = Depends(verify_token)) -> RequestContext:
     if not ctx.is_admin:
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied, admins only")
     return ctx
