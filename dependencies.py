# dependencies.py
"""
Shared FastAPI dependencies: token auth, role check, stores and policy.
"""
import os
from typing import Generator

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from dotenv import load_dotenv

from config import CommissionPolicy, get_commission_policy
from database import get_session
from services.sql_stores import SqlStores

load_dotenv()
SECRET_KEY = os.getenv("JWT_SECRET")
ALGORITHM = "HS256"


# Token Auth Dependency
def verify_token(request: Request) -> dict:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
     token = auth.split(" ")[1]
     try:
          payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
          return payload
     except JWTError:
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")


def require_admin(token: dict = Depends(verify_token)) -> dict:
     """Only admins may move money by hand (withdrawals, adjustments, reconciliation)."""
     if token.get("role") != "admin":
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
     return token


def get_stores(db: Session = Depends(get_session)) -> Generator[SqlStores, None, None]:
     yield SqlStores(db)


def get_policy() -> CommissionPolicy:
     return get_commission_policy()
