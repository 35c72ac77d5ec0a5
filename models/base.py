# models/base.py
import re
from datetime import datetime, timezone

from sqlalchemy import Numeric
from sqlalchemy.orm import DeclarativeBase, declared_attr


# Shared column types for money and percentages
Money = Numeric(14, 2)
Percentage = Numeric(7, 2)


def utcnow() -> datetime:
     """Naive UTC timestamp truncated to seconds (stable across DB round trips)."""
     return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


class Base(DeclarativeBase):
     """
     Base class for all SQLAlchemy models.
     Provides common configuration and mixins.
     """

     @declared_attr.directive
     def __tablename__(cls) -> str:
          """
          Automatically generate table name from class name.
          Example: WithdrawalRequest -> withdrawal_requests
          """
          name = re.sub(r'(?<!^)(?=[A-Z])', '_', cls.__name__).lower()
          # Pluralize (simple version)
          if name.endswith('y'):
               return name[:-1] + 'ies'
          elif name.endswith('s'):
               return name + 'es'
          return name + 's'
