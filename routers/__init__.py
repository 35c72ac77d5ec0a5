# routers/__init__.py
from . import plots, commissions, brokers, withdrawals

__all__ = ["plots", "commissions", "brokers", "withdrawals"]
