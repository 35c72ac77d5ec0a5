# routers/withdrawals.py
"""
Withdrawal request API routes.

Brokers request, admins approve (with a payment type) or reject (with a
reason). Only pending requests can be processed.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from dependencies import get_stores, require_admin, verify_token
from models import WithdrawalStatus
from schemas.withdrawal import (
     WithdrawalCreate,
     WithdrawalListResponse,
     WithdrawalProcess,
     WithdrawalResponse,
)
from services import wallet_service
from services.sql_stores import SqlStores

router = APIRouter(prefix="/api/withdrawals", tags=["withdrawals"])


@router.post(
     "",
     response_model=WithdrawalResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Request a withdrawal"
)
def request_withdrawal(
     body: WithdrawalCreate,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     """Amount cannot exceed total balance minus other pending requests."""
     request = wallet_service.request_withdrawal(stores, body.broker_id, body.amount, body.note)
     return WithdrawalResponse.model_validate(request)


@router.get("", response_model=WithdrawalListResponse, summary="List withdrawal requests")
def list_withdrawals(
     status: Optional[WithdrawalStatus] = Query(None, description="Filter by status"),
     broker_id: Optional[int] = Query(None, description="Filter by broker"),
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     requests = stores.withdrawals.list(status=status, broker_id=broker_id)
     return WithdrawalListResponse(
          requests=[WithdrawalResponse.model_validate(r) for r in requests],
          total=len(requests)
     )


@router.post("/{request_id}/process", response_model=WithdrawalResponse, summary="Approve or reject (admin)")
def process_withdrawal(
     request_id: int,
     body: WithdrawalProcess,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(require_admin)
):
     """
     - **approve**: requires **payment_type**; debits direct-sale balance first, then downline
     - **reject**: requires **rejection_reason**; balances untouched
     """
     request = wallet_service.process_withdrawal(
          stores,
          request_id,
          body.action.value,
          processed_by=str(token.get("id")),
          payment_type=body.payment_type,
          rejection_reason=body.rejection_reason
     )
     return WithdrawalResponse.model_validate(request)
