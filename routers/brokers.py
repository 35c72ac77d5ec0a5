# routers/brokers.py
"""
Broker API routes: registration, referral tree, wallet and transactions.
"""
from typing import List

from fastapi import APIRouter, Depends, status

from dependencies import get_stores, require_admin, verify_token
from schemas.broker import BrokerCreate, BrokerResponse, DownlineNode
from schemas.wallet import (
     TransactionListResponse,
     TransactionResponse,
     WalletAdjustment,
     WalletResponse,
)
from services import broker_service, wallet_service
from services.sql_stores import SqlStores

router = APIRouter(prefix="/api/brokers", tags=["brokers"])


def _wallet_response(stores: SqlStores, broker_id: int) -> WalletResponse:
     wallet = wallet_service.get_wallet(stores, broker_id)
     return WalletResponse(
          owner_id=wallet.owner_id,
          direct_sale_balance=wallet.direct_sale_balance,
          downline_sale_balance=wallet.downline_sale_balance,
          total_balance=wallet.total_balance,
          available_balance=wallet_service.available_balance(stores, broker_id)
     )


@router.post(
     "",
     response_model=BrokerResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Register a broker"
)
def create_broker(
     broker_data: BrokerCreate,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     """
     Register a broker.

     - **upline_id**: the referring broker; must already exist
     """
     broker = broker_service.create_broker(stores, **broker_data.model_dump())
     return BrokerResponse.model_validate(broker)


@router.get("", response_model=List[BrokerResponse], summary="List brokers")
def list_brokers(
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     return [BrokerResponse.model_validate(b) for b in stores.brokers.list()]


@router.get("/{broker_id}", response_model=BrokerResponse, summary="Get a broker")
def get_broker(
     broker_id: int,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     return BrokerResponse.model_validate(broker_service.get_broker(stores, broker_id))


@router.get("/{broker_id}/downline", response_model=DownlineNode, summary="Referral tree under a broker")
def get_downline(
     broker_id: int,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     return broker_service.downline_tree(stores, broker_id)


@router.get("/{broker_id}/wallet", response_model=WalletResponse, summary="Wallet balances")
def get_wallet(
     broker_id: int,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     """Direct-sale, downline-sale and total balances plus what is available to withdraw."""
     return _wallet_response(stores, broker_id)


@router.get("/{broker_id}/transactions", response_model=TransactionListResponse, summary="Wallet transactions")
def list_transactions(
     broker_id: int,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     broker_service.get_broker(stores, broker_id)
     transactions = stores.transactions.for_owner(broker_id)
     return TransactionListResponse(
          transactions=[TransactionResponse.model_validate(t) for t in transactions],
          total=len(transactions)
     )


@router.post(
     "/{broker_id}/wallet/adjustments",
     response_model=TransactionResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Adjust a wallet balance (admin)"
)
def adjust_wallet(
     broker_id: int,
     adjustment: WalletAdjustment,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(require_admin)
):
     """Positive **amount** credits, negative debits; a debit cannot take the bucket below zero."""
     tx = wallet_service.adjust_wallet(
          stores,
          broker_id,
          adjustment.amount,
          adjustment.bucket,
          adjustment.description
     )
     return TransactionResponse.model_validate(tx)
