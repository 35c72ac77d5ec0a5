# routers/commissions.py
"""
Commission API routes.

Distribution normally happens inside the payment that sells a plot; these
endpoints expose the same operations for maintenance:
- POST /distribute: distribute a sold plot's pending commission (no-op if paid)
- POST /reconcile: repair derived totals, sell at threshold, distribute
- POST /reconcile-all: sweep every booked / pending plot
- GET /breakdown: per-level amounts for a plot total
"""
from decimal import Decimal

from fastapi import APIRouter, Depends, Query

from config import CommissionPolicy
from dependencies import get_policy, get_stores, require_admin, verify_token
from schemas.commission import (
     BreakdownResponse,
     DistributionResponse,
     LegacyPlotRef,
     PlotRef,
     ReconcileAllResponse,
     ReconcileResponse,
)
from services import commission_service, reconciliation_service
from services.sql_stores import SqlStores

router = APIRouter(prefix="/api/commissions", tags=["commissions"])

# Old maintenance caller posts {"plotId": ...} here
legacy_router = APIRouter(prefix="/api", tags=["commissions"])


def _reconcile_response(result) -> ReconcileResponse:
     return ReconcileResponse.model_validate(result, from_attributes=True)


@router.post("/distribute", response_model=DistributionResponse, summary="Distribute commission for a sold plot")
def distribute(
     body: PlotRef,
     stores: SqlStores = Depends(get_stores),
     policy: CommissionPolicy = Depends(get_policy),
     token: dict = Depends(require_admin)
):
     """
     Credit the selling broker and upline for a sold plot.

     Safe to call repeatedly: a plot whose commission is already paid returns
     **already_distributed** = true and changes nothing.
     """
     result = commission_service.distribute_commission(stores, body.plot_id, policy)
     return DistributionResponse.model_validate(result, from_attributes=True)


@router.post("/reconcile", response_model=ReconcileResponse, summary="Reconcile one plot")
def reconcile(
     body: PlotRef,
     stores: SqlStores = Depends(get_stores),
     policy: CommissionPolicy = Depends(get_policy),
     token: dict = Depends(require_admin)
):
     return _reconcile_response(reconciliation_service.reconcile(stores, body.plot_id, policy))


@router.post("/reconcile-all", response_model=ReconcileAllResponse, summary="Reconcile all open plots")
def reconcile_all(
     stores: SqlStores = Depends(get_stores),
     policy: CommissionPolicy = Depends(get_policy),
     token: dict = Depends(require_admin)
):
     """Per-plot failures are reported in **failures** and do not stop the sweep."""
     summary = reconciliation_service.reconcile_all(stores, policy)
     return ReconcileAllResponse.model_validate(summary, from_attributes=True)


@router.get("/breakdown", response_model=BreakdownResponse, summary="Commission per level for a total")
def breakdown(
     total: Decimal = Query(..., gt=0, description="Total plot amount"),
     policy: CommissionPolicy = Depends(get_policy),
     token: dict = Depends(verify_token)
):
     return commission_service.commission_breakdown(total, policy)


@legacy_router.post(
     "/recalculate-commission",
     response_model=ReconcileResponse,
     summary="Recalculate commission (idempotent reconcile)"
)
def recalculate_commission(
     body: LegacyPlotRef,
     stores: SqlStores = Depends(get_stores),
     policy: CommissionPolicy = Depends(get_policy),
     token: dict = Depends(require_admin)
):
     """Same as POST /api/commissions/reconcile; never pays a plot twice."""
     return _reconcile_response(reconciliation_service.reconcile(stores, body.plot_id, policy))
