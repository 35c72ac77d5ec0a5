# routers/plots.py
"""
Plot API routes.

Inventory, booking lifecycle and the per-plot payment history:
- available -> booked (POST /{id}/booking)
- booked -> available (POST /{id}/cancel, only below the cancellation lock)
- booked -> sold happens when a payment crosses the sale threshold

PATCH /{id} edits descriptive fields only; POST /bulk adds a numbered run of plots.
"""
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from config import CommissionPolicy
from dependencies import get_policy, get_stores, require_admin, verify_token
from models import PlotStatus
from schemas.commission import DistributionResponse
from schemas.payment import (
     PaymentCreate,
     PaymentHistoryResponse,
     PaymentRecordResponse,
     PaymentResponse,
     VerificationResponse,
)
from schemas.plot import (
     BookingRequest,
     BookingResponse,
     BulkAddResponse,
     DeletableResponse,
     PlotCreate,
     PlotBulkCreate,
     PlotListResponse,
     PlotResponse,
     PlotUpdate,
)
from services import ledger_service, plot_service
from services.sql_stores import SqlStores

router = APIRouter(prefix="/api/plots", tags=["plots"])


def _distribution(result) -> Optional[DistributionResponse]:
     if result is None:
          return None
     return DistributionResponse.model_validate(result, from_attributes=True)


@router.post(
     "",
     response_model=PlotResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Add a plot to the inventory"
)
def create_plot(
     plot_data: PlotCreate,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     """
     Create an available plot.

     - **project_name** / **plot_number**: unique together (409 on duplicate)
     - **plot_type**, **block**, **dimension**, **area**: descriptive, optional
     """
     plot = plot_service.create_plot(stores, **plot_data.model_dump())
     return PlotResponse.model_validate(plot)


@router.post(
     "/bulk",
     response_model=BulkAddResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Add a run of plots to a project"
)
def bulk_add_plots(
     body: PlotBulkCreate,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(require_admin)
):
     """
     Add **count** available plots numbered upward from **starting_number**.

     Numbers already taken in the project are skipped (listed in
     **skipped_numbers**), so exactly **count** plots are added.
     """
     plots, skipped = plot_service.bulk_add_plots(stores, **body.model_dump())
     return BulkAddResponse(
          plots=[PlotResponse.model_validate(p) for p in plots],
          added=len(plots),
          skipped_numbers=skipped
     )


@router.get(
     "",
     response_model=PlotListResponse,
     summary="List plots with filters"
)
def list_plots(
     status: Optional[PlotStatus] = Query(None, description="Filter by status"),
     broker_id: Optional[int] = Query(None, description="Filter by selling broker"),
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     plots = stores.plots.list(status=status, broker_id=broker_id)
     return PlotListResponse(
          plots=[PlotResponse.model_validate(p) for p in plots],
          total=len(plots)
     )


@router.get("/{plot_id}", response_model=PlotResponse, summary="Get a plot")
def get_plot(
     plot_id: int,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     return PlotResponse.model_validate(plot_service.get_plot(stores, plot_id))


@router.patch("/{plot_id}", response_model=PlotResponse, summary="Edit plot details")
def update_plot(
     plot_id: int,
     plot_data: PlotUpdate,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     """
     Edit **plot_type**, **block**, **dimension** or **area**.

     Only provided fields are updated. Buyer, broker, amounts and status are
     not accepted here (422); they change through booking, payments and cancel.
     """
     plot = plot_service.update_plot(stores, plot_id, **plot_data.model_dump(exclude_unset=True))
     return PlotResponse.model_validate(plot)


@router.get("/{plot_id}/deletable", response_model=DeletableResponse, summary="Check if a plot can be deleted")
def check_deletable(
     plot_id: int,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     allowed, reason = plot_service.can_delete_plot(stores, plot_id)
     return DeletableResponse(plot_id=plot_id, can_delete=allowed, reason=reason)


@router.delete("/{plot_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete an available plot")
def delete_plot(
     plot_id: int,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     """Only available plots with no payment history or transactions can be deleted."""
     plot_service.delete_plot(stores, plot_id)


@router.post(
     "/{plot_id}/booking",
     response_model=BookingResponse,
     summary="Book an available plot"
)
def book_plot(
     plot_id: int,
     booking: BookingRequest,
     stores: SqlStores = Depends(get_stores),
     policy: CommissionPolicy = Depends(get_policy),
     token: dict = Depends(verify_token)
):
     """
     Book a plot for a buyer.

     - **total_plot_amount**: full sale price
     - **booking_amount**: paid at booking; counts toward paid percentage
     - **broker_id**: selling broker (receives direct commission on sale)

     A booking amount at or above the sale threshold sells the plot at once.
     """
     outcome = plot_service.book_plot(
          stores,
          plot_id,
          buyer_name=booking.buyer_name,
          total_amount=booking.total_plot_amount,
          booking_amount=booking.booking_amount,
          broker_id=booking.broker_id,
          policy=policy
     )
     return BookingResponse(
          plot=PlotResponse.model_validate(outcome.plot),
          sold_now=outcome.sold_now,
          distribution=_distribution(outcome.distribution)
     )


@router.post("/{plot_id}/cancel", response_model=PlotResponse, summary="Cancel a booking")
def cancel_booking(
     plot_id: int,
     stores: SqlStores = Depends(get_stores),
     policy: CommissionPolicy = Depends(get_policy),
     token: dict = Depends(verify_token)
):
     """Rejected with 409 once the paid percentage reaches the cancellation lock."""
     return PlotResponse.model_validate(plot_service.cancel_booking(stores, plot_id, policy))


@router.get("/{plot_id}/payments", response_model=PaymentHistoryResponse, summary="Payment history of a plot")
def list_payments(
     plot_id: int,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     plot_service.get_plot(stores, plot_id)
     payments = stores.plots.payments(plot_id)
     return PaymentHistoryResponse(
          plot_id=plot_id,
          payments=[PaymentRecordResponse.model_validate(p) for p in payments],
          total_received=sum((Decimal(p.amount_received) for p in payments), Decimal("0.00"))
     )


@router.post(
     "/{plot_id}/payments",
     response_model=PaymentResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Record a payment"
)
def add_payment(
     plot_id: int,
     payment: PaymentCreate,
     stores: SqlStores = Depends(get_stores),
     policy: CommissionPolicy = Depends(get_policy),
     token: dict = Depends(verify_token)
):
     """
     Record a payment against a booked plot.

     Rejects amounts above the remaining balance (400) and non-booked plots (409).
     If the payment crosses the sale threshold the plot is sold and commission
     distributed in the same transaction; see **distribution** in the response.
     """
     outcome = ledger_service.append_payment(
          stores,
          plot_id,
          payment.amount,
          payment_date=payment.payment_date,
          payment_method=payment.payment_method,
          reference=payment.reference,
          notes=payment.notes,
          policy=policy
     )
     return PaymentResponse(
          payment=PaymentRecordResponse.model_validate(outcome.payment),
          plot=PlotResponse.model_validate(outcome.plot),
          sold_now=outcome.sold_now,
          distribution=_distribution(outcome.distribution)
     )


@router.get(
     "/{plot_id}/payments/verify",
     response_model=VerificationResponse,
     summary="Verify a plot's payment chain"
)
def verify_payments(
     plot_id: int,
     stores: SqlStores = Depends(get_stores),
     token: dict = Depends(verify_token)
):
     """Recomputes every payment hash and checks the stored totals against the records."""
     verified, message = ledger_service.verify_payment_history(stores, plot_id)
     return VerificationResponse(plot_id=plot_id, verified=verified, message=message)
