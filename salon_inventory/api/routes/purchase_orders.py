"""Purchase order delivery endpoint."""

from fastapi import APIRouter, Depends

from salon_inventory.api.dependencies import get_receive_delivery_use_case
from salon_inventory.application.dto.requests import DeliverPurchaseOrderRequest
from salon_inventory.application.dto.responses import DeliveryResponse, ErrorResponse
from salon_inventory.application.use_cases import ReceivePurchaseOrderDeliveryUseCase

router = APIRouter(prefix="/api/purchase-orders", tags=["purchase-orders"])


@router.post(
    "/{purchase_order_id}/deliver",
    response_model=DeliveryResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def deliver_purchase_order(
    purchase_order_id: str,
    request: DeliverPurchaseOrderRequest,
    use_case: ReceivePurchaseOrderDeliveryUseCase = Depends(get_receive_delivery_use_case),
) -> DeliveryResponse:
    """
    Receive a purchase order delivery.

    Creates one batch per line item, stocks the ledger and marks the
    order Delivered. Every line item needs an expiration date.
    """
    result = await use_case.execute(purchase_order_id, request)
    return use_case.to_response(result)
