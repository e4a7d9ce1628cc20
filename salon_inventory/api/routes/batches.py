"""Product batch endpoints: delivery lots, FIFO deduction and expiry tracking."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from salon_inventory.api.dependencies import (
    get_app_settings,
    get_batch_queries_use_case,
    get_create_batches_use_case,
    get_deduct_fifo_use_case,
    get_expiration_sweep_use_case,
)
from salon_inventory.application.dto.requests import CreateBatchesRequest, DeductStockRequest
from salon_inventory.application.dto.responses import (
    BatchListResponse,
    BatchResponse,
    ErrorResponse,
    ExpirationSweepResponse,
    FifoDeductionResponse,
)
from salon_inventory.application.use_cases import (
    BatchQueriesUseCase,
    CreateProductBatchesUseCase,
    DeductStockFifoUseCase,
    UpdateExpirationStatusUseCase,
)
from salon_inventory.config import Settings
from salon_inventory.core.entities import Batch, BatchStatus
from salon_inventory.core.services.expiry_tracker import ExpiryTracker

router = APIRouter(prefix="/api/branches/{branch_id}/batches", tags=["batches"])


def _batch_list(
    batches: list[Batch],
    today: date,
    settings: Settings,
    message: str | None = None,
) -> BatchListResponse:
    tracker = ExpiryTracker.from_settings(settings.inventory)
    return BatchListResponse(
        batches=[BatchResponse.from_entity(b, today, tracker) for b in batches],
        total=len(batches),
        message=message,
    )


@router.get("", response_model=BatchListResponse)
async def list_batches(
    branch_id: str,
    product_id: str | None = None,
    batch_status: BatchStatus | None = Query(default=None, alias="status"),
    queries: BatchQueriesUseCase = Depends(get_batch_queries_use_case),
    settings: Settings = Depends(get_app_settings),
) -> BatchListResponse:
    """List a branch's batches in FIFO draw order."""
    batches = await queries.list_batches(branch_id, product_id=product_id, status=batch_status)
    return _batch_list(batches, date.today(), settings)


@router.post(
    "",
    response_model=BatchListResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_batches(
    branch_id: str,
    request: CreateBatchesRequest,
    use_case: CreateProductBatchesUseCase = Depends(get_create_batches_use_case),
) -> BatchListResponse:
    """Create one active batch per delivered line item."""
    result = await use_case.execute(branch_id, request)
    return use_case.to_response(result)


@router.post(
    "/deduct",
    response_model=FifoDeductionResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def deduct_stock_fifo(
    branch_id: str,
    request: DeductStockRequest,
    use_case: DeductStockFifoUseCase = Depends(get_deduct_fifo_use_case),
) -> FifoDeductionResponse:
    """Deduct stock across batches, soonest expiry first."""
    result = await use_case.execute(branch_id, request)
    return use_case.to_response(result)


@router.post("/expiration-sweep", response_model=ExpirationSweepResponse)
async def expiration_sweep(
    branch_id: str,
    today: date | None = None,
    use_case: UpdateExpirationStatusUseCase = Depends(get_expiration_sweep_use_case),
) -> ExpirationSweepResponse:
    """Mark active batches past their expiration date as expired."""
    result = await use_case.execute(branch_id, today=today)
    return use_case.to_response(result)


@router.get(
    "/expiring",
    response_model=BatchListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def expiring_batches(
    branch_id: str,
    days_ahead: int | None = None,
    today: date | None = None,
    queries: BatchQueriesUseCase = Depends(get_batch_queries_use_case),
    settings: Settings = Depends(get_app_settings),
) -> BatchListResponse:
    """Active batches expiring within the given window."""
    today = today or date.today()
    batches = await queries.expiring(branch_id, days_ahead=days_ahead, today=today)
    return _batch_list(batches, today, settings)


@router.get("/expired", response_model=BatchListResponse)
async def expired_batches(
    branch_id: str,
    today: date | None = None,
    queries: BatchQueriesUseCase = Depends(get_batch_queries_use_case),
    settings: Settings = Depends(get_app_settings),
) -> BatchListResponse:
    """Batches past their expiration date that still hold stock."""
    today = today or date.today()
    batches = await queries.expired(branch_id, today=today)
    return _batch_list(batches, today, settings)
