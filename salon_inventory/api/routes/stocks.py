"""Stock ledger endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from salon_inventory.api.dependencies import (
    get_add_stock_use_case,
    get_reduce_stock_use_case,
    get_stock_queries_use_case,
    get_update_stock_use_case,
)
from salon_inventory.application.dto.requests import (
    AddStockRequest,
    ReduceStockRequest,
    UpdateStockRequest,
)
from salon_inventory.application.dto.responses import (
    ErrorResponse,
    InventoryStatsResponse,
    MovementListResponse,
    MovementResponse,
    StockChangeResponse,
    StockListResponse,
    StockResponse,
)
from salon_inventory.application.use_cases import (
    AddStockUseCase,
    ReduceStockUseCase,
    StockQueriesUseCase,
    UpdateStockUseCase,
)
from salon_inventory.core.entities import MovementType, StockStatus

router = APIRouter(prefix="/api", tags=["stocks"])


@router.get("/branches/{branch_id}/stocks", response_model=StockListResponse)
async def list_branch_stocks(
    branch_id: str,
    stock_status: StockStatus | None = Query(default=None, alias="status"),
    category: str | None = None,
    order_by: str = "product_name",
    order_direction: Literal["asc", "desc"] = "asc",
    queries: StockQueriesUseCase = Depends(get_stock_queries_use_case),
) -> StockListResponse:
    """List a branch's stock records with optional status and category filters."""
    stocks = await queries.list_stocks(
        branch_id,
        status=stock_status,
        category=category,
        order_by=order_by,
        order_direction=order_direction,
    )
    return StockListResponse(
        stocks=[StockResponse.from_entity(s) for s in stocks],
        total=len(stocks),
    )


@router.post(
    "/branches/{branch_id}/stocks",
    response_model=StockChangeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def add_stock(
    branch_id: str,
    request: AddStockRequest,
    use_case: AddStockUseCase = Depends(get_add_stock_use_case),
) -> StockChangeResponse:
    """Stock-in: create or increment the ledger record and log the movement."""
    result = await use_case.execute(branch_id, request)
    return use_case.to_response(result)


@router.post(
    "/branches/{branch_id}/stocks/reduce",
    response_model=StockChangeResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def reduce_stock(
    branch_id: str,
    request: ReduceStockRequest,
    use_case: ReduceStockUseCase = Depends(get_reduce_stock_use_case),
) -> StockChangeResponse:
    """Stock-out straight from the ledger, clamped at zero."""
    result = await use_case.execute(branch_id, request)
    return use_case.to_response(result)


@router.get(
    "/stocks/{stock_id}",
    response_model=StockResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_stock(
    stock_id: str,
    queries: StockQueriesUseCase = Depends(get_stock_queries_use_case),
) -> StockResponse:
    """Get one stock record."""
    stock = await queries.get_stock(stock_id)
    return StockResponse.from_entity(stock)


@router.patch(
    "/stocks/{stock_id}",
    response_model=StockResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_stock(
    stock_id: str,
    request: UpdateStockRequest,
    use_case: UpdateStockUseCase = Depends(get_update_stock_use_case),
) -> StockResponse:
    """Patch thresholds, cost or location of a stock record."""
    stock = await use_case.execute(stock_id, request)
    return use_case.to_response(stock)


@router.get("/branches/{branch_id}/movements", response_model=MovementListResponse)
async def list_movements(
    branch_id: str,
    movement_type: MovementType | None = Query(default=None, alias="type"),
    product_id: str | None = None,
    limit: int | None = None,
    queries: StockQueriesUseCase = Depends(get_stock_queries_use_case),
) -> MovementListResponse:
    """List a branch's movements, newest first."""
    movements = await queries.list_movements(
        branch_id,
        movement_type=movement_type,
        product_id=product_id,
        limit=limit,
    )
    return MovementListResponse(
        movements=[MovementResponse.from_entity(m) for m in movements],
        total=len(movements),
    )


@router.get("/branches/{branch_id}/stats", response_model=InventoryStatsResponse)
async def inventory_stats(
    branch_id: str,
    queries: StockQueriesUseCase = Depends(get_stock_queries_use_case),
) -> InventoryStatsResponse:
    """Aggregate counts and value of a branch's stock."""
    stats = await queries.stats(branch_id)
    return InventoryStatsResponse(
        branch_id=branch_id,
        total_products=stats.total_products,
        total_value=stats.total_value,
        in_stock_count=stats.in_stock_count,
        low_stock_count=stats.low_stock_count,
        out_of_stock_count=stats.out_of_stock_count,
    )
