"""
Intraday trade routes: CRUD, CSV import and CSV export.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request, Response, status

from tradejournal.application.journal.dtos import (
    CreateTradeCommand,
    ExportTradesQuery,
    ImportTradesCommand,
    ListTradesQuery,
    UpdateTradeCommand,
)
from tradejournal.application.journal.trades import (
    MAX_PAGE_SIZE,
    CreateTradeUseCase,
    DeleteTradeUseCase,
    ExportTradesUseCase,
    ImportTradesUseCase,
    ListTradesUseCase,
    UpdateTradeUseCase,
)
from tradejournal.core.config import settings
from tradejournal.domain.journal.entities import User
from tradejournal.interfaces.journal.dependencies import (
    get_create_trade_use_case,
    get_current_user,
    get_delete_trade_use_case,
    get_export_trades_use_case,
    get_import_trades_use_case,
    get_list_trades_use_case,
    get_update_trade_use_case,
)
from tradejournal.interfaces.journal.schemas import (
    ImportTradesRequest,
    ImportTradesResponse,
    MessageResponse,
    Pagination,
    TradeCreateRequest,
    TradeListResponse,
    TradeResponse,
    TradeUpdateRequest,
)
from tradejournal.shared.security.rate_limiting import limiter

router = APIRouter(prefix="/intraday", tags=["intraday"])


@router.get(
    "",
    response_model=TradeListResponse,
    summary="List trades",
    description="Trades newest first, paginated. `all=true` returns every trade.",
)
@limiter.limit(settings.rate_limit_standard)
def list_trades(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=MAX_PAGE_SIZE),
    all: bool = False,
    user: User = Depends(get_current_user),
    use_case: ListTradesUseCase = Depends(get_list_trades_use_case),
) -> TradeListResponse:
    result = use_case.execute(ListTradesQuery(user_id=user.id, page=page, limit=limit, all=all))
    return TradeListResponse(
        data=[TradeResponse.from_entity(t) for t in result.trades],
        pagination=Pagination(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages,
        ),
    )


@router.post(
    "",
    response_model=TradeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log a trade",
)
@limiter.limit(settings.rate_limit_standard)
def create_trade(
    request: Request,
    payload: TradeCreateRequest,
    user: User = Depends(get_current_user),
    use_case: CreateTradeUseCase = Depends(get_create_trade_use_case),
) -> TradeResponse:
    trade = use_case.execute(
        CreateTradeCommand(
            user_id=user.id,
            trade_date=payload.trade_date,
            script=payload.script,
            trade_type=payload.type,
            quantity=payload.quantity,
            buy_price=payload.buy_price,
            sell_price=payload.sell_price,
            charges=payload.charges,
            follow_setup=payload.follow_setup,
            mood=payload.mood,
            remarks=payload.remarks,
        )
    )
    return TradeResponse.from_entity(trade)


@router.post(
    "/import",
    response_model=ImportTradesResponse,
    summary="Import trades from CSV",
    description="Auto-maps CSV columns; valid rows are stored in one transaction.",
)
@limiter.limit(settings.rate_limit_strict)
def import_trades(
    request: Request,
    payload: ImportTradesRequest,
    user: User = Depends(get_current_user),
    use_case: ImportTradesUseCase = Depends(get_import_trades_use_case),
) -> ImportTradesResponse:
    result = use_case.execute(
        ImportTradesCommand(user_id=user.id, content=payload.content, mapping=payload.mapping)
    )
    return ImportTradesResponse(
        imported=result.imported, failed=result.failed, errors=result.errors
    )


@router.get(
    "/export",
    response_class=Response,
    summary="Export trades as CSV",
    responses={200: {"content": {"text/csv": {}}}},
)
@limiter.limit(settings.rate_limit_standard)
def export_trades(
    request: Request,
    period: str = "all",
    start: date | None = None,
    end: date | None = None,
    user: User = Depends(get_current_user),
    use_case: ExportTradesUseCase = Depends(get_export_trades_use_case),
) -> Response:
    result = use_case.execute(
        ExportTradesQuery(user_id=user.id, period=period, start=start, end=end)
    )
    return Response(
        content=result.content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@router.put("/{trade_id}", response_model=TradeResponse, summary="Update a trade")
@limiter.limit(settings.rate_limit_standard)
def update_trade(
    request: Request,
    trade_id: str,
    payload: TradeUpdateRequest,
    user: User = Depends(get_current_user),
    use_case: UpdateTradeUseCase = Depends(get_update_trade_use_case),
) -> TradeResponse:
    trade = use_case.execute(
        UpdateTradeCommand(
            user_id=user.id,
            trade_id=trade_id,
            trade_date=payload.trade_date,
            script=payload.script,
            trade_type=payload.type,
            quantity=payload.quantity,
            buy_price=payload.buy_price,
            sell_price=payload.sell_price,
            charges=payload.charges,
            follow_setup=payload.follow_setup,
            mood=payload.mood,
            remarks=payload.remarks,
        )
    )
    return TradeResponse.from_entity(trade)


@router.delete("/{trade_id}", response_model=MessageResponse, summary="Delete a trade")
@limiter.limit(settings.rate_limit_standard)
def delete_trade(
    request: Request,
    trade_id: str,
    user: User = Depends(get_current_user),
    use_case: DeleteTradeUseCase = Depends(get_delete_trade_use_case),
) -> MessageResponse:
    use_case.execute(user.id, trade_id)
    return MessageResponse(message="Trade deleted successfully")
