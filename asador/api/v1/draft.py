"""
Draft sale routes
The sale being assembled for the caller's session
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...core.error_handler import create_success_response
from ...core.exceptions import ValidationError
from ...models.sale import DraftResult
from ...schemas.draft import AddItemRequest, DraftMutationResponse, DraftView, SaveDraftRequest
from ...services.draft_sale import DraftSaleEngine
from ...services.sale_service import SaleService
from ..deps import get_draft, get_sale_service

router = APIRouter()


def _view(draft: DraftSaleEngine) -> DraftView:
    items = draft.snapshot()
    return DraftView(
        items=items,
        total_cents=draft.total_cents,
        item_count=sum(line.quantity for line in items),
    )


def _mutation_response(draft: DraftSaleEngine, result: DraftResult):
    body = DraftMutationResponse(
        draft=_view(draft),
        line=result.line,
        removed=result.removed,
        notices=result.notices,
    )
    return create_success_response(data=body.model_dump(mode="json"))


@router.get("")
def get_current_draft(draft: DraftSaleEngine = Depends(get_draft)):
    return create_success_response(data=_view(draft).model_dump(mode="json"))


@router.post("/items")
def add_item(req: AddItemRequest, draft: DraftSaleEngine = Depends(get_draft)):
    result = draft.add_item(req.item_id, req.category_id,
                            amount_cents=req.amount_cents, option_name=req.option_name)
    return _mutation_response(draft, result)


@router.post("/items/{line_id}/increment")
def increment_item(line_id: str, draft: DraftSaleEngine = Depends(get_draft)):
    return _mutation_response(draft, draft.increment_item(line_id))


@router.post("/items/{line_id}/decrement")
def decrement_item(line_id: str, draft: DraftSaleEngine = Depends(get_draft)):
    return _mutation_response(draft, draft.decrement_item(line_id))


@router.delete("/items/{line_id}")
def remove_item(line_id: str, draft: DraftSaleEngine = Depends(get_draft)):
    return _mutation_response(draft, draft.remove_item(line_id))


@router.delete("")
def clear_draft(confirm: bool = Query(False, description="Required when the draft has items"),
                draft: DraftSaleEngine = Depends(get_draft)):
    """Empty the draft; a non-empty draft needs confirm=true"""
    if not draft.is_empty and not confirm:
        raise ValidationError("Clearing a non-empty sale requires confirmation",
                              {"item_count": len(draft.items)})
    draft.clear()
    return create_success_response(data=_view(draft).model_dump(mode="json"), message="Sale cleared")


@router.post("/save")
def save_draft(req: Optional[SaveDraftRequest] = None,
               draft: DraftSaleEngine = Depends(get_draft),
               service: SaleService = Depends(get_sale_service)):
    """Save the draft as an active sale; the draft is cleared only once the sale is stored"""
    fee = req.delivery_fee_cents if req else 0
    sale = service.create_sale(draft, delivery_fee_cents=fee)
    draft.clear()
    return create_success_response(data=sale.model_dump(mode="json", by_alias=True), message="Sale saved")
