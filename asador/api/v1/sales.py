"""
Sale lifecycle routes
Active and closed sales: list, close, reopen, delete
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...config import settings
from ...core.error_handler import create_success_response
from ...core.security import require_session
from ...models.sale import PersistedSale
from ...schemas.sale import CloseSaleRequest
from ...services.sale_service import SaleService
from ..deps import get_sale_service

router = APIRouter(dependencies=[Depends(require_session)])


def _dump_sale(sale: PersistedSale) -> dict:
    """Sale payload; the breakdown keeps the method names it is posted with"""
    return sale.model_dump(mode="json", by_alias=True)


def _dump(sales: List[PersistedSale]) -> list:
    return [_dump_sale(sale) for sale in sales]


@router.get("/active")
def list_active_sales(service: SaleService = Depends(get_sale_service)):
    return create_success_response(data=_dump(service.list_active()))


@router.get("/closed")
def list_closed_sales(limit: Optional[int] = Query(None, ge=1, le=1000),
                      service: SaleService = Depends(get_sale_service)):
    return create_success_response(data=_dump(service.list_closed(limit or settings.closed_sales_limit)))


@router.post("/active/{sale_id}/close")
def close_sale(sale_id: str, req: CloseSaleRequest, service: SaleService = Depends(get_sale_service)):
    """
    Close an active sale

    The breakdown must add up to the sale total plus tip; a mismatch returns
    422 with the signed remaining amount and nothing is written.
    """
    sale = service.close_sale(sale_id, req.payment_breakdown, tip_cents=req.tip_cents)
    return create_success_response(data=_dump_sale(sale), message="Sale closed")


@router.post("/closed/{sale_id}/reopen")
def reopen_sale(sale_id: str, service: SaleService = Depends(get_sale_service)):
    sale = service.reopen_sale(sale_id)
    return create_success_response(data=_dump_sale(sale), message="Sale reopened")


@router.delete("/active/{sale_id}")
def delete_active_sale(sale_id: str, service: SaleService = Depends(get_sale_service)):
    service.delete_active(sale_id)
    return create_success_response(data={"id": sale_id, "partition": "active"}, message="Sale deleted")


@router.delete("/closed/{sale_id}")
def delete_closed_sale(sale_id: str, service: SaleService = Depends(get_sale_service)):
    service.delete_closed(sale_id)
    return create_success_response(data={"id": sale_id, "partition": "closed"}, message="Sale deleted")


@router.delete("/{sale_id}")
def delete_sale(sale_id: str, service: SaleService = Depends(get_sale_service)):
    partition = service.delete_sale(sale_id)
    return create_success_response(data={"id": sale_id, "partition": partition}, message="Sale deleted")
