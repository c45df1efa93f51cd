from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from lotato.dependencies import Services, get_current_principal, get_services
from lotato.models.principal import Principal
from lotato.models.result import ResultPublish

router = APIRouter(prefix="/api/results", tags=["results"])


@router.get("")
async def list_results(
    draw: Optional[str] = Query(None),
    draw_time: Optional[str] = Query(None, alias="drawTime"),
    draw_date: Optional[date] = Query(None, alias="date"),
    limit: int = Query(50, ge=1),
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    results = await services.results.list_results(draw, draw_time, draw_date, limit)
    return {"results": results, "count": len(results)}


@router.get("/latest")
async def latest_results(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"results": await services.results.latest()}


@router.post("", status_code=status.HTTP_201_CREATED)
async def publish_result(
    body: ResultPublish,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    """Publish the winning lots of one draw. A second publication is a 409."""
    return await services.results.publish(principal, body)
