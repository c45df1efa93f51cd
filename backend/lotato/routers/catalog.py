"""Static reference data for the point of sale: draws and bet types."""

from fastapi import APIRouter, Depends

from lotato.dependencies import Services, get_services

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/draws")
async def list_draws(services: Services = Depends(get_services)):
    return {
        "timezone": services.draws.tz.key,
        "draws": [
            {**draw, "open": {slot: services.draws.is_open(draw["draw_id"], slot) for slot in draw["times"]}}
            for draw in services.draws.all()
        ],
    }


@router.get("/bet-types")
async def list_bet_types(services: Services = Depends(get_services)):
    return {"bet_types": [bet_type.to_public() for bet_type in services.catalog.all()]}
