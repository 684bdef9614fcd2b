from fastapi import APIRouter, Depends

from api.dependencies.runtime import get_territory_service
from api.helpers import DOMAIN_ERRORS, to_http_exception
from api.schemas.territory import TerritoryResponse
from tools.walks import TerritoryService

router = APIRouter(prefix="/api/territory", tags=["territory"])


@router.get("/{dog_id}", response_model=TerritoryResponse)
async def get_territory(
    dog_id: str,
    service: TerritoryService = Depends(get_territory_service),
):
    """
    Накопленная территория собаки для отрисовки на карте.

    Пустая территория отдаётся с нулевой площадью и geojson=None.
    """
    try:
        territory = await service.get_territory(dog_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)

    return TerritoryResponse(
        dog_id=dog_id,
        area_km2=territory.area_km2,
        polygons_count=len(territory.polygons),
        geojson=None if territory.is_empty else territory.to_geojson(),
    )
