from typing import Annotated

from fastapi import APIRouter, Depends

from .dependencies import get_class_map
from .models import HealthResponse
from ..classmap.static_map import StaticClassMap

router = APIRouter(tags=["health"])

@router.get("/health", response_model=HealthResponse)
def health(class_map: Annotated[StaticClassMap, Depends(get_class_map)]) -> HealthResponse:
    return HealthResponse(class_map_size=len(class_map), categories=class_map.category_counts())
