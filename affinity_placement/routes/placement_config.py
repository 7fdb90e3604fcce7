from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from affinity_placement.errors import PlacementConfigError
from affinity_placement.logger import get_logger
from affinity_placement.schemas.placement_config import (
    PlacementConfigErrorOut,
    PlacementConfigOut,
    PlacementConfigValidationOut,
)
from affinity_placement.services import placement_config as placement_config_service
from affinity_placement.services.placement_config import PlacementConfigStore, get_store

router = APIRouter(
    prefix="/placement-config",
    tags=["placement-config"],
    responses={400: {"model": PlacementConfigErrorOut}},
)
_logger = get_logger("api.placement_config")


@router.get("", response_model=PlacementConfigOut)
async def get_placement_config(
    store: PlacementConfigStore = Depends(get_store),
) -> PlacementConfigOut:
    return PlacementConfigOut.from_config(store.get())


@router.put("", response_model=PlacementConfigOut)
async def put_placement_config(
    document: Any = Body(...),
    store: PlacementConfigStore = Depends(get_store),
) -> PlacementConfigOut:
    config = placement_config_service.parse_document(document)
    store.set(config)
    return PlacementConfigOut.from_config(config)


@router.post("/validate", response_model=PlacementConfigValidationOut)
async def validate_placement_config(
    document: Any = Body(...),
) -> PlacementConfigValidationOut:
    try:
        placement_config_service.parse_document(document).validate()
    except PlacementConfigError as exc:
        _logger.info("placement_config.rejected", "Rejected placement config", reason=exc.message)
        raise
    return PlacementConfigValidationOut(valid=True)


@router.delete("", response_model=PlacementConfigOut)
async def reset_placement_config(
    store: PlacementConfigStore = Depends(get_store),
) -> PlacementConfigOut:
    return PlacementConfigOut.from_config(store.reset())
