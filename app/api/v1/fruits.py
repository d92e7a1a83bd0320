import logging
from fastapi import APIRouter, Depends, HTTPException, status
from app.api.deps import get_recorder
from app.core.exceptions import FruitConflictError, FruitNotFoundError, FruitValidationError, StorageError
from app.events.recorder import EventRecorder
from app.models.fruit import Fruit
from app.schemas.fruit import FruitAmountRequest, FruitCreateRequest, FruitResponse, FruitUpdateRequest
from app.schemas.response import SuccessResponse
from app.services.fruit_service import (
    create_fruit,
    delete_fruit,
    find_fruit,
    remove_fruit,
    store_fruit,
    update_fruit,
)

router = APIRouter()
log = logging.getLogger("uvicorn")


def _to_response(fruit: Fruit) -> dict:
    return FruitResponse(
        id=fruit.id,
        name=fruit.name,
        description=fruit.description,
        limit=fruit.storage_limit,
        amount=fruit.current_amount,
    ).model_dump(mode="json")


def _raise_for(e: Exception, action: str):
    """Maps fruit service errors onto HTTP errors."""
    if isinstance(e, FruitNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, FruitConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if isinstance(e, FruitValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, StorageError):
        # The fruit write committed but its event could not be recorded
        log.error(f"Event recording failed while trying to {action}: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Event store unavailable.")
    log.error(f"Error trying to {action}: {e}")
    raise HTTPException(status_code=500, detail=f"Server failed to {action}.")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_fruit_endpoint(request_data: FruitCreateRequest, recorder: EventRecorder = Depends(get_recorder)):
    """Creates a fruit with an empty storage."""
    try:
        fruit = await create_fruit(request_data.name, request_data.description, request_data.limit, recorder)
        log.info(f"Fruit {fruit.name} created.")
        return SuccessResponse(data=_to_response(fruit))
    except Exception as e:
        _raise_for(e, "create fruit")


@router.get("/{name}", response_model=SuccessResponse)
async def get_fruit_endpoint(name: str):
    """Fetches a fruit by name."""
    try:
        fruit = await find_fruit(name)
        return SuccessResponse(data=_to_response(fruit))
    except Exception as e:
        _raise_for(e, "fetch fruit")


@router.put("/{name}", response_model=SuccessResponse)
async def update_fruit_endpoint(
    name: str, payload: FruitUpdateRequest, recorder: EventRecorder = Depends(get_recorder)
):
    """Updates description and storage limit."""
    try:
        fruit = await update_fruit(name, payload.description, payload.limit, recorder)
        return SuccessResponse(data=_to_response(fruit))
    except Exception as e:
        _raise_for(e, "update fruit")


@router.post("/{name}/store", response_model=SuccessResponse)
async def store_fruit_endpoint(
    name: str, payload: FruitAmountRequest, recorder: EventRecorder = Depends(get_recorder)
):
    """Adds fruits to storage, up to the limit."""
    try:
        fruit = await store_fruit(name, payload.amount, recorder)
        return SuccessResponse(data=_to_response(fruit))
    except Exception as e:
        _raise_for(e, "store fruit")


@router.post("/{name}/remove", response_model=SuccessResponse)
async def remove_fruit_endpoint(
    name: str, payload: FruitAmountRequest, recorder: EventRecorder = Depends(get_recorder)
):
    """Takes fruits out of storage."""
    try:
        fruit = await remove_fruit(name, payload.amount, recorder)
        return SuccessResponse(data=_to_response(fruit))
    except Exception as e:
        _raise_for(e, "remove fruit")


@router.delete("/{name}", response_model=SuccessResponse)
async def delete_fruit_endpoint(
    name: str, force: bool = False, recorder: EventRecorder = Depends(get_recorder)
):
    """Deletes a fruit. Non-empty storage requires ?force=true."""
    try:
        fruit = await delete_fruit(name, force, recorder)
        return SuccessResponse(message=f"Fruit {fruit.name} deleted.", data={"name": fruit.name, "deleted": True})
    except Exception as e:
        _raise_for(e, "delete fruit")
