from tortoise.transactions import in_transaction
from typing import List, Optional
from app.core.exceptions import FruitConflictError, FruitNotFoundError, FruitValidationError
from app.events.domain import DomainEvent, FruitCreated, FruitDeleted, FruitUpdated
from app.events.recorder import EventRecorder
from app.models.fruit import Fruit

NAME_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 30


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise FruitValidationError("Fruit name cannot be empty")
    if len(name) > NAME_MAX_LENGTH:
        raise FruitValidationError(f"Fruit name must be between 1 and {NAME_MAX_LENGTH} characters")
    return name


def _check_description(description: str) -> str:
    if not description:
        raise FruitValidationError("Description cannot be empty")
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise FruitValidationError(f"Description cannot be longer than {DESCRIPTION_MAX_LENGTH} characters")
    return description


def _check_quantity(value: int, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise FruitValidationError(f"{label} must be an integer")
    if value < 0:
        raise FruitValidationError(f"{label} cannot be negative")
    return value


async def _record(recorder: EventRecorder, events: List[DomainEvent]) -> None:
    # Only called once the fruit write has committed
    await recorder.record_all(events)


async def create_fruit(name: str, description: str, limit: int, recorder: EventRecorder) -> Fruit:
    """Creates a fruit with nothing stored and records FruitCreated."""
    name = _clean_name(name)
    description = _check_description(description)
    limit = _check_quantity(limit, "Limit")

    async with in_transaction() as conn:
        if await Fruit.filter(name=name).using_db(conn).exists():
            raise FruitConflictError(f"A fruit with the name '{name}' already exists")
        fruit = await Fruit.create(
            name=name,
            description=description,
            storage_limit=limit,
            current_amount=0,
            using_db=conn,
        )

    await _record(recorder, [FruitCreated(fruit)])
    return fruit


async def get_fruit_by_name(name: str) -> Optional[Fruit]:
    return await Fruit.get_or_none(name=_clean_name(name))


async def find_fruit(name: str) -> Fruit:
    fruit = await get_fruit_by_name(name)
    if not fruit:
        raise FruitNotFoundError(f"Fruit '{name}' not found")
    return fruit


async def update_fruit(name: str, description: str, limit: int, recorder: EventRecorder) -> Fruit:
    """Updates description and storage limit; the limit may not drop below what is stored."""
    name = _clean_name(name)
    description = _check_description(description)
    limit = _check_quantity(limit, "Limit")

    async with in_transaction() as conn:
        fruit = await Fruit.filter(name=name).using_db(conn).select_for_update().first()
        if not fruit:
            raise FruitNotFoundError(f"Fruit '{name}' not found")
        if fruit.current_amount > limit:
            raise FruitValidationError(
                f"Limit {limit} is below the {fruit.current_amount} fruits currently stored"
            )
        fruit.description = description
        fruit.storage_limit = limit
        await fruit.save(update_fields=["description", "storage_limit", "updated_at"], using_db=conn)

    await _record(recorder, [FruitUpdated(fruit)])
    return fruit


async def store_fruit(name: str, amount: int, recorder: EventRecorder) -> Fruit:
    """Adds amount to storage, bounded by the fruit's limit."""
    name = _clean_name(name)
    amount = _check_quantity(amount, "Amount")

    async with in_transaction() as conn:
        fruit = await Fruit.filter(name=name).using_db(conn).select_for_update().first()
        if not fruit:
            raise FruitNotFoundError(f"Fruit '{name}' not found")
        new_amount = fruit.current_amount + amount
        if new_amount > fruit.storage_limit:
            raise FruitValidationError(
                f"Cannot store {amount} fruits. Current: {fruit.current_amount}, "
                f"Limit: {fruit.storage_limit}"
            )
        fruit.current_amount = new_amount
        await fruit.save(update_fields=["current_amount", "updated_at"], using_db=conn)

    await _record(recorder, [FruitUpdated(fruit)])
    return fruit


async def remove_fruit(name: str, amount: int, recorder: EventRecorder) -> Fruit:
    """Takes amount out of storage; storage never goes below zero."""
    name = _clean_name(name)
    amount = _check_quantity(amount, "Amount")

    async with in_transaction() as conn:
        fruit = await Fruit.filter(name=name).using_db(conn).select_for_update().first()
        if not fruit:
            raise FruitNotFoundError(f"Fruit '{name}' not found")
        if amount > fruit.current_amount:
            raise FruitValidationError(
                f"Cannot remove {amount} fruits. Only {fruit.current_amount} available"
            )
        fruit.current_amount -= amount
        await fruit.save(update_fields=["current_amount", "updated_at"], using_db=conn)

    await _record(recorder, [FruitUpdated(fruit)])
    return fruit


async def delete_fruit(name: str, force: bool, recorder: EventRecorder) -> Fruit:
    """
    Deletes a fruit. A fruit with stock can only be deleted with force=True.
    """
    name = _clean_name(name)

    async with in_transaction() as conn:
        fruit = await Fruit.filter(name=name).using_db(conn).select_for_update().first()
        if not fruit:
            raise FruitNotFoundError(f"Fruit '{name}' not found")
        if not force and fruit.current_amount > 0:
            raise FruitValidationError(
                f"Cannot delete fruit '{name}' as it has {fruit.current_amount} items in storage"
            )
        event = FruitDeleted(fruit)
        await fruit.delete(using_db=conn)

    await _record(recorder, [event])
    return fruit
