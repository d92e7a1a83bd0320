# app/scripts/seed_data.py
import asyncio
from app.core.db import init_db, close_db
from app.core.exceptions import FruitConflictError
from app.events.recorder import EventRecorder
from app.events.store import EventRecordStore
from app.services.fruit_service import create_fruit, store_fruit

SEED_FRUITS = [
    # name, description, limit, initial amount
    ("lemon", "this is a lemon", 10, 5),
    ("apple", "crisp red apple", 20, 12),
    ("banana", "ripe yellow banana", 15, 0),
]

async def seed():
    recorder = EventRecorder(EventRecordStore())
    for name, description, limit, amount in SEED_FRUITS:
        try:
            await create_fruit(name, description, limit, recorder)
        except FruitConflictError:
            print(f"Fruit {name} already exists, skipping.")
            continue
        if amount:
            await store_fruit(name, amount, recorder)
        print(f"Seeded {name} ({amount}/{limit}).")

async def main():
    await init_db()
    await seed()
    await close_db()

if __name__ == "__main__":
    asyncio.run(main())
