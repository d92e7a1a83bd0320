from fastapi import Request
from app.events.processor import OutboxProcessor
from app.events.recorder import EventRecorder
from app.events.store import EventRecordStore


# Outbox components are built once in the lifespan and kept on app.state

def get_recorder(request: Request) -> EventRecorder:
    return request.app.state.recorder


def get_store(request: Request) -> EventRecordStore:
    return request.app.state.store


def get_processor(request: Request) -> OutboxProcessor:
    return request.app.state.processor
