import pytest
from unittest.mock import AsyncMock

from app.core.exceptions import HandlerError
from app.events.dispatcher import EventDispatcher


class TestEventDispatcher:

    @pytest.mark.asyncio
    async def test_handlers_run_in_registration_order(self):
        dispatcher = EventDispatcher()
        calls = []

        async def first(payload):
            calls.append(("first", payload["name"]))

        async def second(payload):
            calls.append(("second", payload["name"]))

        dispatcher.register("FruitCreated", first)
        dispatcher.register("FruitCreated", second)

        await dispatcher.dispatch("FruitCreated", {"name": "lemon"})

        assert calls == [("first", "lemon"), ("second", "lemon")]

    @pytest.mark.asyncio
    async def test_failure_stops_remaining_handlers(self):
        dispatcher = EventDispatcher()
        after = AsyncMock()

        async def broken(payload):
            raise RuntimeError("downstream unavailable")

        dispatcher.register("FruitCreated", broken)
        dispatcher.register("FruitCreated", after)

        with pytest.raises(HandlerError) as excinfo:
            await dispatcher.dispatch("FruitCreated", {})

        assert excinfo.value.event_type == "FruitCreated"
        assert "broken" in excinfo.value.handler_name
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        after.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_event_type_is_a_noop(self):
        dispatcher = EventDispatcher()
        other = AsyncMock()
        dispatcher.register("FruitDeleted", other)

        await dispatcher.dispatch("FruitCreated", {"name": "lemon"})

        other.assert_not_called()

    @pytest.mark.asyncio
    async def test_subscribe_decorator_registers_handler(self):
        dispatcher = EventDispatcher()
        seen = []

        @dispatcher.subscribe("FruitUpdated")
        async def on_update(payload):
            seen.append(payload)

        await dispatcher.dispatch("FruitUpdated", {"current_amount": 3})

        assert seen == [{"current_amount": 3}]
        assert dispatcher.handlers_for("FruitUpdated") == (on_update,)
        assert dispatcher.event_types == ["FruitUpdated"]

    def test_handlers_for_returns_a_copy(self):
        dispatcher = EventDispatcher()
        handler = AsyncMock()
        dispatcher.register("FruitCreated", handler)

        handlers = dispatcher.handlers_for("FruitCreated")

        assert handlers == (handler,)
        assert dispatcher.handlers_for("Unknown") == ()

    def test_sync_handler_is_rejected_at_registration(self):
        dispatcher = EventDispatcher()

        def not_async(payload):
            pass

        with pytest.raises(TypeError):
            dispatcher.register("FruitCreated", not_async)
        with pytest.raises(TypeError):
            dispatcher.subscribe("FruitCreated")(not_async)

        assert dispatcher.handlers_for("FruitCreated") == ()

    @pytest.mark.asyncio
    async def test_callable_object_with_async_call_is_accepted(self):
        dispatcher = EventDispatcher()

        class Collector:
            def __init__(self):
                self.seen = []

            async def __call__(self, payload):
                self.seen.append(payload)

        collector = Collector()
        dispatcher.register("FruitCreated", collector)
        await dispatcher.dispatch("FruitCreated", {"name": "lemon"})

        assert collector.seen == [{"name": "lemon"}]
