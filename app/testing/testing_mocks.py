from unittest.mock import AsyncMock, MagicMock

# Mocked Tortoise transaction manager
class in_transaction:
    """Mock for tortoise.transactions.in_transaction to bypass real DB context."""
    async def __aenter__(self):
        return object()
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


def create_mock_queryset(final_return_value):
    """
    Creates a chainable mock that behaves like a Tortoise QuerySet:
    filter(...).using_db(...).select_for_update().first() and
    filter(...).using_db(...).exists() all resolve to final_return_value.
    """
    chainable_mock = MagicMock()
    chainable_mock.using_db.return_value = chainable_mock
    chainable_mock.select_for_update.return_value = chainable_mock
    chainable_mock.order_by.return_value = chainable_mock
    chainable_mock.first = AsyncMock(return_value=final_return_value)
    chainable_mock.exists = AsyncMock(return_value=bool(final_return_value))
    return chainable_mock
