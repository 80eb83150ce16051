import pytest

from ledger_categorizer.models import Category, Transaction


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def food() -> Category:
    return Category(id=1, title="Food")


@pytest.fixture
def transport() -> Category:
    return Category(id=2, title="Transport")


@pytest.fixture
def starbucks(food: Category) -> Transaction:
    return Transaction(id=1, details="Starbucks Coffee Dubai", category=food)


@pytest.fixture
def shell(transport: Category) -> Transaction:
    return Transaction(id=2, details="Shell Gas Station", category=transport)
