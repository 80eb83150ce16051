from typing import Optional, Protocol, TypeVar

from ledger_categorizer.models import Category, Transaction

T = TypeVar("T")


class Repository(Protocol[T]):
    """Storage for records keyed by numeric ids. Implementations live outside this package."""

    def add(self, item: T) -> Optional[int]:
        ...

    def get(self, item_id: int) -> Optional[T]:
        ...

    def update(self, item: T) -> None:
        ...

    def list_all(self) -> list[T]:
        ...


TransactionRepository = Repository[Transaction]
CategoryRepository = Repository[Category]
