from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Category(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    parent_id: Optional[int] = None # nested categories

    # Categories are compared by id only, titles can be renamed
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Category):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class Transaction(BaseModel):
    id: int
    details: str
    category: Optional[Category] = None
    confidence: int = 0 # confidence of the current category, see ConfidenceLevel
    amount: float = 0.0
    transaction_date: Optional[date] = None
    posting_date: Optional[date] = None
    inflow: bool = False


class CategoryMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: Category
    confidence: int # 0 to 100, the average reducer may add a small bonus
