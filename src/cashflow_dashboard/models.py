import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field

from cashflow_dashboard.domain.colors import DEFAULT_UNCATEGORIZED_COLOR

UNCATEGORIZED_ID = "uncategorized"
UNCATEGORIZED_NAME = "Uncategorized"

Classification = Literal["income", "expense"]


class Category(BaseModel):
    id: str
    name: str
    parent_id: str | None = None
    color: str | None = None
    is_uncategorized: bool = False

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None

    @classmethod
    def uncategorized(cls, color: str = DEFAULT_UNCATEGORIZED_COLOR) -> "Category":
        return cls(
            id=UNCATEGORIZED_ID,
            name=UNCATEGORIZED_NAME,
            color=color,
            is_uncategorized=True,
        )


class Transaction(BaseModel):
    id: str
    date: dt.date
    amount: float  # positive = income, negative = expense
    name: str = ""
    category_id: str | None = None
    excluded: bool = False


class Family(BaseModel):
    id: str = "default"
    name: str = "Family"
    currency: str = "USD"
    categories: list[Category] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)


class CategoryTotal(BaseModel):
    category: Category
    total: float


class PeriodTotal(BaseModel):
    classification: Classification
    currency: str
    total: float = 0.0
    category_totals: list[CategoryTotal] = Field(default_factory=list)


class SankeyNode(BaseModel):
    name: str
    value: float
    percentage: float
    color: str


class SankeyLink(BaseModel):
    source: int
    target: int
    value: float
    color: str
    percentage: float


class CashflowSankeyData(BaseModel):
    nodes: list[SankeyNode] = Field(default_factory=list)
    links: list[SankeyLink] = Field(default_factory=list)
    currency_symbol: str


class ReleaseNotes(BaseModel):
    avatar: str
    username: str
    name: str
    published_at: dt.date
    body: str
