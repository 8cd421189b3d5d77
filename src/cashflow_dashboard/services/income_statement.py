from collections import defaultdict

from cashflow_dashboard.domain.colors import DEFAULT_UNCATEGORIZED_COLOR
from cashflow_dashboard.domain.periods import Period
from cashflow_dashboard.logger import get_logger
from cashflow_dashboard.models import (
    Category,
    CategoryTotal,
    Classification,
    Family,
    PeriodTotal,
    Transaction,
)

logger = get_logger(__name__)


class IncomeStatement:
    """Income and expense totals per category for one family."""

    def __init__(self, family: Family, uncategorized_color: str = DEFAULT_UNCATEGORIZED_COLOR):
        self.family = family
        self.uncategorized = Category.uncategorized(uncategorized_color)
        self._categories = _resolve_hierarchy(family.categories)

    def income_totals(self, period: Period) -> PeriodTotal:
        return self._totals(period, "income")

    def expense_totals(self, period: Period) -> PeriodTotal:
        return self._totals(period, "expense")

    def _lineage(self, category_id: str) -> list[str]:
        """The category itself followed by each of its ancestors."""
        lineage = [category_id]
        parent_id = self._categories[category_id].parent_id
        while parent_id is not None:
            lineage.append(parent_id)
            parent_id = self._categories[parent_id].parent_id
        return lineage

    def _classify(self, transaction: Transaction) -> Classification:
        return "income" if transaction.amount > 0 else "expense"

    def _transactions(self, period: Period, classification: Classification) -> list[Transaction]:
        return [
            t for t in self.family.transactions
            if not t.excluded
            and t.amount != 0
            and period.contains(t.date)
            and self._classify(t) == classification
        ]

    def _totals(self, period: Period, classification: Classification) -> PeriodTotal:
        transactions = self._transactions(period, classification)

        direct: dict[str, float] = defaultdict(float)
        uncategorized_total = 0.0
        for transaction in transactions:
            amount = abs(transaction.amount)
            if transaction.category_id and transaction.category_id in self._categories:
                direct[transaction.category_id] += amount
            else:
                uncategorized_total += amount

        rolled_up: dict[str, float] = defaultdict(float)
        for category_id, amount in direct.items():
            for ancestor_id in self._lineage(category_id):
                rolled_up[ancestor_id] += amount

        category_totals = [
            CategoryTotal(category=category, total=round(rolled_up.get(category.id, 0.0), 2))
            for category in self._categories.values()
        ]
        if uncategorized_total:
            category_totals.append(
                CategoryTotal(category=self.uncategorized, total=round(uncategorized_total, 2))
            )

        total = round(sum(abs(t.amount) for t in transactions), 2)
        logger.debug(
            "[STATEMENT] %s totals for %s: %.2f across %d transactions.",
            classification.capitalize(),
            period.key,
            total,
            len(transactions),
        )
        return PeriodTotal(
            classification=classification,
            currency=self.family.currency,
            total=total,
            category_totals=category_totals,
        )


def _resolve_hierarchy(categories: list[Category]) -> dict[str, Category]:
    """Index categories by id so every parent chain ends at a top-level category.

    A category whose parent is unknown, or whose parent chain loops back on
    itself, is promoted to top level.
    """
    resolved = {category.id: category for category in categories}
    for category in categories:
        if category.parent_id is not None and category.parent_id not in resolved:
            resolved[category.id] = _promote(category)

    for category_id in list(resolved):
        seen = {category_id}
        parent_id = resolved[category_id].parent_id
        while parent_id is not None:
            if parent_id in seen:
                resolved[category_id] = _promote(resolved[category_id])
                break
            seen.add(parent_id)
            parent_id = resolved[parent_id].parent_id
    return resolved


def _promote(category: Category) -> Category:
    logger.warning(
        "[STATEMENT] Category '%s' has an unresolvable parent '%s'; treating it as top level.",
        category.name,
        category.parent_id,
    )
    return category.model_copy(update={"parent_id": None})
