"""Cash-flow sankey data built from income and expense category totals.

All category flows pass through one central "Cash Flow" node: net income
categories link into it, net expense categories link out of it, and any
leftover income links out to a "Surplus" node.

Node order handed to the chart is grouped:
    Cash Flow -> categories (descending value) -> Uncategorized -> Surplus
Links are built against insertion indices first and remapped once the nodes
are sorted.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from cashflow_dashboard.domain.colors import (
    DEFAULT_CATEGORY_COLORS,
    DEFAULT_UNCATEGORIZED_COLOR,
    SUCCESS_COLOR,
    pick_color,
)
from cashflow_dashboard.domain.currency import currency_symbol
from cashflow_dashboard.logger import get_logger
from cashflow_dashboard.models import (
    CashflowSankeyData,
    Category,
    PeriodTotal,
    SankeyLink,
    SankeyNode,
)

logger = get_logger(__name__)

CASH_FLOW_LABEL = "Cash Flow"
SURPLUS_LABEL = "Surplus"

GROUP_CASH_FLOW = 0
GROUP_CATEGORY = 1
GROUP_UNCATEGORIZED = 2
GROUP_SURPLUS = 3


@dataclass
class _Node:
    name: str
    value: float
    percentage: float
    color: str
    group: int


@dataclass
class _Link:
    source: int
    target: int
    value: float
    color: str
    percentage: float


def percentage_of(value: float, total: float) -> float:
    if total == 0:
        return 0.0
    return round(value / total * 100, 1)


class _SankeyBuilder:
    def __init__(self) -> None:
        self.nodes: list[_Node] = []
        self.links: list[_Link] = []

    def add_node(self, name: str, value: float, percentage: float, color: str, group: int) -> int:
        self.nodes.append(_Node(name, round(value, 2), round(percentage, 1), color, group))
        return len(self.nodes) - 1

    def add_link(self, source: int, target: int, value: float, color: str, percentage: float) -> None:
        self.links.append(_Link(source, target, round(value, 2), color, percentage))

    def add_inflow(
        self, cash_flow_idx: int, name: str, value: float, total: float, color: str, group: int
    ) -> None:
        percentage = percentage_of(value, total)
        idx = self.add_node(name, value, percentage, color, group)
        self.add_link(idx, cash_flow_idx, value, color, percentage)

    def add_outflow(
        self, cash_flow_idx: int, name: str, value: float, total: float, color: str, group: int
    ) -> None:
        percentage = percentage_of(value, total)
        idx = self.add_node(name, value, percentage, color, group)
        self.add_link(cash_flow_idx, idx, value, color, percentage)

    def sorted_output(self) -> tuple[list[SankeyNode], list[SankeyLink]]:
        order = sorted(
            range(len(self.nodes)),
            key=lambda i: (
                self.nodes[i].group,
                -self.nodes[i].value if self.nodes[i].group == GROUP_CATEGORY else 0.0,
            ),
        )
        new_index = {old: new for new, old in enumerate(order)}

        nodes = [
            SankeyNode(
                name=self.nodes[old].name,
                value=self.nodes[old].value,
                percentage=self.nodes[old].percentage,
                color=self.nodes[old].color,
            )
            for old in order
        ]
        links = [
            SankeyLink(
                source=new_index[link.source],
                target=new_index[link.target],
                value=link.value,
                color=link.color,
                percentage=link.percentage,
            )
            for link in self.links
        ]
        return nodes, links


def build_cashflow_sankey_data(
    income_totals: PeriodTotal,
    expense_totals: PeriodTotal,
    currency: str,
    *,
    palette: Sequence[str] = DEFAULT_CATEGORY_COLORS,
    uncategorized_color: str = DEFAULT_UNCATEGORIZED_COLOR,
) -> CashflowSankeyData:
    """Reshape period totals into sankey nodes and links.

    Args:
        income_totals: Income totals per category for the period.
        expense_totals: Expense totals per category, as positive amounts.
        currency: ISO currency code of the totals.
        palette: Colors for income categories that have none of their own.
        uncategorized_color: Color for expense categories without a color.

    Returns:
        CashflowSankeyData: Sorted nodes, remapped links and the currency symbol.
    """
    builder = _SankeyBuilder()

    net_by_category: dict[str, float] = {}
    categories: dict[str, Category] = {}
    uncategorized_income = 0.0
    uncategorized_expense = 0.0
    uncategorized_income_category: Category | None = None
    uncategorized_expense_category: Category | None = None

    for ct in income_totals.category_totals:
        category = ct.category
        if not category.is_top_level:
            continue
        if category.is_uncategorized:
            uncategorized_income += ct.total
            uncategorized_income_category = uncategorized_income_category or category
            continue
        net_by_category[category.id] = net_by_category.get(category.id, 0.0) + ct.total
        categories.setdefault(category.id, category)

    for ct in expense_totals.category_totals:
        category = ct.category
        if not category.is_top_level:
            continue
        if category.is_uncategorized:
            uncategorized_expense += ct.total
            uncategorized_expense_category = uncategorized_expense_category or category
            continue
        net_by_category[category.id] = net_by_category.get(category.id, 0.0) - ct.total
        categories.setdefault(category.id, category)

    net_values = {cat_id: round(value, 2) for cat_id, value in net_by_category.items()}
    uncategorized_income = round(uncategorized_income, 2)
    uncategorized_expense = round(uncategorized_expense, 2)

    total_net_income = round(
        sum(value for value in net_values.values() if value > 0) + max(uncategorized_income, 0.0), 2
    )
    total_net_expense = round(
        sum(abs(value) for value in net_values.values() if value < 0) + max(uncategorized_expense, 0.0),
        2,
    )

    cash_flow_value = max(round(income_totals.total, 2), 0.0)
    cash_flow_idx = builder.add_node(CASH_FLOW_LABEL, cash_flow_value, 0.0, SUCCESS_COLOR, GROUP_CASH_FLOW)

    for cat_id, value in net_values.items():
        if value == 0:
            continue
        category = categories[cat_id]
        if value > 0:
            color = category.color or pick_color(cat_id, palette, fallback=uncategorized_color)
            builder.add_inflow(cash_flow_idx, category.name, value, total_net_income, color, GROUP_CATEGORY)
        else:
            color = category.color or uncategorized_color
            builder.add_outflow(
                cash_flow_idx, category.name, abs(value), total_net_expense, color, GROUP_CATEGORY
            )

    if uncategorized_income > 0 and uncategorized_income_category is not None:
        builder.add_inflow(
            cash_flow_idx,
            uncategorized_income_category.name,
            uncategorized_income,
            total_net_income,
            uncategorized_income_category.color or uncategorized_color,
            GROUP_UNCATEGORIZED,
        )
    if uncategorized_expense > 0 and uncategorized_expense_category is not None:
        builder.add_outflow(
            cash_flow_idx,
            uncategorized_expense_category.name,
            uncategorized_expense,
            total_net_expense,
            uncategorized_expense_category.color or uncategorized_color,
            GROUP_UNCATEGORIZED,
        )

    leftover = round(total_net_income - total_net_expense, 2)
    if leftover > 0:
        builder.add_outflow(
            cash_flow_idx, SURPLUS_LABEL, leftover, total_net_income, SUCCESS_COLOR, GROUP_SURPLUS
        )

    nodes, links = builder.sorted_output()
    # Cash Flow always sorts first
    nodes[0].percentage = 100.0

    logger.debug(
        "[CASHFLOW] Built sankey with %d nodes and %d links (income=%.2f, expense=%.2f).",
        len(nodes),
        len(links),
        total_net_income,
        total_net_expense,
    )

    return CashflowSankeyData(
        nodes=nodes,
        links=links,
        currency_symbol=currency_symbol(currency),
    )
