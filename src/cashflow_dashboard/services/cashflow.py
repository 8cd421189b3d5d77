from dataclasses import dataclass
from datetime import date

from cashflow_dashboard.core import settings
from cashflow_dashboard.domain.cashflow import build_cashflow_sankey_data
from cashflow_dashboard.domain.periods import Period, resolve_period
from cashflow_dashboard.logger import get_logger
from cashflow_dashboard.models import CashflowSankeyData, Family
from cashflow_dashboard.services.income_statement import IncomeStatement

logger = get_logger(__name__)


@dataclass(frozen=True)
class CashflowReport:
    period: Period
    sankey: CashflowSankeyData


def build_cashflow_report(
    family: Family,
    period_key: str | None,
    *,
    today: date | None = None,
) -> CashflowReport:
    period = resolve_period(period_key, today=today)
    statement = IncomeStatement(family, uncategorized_color=settings.UNCATEGORIZED_COLOR)

    income_totals = statement.income_totals(period)
    expense_totals = statement.expense_totals(period)

    sankey = build_cashflow_sankey_data(
        income_totals,
        expense_totals,
        family.currency,
        palette=settings.CATEGORY_COLORS,
        uncategorized_color=settings.UNCATEGORIZED_COLOR,
    )
    logger.info(
        "[CASHFLOW] %s: income=%.2f expense=%.2f %s (%d nodes).",
        period.key,
        income_totals.total,
        expense_totals.total,
        family.currency,
        len(sankey.nodes),
    )
    return CashflowReport(period=period, sankey=sankey)
