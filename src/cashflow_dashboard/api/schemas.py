from pydantic import BaseModel

from cashflow_dashboard.models import CashflowSankeyData


class PeriodSchema(BaseModel):
    key: str
    label: str
    label_short: str
    start_date: str
    end_date: str


class CashflowSankeyResponse(BaseModel):
    period: PeriodSchema
    sankey: CashflowSankeyData
