from typing import Annotated

from fastapi import APIRouter, Depends

from cashflow_dashboard.api.dependencies import get_family_repository
from cashflow_dashboard.api.schemas import CashflowSankeyResponse, PeriodSchema
from cashflow_dashboard.domain.periods import Period
from cashflow_dashboard.services.cashflow import build_cashflow_report
from cashflow_dashboard.services.family_data import FamilyRepository

router = APIRouter()


@router.get("/api/cashflow-sankey", response_model=CashflowSankeyResponse)
async def get_cashflow_sankey(
    repository: Annotated[FamilyRepository, Depends(get_family_repository)],
    cashflow_period: str | None = None,
) -> CashflowSankeyResponse:
    report = build_cashflow_report(repository.get_family(), cashflow_period)
    return CashflowSankeyResponse(
        period=PeriodSchema(**report.period.to_dict()),
        sankey=report.sankey,
    )


@router.get("/api/periods")
async def get_periods() -> list[PeriodSchema]:
    return [PeriodSchema(**period.to_dict()) for period in Period.all()]
