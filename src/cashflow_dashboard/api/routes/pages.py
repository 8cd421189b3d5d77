import os
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from cashflow_dashboard.api.dependencies import (
    get_family_repository,
    get_release_notes_provider_optional,
)
from cashflow_dashboard.domain.periods import Period
from cashflow_dashboard.integration.github import GitHubProvider
from cashflow_dashboard.services.cashflow import build_cashflow_report
from cashflow_dashboard.services.changelog import load_release_notes
from cashflow_dashboard.services.family_data import FamilyRepository

router = APIRouter()

templates_dir = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..", "web", "templates")
)
templates = Jinja2Templates(directory=templates_dir)


@router.get("/", response_class=HTMLResponse)
async def dashboard(
    request: Request,
    repository: Annotated[FamilyRepository, Depends(get_family_repository)],
    cashflow_period: str | None = None,
) -> HTMLResponse:
    family = repository.get_family()
    report = build_cashflow_report(family, cashflow_period)

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "family": family,
            "cashflow_period": report.period,
            "periods": Period.all(),
            "cashflow_sankey_data": report.sankey.model_dump(),
            "breadcrumbs": [("Home", "/"), ("Dashboard", None)],
        },
    )


@router.get("/changelog", response_class=HTMLResponse)
async def changelog(
    request: Request,
    provider: Annotated[GitHubProvider | None, Depends(get_release_notes_provider_optional)],
) -> HTMLResponse:
    release_notes = await load_release_notes(provider)
    return templates.TemplateResponse(
        request,
        "changelog.html",
        {"release_notes": release_notes},
    )


@router.get("/feedback", response_class=HTMLResponse)
async def feedback(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "feedback.html", {})
