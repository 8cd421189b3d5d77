from fastapi import HTTPException, Request

from cashflow_dashboard.integration.github import GitHubProvider
from cashflow_dashboard.services.family_data import FamilyRepository


def get_family_repository(request: Request) -> FamilyRepository:
    repository = getattr(request.app.state, "family_repository", None)
    if not repository:
        raise HTTPException(status_code=500, detail="Family data not initialized")
    return repository


def get_release_notes_provider_optional(request: Request) -> GitHubProvider | None:
    return getattr(request.app.state, "github", None)
