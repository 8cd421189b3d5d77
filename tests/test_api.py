import json
from collections.abc import Generator
from datetime import date, timedelta
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from cashflow_dashboard.app import app
from cashflow_dashboard.models import ReleaseNotes
from cashflow_dashboard.services.family_data import FamilyRepository

client = TestClient(app)


def _restore(name: str, had: bool, original: object) -> None:
    if had:
        setattr(app.state, name, original)
    elif hasattr(app.state, name):
        delattr(app.state, name)


@pytest.fixture
def family_repository(tmp_path: Path) -> Generator[FamilyRepository, None, None]:
    recent = (date.today() - timedelta(days=3)).isoformat()
    older = (date.today() - timedelta(days=60)).isoformat()
    path = tmp_path / "family.json"
    path.write_text(json.dumps({
        "name": "Test Family",
        "currency": "EUR",
        "categories": [
            {"id": "salary", "name": "Salary", "color": "#4da568"},
            {"id": "rent", "name": "Rent", "color": "#db5a54"},
        ],
        "transactions": [
            {"id": "1", "date": recent, "amount": 800.0, "category_id": "salary"},
            {"id": "2", "date": recent, "amount": 200.0},
            {"id": "3", "date": recent, "amount": -600.0, "category_id": "rent"},
            {"id": "4", "date": older, "amount": -5000.0, "category_id": "rent"},
        ],
    }))

    had = hasattr(app.state, "family_repository")
    original = getattr(app.state, "family_repository", None)
    repository = FamilyRepository(data_path=str(path))
    app.state.family_repository = repository
    yield repository
    _restore("family_repository", had, original)


@pytest.fixture
def mock_github() -> Generator[AsyncMock, None, None]:
    had = hasattr(app.state, "github")
    original = getattr(app.state, "github", None)
    mock = AsyncMock()
    mock.releases_url = "https://github.com/we-promise/sure/releases"
    app.state.github = mock
    yield mock
    _restore("github", had, original)


def test_cashflow_sankey_api(family_repository: FamilyRepository) -> None:
    response = client.get("/api/cashflow-sankey")
    assert response.status_code == 200
    data = response.json()

    assert data["period"]["key"] == "last_30_days"
    sankey = data["sankey"]
    assert sankey["currency_symbol"] == "€"
    assert [node["name"] for node in sankey["nodes"]] == [
        "Cash Flow",
        "Salary",
        "Rent",
        "Uncategorized",
        "Surplus",
    ]
    assert sankey["nodes"][0]["percentage"] == 100.0
    assert sankey["nodes"][-1]["value"] == 400.0
    assert {"source", "target", "value", "color", "percentage"} <= set(sankey["links"][0])


def test_cashflow_sankey_api_with_longer_period(family_repository: FamilyRepository) -> None:
    response = client.get("/api/cashflow-sankey", params={"cashflow_period": "last_90_days"})
    assert response.status_code == 200
    sankey = response.json()["sankey"]

    names = [node["name"] for node in sankey["nodes"]]
    assert "Surplus" not in names
    rent = next(node for node in sankey["nodes"] if node["name"] == "Rent")
    assert rent["value"] == 5600.0


def test_invalid_period_falls_back_to_default(family_repository: FamilyRepository) -> None:
    response = client.get("/api/cashflow-sankey", params={"cashflow_period": "not-a-period"})
    assert response.status_code == 200
    assert response.json()["period"]["key"] == "last_30_days"


def test_periods_api() -> None:
    response = client.get("/api/periods")
    assert response.status_code == 200
    keys = [period["key"] for period in response.json()]
    assert "last_30_days" in keys
    assert "current_year" in keys


def test_dashboard_page(family_repository: FamilyRepository) -> None:
    response = client.get("/", params={"cashflow_period": "bogus"})
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "cashflow-sankey-data" in response.text
    assert "Cash Flow" in response.text
    assert 'value="last_30_days" selected' in response.text


def test_dashboard_without_family_repository() -> None:
    had = hasattr(app.state, "family_repository")
    original = getattr(app.state, "family_repository", None)
    if had:
        delattr(app.state, "family_repository")
    try:
        response = client.get("/api/cashflow-sankey")
    finally:
        _restore("family_repository", had, original)
    assert response.status_code == 500


def test_changelog_renders_release_notes(mock_github: AsyncMock) -> None:
    mock_github.fetch_latest_release_notes.return_value = ReleaseNotes(
        avatar="https://avatars.example/dev.png",
        username="dev",
        name="v1.2.3",
        published_at=date(2024, 4, 1),
        body="<p>Shiny new sankey</p>",
    )

    response = client.get("/changelog")
    assert response.status_code == 200
    assert "v1.2.3" in response.text
    assert "<p>Shiny new sankey</p>" in response.text


def test_changelog_falls_back_when_unavailable(mock_github: AsyncMock) -> None:
    mock_github.fetch_latest_release_notes.return_value = None

    response = client.get("/changelog")
    assert response.status_code == 200
    assert "Release notes unavailable" in response.text
    assert "https://github.com/we-promise/sure/releases" in response.text


def test_feedback_page() -> None:
    response = client.get("/feedback")
    assert response.status_code == 200
    assert "Feedback" in response.text
