import json
from pathlib import Path

from cashflow_dashboard.services.family_data import FamilyRepository


def test_missing_file_yields_empty_family(tmp_path: Path) -> None:
    repository = FamilyRepository(data_path=str(tmp_path / "missing.json"), default_currency="GBP")

    family = repository.get_family()
    assert family.currency == "GBP"
    assert family.categories == []
    assert family.transactions == []


def test_loads_family_document(tmp_path: Path) -> None:
    path = tmp_path / "family.json"
    path.write_text(json.dumps({
        "name": "Smith Family",
        "currency": "EUR",
        "categories": [{"id": "salary", "name": "Salary"}],
        "transactions": [
            {"id": "t1", "date": "2024-01-05", "amount": 100.0, "category_id": "salary"},
        ],
    }))

    family = FamilyRepository(data_path=str(path)).get_family()

    assert family.name == "Smith Family"
    assert family.currency == "EUR"
    assert family.categories[0].is_top_level
    assert family.transactions[0].amount == 100.0


def test_invalid_document_yields_empty_family(tmp_path: Path) -> None:
    path = tmp_path / "family.json"
    path.write_text("{not json")

    family = FamilyRepository(data_path=str(path), default_currency="USD").get_family()

    assert family.transactions == []
    assert family.currency == "USD"


def test_reload_picks_up_changes(tmp_path: Path) -> None:
    path = tmp_path / "family.json"
    path.write_text(json.dumps({"name": "Before"}))
    repository = FamilyRepository(data_path=str(path))

    path.write_text(json.dumps({"name": "After"}))
    repository.reload()

    assert repository.get_family().name == "After"
