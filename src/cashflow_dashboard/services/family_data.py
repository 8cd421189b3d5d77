import os

from pydantic import ValidationError

from cashflow_dashboard.logger import get_logger
from cashflow_dashboard.models import Family

logger = get_logger(__name__)


class FamilyRepository:
    """Read-only family ledger backed by a JSON document."""

    def __init__(self, data_path: str = "family.json", default_currency: str = "USD"):
        self.data_path = data_path
        self.default_currency = default_currency
        self.family = self._empty()
        self.load()

    def _empty(self) -> Family:
        return Family(currency=self.default_currency)

    def load(self) -> Family:
        if not os.path.exists(self.data_path):
            logger.warning("[FAMILY] No family data at %s; serving an empty ledger.", self.data_path)
            self.family = self._empty()
            return self.family

        try:
            with open(self.data_path, encoding="utf-8") as handle:
                self.family = Family.model_validate_json(handle.read())
        except (OSError, ValidationError) as exc:
            logger.error("[FAMILY] Could not load %s: %s", self.data_path, exc)
            self.family = self._empty()
            return self.family

        logger.info(
            "[FAMILY] Loaded '%s' (%d categories, %d transactions, %s).",
            self.family.name,
            len(self.family.categories),
            len(self.family.transactions),
            self.family.currency,
        )
        return self.family

    def reload(self) -> Family:
        return self.load()

    def get_family(self) -> Family:
        return self.family
