"""Read and maintain the named price-adjustment table."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from kino.domain.models import PriceAdjustment
from kino.repository.data_repository import DataRepository
from kino.utils.config import Settings, get_settings
from kino.utils.logger import get_logger


logger = get_logger(__name__)


class PriceAdjustmentValidationError(Exception):
    """Raised when an adjustment update is invalid."""


class PriceAdjustmentService:
    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    def list_price_adjustments(self) -> list[PriceAdjustment]:
        return self._repository.list_price_adjustments()

    def update_price_adjustment(self, name: str, adjustment: Decimal) -> PriceAdjustment:
        """Create or overwrite one adjustment; the next price calculation sees it."""
        normalized_name = name.strip()
        if not normalized_name:
            raise PriceAdjustmentValidationError("adjustment name must be non-empty")
        if not adjustment.is_finite() or adjustment < 0:
            raise PriceAdjustmentValidationError("adjustment must be a finite value >= 0")

        updated = self._repository.upsert_price_adjustment(normalized_name, adjustment)
        logger.info("Price adjustment %s set to %s", updated.name, updated.adjustment)
        return updated
