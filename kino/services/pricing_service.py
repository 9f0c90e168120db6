"""Business logic for pricing a prospective reservation."""

from __future__ import annotations

from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from kino.domain.constraints import PricingConfig, validate_pricing_config
from kino.domain.models import PricingResult
from kino.domain.pricing import PriceAdjustmentNotConfiguredError, compute_price
from kino.repository.data_repository import DataRepository
from kino.utils.config import Settings, get_settings
from kino.utils.logger import get_logger


logger = get_logger(__name__)


class PricingError(Exception):
    """Base exception for reservation pricing failures."""


class ScreeningNotFoundError(PricingError):
    """Raised when a screening id does not exist in persisted state."""

    def __init__(self, screening_id: int) -> None:
        super().__init__(f"Screening with id {screening_id} not found")
        self.screening_id = screening_id


class ReservationPricingService:
    """Loads screening, seats and adjustments, then runs the pricing policy."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._config = PricingConfig.from_settings(self._settings)
        validate_pricing_config(self._config)

    def load_adjustment_table(self) -> Mapping[str, Decimal]:
        """Read-only snapshot of every named adjustment, fresh per call."""
        return MappingProxyType(
            {
                adjustment.name: adjustment.adjustment
                for adjustment in self._repository.list_price_adjustments()
            }
        )

    def calculate_reservation_price(
        self,
        *,
        screening_id: int,
        seat_ids: Sequence[int],
    ) -> PricingResult:
        screening = self._repository.get_screening(screening_id)
        if screening is None:
            raise ScreeningNotFoundError(screening_id)

        adjustments = self.load_adjustment_table()
        seats = self._repository.get_seats_by_ids(seat_ids)

        try:
            result = compute_price(
                screening=screening,
                seats=seats,
                requested_seat_count=len(seat_ids),
                adjustments=adjustments,
                config=self._config,
            )
        except PriceAdjustmentNotConfiguredError as exc:
            logger.error(
                "Pricing for screening %s failed: adjustment '%s' missing",
                screening_id,
                exc.name,
            )
            raise

        logger.debug(
            "Priced screening=%s requested=%s resolved=%s total=%s",
            screening_id,
            len(seat_ids),
            len(seats),
            result.total,
        )
        return result
