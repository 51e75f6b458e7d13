"""
Tier Operations Module

Operator management of the tier table. Bounds accept the same human
formatting as uploads ("1.5m", "200k"); multipliers must be plain numbers.
Everything is validated before the first write.
"""

from typing import Any, List, Optional

from tracker.database.models import Tier
from tracker.utils.exceptions import NotFoundError, ValidationError
from tracker.utils.logger import setup_logger
from tracker.utils.numbers import parse_float, parse_number

logger = setup_logger(__name__)


class TierOperations:
    """Create, update, list and delete tiers."""

    def __init__(self, database):
        self.db = database
        self.logger = logger

    async def list_tiers(self) -> List[Tier]:
        return await self.db.get_tiers()

    async def save_tier(
        self,
        name: str,
        min_power: Any,
        max_power: Any,
        kill_multiplier: Any,
        death_multiplier: Any,
        tier_id: Optional[int] = None
    ) -> Tier:
        """
        Create a tier, or update an existing one when tier_id is given.

        Raises:
            ValidationError: If a bound or multiplier is not numeric, or the
                bounds are empty/inverted
            NotFoundError: If tier_id does not exist
        """
        name = (name or '').strip()
        if not name:
            raise ValidationError('name', "Tier name cannot be empty")

        min_value = self._parse_bound('min_power', min_power)
        max_value = self._parse_bound('max_power', max_power)
        if min_value >= max_value:
            raise ValidationError(
                'max_power',
                f"Maximum power ({max_value:,}) must be greater than minimum power ({min_value:,})"
            )

        kill_value = self._parse_multiplier('kill_multiplier', kill_multiplier)
        death_value = self._parse_multiplier('death_multiplier', death_multiplier)

        tier = await self.db.save_tier(
            name=name,
            min_power=min_value,
            max_power=max_value,
            kill_multiplier=kill_value,
            death_multiplier=death_value,
            tier_id=tier_id
        )
        if tier is None:
            raise NotFoundError('tier', tier_id)

        self.logger.info(
            f"Tier {'updated' if tier_id is not None else 'created'}: {name} "
            f"[{min_value:,}, {max_value:,}) kills x{kill_value} deaths x{death_value}"
        )
        return tier

    async def delete_tier(self, tier_id: int):
        """
        Raises:
            NotFoundError: If tier_id does not exist
        """
        if not await self.db.delete_tier(tier_id):
            raise NotFoundError('tier', tier_id)
        self.logger.info(f"Tier {tier_id} deleted")

    @staticmethod
    def _parse_bound(field: str, value: Any) -> int:
        if isinstance(value, bool) or value is None or not str(value).strip():
            raise ValidationError(field, f"{field} is required")
        if isinstance(value, (int, float)):
            if value < 0:
                raise ValidationError(field, f"{field} cannot be negative")
            return parse_number(value)
        text = str(value).strip()
        # parse_number reads garbage as 0, so insist on at least one digit
        if not any(ch.isdigit() for ch in text) or text.startswith('-'):
            raise ValidationError(field, f"{field} must be a number, got '{text}'")
        return parse_number(text)

    @staticmethod
    def _parse_multiplier(field: str, value: Any) -> float:
        try:
            number = parse_float(value)
        except (TypeError, ValueError):
            raise ValidationError(field, f"{field} must be a number, got '{value}'")
        if number < 0:
            raise ValidationError(field, f"{field} cannot be negative")
        return number
