"""Promotion applicability and discounted pricing."""
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Union

from app.schemas.promotion import PromotionInDB


def weekday_index(day: date) -> int:
    """Weekday number used by promotions: 0 = Sunday ... 6 = Saturday."""
    return day.isoweekday() % 7


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def is_promotion_applicable(
    promotion: PromotionInDB, day: Union[date, datetime], hour: int, pitch_id: int
) -> bool:
    """
    Check whether a promotion covers a slot.

    The validity window is inclusive on both ends and compared by calendar
    day. An empty pitch list means the promotion covers every pitch.
    """
    slot_day = _as_date(day)
    if not (_as_date(promotion.valid_from) <= slot_day <= _as_date(promotion.valid_to)):
        return False
    if weekday_index(slot_day) not in promotion.applicable_days:
        return False
    if hour not in promotion.applicable_hours:
        return False
    return not promotion.pitch_ids or pitch_id in promotion.pitch_ids


def select_best_promotion(
    promotions: Iterable[PromotionInDB],
    day: Union[date, datetime],
    hour: int,
    pitch_id: int,
) -> Optional[PromotionInDB]:
    """Return the applicable promotion with the largest discount; first one wins ties."""
    best = None
    for promotion in promotions:
        if not is_promotion_applicable(promotion, day, hour, pitch_id):
            continue
        if best is None or promotion.discount_percent > best.discount_percent:
            best = promotion
    return best


def apply_discount(base_price: Decimal, promotion: Optional[PromotionInDB]) -> Decimal:
    """Price after the promotion's percentage discount."""
    if promotion is None:
        return base_price
    return base_price * (1 - Decimal(promotion.discount_percent) / 100)
