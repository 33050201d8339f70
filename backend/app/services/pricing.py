"""
Sale price calculation from specific-price rules.

A rule applies when ``now`` is inside its (inclusive, possibly open) window
and its quantity threshold is at most one unit. Among applicable rules the
highest ``from_quantity`` wins.
"""
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models import SpecificPrice


def utcnow() -> datetime:
    """Naive UTC timestamp, the form rule windows are stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _active_rules_query(db: Session, now: datetime):
    return db.query(SpecificPrice).filter(
        SpecificPrice.from_quantity <= 1,
        or_(SpecificPrice.from_date.is_(None), SpecificPrice.from_date <= now),
        or_(SpecificPrice.to_date.is_(None), SpecificPrice.to_date >= now),
    )


def _pick_rule(rules: list[SpecificPrice]) -> SpecificPrice | None:
    if not rules:
        return None
    return sorted(rules, key=lambda r: (-(r.from_quantity or 0), r.id))[0]


def sale_price(db: Session, product_id: int, price, now: datetime | None = None) -> Decimal | None:
    """Discounted price of one product, or None when no rule applies."""
    now = now or utcnow()
    rules = _active_rules_query(db, now).filter(SpecificPrice.product_id == product_id).all()
    rule = _pick_rule(rules)
    return rule.calculate_discounted_price(price) if rule else None


def sale_prices(db: Session, products: list, now: datetime | None = None) -> dict[int, Decimal]:
    """Batch variant of :func:`sale_price` for listings; keyed by product id."""
    if not products:
        return {}
    now = now or utcnow()
    ids = [p.id for p in products]
    rules_by_product = defaultdict(list)
    for rule in _active_rules_query(db, now).filter(SpecificPrice.product_id.in_(ids)).all():
        rules_by_product[rule.product_id].append(rule)

    result = {}
    for product in products:
        rule = _pick_rule(rules_by_product.get(product.id, []))
        if rule is not None:
            result[product.id] = rule.calculate_discounted_price(product.price)
    return result
