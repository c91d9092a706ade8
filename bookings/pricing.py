from decimal import Decimal
from typing import Any, Mapping


def _price(package: Mapping[str, Any], field: str) -> Decimal:
    # str() keeps the decimal the client typed instead of the binary float expansion
    return Decimal(str(package.get(field) or 0))


def compute_total_price(package: Mapping[str, Any], selected_options: Mapping[str, Any]) -> float:
    """
    Price of a booking: base price plus every selected add-on.
    Add-ons the package does not price (missing or zero) cost nothing.
    """
    total = _price(package, "base_price")
    if selected_options.get("food"):
        total += _price(package, "food_price")
    if selected_options.get("accommodation"):
        total += _price(package, "accommodation_price")
    return float(total)
