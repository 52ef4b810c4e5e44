# utils/pricing.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

# Sell price is 30% of the buy price
SELL_PRICE_PERCENT = Decimal(30)

# Scale of Product.price_sell (Numeric(12, 2))
_CENTS = Decimal("0.01")


def derive_price_sell(price_buy: Union[Decimal, int, str]) -> Decimal:
    """Return the sell price for a given buy price.

    The result is rounded half-up to two decimal places so the value that is
    computed is exactly the value the database column keeps.
    """
    price_buy = Decimal(price_buy)
    return (price_buy * SELL_PRICE_PERCENT / 100).quantize(_CENTS, rounding=ROUND_HALF_UP)


def apply_pricing(product) -> None:
    # Any user supplied price_sell is overwritten.
    product.price_sell = derive_price_sell(product.price_buy)
