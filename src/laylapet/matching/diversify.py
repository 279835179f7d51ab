"""Price-range diversification of ranked products."""

import random
from typing import Optional, TypeVar

from laylapet.state.models import Product, ScoredProduct

T = TypeVar("T", Product, ScoredProduct)


def _price(item) -> float:
    product = item.product if isinstance(item, ScoredProduct) else item
    return product.price


def price_terciles(items: list[T]) -> list[list[T]]:
    """Split items, sorted by ascending price, into cheap/mid/expensive buckets.

    Bucket sizes differ by at most one.
    """
    by_price = sorted(items, key=_price)
    n = len(by_price)
    bounds = [n * i // 3 for i in range(4)]
    return [by_price[bounds[i]:bounds[i + 1]] for i in range(3)]


def diversify(
    ranked: list[T],
    quota: int = 4,
    rng: Optional[random.Random] = None,
) -> list[T]:
    """Resample ranked products across price terciles.

    Draws up to ``quota`` items from each tercile without replacement and
    shuffles the combined selection. This trades relevance order for price
    variety and can demote the single best match.

    Args:
        ranked: Ranked products (Product or ScoredProduct)
        quota: Items sampled per tercile
        rng: Random source (seed it for reproducible output)

    Returns:
        At most ``3 * quota`` distinct items in random order
    """
    rng = rng or random.Random()
    selection: list[T] = []
    for bucket in price_terciles(ranked):
        selection.extend(rng.sample(bucket, min(quota, len(bucket))))
    rng.shuffle(selection)
    return selection
