"""Tests for price tercile diversification."""

import random

from laylapet.matching.diversify import diversify, price_terciles
from laylapet.state.models import ScoredProduct


class TestPriceTerciles:
    """Tests for tercile bucketing."""

    def test_equal_buckets(self, product_factory):
        products = [product_factory(str(i), f"P{i}", price=float(i)) for i in range(9, 0, -1)]
        buckets = price_terciles(products)
        assert [[p.price for p in b] for b in buckets] == [
            [1.0, 2.0, 3.0],
            [4.0, 5.0, 6.0],
            [7.0, 8.0, 9.0],
        ]

    def test_uneven_sizes_differ_by_one(self, product_factory):
        products = [product_factory(str(i), f"P{i}", price=float(i)) for i in range(5)]
        sizes = [len(b) for b in price_terciles(products)]
        assert sum(sizes) == 5
        assert max(sizes) - min(sizes) <= 1


class TestDiversify:
    """Tests for diversify (set properties only, selection is random)."""

    def test_quota_per_bucket(self, product_factory):
        products = [product_factory(str(i), f"P{i}", price=float(i)) for i in range(1, 31)]

        result = diversify(products, quota=4, rng=random.Random(7))

        assert len(result) == 12
        assert len({p.id for p in result}) == 12
        prices = [p.price for p in result]
        assert sum(1 for p in prices if p <= 10) == 4
        assert sum(1 for p in prices if 10 < p <= 20) == 4
        assert sum(1 for p in prices if p > 20) == 4

    def test_small_input_returns_everything(self, product_factory):
        products = [product_factory(str(i), f"P{i}", price=float(i)) for i in range(5)]
        result = diversify(products, quota=4, rng=random.Random(1))
        assert sorted(p.id for p in result) == sorted(p.id for p in products)

    def test_seeded_rng_is_reproducible(self, product_factory):
        products = [product_factory(str(i), f"P{i}", price=float(i)) for i in range(30)]
        first = diversify(products, rng=random.Random(3))
        second = diversify(products, rng=random.Random(3))
        assert [p.id for p in first] == [p.id for p in second]

    def test_works_with_scored_products(self, product_factory):
        scored = [
            ScoredProduct(product=product_factory(str(i), f"P{i}", price=float(i)), score=10)
            for i in range(15)
        ]
        result = diversify(scored, quota=2)
        assert len(result) == 6
        assert all(isinstance(s, ScoredProduct) for s in result)

    def test_empty(self):
        assert diversify([]) == []

    def test_input_not_modified(self, product_factory):
        products = [product_factory(str(i), f"P{i}", price=float(30 - i)) for i in range(30)]
        before = list(products)
        diversify(products, rng=random.Random(0))
        assert products == before
