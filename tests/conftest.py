"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from laylapet.state.models import Product


@pytest.fixture(autouse=True)
def reset_globals(tmp_path: Path):
    """Give every test fresh singletons and a temporary cache path."""
    from laylapet.agents.assistant import reset_chat_assistant
    from laylapet.cache.manager import reset_catalog_cache
    from laylapet.config import settings as settings_module
    from laylapet.state.recency import reset_recency_tracker
    from laylapet.tools.openai_client import reset_llm_provider
    from laylapet.tools.shopify_client import reset_catalog_provider

    original_cache_path = settings_module.settings.cache_path
    settings_module.settings.cache_path = tmp_path / "catalog_cache.db"

    resets = (
        reset_chat_assistant,
        reset_catalog_cache,
        reset_recency_tracker,
        reset_llm_provider,
        reset_catalog_provider,
    )
    for reset in resets:
        reset()
    yield
    for reset in resets:
        reset()
    settings_module.settings.cache_path = original_cache_path


def make_product(product_id: str, title: str, **fields) -> Product:
    """Build a Product with a slug derived from the title."""
    fields.setdefault("slug", title.lower().replace(" ", "-"))
    fields.setdefault("in_stock", True)
    return Product(id=product_id, title=title, **fields)


@pytest.fixture
def product_factory():
    """Factory for ad-hoc products."""
    return make_product


@pytest.fixture
def pet_catalog() -> list[Product]:
    """A small mixed pet shop catalog."""
    return [
        make_product(
            "1",
            "Royal Canin Kitten Chicken",
            vendor="Royal Canin",
            category="Kedi Maması",
            tags=["kedi", "mama", "yavru"],
            description="Tavuklu yavru kedi maması",
            price=450.0,
            image_url="https://cdn.example.com/royal.jpg",
        ),
        make_product(
            "2",
            "Acana Cat Fish",
            vendor="Acana",
            category="cat",
            tags=["food"],
            description="Tahılsız balıklı kedi maması. Grain-free.",
            price=620.0,
        ),
        make_product(
            "3",
            "Pro Plan Adult Dog Lamb",
            vendor="Pro Plan",
            category="Köpek Maması",
            tags=["köpek", "mama", "yetişkin"],
            description="Kuzu etli yetişkin köpek maması",
            price=540.0,
        ),
        make_product(
            "4",
            "Bio PetActive Kedi Şampuanı",
            vendor="Bio PetActive",
            category="Kedi Bakım",
            tags=["şampuan", "bakım"],
            description="Parfümsüz hassas şampuan",
            price=120.0,
        ),
        make_product(
            "5",
            "Ever Clean Kedi Kumu",
            vendor="Ever Clean",
            category="Kedi Kumu",
            tags=["kum", "litter"],
            price=300.0,
        ),
        make_product(
            "6",
            "Kong Köpek Oyuncağı",
            vendor="Kong",
            category="Köpek Oyuncak",
            tags=["oyuncak", "toy"],
            price=180.0,
            in_stock=False,
        ),
    ]
