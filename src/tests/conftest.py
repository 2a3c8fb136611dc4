"""Pytest configuration and fixtures for service layer tests."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session

from src.models.base import Base
from src.services.database import get_session_factory
from src.services.ordering import IngredientSnapshot, PackOffer, RecipeComponent, RecipeSnapshot
from src.utils.config import reset_config


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Provides the database to the test
    4. Drops all tables after the test completes
    """
    # Create in-memory SQLite database for testing
    engine = create_engine("sqlite:///:memory:", echo=False)

    # Create all tables
    Base.metadata.create_all(engine)

    # Create session factory
    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    # Monkey-patch the global session factory for tests
    import src.services.database as db_module

    original_get_session = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    # Provide database to test
    yield Session

    # Cleanup
    Session.remove()
    Base.metadata.drop_all(engine)

    # Restore original session factory
    db_module.get_session_factory = original_get_session


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Reset the configuration singleton around each test."""
    monkeypatch.delenv("COCKTAIL_ORDER_DATABASE_URL", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def menu():
    """Provide a small recipe catalog as engine snapshots."""
    tequila = IngredientSnapshot("i-tequila", "Tequila", "liquor", "ml")
    rum = IngredientSnapshot("i-rum", "White Rum", "liquor", "ml", pack_size=1000)
    lime = IngredientSnapshot("i-lime", "Lime Juice", "juice", "ml")
    syrup = IngredientSnapshot("i-syrup", "Sugar Syrup", "syrup", "ml")
    mint = IngredientSnapshot("i-mint", "Mint", "garnish", "g")
    glass = IngredientSnapshot(
        "i-glass",
        "Rocks Glass",
        "glassware",
        "pcs",
        pack_offers=(PackOffer("p-glass", 12, 9.0),),
    )

    return {
        "margarita": RecipeSnapshot(
            "margarita",
            "Margarita",
            (
                RecipeComponent(tequila, 50),
                RecipeComponent(lime, 25),
                RecipeComponent(syrup, 10),
                RecipeComponent(glass, 1),
            ),
        ),
        "mojito": RecipeSnapshot(
            "mojito",
            "Mojito",
            (
                RecipeComponent(rum, 50),
                RecipeComponent(lime, 20),
                RecipeComponent(syrup, 15),
                RecipeComponent(mint, 2),
                RecipeComponent(glass, 1),
            ),
        ),
        "daiquiri": RecipeSnapshot(
            "daiquiri",
            "Daiquiri",
            (
                RecipeComponent(rum, 60),
                RecipeComponent(lime, 25),
                RecipeComponent(syrup, 15),
                RecipeComponent(None, 5),
            ),
        ),
    }


@pytest.fixture(scope="function")
def sample_catalog(test_db):
    """Provide a stored catalog: ingredients with packs and three recipes.

    Returns a dict of recipe name -> recipe id plus "ingredients", a dict
    of ingredient name -> ingredient id.
    """
    from src.services import catalog_service

    gin = catalog_service.create_ingredient({"name": "Gin", "category": "liquor"})
    tonic = catalog_service.create_ingredient(
        {
            "name": "Tonic Water",
            "category": "mixer",
            "unit": "ml",
            "packs": [
                {"pack_size": 1000, "pack_price": 2.5, "tier": "economy"},
                {"pack_size": 200, "pack_price": 0.9, "tier": "business"},
            ],
        }
    )
    lime = catalog_service.create_ingredient(
        {"name": "Lime", "category": "garnish", "unit": "pcs"}
    )
    glass = catalog_service.create_ingredient(
        {"name": "Highball Glass", "category": "glassware", "unit": "pcs"}
    )

    gin_tonic = catalog_service.create_recipe(
        "Gin & Tonic",
        [
            {"ingredient_id": gin["id"], "amount_per_serving": 50},
            {"ingredient_id": tonic["id"], "amount_per_serving": 150},
            {"ingredient_id": lime["id"], "amount_per_serving": 0.25},
            {"ingredient_id": glass["id"], "amount_per_serving": 1},
        ],
    )
    gimlet = catalog_service.create_recipe(
        "Gimlet",
        [
            {"ingredient_id": gin["id"], "amount_per_serving": 60},
            {"ingredient_id": lime["id"], "amount_per_serving": 0.5},
        ],
    )
    virgin = catalog_service.create_recipe(
        "Tonic Spritz",
        [{"ingredient_id": tonic["id"], "amount_per_serving": 200}],
    )

    return {
        "Gin & Tonic": gin_tonic["id"],
        "Gimlet": gimlet["id"],
        "Tonic Spritz": virgin["id"],
        "ingredients": {
            "Gin": gin["id"],
            "Tonic Water": tonic["id"],
            "Lime": lime["id"],
            "Highball Glass": glass["id"],
        },
    }
