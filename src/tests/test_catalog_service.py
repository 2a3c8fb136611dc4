"""Tests for catalog_service: catalog writes and snapshot conversion."""

import pytest

from src.services import catalog_service
from src.services.exceptions import RecipeNotFound, ValidationError
from src.services.ordering import plan_selection


class TestCatalogWrites:
    """Tests for create_ingredient() and create_recipe()."""

    def test_create_ingredient_normalizes_unit(self, test_db):
        result = catalog_service.create_ingredient(
            {"name": "  Mint ", "category": "garnish", "unit": " G "}
        )
        assert result["name"] == "Mint"
        assert result["unit"] == "g"

    def test_create_ingredient_defaults_unit_to_ml(self, test_db):
        result = catalog_service.create_ingredient({"name": "Soda", "category": "mixer"})
        assert result["unit"] == "ml"

    def test_create_ingredient_rejects_unknown_category(self, test_db):
        with pytest.raises(ValidationError) as exc_info:
            catalog_service.create_ingredient({"name": "Bitters", "category": "spice"})
        assert "Unknown ingredient category: spice" in exc_info.value.errors

    def test_create_ingredient_requires_name(self, test_db):
        with pytest.raises(ValidationError):
            catalog_service.create_ingredient({"name": " ", "category": "mixer"})

    def test_create_ingredient_rejects_bad_packs(self, test_db):
        with pytest.raises(ValidationError) as exc_info:
            catalog_service.create_ingredient(
                {
                    "name": "Soda",
                    "category": "mixer",
                    "packs": [{"pack_size": 0}, {"pack_size": 500, "pack_price": -1}],
                }
            )
        assert exc_info.value.errors == [
            "Pack 1: pack size must be a positive number",
            "Pack 2: pack price must be a non-negative number",
        ]

    def test_pack_without_price_is_not_free(self, test_db):
        soda = catalog_service.create_ingredient(
            {
                "name": "Soda",
                "category": "mixer",
                "packs": [{"pack_size": 1000, "pack_price": 2.0}, {"pack_size": 200}],
            }
        )
        recipe = catalog_service.create_recipe(
            "Highball", [{"ingredient_id": soda["id"], "amount_per_serving": 100}]
        )

        recipes = catalog_service.load_recipe_snapshots([recipe["id"]])
        offers = recipes[str(recipe["id"])].components[0].ingredient.pack_offers
        assert sorted(offer.pack_size for offer in offers if offer.pack_price is None) == [200]

        (plan,) = plan_selection({str(recipe["id"]): 10}, recipes)
        assert plan.rounded_total == 1100
        assert plan.total_price is None

    def test_create_recipe_rejects_unknown_ingredient(self, test_db):
        with pytest.raises(ValidationError):
            catalog_service.create_recipe(
                "Mystery", [{"ingredient_id": 999, "amount_per_serving": 10}]
            )


class TestLoadRecipeSnapshots:
    """Tests for ORM -> snapshot conversion."""

    def test_loads_components_in_order(self, sample_catalog):
        snapshots = catalog_service.load_recipe_snapshots()
        recipe_id = str(sample_catalog["Gin & Tonic"])

        snapshot = snapshots[recipe_id]
        assert snapshot.name == "Gin & Tonic"
        assert [c.ingredient.name for c in snapshot.components] == [
            "Gin",
            "Tonic Water",
            "Lime",
            "Highball Glass",
        ]
        assert [c.amount_per_serving for c in snapshot.components] == [50, 150, 0.25, 1]

    def test_ingredient_snapshot_fields(self, sample_catalog):
        snapshot = catalog_service.get_recipe_snapshot(sample_catalog["Gin & Tonic"])
        gin, tonic = snapshot.components[0].ingredient, snapshot.components[1].ingredient

        assert gin.ingredient_id == str(sample_catalog["ingredients"]["Gin"])
        assert gin.category == "liquor"
        assert gin.pack_size is None
        assert len(tonic.pack_offers) == 2
        assert all(offer.offer_id.startswith("pack:") for offer in tonic.pack_offers)
        assert [offer.pack_price for offer in tonic.pack_offers] == [2.5, 0.9]
        assert [offer.tier for offer in tonic.pack_offers] == ["economy", "business"]

    def test_restricts_to_requested_ids(self, sample_catalog):
        snapshots = catalog_service.load_recipe_snapshots([sample_catalog["Gimlet"], 999])
        assert list(snapshots) == [str(sample_catalog["Gimlet"])]

    def test_empty_id_list(self, sample_catalog):
        assert catalog_service.load_recipe_snapshots([]) == {}

    def test_unknown_recipe_raises(self, test_db):
        with pytest.raises(RecipeNotFound):
            catalog_service.get_recipe_snapshot(12345)

    def test_snapshots_plan_end_to_end(self, sample_catalog):
        snapshots = catalog_service.load_recipe_snapshots()
        selection = {str(sample_catalog["Gin & Tonic"]): 10}

        plans = {plan.name: plan for plan in plan_selection(selection, snapshots)}

        assert plans["Gin"].pack_count == 1
        assert plans["Tonic Water"].rounded_total == 1650
        assert [(line.pack_size, line.count) for line in plans["Tonic Water"].pack_plan] == [
            (1000, 2)
        ]
        assert plans["Tonic Water"].total_price == pytest.approx(5.0)
        assert plans["Lime"].rounded_total == 3
        assert plans["Highball Glass"].rounded_total == 24


class TestRecordAdapters:
    """Tests for loosely shaped record conversion."""

    def _record(self):
        return {
            "id": "r1",
            "name": "Margarita",
            "recipe_ingredients": [
                {
                    "ml_per_serving": 50,
                    "ingredients": {
                        "id": "i1",
                        "name": "Tequila",
                        "type": "liquor",
                        "bottle_size_ml": 750,
                    },
                },
                {
                    "amount_per_serving": 25,
                    "ingredients": [
                        {
                            "id": "i2",
                            "name": "Lime Juice",
                            "type": "juice",
                            "unit": "ML",
                            "ingredient_packs": [
                                {"id": 7, "pack_size": 500, "pack_price": "3.20", "is_active": True},
                                {"id": 8, "pack_size": "bad", "is_active": False},
                            ],
                        }
                    ],
                },
                {"ml_per_serving": 5, "ingredients": []},
            ],
        }

    def test_object_or_list_shapes(self):
        snapshot = catalog_service.recipe_from_record(self._record())

        tequila = snapshot.components[0].ingredient
        lime = snapshot.components[1].ingredient
        assert tequila.name == "Tequila"
        assert tequila.category == "liquor"
        assert tequila.pack_size == 750
        assert lime.unit == "ml"
        assert snapshot.components[1].amount_per_serving == 25
        assert snapshot.components[2].ingredient is None

    def test_pack_records(self):
        lime = catalog_service.recipe_from_record(self._record()).components[1].ingredient

        first, second = lime.pack_offers
        assert first.offer_id == "7"
        assert first.pack_price == pytest.approx(3.2)
        assert first.is_active is True
        assert second.pack_size == 0.0
        assert second.is_active is False

    def test_recipes_from_records_keyed_by_id(self):
        recipes = catalog_service.recipes_from_records([self._record()])
        assert list(recipes) == ["r1"]

    def test_selection_from_mapping(self):
        assert catalog_service.selection_from_record({"r1": 10, "r2": 5.0}) == {"r1": 10, "r2": 5}

    def test_selection_from_rows(self):
        rows = [
            {"recipe_id": "r1", "servings": 4},
            {"recipe_id": "r1", "servings": 2},
            {"recipe_id": None, "servings": 3},
            {"recipe_id": "r2", "servings": "n/a"},
        ]
        assert catalog_service.selection_from_record(rows) == {"r1": 6}

    def test_selection_from_none(self):
        assert catalog_service.selection_from_record(None) == {}

    def test_selection_drops_non_positive_servings(self):
        assert catalog_service.selection_from_record({"r1": 0, "r2": -3, "r3": 2}) == {"r3": 2}

    def test_selection_rejects_fractional_servings(self):
        with pytest.raises(ValidationError) as exc_info:
            catalog_service.selection_from_record([{"recipe_id": "r1", "servings": 2.7}])
        assert exc_info.value.errors == ["Servings for recipe r1 must be a whole number."]
