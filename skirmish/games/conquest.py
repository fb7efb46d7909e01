"""
Conquest - Real-time economy rules.

12x10 map with scattered forests and mountains, two neutral cities and
a base per side. Each side starts with 10000 gold and one infantry on
its base.

Key mechanics:
- Shared action-point pool per faction (10 max, +1 per minute)
- Owned cities and bases pay 100 gold every 10 seconds
- Units are bought on owned bases
- Damage scales with both units' remaining health
"""

from ..engine_core.catalog import Catalog, TerrainKind, UnitArchetype
from ..engine_core.rules import (
    ActionEconomy,
    DamageModel,
    GenerationConfig,
    IncomeModel,
    MovementModel,
    Overlay,
    Placement,
    Rules,
    Ruleset,
)

RULES_ID = "conquest"


def create_catalog() -> Catalog:
    return Catalog.build(
        terrains=[
            TerrainKind("plain", movement_cost=1, defense_bonus_pct=0),
            TerrainKind("forest", movement_cost=1, defense_bonus_pct=20),
            TerrainKind("mountain", movement_cost=2, defense_bonus_pct=30),
            TerrainKind("city", movement_cost=1, defense_bonus_pct=30, is_objective=True),
            TerrainKind(
                "base", movement_cost=1, defense_bonus_pct=30,
                is_objective=True, deployable=True,
            ),
        ],
        archetypes=[
            UnitArchetype(
                "infantry", max_health=100, attack=55, defense=50, move_range=3,
                min_attack_range=1, max_attack_range=1, cost=1000, can_capture=True,
            ),
            UnitArchetype(
                "tank", max_health=100, attack=85, defense=70, move_range=6,
                min_attack_range=1, max_attack_range=1, cost=7000,
            ),
            UnitArchetype(
                "artillery", max_health=100, attack=90, defense=40, move_range=5,
                min_attack_range=2, max_attack_range=3, cost=6000,
            ),
        ],
    )


def create_rules() -> Rules:
    """Build the conquest rules bundle."""
    return Rules(
        rules_id=RULES_ID,
        name="Conquest",
        catalog=create_catalog(),
        ruleset=Ruleset(
            damage_model=DamageModel.HEALTH_SCALED,
            action_economy=ActionEconomy.ACTION_POINTS,
            income_model=IncomeModel.REALTIME,
            movement_model=MovementModel.TERRAIN,
            capture_increment=50,
            income_amount=100,
            income_interval_ms=10_000,
            max_action_points=10,
            ap_recovery_ms=60_000,
            starting_resources=10_000,
        ),
        generation=GenerationConfig(
            base_weights={"plain": 1},
            overlays=(
                Overlay("forest", 0.15),
                Overlay("mountain", 0.08),
            ),
            objective_kind="city",
            objectives=((4, 4), (7, 5)),
            base_kind="base",
            home_rows=3,
        ),
        placements=(
            Placement(0, "infantry"),
            Placement(1, "infantry"),
        ),
        factions=("red", "blue"),
        default_width=12,
        default_height=10,
        min_width=8,
        min_height=6,
    )
