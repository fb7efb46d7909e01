"""
Skirmish - Tactical Grid Combat Engine

A deterministic, command-driven engine for turn-based tactical combat
on a terrain grid. The engine provides:
- Seeded board generation
- Movement (reachability) and attack (targeting) queries
- Combat resolution with configurable damage models
- Objective capture and resource income
- Turn and action-point economies
"""

__version__ = "0.1.0"
