"""Storage module for Colosseum persistence.

Provides:
- BattleStore: SQLite-backed fighters and battle records
- load_fighters / parse_fighters: JSON fighter definition files
"""

from colosseum.storage.loader import load_fighters, parse_fighters
from colosseum.storage.store import BattleStore

__all__ = [
    "BattleStore",
    "load_fighters",
    "parse_fighters",
]
