"""Application-wide constants for Colosseum.

This module defines constants used by the data model and the battle
engine. Tunable rules live in the settings (see core.config); values here
are fixed parts of the game's contract.
"""

from __future__ import annotations

# =============================================================================
# Combatant Rules
# =============================================================================

PROBABILITY_TOLERANCE = 1e-9
"""Allowed deviation of a behaviour's probability sum from 1.0."""

MAX_NAME_LENGTH = 64
"""Maximum length of a fighter or spell name."""

# =============================================================================
# Dice
# =============================================================================

D20_SIDES = 20
"""Faces on the die used for initiative and critical rolls."""

INITIATIVE_TURN = 0
"""Turn number carried by initiative events (regular turns start at 1)."""

# =============================================================================
# Identifiers
# =============================================================================

BATTLE_ID_PREFIX = "battle_"
"""Prefix of generated battle identifiers."""
