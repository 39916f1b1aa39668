"""Pydantic V2 schemas for Colosseum.

Submodules:
    enums: Closed vocabularies (ActionKind, CriticalOutcome, TurnPhase, ...)
    combatant: Combatant stat block, spells and behaviour weights
    events: Immutable battle events and the battle log adapter
    records: Persisted battle records and summaries

Example:
    >>> from colosseum.models import Combatant
    >>> shadow = Combatant.from_definition({
    ...     "name": "Shadow",
    ...     "health": 45,
    ...     "base_attack": 5,
    ...     "heal_delta": 5,
    ...     "behavior": {"attack_chance": 0.7, "heal_chance": 0.3},
    ... })
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from colosseum.models.enums import (
    ActionKind,
    BattleStatus,
    CompletionReason,
    CriticalOutcome,
    EffectKind,
    Side,
    TurnPhase,
)

# =============================================================================
# Combatants
# =============================================================================
from colosseum.models.combatant import (
    ActionChoice,
    Behavior,
    Combatant,
    Spell,
    SpellEffect,
)

# =============================================================================
# Events & Records
# =============================================================================
from colosseum.models.events import (
    ActionChosen,
    BattleCompleted,
    BattleEvent,
    DamageApplied,
    EffectRolled,
    HealingApplied,
    InitiativeRolled,
    TurnStarted,
    battle_log_adapter,
)
from colosseum.models.records import BattleRecord, BattleSummary


__all__ = [
    # Enumerations
    "ActionKind",
    "BattleStatus",
    "CompletionReason",
    "CriticalOutcome",
    "EffectKind",
    "Side",
    "TurnPhase",
    # Combatants
    "ActionChoice",
    "Behavior",
    "Combatant",
    "Spell",
    "SpellEffect",
    # Events
    "ActionChosen",
    "BattleCompleted",
    "BattleEvent",
    "DamageApplied",
    "EffectRolled",
    "HealingApplied",
    "InitiativeRolled",
    "TurnStarted",
    "battle_log_adapter",
    # Records
    "BattleRecord",
    "BattleSummary",
]
