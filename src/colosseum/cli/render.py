"""Plain-text rendering of fighters and battles.

The battle renderer reads nothing but the starting snapshots and the
battle log, so a stored battle renders the same way every time.
"""
from __future__ import annotations

from collections.abc import Sequence

from colosseum.engine.replay import replay
from colosseum.models.combatant import Combatant
from colosseum.models.enums import BattleStatus, CriticalOutcome
from colosseum.models.events import (
    ActionChosen,
    BattleCompleted,
    BattleEvent,
    DamageApplied,
    EffectRolled,
    HealingApplied,
    InitiativeRolled,
    TurnStarted,
)
from colosseum.models.records import BattleSummary


def render_heading(title: str) -> str:
    """Return a consistent section heading."""
    return f"=== {title} ==="


def _percent(chance: float) -> str:
    return f"{chance * 100:.0f}%"


def render_fighter(fighter: Combatant) -> str:
    """Describe a fighter's stats, spells and behaviour."""
    low, high = fighter.attack_range
    attack = str(low) if low == high else f"{low}-{high}"
    spells = ", ".join(
        f"{spell.name} ({spell.effect.kind} {spell.effect.power})" for spell in fighter.spells
    )
    spell_chances = " ".join(_percent(chance) for chance in fighter.behavior.spell_chances)
    lines = [
        fighter.name,
        f"HP: {fighter.health}/{fighter.max_health} | ATK: {attack} | "
        f"DEF: {fighter.base_defense} | Heal: +{fighter.heal_delta}",
        f"Spells: {spells or '-'}",
        f"Behavior: attack {_percent(fighter.behavior.attack_chance)} | "
        f"heal {_percent(fighter.behavior.heal_chance)} | "
        f"spells [{spell_chances}]",
    ]
    return "\n".join(lines)


def render_fighter_list(fighters: Sequence[Combatant]) -> str:
    if not fighters:
        return "No fighters found."
    width = max(len(fighter.name) for fighter in fighters)
    return "\n".join(
        f"{fighter.name:<{width}}  HP {fighter.max_health:>4}  "
        f"ATK {fighter.base_attack:>3}  DEF {fighter.base_defense:>3}  "
        f"spells {len(fighter.spells)}"
        for fighter in fighters
    )


def render_summaries(summaries: Sequence[BattleSummary]) -> str:
    """One line per battle: id, matchup, status and winner."""
    if not summaries:
        return "No battles found."
    lines = []
    for summary in summaries:
        outcome = summary.status.value
        if summary.status is BattleStatus.COMPLETED:
            outcome = f"winner: {summary.winner}" if summary.winner else "draw"
        lines.append(
            f"{summary.id}  {summary.matchup}  [{outcome}]  "
            f"{summary.created_at:%Y-%m-%d %H:%M:%S}"
        )
    return "\n".join(lines)


def _describe(event: BattleEvent) -> str | None:
    if isinstance(event, InitiativeRolled):
        return f"{event.actor} rolls {event.roll} for initiative"
    if isinstance(event, TurnStarted):
        return f"-- Turn {event.turn}: {event.actor} --"
    if isinstance(event, ActionChosen):
        what = f"casts {event.spell_name}" if event.spell_name else f"chooses {event.action}"
        return f"{event.actor} {what}"
    if isinstance(event, EffectRolled):
        if event.critical is CriticalOutcome.POSITIVE:
            return f"Critical hit! (d20: {event.dice})"
        if event.critical is CriticalOutcome.NEGATIVE:
            return f"Critical miss! (d20: {event.dice})"
        return None
    if isinstance(event, DamageApplied):
        return f"{event.target} takes {event.amount} damage"
    if isinstance(event, HealingApplied):
        return f"{event.target} recovers {event.amount} HP"
    if isinstance(event, BattleCompleted):
        if event.winner is None:
            return f"The battle ends in a draw after {event.turn} turns"
        return f"{event.winner} defeats {event.loser} after {event.turn} turns!"
    return None


def render_battle(snapshots: Sequence[Combatant], events: Sequence[BattleEvent]) -> str:
    """Narrate a battle log turn by turn with both fighters' health.

    Args:
        snapshots: Both combatants as they were before the battle.
        events: The battle log.

    Returns:
        Multi-line narration.
    """
    if len(snapshots) != 2:
        return "Battle has not been fought yet."

    max_health = {snapshot.name: snapshot.max_health for snapshot in snapshots}
    lines = [render_heading(f"{snapshots[0].name} vs {snapshots[1].name}")]
    for frame in replay(snapshots, events).frames:
        text = _describe(frame.event)
        if text is not None:
            lines.append(text)
        if isinstance(frame.event, (DamageApplied, HealingApplied)):
            lines.append(
                "   "
                + " | ".join(
                    f"{name} {health}/{max_health[name]}"
                    for name, health in frame.health.items()
                )
            )
    return "\n".join(lines)


__all__ = [
    "render_heading",
    "render_fighter",
    "render_fighter_list",
    "render_summaries",
    "render_battle",
]
