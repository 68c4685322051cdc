"""Typed domain exceptions for game rule violations.

Illegal commands and illegal-state queries raise subclasses of GameRuleError.
Claim and meld declarations do not raise: they soft-deny by returning the
unchanged state, so callers treat "nothing changed" as a rejection.
"""


class GameRuleError(Exception):
    """Base exception for game rule violations."""


class InvalidActionError(GameRuleError):
    """Action is not valid in the current game state (wrong seat, wrong phase)."""


class InvalidDiscardError(GameRuleError):
    """Tile cannot be discarded (not in hand, bonus tile)."""


class NoPlayableTilesError(GameRuleError):
    """A discard decision was requested for a hand with no playable tiles."""


class UnsupportedSettingsError(GameRuleError):
    """Game settings contain values the engine cannot honor."""


class InvalidMeldError(GameRuleError):
    """Tiles do not form the requested meld shape."""
