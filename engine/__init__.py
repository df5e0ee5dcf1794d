"""Core engine package for Misfits."""

__all__ = [
    "cards",
    "deck",
    "placement",
    "mechanics",
    "state",
    "stack",
    "reserve",
    "win",
    "actions",
    "game",
    "view",
    "snapshot",
    "store",
    "rules_schema",
    "service",
]
