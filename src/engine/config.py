"""
Table rule configuration.

GameRules is an immutable snapshot of the house rules. An EV calculator takes
one at construction and never sees it change, so every cached EV is valid for
exactly one rule set.

Rules file format (one toggle per line, '#' starts a comment):

    NUMBER_OF_DECKS=6
    BLACKJACK_ODDS=1.5
    DEALER_HITS_ON_SOFT_17=true

Booleans are true only for the literal 'true' (case-insensitive). Missing keys
keep their defaults. Problems are reported on stdout and recovered from:
an unreadable file or malformed number falls back to DEFAULT_RULES, and
out-of-range values are corrected by validate_rules().
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path

MIN_DECKS: int = 1
MAX_DECKS: int = 8


@dataclass(frozen=True)
class GameRules:
    num_decks: int = 6
    blackjack_odds: float = 1.5
    surrender: bool = True
    dealer_hits_soft_17: bool = True
    dealer_peeks_for_21: bool = True
    dealer_always_plays_out: bool = False
    natural_blackjack_splits: bool = False
    double_after_split: bool = True
    hit_split_aces: bool = False
    double_split_aces: bool = False


DEFAULT_RULES: GameRules = GameRules()

# Rules-file key -> (GameRules field, parser)
_INT, _FLOAT, _BOOL = "int", "float", "bool"
RULE_KEYS: dict[str, tuple[str, str]] = {
    "NUMBER_OF_DECKS": ("num_decks", _INT),
    "BLACKJACK_ODDS": ("blackjack_odds", _FLOAT),
    "SURRENDER": ("surrender", _BOOL),
    "DEALER_HITS_ON_SOFT_17": ("dealer_hits_soft_17", _BOOL),
    "DEALER_PEAKS_FOR_21": ("dealer_peeks_for_21", _BOOL),
    "DEALER_ALWAYS_PLAYS_OUT": ("dealer_always_plays_out", _BOOL),
    "NATURAL_BLACKJACK_SPLITS": ("natural_blackjack_splits", _BOOL),
    "DOUBLE_AFTER_SPLIT": ("double_after_split", _BOOL),
    "HIT_SPLIT_ACES": ("hit_split_aces", _BOOL),
    "DOUBLE_SPLIT_ACES": ("double_split_aces", _BOOL),
}


# ─── Parsing ──────────────────────────────────────────────────────────────────


def _parse_value(raw: str, kind: str) -> int | float | bool:
    if kind == _INT:
        return int(raw)
    if kind == _FLOAT:
        return float(raw)
    return raw.lower() == "true"


def parse_rules(text: str) -> GameRules:
    """Parse rules-file text into a GameRules (not yet validated).

    Unknown keys and lines without '=' are ignored.

    Raises:
        ValueError: If a numeric value cannot be parsed.

    Examples:
        >>> parse_rules("NUMBER_OF_DECKS=2\\nSURRENDER=false").num_decks
        2
    """
    overrides: dict[str, int | float | bool] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, raw = (part.strip() for part in line.split("=", 1))
        if key not in RULE_KEYS:
            continue
        field_name, kind = RULE_KEYS[key]
        overrides[field_name] = _parse_value(raw, kind)
    return dataclasses.replace(DEFAULT_RULES, **overrides)


def validate_rules(rules: GameRules) -> GameRules:
    """Return rules with out-of-range values corrected, warning on each fix.

    Corrections:
        num_decks outside 1–8        -> 6
        blackjack_odds <= 0          -> 1.5
        double_split_aces without hit_split_aces / double_after_split
                                     -> both forced on
    """
    fixes: dict[str, int | float | bool] = {}
    if not MIN_DECKS <= rules.num_decks <= MAX_DECKS:
        print(f"WARNING: Invalid number of decks ({rules.num_decks}). "
              f"Defaulting to {DEFAULT_RULES.num_decks}.")
        fixes["num_decks"] = DEFAULT_RULES.num_decks
    if rules.blackjack_odds <= 0:
        print(f"WARNING: Invalid blackjack odds ({rules.blackjack_odds}). "
              f"Defaulting to {DEFAULT_RULES.blackjack_odds}.")
        fixes["blackjack_odds"] = DEFAULT_RULES.blackjack_odds
    if rules.double_split_aces and not (rules.hit_split_aces and rules.double_after_split):
        print("WARNING: DOUBLE_SPLIT_ACES requires HIT_SPLIT_ACES and "
              "DOUBLE_AFTER_SPLIT. Enabling both.")
        fixes["hit_split_aces"] = True
        fixes["double_after_split"] = True
    return dataclasses.replace(rules, **fixes) if fixes else rules


def load_rules(path: str | Path) -> GameRules:
    """Load and validate a rules file, falling back to DEFAULT_RULES on error.

    Args:
        path: Location of the KEY=VALUE rules file.

    Returns:
        A validated GameRules.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        print("ERROR: Game rules file not found. Using default settings.")
        return DEFAULT_RULES
    try:
        rules = parse_rules(text)
    except ValueError as exc:
        print(f"ERROR: Invalid format in game rules ({exc}). Using default settings.")
        return DEFAULT_RULES
    return validate_rules(rules)


def rules_to_text(rules: GameRules) -> str:
    """Serialise rules back into the KEY=VALUE file format."""
    lines = []
    for key, (field_name, kind) in RULE_KEYS.items():
        value = getattr(rules, field_name)
        lines.append(f"{key}={str(value).lower() if kind == _BOOL else value}")
    return "\n".join(lines) + "\n"
