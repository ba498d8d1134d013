"""Canonical market representation shared by provider adapters and the engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from normalize.names import NameNormalizer

ONE_X_TWO = "1x2"
HOME, DRAW, AWAY = "home", "draw", "away"

# No bookmaker prices above this; larger values are feed errors.
MAX_ODDS = Decimal("10000")


@dataclass(frozen=True)
class BookmakerOdds:
    """One bookmaker's decimal price for one outcome of a market."""

    bookmaker: str
    market: str
    outcome_key: str
    odds: Decimal


@dataclass
class MarketOdds:
    """All competing quotes for one betting market on one event."""

    sport: str
    league: str
    match: str
    market: str
    selections: List[BookmakerOdds] = field(default_factory=list)
    updated_at: Optional[str] = None
    expected_outcomes: Optional[int] = None


def to_decimal(value: Any) -> Optional[Decimal]:
    """Convert a loosely typed number to a finite ``Decimal``, or ``None``.

    The result is rounded to the context precision so pathological inputs
    with thousands of digits stay cheap to work with.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        value = repr(value)
    try:
        result = +(value if isinstance(value, Decimal) else Decimal(value))
    except (ArithmeticError, TypeError, ValueError):
        return None
    return result if result.is_finite() else None


def coerce_odds(value: Any) -> Optional[Decimal]:
    """Return ``value`` as usable decimal odds, or ``None``.

    Odds of 1.0 or lower can never return more than the stake, so they are
    rejected here along with missing, non-numeric, non-finite values and
    values above ``MAX_ODDS``.
    """

    odds = to_decimal(value)
    if odds is None or odds <= 1 or odds > MAX_ODDS:
        return None
    return odds


def build_one_x_two_market(
    sport: str,
    league: str,
    match: str,
    bookmaker: str,
    home: Any = None,
    draw: Any = None,
    away: Any = None,
    market: str = ONE_X_TWO,
    updated_at: Optional[str] = None,
) -> MarketOdds:
    selections = _quotes(bookmaker, market, ((HOME, home), (DRAW, draw), (AWAY, away)))
    return MarketOdds(sport, league, match, market, selections, updated_at, expected_outcomes=3)


def build_two_way_market(
    sport: str,
    league: str,
    match: str,
    market: str,
    bookmaker: str,
    outcome_a: Any = None,
    outcome_b: Any = None,
    key_a: Optional[str] = None,
    key_b: Optional[str] = None,
    updated_at: Optional[str] = None,
) -> MarketOdds:
    selections = _quotes(bookmaker, market, ((key_a or "a", outcome_a), (key_b or "b", outcome_b)))
    return MarketOdds(sport, league, match, market, selections, updated_at, expected_outcomes=2)


def _quotes(bookmaker: str, market: str, pairs: Iterable[Tuple[str, Any]]) -> List[BookmakerOdds]:
    quotes = []
    for key, value in pairs:
        odds = coerce_odds(value)
        if odds is not None:
            quotes.append(BookmakerOdds(bookmaker, market, key, odds))
    return quotes


def market_from_dict(data: Any) -> MarketOdds:
    """Decode a JSON market; unusable selections are dropped.

    Raises ``ValueError`` when the record itself is not shaped like a market.
    """

    if not isinstance(data, Mapping):
        raise ValueError("market must be an object")
    raw_selections = data.get("selections", [])
    if not isinstance(raw_selections, list):
        raise ValueError("market selections must be a list")

    market = str(data.get("market") or "")
    selections: List[BookmakerOdds] = []
    for raw in raw_selections:
        if not isinstance(raw, Mapping):
            continue
        odds = coerce_odds(raw.get("odds"))
        key = raw.get("outcomeKey", raw.get("outcome_key"))
        if odds is None or key is None:
            continue
        selections.append(
            BookmakerOdds(
                bookmaker=str(raw.get("bookmaker") or "unknown"),
                market=str(raw.get("market") or market),
                outcome_key=str(key),
                odds=odds,
            )
        )

    expected = data.get("expectedOutcomes", data.get("expected_outcomes"))
    return MarketOdds(
        sport=str(data.get("sport") or ""),
        league=str(data.get("league") or ""),
        match=str(data.get("match") or ""),
        market=market,
        selections=selections,
        updated_at=data.get("updatedAt", data.get("updated_at")) or None,
        expected_outcomes=expected if isinstance(expected, int) and not isinstance(expected, bool) else None,
    )


def merge_markets(
    markets: Iterable[MarketOdds],
    name_normalizer: Optional[NameNormalizer] = None,
) -> List[MarketOdds]:
    """Combine markets quoted by different bookmakers for the same event.

    Groups are keyed by sport, canonical match name and market label; league
    labels differ too much between providers to take part in the key.
    """

    normalizer = name_normalizer or NameNormalizer()
    merged: Dict[Tuple[str, str, str], MarketOdds] = {}
    for market in markets:
        key = (
            market.sport.casefold().strip(),
            normalizer.canonicalize_match(market.match),
            market.market.casefold().strip(),
        )
        current = merged.get(key)
        if current is None:
            merged[key] = replace(market, selections=list(market.selections))
            continue
        current.selections.extend(market.selections)
        if not current.updated_at and market.updated_at:
            current.updated_at = market.updated_at
        if market.expected_outcomes is not None:
            current.expected_outcomes = max(current.expected_outcomes or 0, market.expected_outcomes)
    return list(merged.values())
