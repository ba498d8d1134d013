"""Provider adapters turning raw bookmaker payloads into canonical markets.

Payloads come from third-party endpoints whose shape is not under our control,
so every field is read defensively: a missing or wrongly typed value drops the
affected outcome or event, never the whole batch.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from normalize.markets import BookmakerOdds, MarketOdds, build_one_x_two_market, coerce_odds

logger = logging.getLogger(__name__)

STAKE_MARKET = "Stake Market"


def normalize_one_x_bet(payload: Any) -> List[MarketOdds]:
    """Normalize the 1xBet live feed (``{"Value": [event, ...]}``)."""

    markets: List[MarketOdds] = []
    for event in _list(_get(payload, "Value")):
        league = _text(_get(event, "L")) or "1xBet League"
        match = f"{_text(_get(event, 'O1'))} - {_text(_get(event, 'O2'))}"
        odds_set = next((entry for entry in _list(_get(event, "E")) if _get(entry, "T") == 1), None)
        if odds_set is None:
            continue
        market = _complete_one_x_two(
            "Football",
            league,
            match,
            "1xBet",
            _get(odds_set, "C"),
            _get(odds_set, "D"),
            _get(odds_set, "E"),
        )
        if market:
            markets.append(market)
    return markets


def normalize_ims(payload: Any) -> List[MarketOdds]:
    """Normalize the IMS sportsbook event tree (sports > leagues > events)."""

    markets: List[MarketOdds] = []
    for sport in _list(_get(payload, "sports")):
        sport_name = _text(_get(sport, "name")) or "Football"
        for league in _list(_get(sport, "leagues")):
            league_name = _text(_get(league, "name")) or "Unknown League"
            for event in _list(_get(league, "events")):
                home_team = _text(_get(_get(event, "homeTeam"), "name")) or "TeamA"
                away_team = _text(_get(_get(event, "awayTeam"), "name")) or "TeamB"
                one_x_two = next(
                    (m for m in _list(_get(event, "markets")) if _get(m, "type") == "1X2"),
                    None,
                )
                if one_x_two is None:
                    continue
                prices = {
                    _text(_get(outcome, "type")): _get(outcome, "odds")
                    for outcome in reversed(_list(_get(one_x_two, "outcomes")))
                }
                market = _complete_one_x_two(
                    sport_name,
                    league_name,
                    f"{home_team} - {away_team}",
                    "IMS",
                    prices.get("1"),
                    prices.get("X"),
                    prices.get("2"),
                )
                if market:
                    markets.append(market)
    return markets


def normalize_stake_highrollers(payload: Any) -> List[MarketOdds]:
    """Normalize the Stake GraphQL high-roller bet board.

    Each bet lists its outcomes with their fixture; the fixture of the first
    outcome names the event. Outcome ids become the outcome keys.
    """

    markets: List[MarketOdds] = []
    for item in _list(_get(_get(payload, "data"), "highrollerSportBets")):
        outcomes = _list(_get(_get(item, "bet"), "outcomes"))
        if not outcomes:
            continue
        first = outcomes[0]
        category = _get(_get(_get(first, "fixture"), "tournament"), "category")
        match = _text(_get(first, "fixtureName")) or "Unknown Match"
        league = _text(_get(category, "id")) or "Unknown League"
        sport = _text(_get(_get(category, "sport"), "slug")) or "sport"

        selections = []
        for index, outcome in enumerate(outcomes):
            odds = coerce_odds(_get(outcome, "odds"))
            if odds is None:
                continue
            outcome_id = _text(_get(outcome, "id")) or f"outcome-{index}"
            selections.append(BookmakerOdds("Stake", STAKE_MARKET, outcome_id, odds))

        if len({s.outcome_key for s in selections}) >= 2:
            markets.append(MarketOdds(sport, league, match, STAKE_MARKET, selections))
    return markets


ADAPTERS: Dict[str, Callable[[Any], List[MarketOdds]]] = {
    "onexbet": normalize_one_x_bet,
    "ims": normalize_ims,
    "stake": normalize_stake_highrollers,
}


def _complete_one_x_two(
    sport: str,
    league: str,
    match: str,
    bookmaker: str,
    home: Any,
    draw: Any,
    away: Any,
) -> Optional[MarketOdds]:
    market = build_one_x_two_market(sport, league, match, bookmaker, home=home, draw=draw, away=away)
    if len(market.selections) < 3:
        logger.debug("Skipping incomplete 1x2 market from %s: %s", bookmaker, match)
        return None
    return market


def _get(container: Any, key: str) -> Any:
    if isinstance(container, dict):
        return container.get(key)
    return None


def _list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()
