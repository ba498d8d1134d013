from decimal import Decimal

import pytest

from normalize.providers import (
    ADAPTERS,
    normalize_ims,
    normalize_one_x_bet,
    normalize_stake_highrollers,
)


@pytest.mark.parametrize("adapter", list(ADAPTERS.values()))
@pytest.mark.parametrize("payload", [None, {}, [], "error", 42, {"Value": None, "sports": "x", "data": []}])
def test_adapters_tolerate_absent_or_malformed_payloads(adapter, payload):
    assert adapter(payload) == []


def test_one_x_bet_reads_main_odds_set():
    payload = {
        "Value": [
            {
                "L": "Premier League",
                "O1": "Arsenal",
                "O2": "Chelsea",
                "E": [{"T": 4, "C": 9.0}, {"T": 1, "C": 2.2, "D": "3.4", "E": 3.3}],
            },
            {"O1": "Leeds", "O2": "Everton", "E": [{"T": 1, "C": 2.0, "D": 3.1}]},
            {"O1": "No", "O2": "Odds"},
            None,
        ]
    }

    [market] = normalize_one_x_bet(payload)

    assert market.match == "Arsenal - Chelsea"
    assert market.league == "Premier League"
    assert market.sport == "Football"
    assert [(s.bookmaker, s.outcome_key, s.odds) for s in market.selections] == [
        ("1xBet", "home", Decimal("2.2")),
        ("1xBet", "draw", Decimal("3.4")),
        ("1xBet", "away", Decimal("3.3")),
    ]


def test_one_x_bet_league_fallback():
    payload = {"Value": [{"O1": "A", "O2": "B", "E": [{"T": 1, "C": 2.2, "D": 3.4, "E": 3.3}]}]}
    assert normalize_one_x_bet(payload)[0].league == "1xBet League"


def test_ims_walks_sport_league_event_tree():
    payload = {
        "sports": [
            {
                "name": "Soccer",
                "leagues": [
                    {
                        "name": "Serie A",
                        "events": [
                            {
                                "homeTeam": {"name": "Milan"},
                                "awayTeam": {"name": "Inter"},
                                "markets": [
                                    {"type": "OU", "outcomes": [{"type": "O", "odds": 1.9}]},
                                    {
                                        "type": "1X2",
                                        "outcomes": [
                                            {"type": "1", "odds": 2.6},
                                            {"type": "X", "odds": 3.2},
                                            {"type": "2", "odds": 2.9},
                                        ],
                                    },
                                ],
                            },
                            {
                                "markets": [
                                    {
                                        "type": "1X2",
                                        "outcomes": [
                                            {"type": "1", "odds": 2.6},
                                            {"type": "X", "odds": None},
                                            {"type": "2", "odds": 2.9},
                                        ],
                                    }
                                ]
                            },
                        ],
                    },
                    {"events": [{"markets": [{"type": "1X2", "outcomes": [{"type": ["1"], "odds": 2}]}]}]},
                ],
            }
        ]
    }

    [market] = normalize_ims(payload)

    assert (market.sport, market.league, market.match) == ("Soccer", "Serie A", "Milan - Inter")
    assert {s.outcome_key: s.odds for s in market.selections} == {
        "home": Decimal("2.6"),
        "draw": Decimal("3.2"),
        "away": Decimal("2.9"),
    }


def test_ims_team_and_league_fallbacks():
    payload = {
        "sports": [
            {
                "leagues": [
                    {
                        "events": [
                            {
                                "markets": [
                                    {
                                        "type": "1X2",
                                        "outcomes": [
                                            {"type": "1", "odds": 2.6},
                                            {"type": "X", "odds": 3.2},
                                            {"type": "2", "odds": 2.9},
                                        ],
                                    }
                                ]
                            }
                        ]
                    }
                ]
            }
        ]
    }
    [market] = normalize_ims(payload)
    assert (market.sport, market.league, market.match) == ("Football", "Unknown League", "TeamA - TeamB")


def test_stake_highrollers_uses_outcome_ids_and_drops_bad_odds():
    fixture = {"tournament": {"category": {"id": "england", "sport": {"slug": "soccer"}}}}
    payload = {
        "data": {
            "highrollerSportBets": [
                {
                    "bet": {
                        "outcomes": [
                            {"id": "o1", "odds": 2.5, "fixtureName": "A - B", "fixture": fixture},
                            {"id": "o2", "odds": "2.4"},
                            {"id": "o3", "odds": None},
                            {"odds": 7},
                        ]
                    }
                },
                {"bet": {"outcomes": [{"id": "x", "odds": 2.0}]}},
                {"bet": None},
            ]
        }
    }

    [market] = normalize_stake_highrollers(payload)

    assert (market.sport, market.league, market.match) == ("soccer", "england", "A - B")
    assert [s.outcome_key for s in market.selections] == ["o1", "o2", "outcome-3"]
    assert all(s.bookmaker == "Stake" for s in market.selections)


def test_stake_highrollers_fallback_labels():
    payload = {"data": {"highrollerSportBets": [{"bet": {"outcomes": [{"id": 1, "odds": 2}, {"id": 2, "odds": 3}]}}]}}
    [market] = normalize_stake_highrollers(payload)
    assert (market.sport, market.league, market.match) == ("sport", "Unknown League", "Unknown Match")
