"""Arbitrage detection and stake allocation helpers."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from fractions import Fraction
from typing import Any, Dict, Iterable, List, Optional

from normalize.markets import MAX_ODDS, BookmakerOdds, MarketOdds, to_decimal

logger = logging.getLogger(__name__)

DEFAULT_TOTAL_STAKE = Decimal("100")
DEFAULT_MIN_ROI_PCT = Decimal("0")
CENT = Decimal("0.01")


class OddsConversionError(ValueError):
    """Raised when an odds value cannot be converted."""


@dataclass
class DetectionConfig:
    """Budget and ROI threshold for one detection run."""

    total_stake: Decimal = DEFAULT_TOTAL_STAKE
    min_roi_pct: Decimal = DEFAULT_MIN_ROI_PCT

    @classmethod
    def from_values(cls, total_stake: Any = None, min_roi_pct: Any = None) -> "DetectionConfig":
        """Build a config, substituting defaults for unusable values."""

        stake = to_decimal(total_stake)
        if stake is None or stake <= 0:
            if total_stake is not None:
                logger.warning("Invalid total stake %r, using default %s", total_stake, DEFAULT_TOTAL_STAKE)
            stake = DEFAULT_TOTAL_STAKE

        min_roi = to_decimal(min_roi_pct)
        if min_roi is None:
            if min_roi_pct is not None:
                logger.warning("Invalid minimum ROI %r, using default %s", min_roi_pct, DEFAULT_MIN_ROI_PCT)
            min_roi = DEFAULT_MIN_ROI_PCT

        return cls(total_stake=stake, min_roi_pct=min_roi)


@dataclass
class SurebetBet:
    """Stake instruction for one leg of a surebet."""

    bookmaker: str
    market: str
    outcome_key: str
    odds: Decimal
    stake: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bookmaker": self.bookmaker,
            "market": self.market,
            "outcomeKey": self.outcome_key,
            "odds": float(self.odds),
            "stake": float(self.stake),
        }


@dataclass
class Surebet:
    """Detected arbitrage with an executable stake plan."""

    id: str
    roi: Decimal
    profit: Decimal
    sport: str
    league: str
    match: str
    updated_at: str
    bets: List[SurebetBet]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "roi": float(self.roi),
            "profit": float(self.profit),
            "sport": self.sport,
            "league": self.league,
            "match": self.match,
            "updatedAt": self.updated_at,
            "bets": [bet.to_dict() for bet in self.bets],
        }


@dataclass
class ArbitrageOpportunity:
    """Unrounded arbitrage result for one set of best prices."""

    profit: Fraction
    roi_pct: Fraction
    stakes: Dict[str, Fraction]


def odds_to_fraction(odds: Any) -> Fraction:
    """Exact rational value of decimal odds.

    Rejects non-positive, non-finite and out-of-range values so the exact
    arithmetic downstream stays bounded.
    """

    value = to_decimal(odds)
    if value is None or value <= 0 or value > MAX_ODDS:
        raise OddsConversionError(f"Unusable odds value: {odds!r}")
    return Fraction(value)


def select_best_prices(quotes: Iterable[BookmakerOdds]) -> Dict[str, BookmakerOdds]:
    """Keep the highest quote per outcome key.

    On equal odds the quote seen first wins, so the reported bookmaker follows
    input order.
    """

    best: Dict[str, BookmakerOdds] = {}
    for quote in quotes:
        try:
            odds = odds_to_fraction(quote.odds)
        except OddsConversionError:
            continue
        current = best.get(quote.outcome_key)
        if current is None or odds > odds_to_fraction(current.odds):
            best[quote.outcome_key] = quote
    return best


def implied_probability_sum(prices: Dict[str, BookmakerOdds]) -> Fraction:
    return sum((1 / odds_to_fraction(quote.odds) for quote in prices.values()), start=Fraction(0))


def detect_arbitrage(
    prices: Dict[str, BookmakerOdds],
    total_stake: Decimal,
) -> Optional[ArbitrageOpportunity]:
    """Split ``total_stake`` so every outcome returns the same payout.

    Returns ``None`` unless the implied probabilities sum to strictly less
    than one. The sum is exact, so break-even books are never reported.
    """

    if len(prices) < 2:
        return None

    implied_sum = implied_probability_sum(prices)
    if implied_sum >= 1:
        return None

    stake = Fraction(total_stake)
    payout = stake / implied_sum
    profit = payout - stake
    stakes = {
        key: stake * (1 / odds_to_fraction(quote.odds)) / implied_sum
        for key, quote in prices.items()
    }
    return ArbitrageOpportunity(
        profit=profit,
        roi_pct=profit / stake * 100,
        stakes=stakes,
    )


def find_surebets(
    markets: Iterable[MarketOdds],
    config: Optional[DetectionConfig] = None,
    now: Optional[datetime] = None,
) -> List[Surebet]:
    """Detect surebets across ``markets``, best ROI first.

    Ids are numbered per call. Each leg stake is rounded on its own; rounding
    drift across legs is left as is.
    """

    config = config or DetectionConfig()
    config = DetectionConfig.from_values(config.total_stake, config.min_roi_pct)
    min_roi = Fraction(config.min_roi_pct)
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    sequence = itertools.count(1)

    surebets: List[Surebet] = []
    evaluated = 0
    for market in markets:
        best = select_best_prices(market.selections)
        if len(best) < max(2, market.expected_outcomes or 0):
            continue
        evaluated += 1

        opportunity = detect_arbitrage(best, config.total_stake)
        if opportunity is None or opportunity.roi_pct < min_roi:
            continue

        bets = [
            SurebetBet(
                bookmaker=quote.bookmaker,
                market=market.market,
                outcome_key=key,
                odds=quote.odds,
                stake=round2(opportunity.stakes[key]),
            )
            for key, quote in best.items()
        ]
        surebets.append(
            Surebet(
                id=f"{market.match}-{market.market}-{next(sequence)}",
                roi=round2(opportunity.roi_pct),
                profit=round2(opportunity.profit),
                sport=market.sport,
                league=market.league,
                match=market.match,
                updated_at=market.updated_at or timestamp,
                bets=bets,
            )
        )

    surebets.sort(key=lambda surebet: surebet.roi, reverse=True)
    logger.debug("Detection run completed: %d markets evaluated, %d surebets", evaluated, len(surebets))
    return surebets


def round2(value: Fraction) -> Decimal:
    exact = Decimal(value.numerator) / Decimal(value.denominator)
    return exact.quantize(CENT, rounding=ROUND_HALF_UP)

