"""Static catalogue of the odds providers scanned for surebets.

Each entry describes the single request that returns a provider's odds
snapshot. Access tokens are never stored here; entries name the environment
variable holding the token and the header it is sent in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

_STAKE_HIGHROLLER_QUERY = """query BetsBoard_HighrollerSportBets($limit: Int!) {
  highrollerSportBets(limit: $limit) {
    id iid bet {
      __typename
      ... on SportBet {
        id
        outcomes {
          id
          odds
          fixtureName
          fixtureAbreviation
          fixture {
            id
            tournament {
              id
              category { id sport { id slug } }
            }
          }
        }
      }
    }
  }
}"""


@dataclass(frozen=True)
class ProviderInfo:
    """Description of one provider endpoint."""

    key: str
    title: str
    url: str
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None
    token_env: Optional[str] = None
    token_header: Optional[str] = None
    token_prefix: str = ""


# NOTE: Keep entries sorted alphabetically by key.
PROVIDERS: List[ProviderInfo] = [
    ProviderInfo(
        key="ims",
        title="IMS Sportsbook",
        url="https://sb.imsptdls.com/api/Event/GetSportEvents",
        method="POST",
        headers={"content-type": "application/json"},
        body={
            "SportId": 1,
            "Market": 3,
            "BetTypeIds": [1, 2, 3],
            "PeriodIds": [1, 2],
            "IsCombo": False,
            "OddsType": 2,
            "DateFrom": None,
            "DateTo": None,
            "CompetitionIds": [],
            "SortType": 2,
            "ProgrammeIds": [],
        },
        token_env="IMS_ACCESS_TOKEN",
        token_header="x-token",
    ),
    ProviderInfo(
        key="onexbet",
        title="1xBet",
        url=(
            "https://fun1x888.com/service-api/LiveFeed/Get1x2_VZip"
            "?count=20&lng=en&gr=819&mode=4&country=43&virtualSports=true&noFilterBlockEvent=true"
        ),
    ),
    ProviderInfo(
        key="stake",
        title="Stake",
        url="https://stake.com/_api/graphql",
        method="POST",
        headers={
            "accept": "*/*",
            "content-type": "application/json",
            "origin": "https://stake.com",
            "referer": "https://stake.com/",
        },
        body={
            "query": _STAKE_HIGHROLLER_QUERY,
            "variables": {"limit": 10},
            "operationName": "BetsBoard_HighrollerSportBets",
        },
        token_env="STAKE_ACCESS_TOKEN",
        token_header="x-access-token",
    ),
]


def get_provider(key: str) -> Optional[ProviderInfo]:
    for provider in PROVIDERS:
        if provider.key == key:
            return provider
    return None
