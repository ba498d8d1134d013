"""HTTP service exposing detected surebets.

Routes:
- GET /api/surebets - fetch every provider and return the current surebets
- POST /api/surebets - run detection over a caller-supplied market list
"""

from __future__ import annotations

import logging
import os
from typing import Any, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from arb_engine.calculations import DetectionConfig, find_surebets
from controller.scheduler import ScanConfig, ScanController
from normalize.markets import MarketOdds, market_from_dict
from odds_client.client import ProviderClient

logger = logging.getLogger(__name__)


def create_app(controller: Optional[ScanController] = None) -> FastAPI:
    """Build the application; ``controller`` defaults to one using live providers."""

    app = FastAPI(title="Surebet Scanner")
    app.state.controller = controller or ScanController(ProviderClient())

    @app.get("/api/surebets")
    def get_surebets(minRoi: Optional[str] = None, stake: Optional[str] = None):
        detection = DetectionConfig.from_values(_number(stake), _number(minRoi))
        logger.info("Surebet scan requested (stake=%s, minRoi=%s)", detection.total_stake, detection.min_roi_pct)
        config = ScanConfig(total_stake=detection.total_stake, min_roi_pct=detection.min_roi_pct)
        result = app.state.controller.run_snapshot(config)
        return result.to_dict()

    @app.post("/api/surebets")
    async def post_surebets(request: Request):
        try:
            body = await request.json()
            markets = _markets(body)
        except ValueError as exc:
            logger.warning("Rejected surebet request: %s", exc)
            return JSONResponse(status_code=400, content={"error": "Invalid payload"})

        detection = DetectionConfig.from_values(
            _json_number(body.get("totalStake")),
            _json_number(body.get("minRoiPct")),
        )
        surebets = find_surebets(markets, detection)
        return {"count": len(surebets), "surebets": [surebet.to_dict() for surebet in surebets]}

    return app


def _markets(body: Any) -> List[MarketOdds]:
    if not isinstance(body, dict):
        raise ValueError("request body must be an object")
    raw = body.get("markets") or []
    if not isinstance(raw, list):
        raise ValueError("markets must be a list")
    return [market_from_dict(entry) for entry in raw]


def _number(value: Optional[str]) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning("Ignoring non-numeric query value %r", value)
        return None


def _json_number(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def main() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")
    uvicorn.run(
        create_app(),
        host=os.environ.get("SUREBET_HOST", "0.0.0.0"),
        port=int(os.environ.get("SUREBET_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
