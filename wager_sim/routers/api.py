from typing import List, Optional, Union

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from wager_sim.core.logger import get_logger
from wager_sim.core.models import GameId
from wager_sim.core.session import ActionResult, SessionCoordinator

logger = get_logger("api")

router = APIRouter()

# ==================== Request Models ====================

class BetRequest(BaseModel):
    bet: int


class CrashStartRequest(BaseModel):
    bet: int
    auto_cashout: Optional[float] = None


class RouletteSelection(BaseModel):
    type: str
    value: Union[int, str]


class RouletteRequest(BaseModel):
    bet: int
    selections: List[RouletteSelection] = Field(default_factory=list)


class DiceRequest(BaseModel):
    bet: int
    bet_type: str


# ==================== Helpers ====================

def get_coordinator(request: Request) -> SessionCoordinator:
    return request.app.state.coordinator


def respond(result: ActionResult) -> dict:
    """Rejected intents become a 400 carrying the error kind and severity."""
    if not result.ok:
        raise HTTPException(
            status_code=400,
            detail={"kind": result.error, "message": result.message, "severity": result.severity},
        )
    return result.to_dict()


# ==================== State ====================

@router.get("/state")
async def get_state(request: Request):
    return get_coordinator(request).state()


@router.get("/history")
async def get_history(request: Request):
    ledger = get_coordinator(request).ledger
    return {
        "history": [entry.to_dict() for entry in ledger.history],
        "profit_series": list(ledger.profit_series),
        **ledger.totals(),
    }


@router.post("/stats/reset")
async def reset_stats(request: Request):
    return respond(get_coordinator(request).reset_stats())


# ==================== Crash ====================

@router.post("/crash/start")
async def crash_start(request: Request, data: CrashStartRequest):
    return respond(
        get_coordinator(request).start_round(GameId.CRASH, data.bet, auto_cashout=data.auto_cashout)
    )


@router.post("/crash/cashout")
async def crash_cashout(request: Request):
    return respond(get_coordinator(request).cash_out())


# ==================== Roulette ====================

@router.post("/roulette/spin")
async def roulette_spin(request: Request, data: RouletteRequest):
    selections = [selection.model_dump() for selection in data.selections]
    return respond(
        get_coordinator(request).start_round(GameId.ROULETTE, data.bet, selections=selections)
    )


# ==================== Blackjack ====================

@router.post("/blackjack/deal")
async def blackjack_deal(request: Request, data: BetRequest):
    return respond(get_coordinator(request).start_round(GameId.BLACKJACK, data.bet))


@router.post("/blackjack/{action}")
async def blackjack_action(request: Request, action: str):
    return respond(get_coordinator(request).act(GameId.BLACKJACK, action))


# ==================== Slots & Dice ====================

@router.get("/slots/paytable")
async def slots_paytable(request: Request):
    return get_coordinator(request).engines[GameId.SLOTS].paytable()


@router.post("/slots/spin")
async def slots_spin(request: Request, data: BetRequest):
    return respond(get_coordinator(request).start_round(GameId.SLOTS, data.bet))


@router.post("/dice/roll")
async def dice_roll(request: Request, data: DiceRequest):
    return respond(
        get_coordinator(request).start_round(GameId.DICE, data.bet, bet_type=data.bet_type)
    )
