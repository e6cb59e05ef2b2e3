"""
Simulation Control Endpoints

Drive the in-memory collaborators: fund accounts, move the pool price,
accrue swap fees, advance the clock and rebuild the environment.
"""
from fastapi import APIRouter, Depends, HTTPException

from app.api.schemas import (
    AccrueFeesRequest,
    AdvanceClockRequest,
    FundRequest,
    MovePriceRequest,
    ResetRequest,
    SimulationStateResponse,
    VaultStateResponse,
)
from app.config import settings
from app.core.vault_service import VaultService, get_service, reset_service

router = APIRouter()

CONFIG_OVERRIDES = (
    "rebalance_width_bps",
    "min_rebalance_interval",
    "max_tick_deviation",
    "protocol_fee_bps",
    "protocol_fee_recipient",
)


def _sim_state(service: VaultService) -> SimulationStateResponse:
    return SimulationStateResponse(tick=service.env.pool.slot0().tick, now=service.env.clock())


@router.post("/sim/fund")
async def fund(request: FundRequest, service: VaultService = Depends(get_service)):
    """Mint both tokens to an account (and approve the vault)"""
    service.env.fund(request.account, request.amount0, request.amount1, approve=request.approve)
    print(f"[Sim] Funded {request.account}: {request.amount0} / {request.amount1}")
    return {
        "account": request.account.lower(),
        "balance0": service.env.token0.balance_of(request.account),
        "balance1": service.env.token1.balance_of(request.account),
    }


@router.post("/sim/price", response_model=SimulationStateResponse)
async def move_price(request: MovePriceRequest, service: VaultService = Depends(get_service)):
    """Move the pool to a tick, crossing initialized ticks on the way"""
    service.env.pool.move_to_tick(request.tick)
    return _sim_state(service)


@router.post("/sim/fees", response_model=SimulationStateResponse)
async def accrue_fees(request: AccrueFeesRequest, service: VaultService = Depends(get_service)):
    """Distribute swap fees to liquidity active at the current tick"""
    service.env.pool.accrue_fees(request.amount0, request.amount1)
    return _sim_state(service)


@router.post("/sim/advance", response_model=SimulationStateResponse)
async def advance_clock(request: AdvanceClockRequest, service: VaultService = Depends(get_service)):
    """Advance the simulated clock"""
    service.env.clock.advance(request.seconds)
    return _sim_state(service)


@router.post("/sim/reset", response_model=VaultStateResponse)
async def reset(request: ResetRequest):
    """Rebuild the environment with optional configuration overrides"""
    overrides = {
        name: getattr(request, name)
        for name in CONFIG_OVERRIDES
        if getattr(request, name) is not None
    }
    base = settings.vault_config()
    config = base.create(**{**base.model_dump(), **overrides})
    if request.fee is not None and request.fee not in (100, 500, 3000, 10000):
        raise HTTPException(status_code=422, detail=f"Unsupported fee tier {request.fee}")

    print(f"[Sim] Reset at tick {request.tick} with {overrides or 'default config'}")
    service = reset_service(config, tick=request.tick, fee=request.fee)
    return VaultStateResponse(**service.state())
