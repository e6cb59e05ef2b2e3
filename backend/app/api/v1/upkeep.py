"""
Upkeep Endpoints

Trigger surface for an external automation network: a side-effect-free
check that returns the observed tick payload, and the rebalance execution.
"""
from fastapi import APIRouter, Depends, HTTPException

from range_vault.vault import decode_observed_tick

from app.api.schemas import (
    PerformUpkeepRequest,
    RebalancePreviewResponse,
    RebalanceResponse,
    UpkeepCheckResponse,
)
from app.core.vault_service import VaultService, get_service

router = APIRouter()


def _parse_payload(perform_data: str) -> bytes:
    try:
        return bytes.fromhex(perform_data[2:] if perform_data.startswith("0x") else perform_data)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"perform_data is not hex: {perform_data}")


@router.get("/upkeep/check", response_model=UpkeepCheckResponse)
async def check_upkeep(service: VaultService = Depends(get_service)):
    """Whether a rebalance is due, with the payload to pass to perform"""
    needed, payload = service.vault.check_upkeep()
    return UpkeepCheckResponse(
        upkeep_needed=needed,
        perform_data="0x" + payload.hex(),
        observed_tick=decode_observed_tick(payload),
    )


@router.post("/upkeep/perform", response_model=RebalanceResponse)
async def perform_upkeep(request: PerformUpkeepRequest, service: VaultService = Depends(get_service)):
    """
    Execute a rebalance

    Fails with 409 when the tick moved too far since the check, and with 412
    when the interval has not elapsed or the price is still in range.
    """
    payload = _parse_payload(request.perform_data)
    print(f"[Upkeep] perform by {request.sender}, observed tick {decode_observed_tick(payload)}")

    vault = service.vault
    event = vault.perform_upkeep(payload)
    if event is None:
        return RebalanceResponse(
            status="unchanged",
            tick_lower=vault.position.lower,
            tick_upper=vault.position.upper,
            timestamp=vault.last_rebalance_time,
        )

    print(f"[Upkeep] {event.old_range} -> {event.new_range}, L={event.liquidity}")
    return RebalanceResponse(
        status="rebalanced",
        tick_lower=event.new_range.lower,
        tick_upper=event.new_range.upper,
        previous_tick_lower=event.old_range.lower,
        previous_tick_upper=event.old_range.upper,
        liquidity=event.liquidity,
        amount0=event.amount0,
        amount1=event.amount1,
        swap_amount_in=event.swap_amount_in,
        swap_zero_for_one=event.swap_zero_for_one,
        swap_amount_out=event.swap_amount_out,
        timestamp=event.timestamp,
    )


@router.get("/upkeep/preview", response_model=RebalancePreviewResponse)
async def preview_rebalance(service: VaultService = Depends(get_service)):
    """Estimate the range, holdings and swap a rebalance would use now"""
    preview = service.vault.preview_rebalance()
    return RebalancePreviewResponse(
        current_tick=preview.current_tick,
        current_tick_lower=preview.current_range.lower,
        current_tick_upper=preview.current_range.upper,
        proposed_tick_lower=preview.proposed_range.lower,
        proposed_tick_upper=preview.proposed_range.upper,
        upkeep_needed=preview.upkeep_needed,
        amount0=preview.amount0,
        amount1=preview.amount1,
        swap_amount_in=preview.swap.amount_in,
        swap_zero_for_one=preview.swap.zero_for_one,
        quoted_amount_out=preview.quoted_amount_out,
    )
