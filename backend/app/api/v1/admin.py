"""
Protocol Fee Endpoints

Accrued protocol fees and their collection to the configured recipient.
"""
from fastapi import APIRouter, Depends

from app.api.schemas import CollectProtocolFeesRequest, ProtocolFeesResponse
from app.core.vault_service import VaultService, get_service

router = APIRouter()


@router.get("/protocol-fees", response_model=ProtocolFeesResponse)
async def protocol_fees(service: VaultService = Depends(get_service)):
    """Protocol fees accrued since the last collection"""
    accrual = service.vault.protocol_accrual()
    return ProtocolFeesResponse(
        recipient=service.config.protocol_fee_recipient,
        amount0=accrual.pending0,
        amount1=accrual.pending1,
    )


@router.post("/protocol-fees/collect", response_model=ProtocolFeesResponse)
async def collect_protocol_fees(request: CollectProtocolFeesRequest, service: VaultService = Depends(get_service)):
    """
    Pay accrued protocol fees to the fixed recipient

    Any caller may trigger collection; funds only move to the configured recipient.
    With no shares outstanding the position is closed and both token balances are swept.
    """
    amount0, amount1 = service.vault.collect_protocol_fees(request.sender)
    print(f"[ProtocolFees] Collected {amount0} / {amount1} -> {service.config.protocol_fee_recipient}")
    return ProtocolFeesResponse(
        recipient=service.config.protocol_fee_recipient,
        amount0=amount0,
        amount1=amount1,
    )
