"""
Vault Endpoints

Share operations (deposit / withdraw / redeem), share ledger calls,
conversions and previews.
"""
from fastapi import APIRouter, Depends, HTTPException

from range_vault.vault import DepositEvent, WithdrawEvent

from app.api.schemas import (
    AccountResponse,
    ApproveRequest,
    DepositRequest,
    DepositTokenRequest,
    PreviewResponse,
    RedeemRequest,
    ShareOperationResponse,
    TransferRequest,
    VaultStateResponse,
    WithdrawRequest,
)
from app.core.vault_service import VaultService, get_service

router = APIRouter()

PREVIEWS = {
    "deposit": "preview_deposit",
    "withdraw": "preview_withdraw",
    "redeem": "preview_redeem",
    "convert_to_shares": "convert_to_shares",
    "convert_to_assets": "convert_to_assets",
}


def _deposit_response(operation: str, event: DepositEvent) -> ShareOperationResponse:
    return ShareOperationResponse(
        status="success",
        operation=operation,
        shares=event.shares,
        liquidity=event.liquidity,
        amount0=event.amount0,
        amount1=event.amount1,
    )


def _withdraw_response(operation: str, event: WithdrawEvent) -> ShareOperationResponse:
    return ShareOperationResponse(
        status="success",
        operation=operation,
        shares=event.shares,
        liquidity=event.liquidity,
        amount0=event.amount0,
        amount1=event.amount1,
        protocol_fee0=event.protocol_fee0,
        protocol_fee1=event.protocol_fee1,
    )


def _last_event(service: VaultService, event_type):
    for event in reversed(service.vault.events):
        if isinstance(event, event_type):
            return event
    raise HTTPException(status_code=500, detail=f"No {event_type.__name__} recorded")


@router.get("/vault", response_model=VaultStateResponse)
async def vault_state(service: VaultService = Depends(get_service)):
    """Current range, supply, deployed liquidity, fees and idle balances"""
    return VaultStateResponse(**service.state())


@router.get("/vault/accounts/{address}", response_model=AccountResponse)
async def account(address: str, service: VaultService = Depends(get_service)):
    """Share balance and withdrawal limits of an account"""
    vault = service.vault
    return AccountResponse(
        address=address.lower(),
        shares=vault.balance_of(address),
        max_withdraw=vault.max_withdraw(address),
        max_redeem=vault.max_redeem(address),
        balance0=service.env.token0.balance_of(address),
        balance1=service.env.token1.balance_of(address),
    )


@router.get("/vault/preview/{operation}", response_model=PreviewResponse)
async def preview(operation: str, amount: int, service: VaultService = Depends(get_service)):
    """
    Conversion previews

    operation: deposit, withdraw, redeem, convert_to_shares or convert_to_assets
    """
    method = PREVIEWS.get(operation)
    if method is None:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown preview {operation}. Supported: {', '.join(PREVIEWS)}"
        )
    result = getattr(service.vault, method)(amount)
    return PreviewResponse(operation=operation, amount=amount, result=result)


@router.post("/vault/deposit", response_model=ShareOperationResponse)
async def deposit(request: DepositRequest, service: VaultService = Depends(get_service)):
    """Deposit a liquidity amount, paying both tokens at the current price"""
    print(f"[Deposit] {request.sender} -> {request.receiver}: L={request.liquidity}")
    service.vault.deposit(request.liquidity, receiver=request.receiver, sender=request.sender)
    return _deposit_response("deposit", _last_event(service, DepositEvent))


@router.post("/vault/deposit-token", response_model=ShareOperationResponse)
async def deposit_token(request: DepositTokenRequest, service: VaultService = Depends(get_service)):
    """Deposit a single pool token; the vault swaps to the range ratio"""
    print(f"[Deposit] {request.sender} -> {request.receiver}: {request.amount} of {request.token}")
    service.vault.deposit_token(
        request.token, request.amount, receiver=request.receiver, sender=request.sender
    )
    return _deposit_response("deposit_token", _last_event(service, DepositEvent))


@router.post("/vault/withdraw", response_model=ShareOperationResponse)
async def withdraw(request: WithdrawRequest, service: VaultService = Depends(get_service)):
    """Withdraw an exact liquidity amount, burning shares rounded up"""
    print(f"[Withdraw] {request.owner} -> {request.receiver}: L={request.liquidity}")
    service.vault.withdraw(
        request.liquidity, receiver=request.receiver, owner=request.owner, sender=request.sender
    )
    return _withdraw_response("withdraw", _last_event(service, WithdrawEvent))


@router.post("/vault/redeem", response_model=ShareOperationResponse)
async def redeem(request: RedeemRequest, service: VaultService = Depends(get_service)):
    """Burn an exact share amount for liquidity rounded down"""
    print(f"[Withdraw] {request.owner} -> {request.receiver}: shares={request.shares}")
    service.vault.redeem(
        request.shares, receiver=request.receiver, owner=request.owner, sender=request.sender
    )
    return _withdraw_response("redeem", _last_event(service, WithdrawEvent))


@router.post("/vault/approve")
async def approve(request: ApproveRequest, service: VaultService = Depends(get_service)):
    """Set a share allowance"""
    service.vault.approve(request.owner, request.spender, request.shares)
    return {"status": "success", "allowance": service.vault.allowance(request.owner, request.spender)}


@router.post("/vault/transfer")
async def transfer(request: TransferRequest, service: VaultService = Depends(get_service)):
    """Transfer shares between accounts"""
    service.vault.transfer(request.sender, request.to, request.shares)
    return {"status": "success", "balance": service.vault.balance_of(request.sender)}
