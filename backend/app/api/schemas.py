"""
API Request/Response Schemas using Pydantic

Defines data models for the range vault API endpoints.
All token amounts, liquidity and shares are integers in on-chain units.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


# ==================== Share operations ====================

class DepositRequest(BaseModel):
    """Request payload for POST /api/v1/vault/deposit"""
    liquidity: int = Field(..., description="Liquidity units to add to the active range")
    receiver: str = Field(..., description="Account credited with the minted shares")
    sender: str = Field(..., description="Account paying both tokens")

    class Config:
        json_schema_extra = {
            "example": {
                "liquidity": 1000000000000000000,
                "receiver": "0xalice",
                "sender": "0xalice"
            }
        }


class DepositTokenRequest(BaseModel):
    """Request payload for POST /api/v1/vault/deposit-token"""
    token: str = Field(..., description="Address of the deposited pool token")
    amount: int = Field(..., description="Token amount in smallest units")
    receiver: str = Field(..., description="Account credited with the minted shares")
    sender: str = Field(..., description="Account paying the token")


class WithdrawRequest(BaseModel):
    """Request payload for POST /api/v1/vault/withdraw"""
    liquidity: int = Field(..., description="Liquidity units to remove")
    receiver: str = Field(..., description="Account receiving the tokens")
    owner: str = Field(..., description="Account whose shares are burned")
    sender: str = Field(..., description="Caller (needs allowance when not the owner)")


class RedeemRequest(BaseModel):
    """Request payload for POST /api/v1/vault/redeem"""
    shares: int = Field(..., description="Shares to burn")
    receiver: str = Field(..., description="Account receiving the tokens")
    owner: str = Field(..., description="Account whose shares are burned")
    sender: str = Field(..., description="Caller (needs allowance when not the owner)")


class ApproveRequest(BaseModel):
    """Request payload for POST /api/v1/vault/approve"""
    owner: str
    spender: str
    shares: int = Field(..., ge=0)


class TransferRequest(BaseModel):
    """Request payload for POST /api/v1/vault/transfer"""
    sender: str
    to: str
    shares: int = Field(..., ge=0)


class ShareOperationResponse(BaseModel):
    """Result of a deposit, withdraw or redeem"""
    status: str = Field(..., description="Response status (success)")
    operation: str = Field(..., description="deposit, deposit_token, withdraw or redeem")
    shares: int = Field(..., description="Shares minted or burned")
    liquidity: int = Field(..., description="Liquidity added or removed")
    amount0: int = Field(..., description="token0 paid in (deposit) or out (withdraw)")
    amount1: int = Field(..., description="token1 paid in (deposit) or out (withdraw)")
    protocol_fee0: int = Field(0, description="token0 retained as protocol fee")
    protocol_fee1: int = Field(0, description="token1 retained as protocol fee")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Response timestamp")


# ==================== Views ====================

class VaultStateResponse(BaseModel):
    """Response payload for GET /api/v1/vault"""
    address: str
    token0: str
    token1: str
    current_tick: int
    sqrt_price_x96: int
    tick_lower: int
    tick_upper: int
    in_range: bool
    total_assets: int = Field(..., description="Liquidity deployed in the active range")
    total_supply: int
    position_amount0: int
    position_amount1: int
    pending_fee0: int
    pending_fee1: int
    idle0: int
    idle1: int
    protocol_pending0: int
    protocol_pending1: int
    last_rebalance_time: int
    now: int


class AccountResponse(BaseModel):
    """Response payload for GET /api/v1/vault/accounts/{address}"""
    address: str
    shares: int
    max_withdraw: int
    max_redeem: int
    balance0: int = Field(..., description="token0 wallet balance")
    balance1: int = Field(..., description="token1 wallet balance")


class PreviewResponse(BaseModel):
    """Response payload for GET /api/v1/vault/preview/{operation}"""
    operation: str
    amount: int
    result: int


# ==================== Upkeep ====================

class UpkeepCheckResponse(BaseModel):
    """Response payload for GET /api/v1/upkeep/check"""
    upkeep_needed: bool
    perform_data: str = Field(..., description="0x-prefixed 32-byte observed tick payload")
    observed_tick: int


class PerformUpkeepRequest(BaseModel):
    """Request payload for POST /api/v1/upkeep/perform"""
    perform_data: str = Field(..., description="Payload returned by the upkeep check")
    sender: str = Field("0xkeeper", description="Keeper address (informational)")

    class Config:
        json_schema_extra = {
            "example": {
                "perform_data": "0x00000000000000000000000000000000000000000000000000000000000007d0",
                "sender": "0xkeeper"
            }
        }


class RebalanceResponse(BaseModel):
    """Response payload for POST /api/v1/upkeep/perform"""
    status: str = Field(..., description="rebalanced or unchanged")
    tick_lower: int
    tick_upper: int
    previous_tick_lower: Optional[int] = None
    previous_tick_upper: Optional[int] = None
    liquidity: int = 0
    amount0: int = 0
    amount1: int = 0
    swap_amount_in: int = 0
    swap_zero_for_one: Optional[bool] = None
    swap_amount_out: int = 0
    timestamp: int


class RebalancePreviewResponse(BaseModel):
    """Response payload for GET /api/v1/upkeep/preview"""
    current_tick: int
    current_tick_lower: int
    current_tick_upper: int
    proposed_tick_lower: int
    proposed_tick_upper: int
    upkeep_needed: bool
    amount0: int
    amount1: int
    swap_amount_in: int
    swap_zero_for_one: bool
    quoted_amount_out: int


# ==================== Protocol fees ====================

class ProtocolFeesResponse(BaseModel):
    """Protocol fee accrual or collection result"""
    recipient: str
    amount0: int
    amount1: int


class CollectProtocolFeesRequest(BaseModel):
    """Request payload for POST /api/v1/protocol-fees/collect"""
    sender: str


# ==================== Simulation controls ====================

class FundRequest(BaseModel):
    """Mint both simulated tokens to an account and approve the vault"""
    account: str
    amount0: int = Field(..., ge=0)
    amount1: int = Field(..., ge=0)
    approve: bool = True


class MovePriceRequest(BaseModel):
    """Move the simulated pool to a tick"""
    tick: int


class AccrueFeesRequest(BaseModel):
    """Distribute swap fees to in-range liquidity"""
    amount0: int = Field(..., ge=0)
    amount1: int = Field(..., ge=0)


class AdvanceClockRequest(BaseModel):
    """Advance the simulated clock"""
    seconds: int = Field(..., ge=0)


class ResetRequest(BaseModel):
    """Rebuild the simulated environment"""
    tick: int = 0
    fee: Optional[int] = Field(None, description="Pool fee tier (500, 3000, 10000)")
    rebalance_width_bps: Optional[int] = None
    min_rebalance_interval: Optional[int] = None
    max_tick_deviation: Optional[int] = None
    protocol_fee_bps: Optional[int] = None
    protocol_fee_recipient: Optional[str] = None


class SimulationStateResponse(BaseModel):
    """Pool tick and clock after a simulation control call"""
    tick: int
    now: int


# ==================== Health ====================

class HealthCheckResponse(BaseModel):
    """Response payload for GET /api/v1/health"""
    status: str = Field(..., description="API health status")
    version: str = Field(..., description="API version")
    vault_ready: bool = Field(..., description="Whether the simulated vault is initialized")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Response timestamp")
