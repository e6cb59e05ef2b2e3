"""
Vault Service

Holds the process-wide simulated environment (tokens, pool, router, clock,
vault) behind the HTTP endpoints and maps vault error kinds to status codes.
"""
from typing import Optional

from range_vault.config import VaultConfig
from range_vault.exceptions import VaultError
from range_vault.sim.environment import SimulatedEnvironment, create_environment

from app.config import settings


ERROR_STATUS_CODES = {
    "authorization_failure": 403,
    "invalid_argument": 422,
    "staleness_violation": 409,
    "precondition_not_met": 412,
    "execution_shortfall": 502,
}


def error_status_code(error: VaultError) -> int:
    """HTTP status for a vault error (unknown kinds are server errors)"""
    return ERROR_STATUS_CODES.get(error.kind, 500)


class VaultService:
    """Simulated environment wrapper used by the API routers"""

    def __init__(self, config: VaultConfig, tick: int = 0, fee: int = 3000):
        self.config = config
        self.env: SimulatedEnvironment = create_environment(config, tick=tick, fee=fee)
        print(f"[VaultService] Vault ready at {self.vault.address}, range {self.vault.position}")

    @property
    def vault(self):
        return self.env.vault

    def token(self, address: str):
        """Resolve a pool token by address"""
        address = address.lower()
        if address == self.env.token0.address:
            return self.env.token0
        if address == self.env.token1.address:
            return self.env.token1
        return None

    def state(self) -> dict:
        """Vault-wide state summary"""
        vault = self.vault
        slot0 = self.env.pool.slot0()
        fees = vault.pending_fees()
        amount0, amount1 = vault.position_amounts()
        idle0, idle1 = vault.idle_balances()
        accrual = vault.protocol_accrual()
        return {
            "address": vault.address,
            "token0": self.env.token0.address,
            "token1": self.env.token1.address,
            "current_tick": slot0.tick,
            "sqrt_price_x96": slot0.sqrt_price_x96,
            "tick_lower": vault.position.lower,
            "tick_upper": vault.position.upper,
            "in_range": vault.position.contains(slot0.tick),
            "total_assets": vault.total_assets(),
            "total_supply": vault.total_supply(),
            "position_amount0": amount0,
            "position_amount1": amount1,
            "pending_fee0": fees.fee0,
            "pending_fee1": fees.fee1,
            "idle0": idle0,
            "idle1": idle1,
            "protocol_pending0": accrual.pending0,
            "protocol_pending1": accrual.pending1,
            "last_rebalance_time": vault.last_rebalance_time,
            "now": self.env.clock(),
        }


_service: Optional[VaultService] = None


def get_service() -> VaultService:
    """FastAPI dependency returning the shared service"""
    global _service
    if _service is None:
        _service = VaultService(settings.vault_config(), tick=settings.INITIAL_TICK, fee=settings.POOL_FEE)
    return _service


def reset_service(config: Optional[VaultConfig] = None, tick: int = 0, fee: Optional[int] = None) -> VaultService:
    """Replace the shared service with a fresh environment"""
    global _service
    _service = VaultService(
        config or settings.vault_config(),
        tick=tick,
        fee=fee or settings.POOL_FEE,
    )
    return _service


def service_ready() -> bool:
    return _service is not None
