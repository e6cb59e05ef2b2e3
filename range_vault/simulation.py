"""
Simulation - 가격 경로 위에서 볼트 재배치 시뮬레이션

가격 경로(틱 시계열)를 따라 풀 가격을 이동시키고, 매 스텝마다 수수료를 적립한 뒤
외부 자동화처럼 check_upkeep → perform_upkeep을 호출합니다.
결과는 스텝별 pandas DataFrame입니다.

Example:
    >>> config = VaultConfig(protocol_fee_recipient="0xprotocol")
    >>> df = simulate(config, n_steps=500, volatility=0.01, seed=42)
    >>> summarize(df)["rebalances"]
"""

import logging
import math
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .config import VaultConfig
from .constants import MIN_TICK, MAX_TICK
from .exceptions import VaultError
from .sim.environment import SimulatedEnvironment, create_environment
from .vault.interfaces import TriggerSource

logger = logging.getLogger(__name__)

LOG_TICK_BASE = math.log(1.0001)
DEFAULT_LP = "0xlp"


def generate_tick_path(
    n_steps: int,
    volatility: float = 0.01,
    drift: float = 0.0,
    start_tick: int = 0,
    seed: Optional[int] = None
) -> np.ndarray:
    """기하 브라운 운동 가격 경로를 틱 배열로 생성

    Args:
        n_steps: 스텝 수
        volatility: 스텝당 로그수익률 표준편차
        drift: 스텝당 기대 로그수익률
        start_tick: 시작 틱
        seed: 난수 시드

    Returns:
        길이 n_steps의 int 틱 배열 (전역 틱 경계로 제한)
    """
    rng = np.random.default_rng(seed)
    log_returns = rng.normal(drift - 0.5 * volatility ** 2, volatility, n_steps)
    log_price = np.cumsum(log_returns)
    ticks = start_tick + np.round(log_price / LOG_TICK_BASE).astype(np.int64)
    return np.clip(ticks, MIN_TICK, MAX_TICK)


def run_simulation(
    env: SimulatedEnvironment,
    ticks: Union[Sequence[int], np.ndarray, pd.Series],
    step_seconds: int = 3600,
    fees_per_step: Tuple[int, int] = (0, 0),
    keeper: str = "0xkeeper"
) -> pd.DataFrame:
    """틱 경로를 따라 볼트를 구동

    재배치 실패(VaultError)는 해당 스텝의 error 열에 기록하고 다음 스텝으로 진행합니다.
    """
    vault = env.vault
    trigger: TriggerSource = vault
    path = pd.Series(ticks)
    rows = []

    for step, tick in path.items():
        env.clock.advance(step_seconds)
        env.pool.move_to_tick(int(tick))
        env.pool.accrue_fees(*fees_per_step)

        needed, payload = trigger.check_upkeep()
        rebalanced = False
        error = None
        if needed:
            try:
                rebalanced = trigger.perform_upkeep(payload) is not None
            except VaultError as e:
                error = e.kind
                logger.warning("스텝 %s 재배치 실패 (%s): %s", step, keeper, e)

        fees = vault.pending_fees()
        idle0, idle1 = vault.idle_balances()
        accrual = vault.protocol_accrual()
        rows.append({
            "step": step,
            "timestamp": env.clock(),
            "tick": int(tick),
            "tick_lower": vault.position.lower,
            "tick_upper": vault.position.upper,
            "in_range": vault.position.contains(int(tick)),
            "upkeep_needed": needed,
            "rebalanced": rebalanced,
            "error": error,
            "liquidity": vault.total_assets(),
            "total_supply": vault.total_supply(),
            "fee0": fees.fee0,
            "fee1": fees.fee1,
            "idle0": idle0,
            "idle1": idle1,
            "protocol_pending0": accrual.pending0,
            "protocol_pending1": accrual.pending1,
        })

    return pd.DataFrame(rows)


def simulate(
    config: VaultConfig,
    n_steps: int = 500,
    volatility: float = 0.01,
    drift: float = 0.0,
    seed: Optional[int] = None,
    initial_liquidity: int = 10 ** 21,
    fees_per_step: Tuple[int, int] = (10 ** 15, 10 ** 15),
    step_seconds: int = 3600,
    fee: int = 3000
) -> pd.DataFrame:
    """환경 생성 → LP 입금 → 랜덤 경로 시뮬레이션"""
    env = create_environment(config, fee=fee)
    env.fund(DEFAULT_LP, 10 ** 30, 10 ** 30)
    env.vault.deposit(initial_liquidity, receiver=DEFAULT_LP, sender=DEFAULT_LP)

    ticks = generate_tick_path(n_steps, volatility=volatility, drift=drift, seed=seed)
    return run_simulation(env, ticks, step_seconds=step_seconds, fees_per_step=fees_per_step)


def summarize(df: pd.DataFrame) -> Dict[str, Any]:
    """시뮬레이션 결과 요약"""
    if df.empty:
        return {"steps": 0, "rebalances": 0, "failed_rebalances": 0, "time_in_range_pct": 0.0}
    return {
        "steps": len(df),
        "rebalances": int(df["rebalanced"].sum()),
        "failed_rebalances": int(df["error"].notna().sum()),
        "time_in_range_pct": float(df["in_range"].mean() * 100),
        "final_tick": int(df["tick"].iloc[-1]),
        "final_range": (int(df["tick_lower"].iloc[-1]), int(df["tick_upper"].iloc[-1])),
        "final_liquidity": int(df["liquidity"].iloc[-1]),
    }
