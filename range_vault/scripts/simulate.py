#!/usr/bin/env python3
"""
Simulate - 랜덤 가격 경로 위에서 볼트 재배치 시뮬레이션

Usage:
    # 기본 설정 (500시간, 변동성 1%)
    python -m range_vault.scripts.simulate

    # 폭 / 간격 / 시드 지정 후 CSV 저장
    python -m range_vault.scripts.simulate --width 100 --interval 7200 --seed 7 --csv out.csv
"""

import argparse

from range_vault.config import VaultConfig
from range_vault.exceptions import VaultError
from range_vault.simulation import simulate, summarize


def print_summary(summary: dict, config: VaultConfig) -> None:
    print("=" * 60)
    print(f"[Sim] width={config.rebalance_width_bps} interval={config.min_rebalance_interval}s "
          f"max_deviation={config.max_tick_deviation}")
    print("=" * 60)
    print(f"[Sim] Steps:            {summary['steps']}")
    print(f"[Sim] Rebalances:       {summary['rebalances']}")
    print(f"[Sim] Failed:           {summary['failed_rebalances']}")
    print(f"[Sim] Time in range:    {summary['time_in_range_pct']:.1f}%")
    if summary["steps"]:
        print(f"[Sim] Final tick:       {summary['final_tick']}")
        print(f"[Sim] Final range:      {summary['final_range']}")
        print(f"[Sim] Final liquidity:  {summary['final_liquidity']}")
    print("=" * 60)


def main():
    parser = argparse.ArgumentParser(
        description="랜덤 가격 경로로 볼트 재배치 시뮬레이션",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # 볼트 설정
    parser.add_argument("--width", type=int, default=50, help="sqrtPrice 대비 반폭, 1000 분율 (기본: 50)")
    parser.add_argument("--interval", type=int, default=3600, help="최소 재배치 간격 (초)")
    parser.add_argument("--max-deviation", type=int, default=100, help="허용 틱 편차")
    parser.add_argument("--protocol-fee", type=int, default=50, help="프로토콜 수수료 bps")
    parser.add_argument("--recipient", type=str, default="0xprotocol", help="프로토콜 수수료 수령 주소")

    # 경로 설정
    parser.add_argument("--steps", type=int, default=500, help="스텝 수")
    parser.add_argument("--volatility", type=float, default=0.01, help="스텝당 변동성")
    parser.add_argument("--drift", type=float, default=0.0, help="스텝당 드리프트")
    parser.add_argument("--seed", type=int, default=None, help="난수 시드")
    parser.add_argument("--step-seconds", type=int, default=3600, help="스텝 간격 (초)")

    parser.add_argument("--csv", type=str, default=None, help="스텝별 결과 CSV 저장 경로")

    args = parser.parse_args()

    try:
        config = VaultConfig.create(
            rebalance_width_bps=args.width,
            min_rebalance_interval=args.interval,
            max_tick_deviation=args.max_deviation,
            protocol_fee_bps=args.protocol_fee,
            protocol_fee_recipient=args.recipient,
        )
        df = simulate(
            config,
            n_steps=args.steps,
            volatility=args.volatility,
            drift=args.drift,
            seed=args.seed,
            step_seconds=args.step_seconds,
        )
    except VaultError as e:
        print(f"[Sim] ❌ {e.kind}: {e.message}")
        raise SystemExit(1)

    print_summary(summarize(df), config)

    if args.csv:
        df.to_csv(args.csv, index=False)
        print(f"[Sim] Saved {len(df)} rows to {args.csv}")


if __name__ == "__main__":
    main()
