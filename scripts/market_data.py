#!/usr/bin/env python3
"""
📈 行情数据工具

使用方式:
    # 多时间框架拉取 (失败时降级为演示数据)
    python -m scripts.market_data fetch --symbol EURUSD --count 50

    # 单时间框架
    python -m scripts.market_data fetch --symbol XAUUSD --tf 1h

    # 演示数据
    python -m scripts.market_data demo --symbol BTCUSD

    # 密钥管理
    python -m scripts.market_data keys list
    python -m scripts.market_data keys add <API_KEY>
    python -m scripts.market_data keys remove <API_KEY>

    # 连通性测试
    python -m scripts.market_data test
"""

import argparse
import asyncio
import sys
from pathlib import Path

# 项目根目录
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.core.config import get_settings  # noqa: E402
from src.core.timeframes import Timeframe  # noqa: E402
from src.data.errors import MarketDataError  # noqa: E402
from src.data.fetcher.manager import MarketDataService  # noqa: E402
from src.data.models import MultiTimeframeResult  # noqa: E402
from src.ops.logging import configure_logging  # noqa: E402


def print_banner():
    """打印横幅"""
    print("\n" + "=" * 70)
    print("📈 MarketFeed - 行情数据工具")
    print("=" * 70)


def print_result(result: MultiTimeframeResult) -> None:
    """打印多时间框架结果摘要"""
    mode = "演示数据" if result.is_demo else "实时数据"
    print(f"\n{result.symbol} ({mode})")
    for tf, candles in result.timeframes.items():
        source = "模拟" if tf in result.synthetic else "真实"
        last = candles[-1] if candles else None
        close = f"{last.close}" if last else "-"
        print(f"  {tf.value:>6}: {len(candles):>3} 根 [{source}] 最新收盘 {close}")
    for tf, error in result.errors.items():
        print(f"  ⚠️ {tf.value}: {error}")


async def cmd_fetch(service: MarketDataService, args: argparse.Namespace) -> int:
    if args.tf:
        candles = await service.fetch_series(args.symbol, args.tf, args.count)
        for candle in candles:
            print(
                f"{candle.datetime}  O={candle.open} H={candle.high} "
                f"L={candle.low} C={candle.close} V={candle.volume}"
            )
        return 0

    result = await service.fetch_all_or_demo(args.symbol, args.count)
    print_result(result)
    return 0


async def cmd_keys(service: MarketDataService, args: argparse.Namespace) -> int:
    if args.action == "add":
        ok = service.add_key(args.key)
        print("✅ 已添加" if ok else "❌ 添加失败 (空白或重复)")
        return 0 if ok else 1

    if args.action == "remove":
        ok = service.remove_key(args.key)
        print("✅ 已移除" if ok else "❌ 移除失败 (不存在或为最后一个 Key)")
        return 0 if ok else 1

    report = await service.key_status()
    print(f"\n共 {report.total_keys} 个 Key，当前游标 {report.active_key}")
    for status in report.keys:
        usage = status.usage or {}
        used = usage.get("current_usage", "-")
        limit = usage.get("plan_limit", "-")
        print(f"  [{status.index}] {status.key}  {status.status.value:<8} {used}/{limit}")
        if status.message:
            print(f"       {status.message}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """命令行参数"""
    parser = argparse.ArgumentParser(
        description="行情数据工具",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default=None, help="日志级别")
    sub = parser.add_subparsers(dest="command", required=True)

    fetch = sub.add_parser("fetch", help="拉取行情")
    fetch.add_argument("--symbol", required=True, help="交易品种，如 EURUSD")
    fetch.add_argument(
        "--tf",
        default=None,
        choices=[tf.value for tf in Timeframe],
        help="单个时间框架 (5min/15min/1h/4h)",
    )
    fetch.add_argument("--count", type=int, default=50, help="K 线数量")

    demo = sub.add_parser("demo", help="生成演示数据")
    demo.add_argument("--symbol", required=True, help="交易品种")
    demo.add_argument("--count", type=int, default=50, help="K 线数量")

    keys = sub.add_parser("keys", help="API Key 管理")
    keys.add_argument("action", choices=["list", "add", "remove"])
    keys.add_argument("key", nargs="?", default="", help="API Key")

    sub.add_parser("test", help="测试行情源连通性")

    return parser


async def main() -> int:
    """主函数"""
    args = build_parser().parse_args()

    settings = get_settings()
    settings.ensure_dirs()
    configure_logging("market_data", log_level=args.log_level)
    print_banner()

    async with MarketDataService.from_settings(settings) as service:
        try:
            if args.command == "fetch":
                return await cmd_fetch(service, args)
            if args.command == "demo":
                print_result(service.demo(args.symbol, args.count))
                return 0
            if args.command == "keys":
                return await cmd_keys(service, args)

            connected = await service.initialize()
            print("✅ 行情源连接正常" if connected else "❌ 行情源不可用")
            return 0 if connected else 1

        except MarketDataError as e:
            print(f"❌ {e}")
            return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
