"""Pool Scan — fetch, normalize and rank DLMM pools in one shot.

1. Load config (config/ranker.yaml + .env overrides)
2. Fetch pools from the configured endpoints (first healthy one wins)
3. If every endpoint fails: use the bundled fallback dataset
4. Score with the requested weights, filter by category/search
5. Print the ranked view (table or JSON)

Usage:
    python3 -m poolrank.skills.pool_scan
    python3 -m poolrank.skills.pool_scan --category majors --search sol --limit 10
    python3 -m poolrank.skills.pool_scan --weight fee_apr=1 --weight depth=0 --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from poolrank.config import load_ranker_config
from poolrank.logsink import BufferedLogSink, LoggerSink
from poolrank.models import Category
from poolrank.scoring import RankedPool
from poolrank.session import PoolSession, SessionStatus


def _parse_weight(text: str) -> tuple[str, float]:
    name, sep, value = text.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected name=value, got {text!r}")
    try:
        return name.strip(), float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"weight {name!r} is not a number: {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rank DLMM liquidity pools")
    parser.add_argument("--config", help="Path to ranker YAML config")
    parser.add_argument("--category", default=Category.TOP.value,
                        choices=[c.value for c in Category], help="Pool category filter")
    parser.add_argument("--search", default="", help="Substring match on pair label or address")
    parser.add_argument("--limit", type=int, default=20, help="Max pools to print (0 = all)")
    parser.add_argument("--weight", action="append", type=_parse_weight, default=[],
                        metavar="NAME=VALUE", help="Override a score weight (repeatable)")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of a table")
    parser.add_argument("--show-logs", action="store_true", help="Print buffered fetch diagnostics")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _pool_row(ranked: RankedPool) -> dict[str, Any]:
    pool = ranked.pool
    return {
        "id": pool.id,
        "pair": pool.pair_label,
        "score": round(ranked.score, 4),
        "tvl": round(pool.tvl, 2),
        "volume_24h": round(pool.volume_24h, 2),
        "volume_7d": round(pool.volume_7d, 2),
        "fee_apr_pct": round(pool.fee_apr_estimate * 100, 2),
        "bin_step": pool.bin_step,
        "stable": pool.is_stable,
        "major": pool.is_major,
        "new": pool.is_new,
    }


def format_table(rows: list[dict[str, Any]]) -> str:
    header = f"{'#':>3}  {'PAIR':<20} {'SCORE':>7} {'TVL':>14} {'VOL 24H':>14} {'APR %':>8} {'STEP':>5}"
    lines = [header, "-" * len(header)]
    for i, row in enumerate(rows, 1):
        lines.append(
            f"{i:>3}  {row['pair'][:20]:<20} {row['score']:>7.4f} {row['tvl']:>14,.0f} "
            f"{row['volume_24h']:>14,.0f} {row['fee_apr_pct']:>8.2f} {row['bin_step']:>5}"
        )
    return "\n".join(lines)


async def run_scan(args: argparse.Namespace, session: PoolSession | None = None) -> dict[str, Any]:
    """Load a session, apply CLI weights/filters, return the output document."""
    if session is None:
        config = load_ranker_config(args.config)
        session = PoolSession(config=config, sink=BufferedLogSink(forward=LoggerSink("poolrank")))
    if args.weight:
        session.set_weights(dict(args.weight))
    session.set_filter(category=args.category, search=args.search)

    report = await session.load()
    ranked = session.ranked()
    if args.limit > 0:
        ranked = ranked[:args.limit]

    output: dict[str, Any] = {
        "status": session.status.value,
        "source": report.source if report else None,
        "endpoint": report.endpoint if report else None,
        "soft_failures": [
            {"endpoint": f.endpoint, "kind": f.kind.value, "reason": f.reason}
            for f in (report.failures if report else [])
        ],
        "category": session.category.value,
        "search": session.search,
        "weights": session.weights.model_dump(),
        "pools": [_pool_row(r) for r in ranked],
    }
    if session.error:
        output["error"] = session.error
    if args.show_logs and isinstance(session.sink, BufferedLogSink):
        output["logs"] = [
            {"level": e.level, "timestamp": e.timestamp, "message": e.message, **e.fields}
            for e in session.sink.entries()
        ]
    return output


def main(argv: list[str] | None = None) -> int:
    load_dotenv(override=True)
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(name)s %(asctime)s] %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        output = asyncio.run(run_scan(args))
    except (KeyError, ValidationError) as e:
        print(f"Invalid weight: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(output, indent=2))
    else:
        print(f"Source: {output['source']} ({output['endpoint'] or 'bundled dataset'}), "
              f"{len(output['soft_failures'])} soft failure(s)")
        print(format_table(output["pools"]))
        for entry in output.get("logs", []):
            print(f"[{entry['timestamp']}] {entry['level'].upper()} {entry['message']}")

    return 0 if output["status"] == SessionStatus.READY.value else 1


if __name__ == "__main__":
    sys.exit(main())
