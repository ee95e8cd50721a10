"""CLI interface for the option-chain engine.

Reads raw NSE/BSE payload JSON files (as saved from the proxy layer),
runs the normalize -> window -> metrics -> alerts pipeline and prints
structured JSON. The metrics of each symbol/expiry are kept as a
baseline between calls so a second ``analyze`` reports alerts.

Usage:
    oichain analyze nifty.json --strikes 10
    oichain analyze sensex.json --exchange bse --high-oi --lot-size
    oichain chain nifty.json --strikes 6
    oichain metrics nifty.json --lot-size
    oichain export nifty.json window.csv
    oichain symbols --exchange NSE
    oichain reset
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path

logger = logging.getLogger(__name__)


def _session_dir() -> Path:
    """Directory holding persisted baselines (``OICHAIN_HOME`` overrides)."""
    override = os.environ.get("OICHAIN_HOME")
    return Path(override) if override else Path.home() / ".oichain"


def _baseline_file() -> Path:
    return _session_dir() / "baselines.json"


def _load_baselines() -> dict:
    """Load persisted metrics baselines from disk."""
    path = _baseline_file()
    if path.exists():
        with open(path) as f:
            return json.load(f)
    return {}


def _save_baselines(state: dict) -> None:
    """Save metrics baselines to disk."""
    path = _baseline_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(state, f, indent=2, default=str)


def _baseline_key(symbol: str, expiry: str) -> str:
    return f"{symbol}|{expiry}"


def _load_payload(source: str) -> dict:
    """Read a raw payload from a file path, or stdin for '-'."""
    if source == "-":
        return json.load(sys.stdin)
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Payload file not found: {path}")
    with open(path) as f:
        return json.load(f)


def _window_config(args: argparse.Namespace):
    from oichain.window import WindowConfig

    return WindowConfig(window_size=args.strikes, high_oi_only=args.high_oi)


def _run(args: argparse.Namespace, previous=None):
    """Load the payload and run the pipeline for the common options."""
    from oichain.data import detect_exchange
    from oichain.pipeline import run_cycle

    raw = _load_payload(args.payload)
    exchange = args.exchange or detect_exchange(raw)
    return run_cycle(
        exchange,
        raw,
        _window_config(args),
        previous=previous,
        use_lot_size=args.lot_size,
        lot_size=args.lot_size_override,
    )


def _output(data: dict | list) -> None:
    """Print structured output as JSON."""
    print(json.dumps(data, indent=2, default=str))


# ─── Analyze ───────────────────────────────────────────────────

def cmd_analyze(args: argparse.Namespace) -> None:
    """Run the full pipeline and report alerts against the stored baseline."""
    from oichain.data import detect_exchange, normalize
    from oichain.metrics import MetricsSnapshot
    from oichain.pipeline import analyze_snapshot

    raw = _load_payload(args.payload)
    snapshot = normalize(args.exchange or detect_exchange(raw), raw)

    baselines = {} if args.no_baseline else _load_baselines()
    key = _baseline_key(snapshot.symbol, snapshot.expiry)
    previous = MetricsSnapshot.from_dict(baselines[key]) if key in baselines else None

    result = analyze_snapshot(
        snapshot,
        _window_config(args),
        previous=previous,
        use_lot_size=args.lot_size,
        lot_size=args.lot_size_override,
    )

    if not args.no_baseline:
        baselines[key] = asdict(result.metrics)
        _save_baselines(baselines)
    _output(result.to_dict())


# ─── Chain ─────────────────────────────────────────────────────

def cmd_chain(args: argparse.Namespace) -> None:
    """Print the windowed option-chain table."""
    from oichain.frames import chain_frame

    result = _run(args)
    frame = chain_frame(result.window, result.atm_strike.strike_price)
    _output({
        "symbol": result.snapshot.symbol,
        "underlying_price": result.snapshot.underlying_price,
        "atm_strike": result.atm_strike.strike_price,
        "expiry": result.snapshot.expiry,
        "rows": json.loads(frame.to_json(orient="records")),
        "count": len(frame),
    })


# ─── Metrics ───────────────────────────────────────────────────

def cmd_metrics(args: argparse.Namespace) -> None:
    """Print key metrics with display formatting."""
    from oichain.formatting import format_currency, scale_to_human_unit

    result = _run(args)
    m = result.metrics
    _output({
        "symbol": result.snapshot.symbol,
        "metrics": m.to_dict(),
        "display": {
            "pcr": f"{m.pcr:.3f}",
            "max_pain": format_currency(m.max_pain),
            "total_call_oi": scale_to_human_unit(m.total_call_oi),
            "total_put_oi": scale_to_human_unit(m.total_put_oi),
            "total_call_change_oi": scale_to_human_unit(m.total_call_change_oi),
            "total_put_change_oi": scale_to_human_unit(m.total_put_change_oi),
            "call_dominance": f"{m.call_dominance:.1f}%",
            "put_dominance": f"{m.put_dominance:.1f}%",
        },
    })


# ─── Export ────────────────────────────────────────────────────

def cmd_export(args: argparse.Namespace) -> None:
    """Write the windowed chain to CSV."""
    from oichain.frames import export_csv

    result = _run(args)
    path = export_csv(result.window, args.output, result.atm_strike.strike_price)
    _output({"exported": str(path), "rows": len(result.window)})


# ─── Symbols ───────────────────────────────────────────────────

def cmd_symbols(args: argparse.Namespace) -> None:
    """List the symbol metadata table."""
    from oichain.symbols import SYMBOL_METADATA, supported_symbols

    _output([
        {"symbol": name, **asdict(SYMBOL_METADATA[name])}
        for name in supported_symbols(args.exchange)
    ])


# ─── Reset ─────────────────────────────────────────────────────

def cmd_reset(args: argparse.Namespace) -> None:
    """Clear stored baselines."""
    path = _baseline_file()
    if path.exists():
        path.unlink()
        _output({"status": "Cleared baselines"})
    else:
        _output({"status": "No baselines to clear"})


# ─── Parser ────────────────────────────────────────────────────

def _add_pipeline_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("payload", help="Raw payload JSON file ('-' for stdin)")
    p.add_argument("--exchange", "-e", type=str.upper, choices=["NSE", "BSE"],
                   help="Payload exchange (detected when omitted)")
    p.add_argument("--strikes", "-n", type=int, default=10, help="Window size (default: 10)")
    p.add_argument("--high-oi", action="store_true", help="Show only high-OI strikes")
    p.add_argument("--lot-size", action="store_true", help="Multiply OI by lot size")
    p.add_argument("--lot-size-override", type=int, help="Use this lot size instead of the table")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="oichain",
        description="Option-chain normalization and analytics for NSE/BSE indices",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # analyze
    p_analyze = subparsers.add_parser("analyze", help="Full pipeline with alerts")
    _add_pipeline_args(p_analyze)
    p_analyze.add_argument("--no-baseline", action="store_true",
                           help="Do not read or update the stored baseline")
    p_analyze.set_defaults(func=cmd_analyze)

    # chain
    p_chain = subparsers.add_parser("chain", help="Windowed option-chain table")
    _add_pipeline_args(p_chain)
    p_chain.set_defaults(func=cmd_chain)

    # metrics
    p_metrics = subparsers.add_parser("metrics", help="Key metrics")
    _add_pipeline_args(p_metrics)
    p_metrics.set_defaults(func=cmd_metrics)

    # export
    p_export = subparsers.add_parser("export", help="Export the window to CSV")
    _add_pipeline_args(p_export)
    p_export.add_argument("output", help="Output CSV path")
    p_export.set_defaults(func=cmd_export)

    # symbols
    p_symbols = subparsers.add_parser("symbols", help="List symbol metadata")
    p_symbols.add_argument("--exchange", "-e", type=str.upper, choices=["NSE", "BSE"])
    p_symbols.set_defaults(func=cmd_symbols)

    # reset
    p_reset = subparsers.add_parser("reset", help="Clear stored baselines")
    p_reset.set_defaults(func=cmd_reset)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except Exception as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        _output({"error": str(e), "type": type(e).__name__})
        sys.exit(1)


if __name__ == "__main__":
    main()
