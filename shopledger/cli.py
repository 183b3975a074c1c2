#!/usr/bin/env python3
"""
Shop Ledger CLI: balances, ledgers, transactions, and the API server.

USAGE:
  python -m shopledger.cli summary                              # All shops
  python -m shopledger.cli summary --leader "JOHN" --csv out.csv
  python -m shopledger.cli summary --excel shops_balance.xlsx

  python -m shopledger.cli ledger "ACME STORE"                  # Daily ledger
  python -m shopledger.cli ledger "ACME STORE" --excel acme.xlsx

  python -m shopledger.cli transactions --wallet GCASH --date 2024-03-05

  python -m shopledger.cli serve                                # Start API server
  python -m shopledger.cli serve --port 8000
"""
from __future__ import annotations

import argparse
import os
import sys
from datetime import datetime
from pathlib import Path

from shopledger.data.loader import SheetFetchError
from shopledger.data.store import DataStore
from shopledger.data.schemas import FilterState
from shopledger.analytics.balances import summary_totals, totals_by
from shopledger.analytics.common import sum_column


def _banner(title: str) -> None:
    print("\n" + "=" * 70)
    print(f"  SHOP LEDGER: {title}")
    print("=" * 70)
    print(f"  Started: {datetime.now():%Y-%m-%d %H:%M:%S}\n")


def _write_csv(path: str, text: str) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    print(f"\n  CSV saved to: {out}")


def cmd_summary(args):
    """Print the per-shop balance summary."""
    from shopledger.reports import balance_report
    _banner("SHOPS BALANCE")

    store = DataStore().load()
    filters = FilterState(leader=args.leader, search=args.search)
    view = store.summary_view(filters)
    rows = view.filtered

    print(f"\nSHOPS ({len(rows):,}):\n")
    print(f"{'SHOP':<32}{'LEADER':<16}{'DEPOSIT':>14}{'WITHDRAWAL':>14}{'BALANCE':>16}")
    for rec in rows.itertuples(index=False):
        print(f"{rec.shop_name[:30]:<32}{rec.team_leader[:14]:<16}"
              f"{rec.total_deposit:>14,.2f}{rec.total_withdrawal:>14,.2f}{rec.running_balance:>16,.2f}")

    t = summary_totals(rows)
    print("-" * 92)
    print(f"{'TOTAL':<48}{t['total_deposit']:>14,.2f}{t['total_withdrawal']:>14,.2f}{t['running_balance']:>16,.2f}")

    if args.csv:
        _, text = balance_report.generate_csv(store, filters)
        _write_csv(args.csv, text)
    if args.excel:
        out = balance_report.generate_excel(store, args.excel, filters)
        print(f"  Excel saved to: {out}")


def cmd_ledger(args):
    """Print one shop's daily ledger."""
    from shopledger.reports import ledger_report
    _banner("DAILY LEDGER")

    store = DataStore().load()
    ledger = store.ledger(args.shop)
    p, r = ledger.profile, ledger.rates

    if not p.found:
        print(f"  Shop not in SHOPS BALANCE: '{p.shop_name}' (opening balance 0)")
    print(f"\n  {p.shop_name}  |  Leader: {p.team_leader}")
    print(f"  Rates: DP {r.dp_rate:g}%  WD {r.wd_rate:g}%  ADD {r.add_rate:g}%\n")

    print(f"{'DATE':<14}{'DEPOSIT':>14}{'WITHDRAWAL':>14}{'SETTLEMENT':>14}{'COMM':>12}{'BALANCE':>16}")
    for rec in ledger.rows.to_dict("records"):
        comm = rec["dp_comm"] + rec["wd_comm"] + rec["add_comm"]
        print(f"{rec['date']:<14}{rec['deposit']:>14,.2f}{rec['withdrawal']:>14,.2f}"
              f"{rec['settlement']:>14,.2f}{comm:>12,.2f}{rec['running_balance']:>16,.2f}")
    print("-" * 84)
    print(f"{'FINAL BALANCE':<68}{ledger.final_balance:>16,.2f}")

    if args.csv:
        _, text = ledger_report.generate_csv(store, args.shop)
        _write_csv(args.csv, text)
    if args.excel:
        out = ledger_report.generate_excel(store, args.shop, args.excel)
        print(f"  Excel saved to: {out}")


def cmd_transactions(args):
    """Print filtered transactions and per-wallet totals."""
    from shopledger.reports import transaction_report
    _banner("TRANSACTIONS")

    store = DataStore().load()
    filters = FilterState(shop=args.shop, wallet=args.wallet, type=args.type, date=args.date)
    view = store.transactions(filters)

    if view.backup_used:
        print("  Reading backup snapshot for this date.")
    if view.notice:
        print(f"  {view.notice}")
    for source, reason in view.warnings.items():
        print(f"  Warning: {source}: {reason}")

    df = view.frame
    print(f"\nTRANSACTIONS ({len(df):,}):\n")
    for rec in df.head(args.limit).itertuples(index=False):
        print(f"{rec.date:<12}{rec.shop_name[:24]:<26}{rec.wallet[:10]:<12}{rec.type[:10]:<12}{rec.amount:>14,.2f}")
    if len(df) > args.limit:
        print(f"  ... {len(df) - args.limit:,} more")

    print("\nBY WALLET:\n")
    for rec in totals_by(df, "wallet").to_dict("records"):
        print(f"  {rec['wallet'][:20]:<22}{rec['count']:>8,}{rec['amount']:>16,.2f}")
    print(f"\n  Total amount: {sum_column(df, 'amount'):,.2f}")

    if args.csv:
        _, text = transaction_report.generate_csv(store, filters)
        _write_csv(args.csv, text)


def cmd_serve(args):
    """Start the API server."""
    import uvicorn
    print(f"\nStarting Shop Ledger API on port {args.port}...")
    uvicorn.run("shopledger.main:app", host="0.0.0.0", port=args.port, reload=args.reload,
                timeout_keep_alive=65)


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="Shop Ledger: shop balances and wallet transactions from published sheets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # summary subcommand
    summary_parser = subparsers.add_parser("summary", help="Per-shop balance summary")
    summary_parser.add_argument("--leader", help="Team leader")
    summary_parser.add_argument("--search", help="Substring of the shop name")
    summary_parser.add_argument("--csv", help="Write CSV to this path")
    summary_parser.add_argument("--excel", help="Write Excel to this path")
    summary_parser.set_defaults(func=cmd_summary)

    # ledger subcommand
    ledger_parser = subparsers.add_parser("ledger", help="Daily ledger for one shop")
    ledger_parser.add_argument("shop", help="Shop name")
    ledger_parser.add_argument("--csv", help="Write CSV to this path")
    ledger_parser.add_argument("--excel", help="Write Excel to this path")
    ledger_parser.set_defaults(func=cmd_ledger)

    # transactions subcommand
    tx_parser = subparsers.add_parser("transactions", help="Filtered transactions")
    tx_parser.add_argument("--shop", help="Shop name")
    tx_parser.add_argument("--wallet", help="Wallet")
    tx_parser.add_argument("--type", help="Transaction type")
    tx_parser.add_argument("--date", help="Date (YYYY-MM-DD)")
    tx_parser.add_argument("--limit", type=int, default=50, help="Rows to print (default 50)")
    tx_parser.add_argument("--csv", help="Write CSV to this path")
    tx_parser.set_defaults(func=cmd_transactions)

    # serve subcommand
    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")), help="Port (default 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    try:
        args.func(args)
    except SheetFetchError as e:
        print(f"\n  Error: failed to fetch {e.source}: {e.reason}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
