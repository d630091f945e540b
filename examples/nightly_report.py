"""Example: Nightly Report from a Saved Order Log

This example shows how to build and reconcile the nightly report for one
business date from an order log exported by the tablets:
1. Load order records from JSON (malformed records are skipped)
2. Aggregate and reconcile the business date
3. Print the breakdowns as DataFrames

Prerequisites:
- Export the order log to data/pos_orders.json (a JSON list of orders)
- Optionally list custom ticket categories in config/categories.json
"""

import json
import logging
from pathlib import Path

from theatre_pos import ReportSettings, generate_nightly_report
from theatre_pos.orders import TicketCategoryRegistry, load_orders
from theatre_pos.reports import report_to_frames

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

orders_json = Path("data/pos_orders.json")
categories_json = Path("config/categories.json")

business_date = "2025-01-15"  # MODIFY AS NEEDED

loaded = load_orders(json.loads(orders_json.read_text(encoding="utf-8")))
print(f"Loaded {len(loaded.orders)} orders ({loaded.skipped} malformed records skipped)")

registry = (
    TicketCategoryRegistry.from_json(categories_json)
    if categories_json.exists()
    else TicketCategoryRegistry()
)

result = generate_nightly_report(
    loaded.orders,
    business_date,
    settings=ReportSettings(credit_card_fee_percent=5.0),
    is_ticket_category=registry,
)
report = result.report

print(f"\nNightly report for {report.date}")
print(f"  - Total sales: ${report.total_sales:.2f} ({report.total_orders} orders)")
print(f"  - Cash: ${report.cash_sales:.2f}  Card: ${report.card_sales:.2f}")
print(f"  - Card fees: ${report.credit_card_fees:.2f}  Net: ${report.net_sales:.2f}")
print(f"  - Average order: ${report.average_order_value:.2f}")

frames = report_to_frames(report)
for name in ("departments", "payments", "shows", "users", "top_products"):
    print(f"\n{name}:")
    print(frames[name].to_string(index=False))

if result.passed:
    print("\n✓ Report reconciles")
else:
    print("\n✗ Reconciliation failed:")
    for d in result.verification.errors:
        print(f"  - {d.kind}: expected {d.expected:.2f}, got {d.actual:.2f} ({d.delta:+.2f})")

for d in result.verification.warnings:
    print(f"  ! {d.kind}: {d.message}")
