#!/usr/bin/env python3
"""
seed_data.py

Generates realistic fake steel plant data to CSVs under a local folder (default: sample_data),
in the layout read by CsvDataAccess.

Entities:
- inventory, production, material_requests
- users, vendor_orders, login_sessions (header only; filled by using the app)

Run:
  python -m steelops.data.seed_data --days 60 --seed 42
"""

from __future__ import annotations
import argparse
import csv
import os
import random
import sys
import uuid
from datetime import datetime, timedelta, date, time, timezone
from math import sin, pi
from typing import Dict, List

from steelops.config import get_config
from steelops.data.backends.csv_backend import TABLES

# -----------------------------
# Config & helper structures
# -----------------------------

INVENTORY_CATALOG = {
    "Raw Materials": [
        ("Iron Ore Fines", "tons", 5200.0),
        ("Coking Coal", "tons", 14500.0),
        ("Limestone", "tons", 1800.0),
        ("Dolomite", "tons", 2100.0),
        ("Ferro Manganese", "tons", 68000.0),
        ("Scrap Metal", "tons", 31000.0),
    ],
    "Finished Products": [
        ("Hot Rolled Coils", "tons", 45000.0),
        ("Cold Rolled Sheets", "tons", 52000.0),
        ("Wire Rods", "tons", 48000.0),
        ("Structural Steel", "tons", 50000.0),
        ("Steel Plates", "tons", 47000.0),
    ],
    "Tools & Equipment": [
        ("Ladle Thermocouples", "pieces", 3500.0),
        ("Tuyere Assemblies", "pieces", 185000.0),
        ("Oxygen Lances", "pieces", 42000.0),
    ],
    "Spare Parts": [
        ("Conveyor Idlers", "pieces", 2800.0),
        ("Mill Roll Bearings", "pieces", 96000.0),
        ("Hydraulic Hoses", "meters", 650.0),
    ],
}

LOCATIONS = ["Warehouse A", "Warehouse B", "Raw Material Yard", "Blast Furnace Store", "Rolling Mill Store"]
SUPPLIERS = ["Steel Supply Co.", "Industrial Equipment Ltd.", "Quality Tools Inc.", "NMDC", "Coal India"]

SHIFTS = ["Day", "Evening", "Night"]
DOWNTIME_REASONS = ["Scheduled maintenance", "Equipment failure", "Power fluctuation", "Raw material shortage"]

MATERIALS = ["Iron Ore", "Coal", "Limestone", "Dolomite", "Scrap Metal", "Alloy Elements"]
PRIORITIES = ["Low", "Medium", "High", "Critical"]
REQUEST_STATUSES = ["Pending", "Approved", "In Transit", "Delivered", "Rejected"]


# -----------------------------
# Utility functions
# -----------------------------

def ensure_dir(path: str) -> None:
    if not os.path.exists(path):
        os.makedirs(path, exist_ok=True)

def iso_ts(d: date, hour: int) -> str:
    return datetime.combine(d, time(hour, 0, 0), tzinfo=timezone.utc).isoformat()

def seasonal_multiplier(d: date) -> float:
    """
    Slow monthly swing in output (~0.93 to ~1.07), plus a weekend dip.
    """
    swing = 1.0 + 0.07 * sin(d.timetuple().tm_yday / 365.0 * 2 * pi)
    return swing * (0.94 if d.weekday() >= 5 else 1.0)

def status_for(quantity: int, min_threshold: int) -> str:
    if quantity < min_threshold // 2:
        return "Critical"
    if quantity < min_threshold:
        return "Low Stock"
    return "In Stock"


# -----------------------------
# Core generators
# -----------------------------

def gen_inventory(created: date) -> List[Dict]:
    items = []
    n = 1
    for category, entries in INVENTORY_CATALOG.items():
        prefix = "".join(word[0] for word in category.replace("&", "").split()).upper()
        for name, unit, cost in entries:
            min_threshold = 100 if unit == "tons" else 20
            max_threshold = 10000 if unit == "tons" else 500
            quantity = random.randint(0, max_threshold)
            items.append({
                "id": str(uuid.uuid4()),
                "item_id": f"{prefix}{n:03d}",
                "name": name,
                "category": category,
                "quantity": quantity,
                "unit": unit,
                "status": status_for(quantity, min_threshold),
                "min_threshold": min_threshold,
                "max_threshold": max_threshold,
                "location": random.choice(LOCATIONS),
                "supplier": random.choice(SUPPLIERS),
                "cost_per_unit": cost,
                "created_at": iso_ts(created, 8 + n % 10),
                "updated_at": iso_ts(created, 8 + n % 10),
            })
            n += 1
    return items

def gen_production(start_d: date, days: int) -> List[Dict]:
    rows = []
    for offset in range(days):
        d = start_d + timedelta(days=offset)
        mult = seasonal_multiplier(d)
        for i, shift in enumerate(SHIFTS):
            downtime = round(random.choice([0.0, 0.0, 0.0, 0.5, 1.0, 1.5, 2.5]), 1)
            uptime = round(8.0 - min(downtime, 8.0), 1)
            efficiency = round(min(99.5, random.gauss(94.0, 2.0) * (uptime / 8.0) ** 0.5), 1)
            steel = round(random.gauss(830.0, 35.0) * mult * efficiency / 94.0, 1)
            rows.append({
                "id": str(uuid.uuid4()),
                "date": d.isoformat(),
                "shift": shift,
                "steel_production": steel,
                "molten_iron": round(steel * random.uniform(0.68, 0.76), 1),
                "efficiency": efficiency,
                "quality_rate": round(min(99.9, random.gauss(98.4, 0.6)), 1),
                "uptime_hours": uptime,
                "downtime_hours": downtime,
                "downtime_reason": random.choice(DOWNTIME_REASONS) if downtime else "",
                "energy_consumption": round(steel * random.uniform(17.0, 19.5), 1),
                "notes": "",
                "operator_id": "",
                "created_at": iso_ts(d, 6 + 8 * i),
            })
    return rows

def gen_material_requests(start_d: date, end_d: date, n: int) -> List[Dict]:
    rows = []
    span = max((end_d - start_d).days, 1)
    used = set()
    for _ in range(n):
        requested = start_d + timedelta(days=random.randint(0, span))
        required = requested + timedelta(days=random.randint(5, 20))
        request_id = f"REQ{random.randint(100000, 999999)}"
        while request_id in used:
            request_id = f"REQ{random.randint(100000, 999999)}"
        used.add(request_id)
        rows.append({
            "id": str(uuid.uuid4()),
            "request_id": request_id,
            "material": random.choice(MATERIALS),
            "quantity": random.choice([50, 100, 250, 500, 1000]),
            "unit": "tons",
            "priority": random.choices(PRIORITIES, weights=[0.2, 0.45, 0.25, 0.1])[0],
            "status": random.choices(REQUEST_STATUSES, weights=[0.3, 0.25, 0.2, 0.2, 0.05])[0],
            "request_date": requested.isoformat(),
            "required_date": required.isoformat(),
            "estimated_delivery": required.isoformat(),
            "notes": "",
            "user_id": "",
            "created_at": iso_ts(requested, 10),
        })
    return rows


# -----------------------------
# IO
# -----------------------------

def write_csv(path: str, rows: List[Dict], header: List[str]) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=header)
        w.writeheader()
        for r in rows:
            w.writerow({k: r.get(k, "") for k in header})


# -----------------------------
# Main
# -----------------------------

def parse_args(argv=None) -> argparse.Namespace:
    config = get_config()
    ap = argparse.ArgumentParser(description="Generate sample steel plant CSV data.")
    ap.add_argument("--outdir", default=config.data_dir, help="Output folder (default: configured data_dir)")
    ap.add_argument("--days", type=int, default=config.default_seed_days, help="Days of production history")
    ap.add_argument("--requests", type=int, default=15, help="Number of material requests")
    ap.add_argument("--seed", type=int, default=config.default_seed_value, help="Random seed")
    ap.add_argument("--start-date", default=None, help="First production date (YYYY-MM-DD)")
    ap.add_argument("--no-overwrite", action="store_true", help="Refuse to overwrite existing files")
    return ap.parse_args(argv)

def main(argv=None) -> int:
    args = parse_args(argv)
    random.seed(args.seed)
    outdir = args.outdir
    ensure_dir(outdir)

    # file paths
    files = {name: os.path.join(outdir, spec.file) for name, spec in TABLES.items()}
    if args.no_overwrite:
        for p in files.values():
            if os.path.exists(p):
                print(f"Refusing to overwrite existing file: {p}", file=sys.stderr)
                return 2

    # time window
    if args.start_date:
        start_d = date.fromisoformat(args.start_date)
    else:
        start_d = (datetime.now(timezone.utc).date() - timedelta(days=args.days - 1))
    end_d = start_d + timedelta(days=args.days - 1)

    inventory = gen_inventory(start_d)
    production = gen_production(start_d, args.days)
    requests = gen_material_requests(start_d, end_d, args.requests)

    # write CSVs
    generated = {"inventory": inventory, "production": production, "material_requests": requests}
    for name, spec in TABLES.items():
        write_csv(files[name], generated.get(name, []), list(spec.columns))

    # simple summary
    print(f"Generated data in {outdir}")
    print(f" inventory: {len(inventory)} | production: {len(production)} | material_requests: {len(requests)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
