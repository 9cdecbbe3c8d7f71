#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Stock-Normalisierung für die Grow-a-Garden-Daten

- Präfixe "Seeds" / "Gear" / "Egg" am Namensanfang entfernen
- Duplikate je Kategorie zusammenführen (case-insensitive), Mengen SUMMIEREN
- Kategorien bleiben strikt getrennt, kein I/O
"""

from __future__ import annotations
import re
from typing import TypedDict


class StockItem(TypedDict):
    name: str
    quantity: int


StockData = dict[str, list[StockItem]]

CATEGORIES = ("seeds", "gear", "eggs")

RE_PREFIX = re.compile(r"^(Seeds|Gear|Egg)", re.I)


def empty_stock() -> StockData:
    return {cat: [] for cat in CATEGORIES}

# ----------------------------- Namen ---------------------------------------

def clean_name(name: str) -> str:
    """Display name: trimmed, one leading category prefix removed, original casing."""
    return RE_PREFIX.sub("", name.strip(), count=1).strip()

def name_key(name: str) -> str:
    return clean_name(name).lower()

# ----------------------------- Aggregation ---------------------------------

def normalize_category(items: list[StockItem] | None) -> list[StockItem]:
    merged: dict[str, StockItem] = {}
    for item in items or []:
        key = name_key(item["name"])
        if key in merged:
            # Summe, nicht Maximum
            merged[key]["quantity"] += item["quantity"]
        else:
            merged[key] = {"name": clean_name(item["name"]), "quantity": item["quantity"]}
    return list(merged.values())

def normalize_stock(raw: StockData) -> StockData:
    """
    Merge duplicate names inside each category.

    Items sharing a key (cleaned, lower-cased name) are summed; the first
    occurrence decides the displayed name. A missing category counts as empty.
    """
    return {cat: normalize_category(raw.get(cat)) for cat in CATEGORIES}

def stock_totals(data: StockData) -> dict[str, int]:
    return {cat: sum(it["quantity"] for it in data.get(cat) or []) for cat in CATEGORIES}
