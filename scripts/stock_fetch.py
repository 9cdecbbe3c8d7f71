#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Grow-a-Garden Stock-Fetch (gamersberg.com API) mit Retries

Ablauf:
- fetch_stock: GET auf die Stock-API, Browser-Header, 15s Timeout, bis zu 3 Versuche
- parse_stock_payload: Seeds/Gear (Mapping) und Eggs (Liste) extrahieren, Menge <= 0 verwerfen
- get_all_stock_data: Fetch + Normalisierung, bis zu 3 Durchläufe solange alles 0 / None ist;
  wirft nie, Fallback ist immer {"seeds": [], "gear": [], "eggs": []}
"""

from __future__ import annotations
import asyncio, json, math, re, sys
from typing import Any, Callable

import httpx

from scripts.stock_normalize import (
    StockData, StockItem, empty_stock, normalize_stock, stock_totals,
)

API_URL = "https://www.gamersberg.com/api/grow-a-garden/stock"

# Browser-Header, sonst blockt die API
HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "application/json",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
    "Referer": "https://www.gamersberg.com/",
    "Origin": "https://www.gamersberg.com",
}

HTTP_TIMEOUT = 15.0
MAX_ATTEMPTS = 3    # Versuche pro fetch_stock
RETRY_DELAY = 2.0
MAX_TRIES = 3       # Durchläufe in get_all_stock_data

TAG = "[stock_fetch]"

Logger = Callable[..., None]

def log(msg: str, *, err: bool = False) -> None:
    print(f"{TAG} {msg}", file=sys.stderr if err else sys.stdout)

# ----------------------------- Extraktion ----------------------------------

RE_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")

def as_int(x: Any) -> int | None:
    """parseInt-artig: 7 -> 7, 3.9 -> 3, "12 left" -> 12, sonst None."""
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, int):
        return x
    if isinstance(x, float):
        return int(x) if math.isfinite(x) else None
    if isinstance(x, str):
        m = RE_LEADING_INT.match(x)
        return int(m.group(1)) if m else None
    return None

def _mapping_items(src: Any) -> list[StockItem]:
    # {"Carrot": 3, "Tomato": "0"}
    if not isinstance(src, dict):
        return []
    out: list[StockItem] = []
    for name, qty in src.items():
        q = as_int(qty)
        if q is not None and q > 0:
            out.append({"name": str(name), "quantity": q})
    return out

def _egg_items(src: Any) -> list[StockItem]:
    # [{"name": "Common Egg", "quantity": 2}, ...]
    if not isinstance(src, list):
        return []
    out: list[StockItem] = []
    for egg in src:
        if not isinstance(egg, dict):
            continue
        name = egg.get("name")
        if not isinstance(name, str) or not name.strip():
            continue
        q = as_int(egg.get("quantity"))
        if q is not None and q > 0:
            out.append({"name": name, "quantity": q})
    return out

def parse_stock_payload(payload: Any, *, log: Logger = log) -> StockData:
    """
    Turn a decoded API body into raw stock data.

    Never raises: an unusable payload (no object, ``success`` falsy, empty
    ``data``) gives all-empty categories, a missing or wrong-typed category
    gives an empty list. Only ``data[0]`` is read.
    """
    stock = empty_stock()
    if not isinstance(payload, dict):
        log(f"unexpected payload type: {type(payload).__name__}")
        return stock

    data = payload.get("data")
    data_len = len(data) if isinstance(data, list) else 0
    log("response: " + json.dumps({
        "success": payload.get("success"),
        "message": payload.get("message"),
        "dataLength": data_len,
        "hasData": data_len > 0,
    }, ensure_ascii=False, default=str))

    if not (payload.get("success") and data_len and isinstance(data[0], dict)):
        log("no valid data found in API response")
        return stock

    game = data[0]
    log(f"processing game data with keys: {list(game)}")
    stock["seeds"] = _mapping_items(game.get("seeds"))
    stock["gear"] = _mapping_items(game.get("gear"))
    stock["eggs"] = _egg_items(game.get("eggs"))
    log("processed counts: " + json.dumps({cat: len(items) for cat, items in stock.items()}))
    return stock

# ----------------------------- Fetch ---------------------------------------

async def fetch_stock(
    client: httpx.AsyncClient | None = None,
    *,
    attempts: int = MAX_ATTEMPTS,
    retry_delay: float = RETRY_DELAY,
    log: Logger = log,
) -> StockData | None:
    """
    Fetch raw stock data, retrying failed requests.

    Network errors, timeouts, non-2xx responses and undecodable JSON count as
    a failed attempt. Returns ``None`` once all attempts failed, never raises.
    Without ``client`` a fresh HTTP/2 client is opened for this call.
    """
    if client is None:
        async with httpx.AsyncClient(http2=True) as own:
            return await fetch_stock(own, attempts=attempts, retry_delay=retry_delay, log=log)

    for attempt in range(1, attempts + 1):
        try:
            log(f"fetching stock from gamersberg.com API (attempt {attempt}/{attempts}) ...")
            r = await client.get(API_URL, headers=HEADERS, timeout=HTTP_TIMEOUT)
            r.raise_for_status()
            payload = r.json()
        except Exception as e:
            log(f"attempt {attempt}/{attempts} failed: {e!r}", err=True)
            if attempt < attempts:
                log(f"retrying in {retry_delay:g}s")
                await asyncio.sleep(retry_delay)
            continue
        return parse_stock_payload(payload, log=log)

    log("all attempts failed, returning None", err=True)
    return None

# ----------------------------- Orchestrierung ------------------------------

async def get_all_stock_data(
    client: httpx.AsyncClient | None = None,
    *,
    tries: int = MAX_TRIES,
    retry_delay: float = RETRY_DELAY,
    log: Logger = log,
) -> StockData:
    try:
        for attempt in range(1, tries + 1):
            log(f"stock run {attempt}/{tries}")
            raw = await fetch_stock(client, retry_delay=retry_delay, log=log)
            if raw is None:
                log("no data available from API")
                continue

            normalized = normalize_stock(raw)
            totals = stock_totals(normalized)
            log("stock counts: " + ", ".join(f"{cat}={n}" for cat, n in totals.items()))
            if not any(totals.values()):
                log("all stock counts are zero")
                continue
            return normalized

        log("no valid stock data after retries, returning empty data")
    except Exception as e:
        log(f"getting stock data failed: {e!r}", err=True)
    return empty_stock()

# --------------------------------- Main -----------------------------------

def main():
    stock = asyncio.run(get_all_stock_data())
    print(json.dumps(stock, ensure_ascii=False, indent=2))
    totals = stock_totals(stock)
    log("done: " + ", ".join(f"{cat}={n}" for cat, n in totals.items()))

if __name__ == "__main__":
    main()
