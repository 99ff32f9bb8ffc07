#!/usr/bin/env python3
"""Seed the demo catalog through the storefront API and print what it holds.

Flow:
1) POST /api/v1/products/seed (no-op when products already exist)
2) GET /api/v1/products and list the catalog
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict

import httpx


DEFAULT_BASE_URL = "http://127.0.0.1:8000"


class ApiError(RuntimeError):
    pass


def _json_or_text(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _require_success(response: httpx.Response, context: str) -> Dict[str, Any]:
    payload = _json_or_text(response)
    if response.status_code >= 400:
        raise ApiError(f"{context} failed ({response.status_code}): {payload}")
    if not isinstance(payload, dict):
        raise ApiError(f"{context} returned non-JSON payload: {payload}")
    if payload.get("success") is False:
        raise ApiError(f"{context} returned success=false: {payload}")
    return payload


def seed(client: httpx.Client) -> int:
    payload = _require_success(client.post("/api/v1/products/seed"), "Seed catalog")
    print(payload.get("message"))
    return int((payload.get("data") or {}).get("count", 0))


def list_products(client: httpx.Client) -> None:
    payload = _require_success(client.get("/api/v1/products"), "List products")
    for product in payload.get("data") or []:
        print(f"  {product.get('id'):>4}  {product.get('name')}  ({product.get('price')})")


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--timeout", type=float, default=10.0)
    args = parser.parse_args()

    try:
        with httpx.Client(base_url=args.base_url, timeout=args.timeout) as client:
            count = seed(client)
            print(f"Catalog holds {count} products")
            list_products(client)
    except (ApiError, httpx.HTTPError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
