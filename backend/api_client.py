"""
api_client.py

A small client for the inventory API, for scripts, scanners and front ends.

What it provides:
- JWT login + authenticated requests (one retry after re-login on 401/403)
- CRUD helpers for categories, locations, items and movements
- Form helpers: scan lookup and movement payload normalisation
- Bulk move (atomic, server side)

Environment variables expected:
- INVENTORY_API_URL: e.g. "https://your-domain.com/api"
- INVENTORY_API_EMAIL: user's email (must exist in backend)
- INVENTORY_API_PASSWORD: user's password

Optional:
- INVENTORY_API_TOKEN: if you want to pre-seed a token (otherwise we login)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import requests

from core.lookup import find_by_code

logger = logging.getLogger("backend.api_client")

UNASSIGNED = "unassigned"


class ApiError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _blank_to_none(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value or value == UNASSIGNED:
            return None
    return value


def _parse_location_id(value: Any) -> Optional[int]:
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid location id: {value!r}")


def build_movement_payload(
    item: Dict[str, Any],
    *,
    reason: str,
    to_location_id: Any = None,
    to_organizer_id: Any = None,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Turn movement form values into an API payload.

    The source is pre-filled from the item's current holder, "unassigned" and
    blank selections become None, and at least one destination is required.
    """
    to_location = _parse_location_id(to_location_id)
    to_organizer = _blank_to_none(to_organizer_id)
    if to_location is None and to_organizer is None:
        raise ValueError("Either 'To Location' or 'To Person' must be specified.")

    return {
        "item_id": str(item["id"]),
        "reason": reason,
        "from_location_id": item.get("holder_location_id"),
        "from_organizer_id": _blank_to_none(item.get("holder_organizer_id")),
        "to_location_id": to_location,
        "to_organizer_id": str(to_organizer) if to_organizer is not None else None,
        "notes": _blank_to_none(notes),
    }


def collect_scanned(items: Iterable[Dict[str, Any]], codes: Iterable[str]) -> tuple[List[Dict[str, Any]], List[str]]:
    """
    Resolve scanned codes to items for a bulk move.

    Returns (items found, codes not found); items scanned twice are kept once.
    """
    items = list(items)
    found: List[Dict[str, Any]] = []
    seen = set()
    unknown: List[str] = []
    for code in codes:
        it = find_by_code(items, code)
        if it is None:
            unknown.append(code)
            continue
        if it["id"] in seen:
            logger.info("Item %s is already in the list", it.get("name") or it.get("asset_tag"))
            continue
        seen.add(it["id"])
        found.append(it)
    return found, unknown


@dataclass
class InventoryApiClient:
    base_url: str
    email: str
    password: str
    token: Optional[str] = None
    timeout: int = 60

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def login(self) -> str:
        """Exchange email/password for a bearer token via POST /auth/jwt/login (form fields)."""
        resp = requests.post(
            self._url("/auth/jwt/login"),
            data={"username": self.email, "password": self.password},
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        if resp.status_code >= 400:
            raise ApiError(f"Login failed ({resp.status_code}): {resp.text}", resp.status_code)
        token = resp.json().get("access_token")
        if not token:
            raise ApiError("Login response missing access_token", resp.status_code)
        self.token = token
        logger.debug("Logged in to %s as %s", self.base_url, self.email)
        return token

    def _send(self, method: str, path: str, json: Any, params: Optional[Dict[str, Any]]) -> requests.Response:
        if not self.token:
            self.login()
        return requests.request(
            method,
            self._url(path),
            json=json,
            params=params,
            headers=self._headers(),
            timeout=self.timeout,
        )

    def _request(self, method: str, path: str, *, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        resp = self._send(method, path, json, params)
        if resp.status_code in (401, 403):
            # Stale token: one fresh login, then give up.
            self.token = None
            resp = self._send(method, path, json, params)

        if resp.status_code >= 400:
            raise ApiError(f"{method} {path} failed ({resp.status_code}): {resp.text}", resp.status_code)
        if resp.status_code == 204:
            return None
        return resp.json()

    # ----------------------------
    # Categories
    # ----------------------------

    def list_categories(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/inventory/categories/")

    def create_category(self, *, name: str, description: Optional[str] = None) -> Dict[str, Any]:
        return self._request("POST", "/inventory/categories/", json={"name": name, "description": description})

    def update_category(self, category_id: int, **changes: Any) -> Dict[str, Any]:
        return self._request("PATCH", f"/inventory/categories/{category_id}", json=changes)

    def delete_category(self, category_id: int) -> None:
        self._request("DELETE", f"/inventory/categories/{category_id}")

    # ----------------------------
    # Locations
    # ----------------------------

    def list_locations(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/locations/")

    def create_location(self, *, name: str, capacity: int = 0) -> Dict[str, Any]:
        return self._request("POST", "/locations/", json={"name": name, "capacity": capacity})

    def get_location(self, location_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/locations/{location_id}")

    def update_location(self, location_id: int, **changes: Any) -> Dict[str, Any]:
        return self._request("PATCH", f"/locations/{location_id}", json=changes)

    def delete_location(self, location_id: int) -> None:
        self._request("DELETE", f"/locations/{location_id}")

    def list_organizers(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/organizers/")

    # ----------------------------
    # Items
    # ----------------------------

    def list_items(
        self,
        *,
        q: Optional[str] = None,
        category_id: Optional[int] = None,
        status: Optional[str] = None,
        holder: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = {"q": q, "category_id": category_id, "status": status, "holder": holder}
        return self._request("GET", "/inventory/items", params={k: v for k, v in params.items() if v is not None})

    def create_item(self, **fields: Any) -> Dict[str, Any]:
        """
        Calls: POST /inventory/items
        Required: category_id, holder_location_id, and name or asset_tag.
        """
        return self._request("POST", "/inventory/items", json=fields)

    def update_item(self, item_id: str, **changes: Any) -> Dict[str, Any]:
        """Only name, asset_tag, serial_number and notes can be changed."""
        return self._request("PATCH", f"/inventory/items/{item_id}", json=changes)

    def delete_item(self, item_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/inventory/items/{item_id}")

    def lookup_item(self, code: str) -> Dict[str, Any]:
        return self._request("GET", "/inventory/items/lookup", params={"code": code})

    def new_asset_tag(self) -> str:
        return self._request("GET", "/inventory/items/asset-tag")["asset_tag"]

    # ----------------------------
    # Movements
    # ----------------------------

    def list_movements(
        self, *, q: Optional[str] = None, item_id: Optional[str] = None, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        params = {"q": q, "item_id": item_id, "limit": limit}
        return self._request("GET", "/inventory/movements", params={k: v for k, v in params.items() if v is not None})

    def create_movement(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Calls: POST /inventory/movements
        Build the payload with build_movement_payload() to get the holder pre-fill.
        """
        return self._request("POST", "/inventory/movements", json=payload)

    def move_item(
        self,
        item: Dict[str, Any],
        *,
        reason: str,
        to_location_id: Any = None,
        to_organizer_id: Any = None,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = build_movement_payload(
            item,
            reason=reason,
            to_location_id=to_location_id,
            to_organizer_id=to_organizer_id,
            notes=notes,
        )
        return self.create_movement(payload)

    def bulk_move(
        self,
        item_ids: Iterable[str],
        *,
        to_location_id: int,
        to_organizer_id: Optional[str] = None,
        reason: str = "transfer",
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Calls: POST /inventory/movements/bulk
        All items move or none do.
        """
        ids = [str(i) for i in item_ids]
        if not ids:
            raise ValueError("Please select at least one item")
        payload = {
            "item_ids": ids,
            "to_location_id": to_location_id,
            "to_organizer_id": to_organizer_id,
            "reason": reason,
            "notes": notes,
        }
        return self._request("POST", "/inventory/movements/bulk", json=payload)

    def delete_movement(self, movement_id: str) -> None:
        self._request("DELETE", f"/inventory/movements/{movement_id}")

    # ----------------------------
    # Analytics
    # ----------------------------

    def analytics(self) -> Dict[str, Any]:
        return self._request("GET", "/inventory/analytics")

    def catalog(self, *, category_id: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {"category_id": category_id} if category_id is not None else None
        return self._request("GET", "/inventory/catalog", params=params)


def make_client_from_env() -> InventoryApiClient:
    base_url = os.getenv("INVENTORY_API_URL", "").strip()
    email = os.getenv("INVENTORY_API_EMAIL", "").strip()
    password = os.getenv("INVENTORY_API_PASSWORD", "").strip()
    token = os.getenv("INVENTORY_API_TOKEN", "").strip() or None

    if not base_url:
        raise RuntimeError("Missing INVENTORY_API_URL")
    if not email:
        raise RuntimeError("Missing INVENTORY_API_EMAIL")
    if not password:
        raise RuntimeError("Missing INVENTORY_API_PASSWORD")

    return InventoryApiClient(base_url=base_url, email=email, password=password, token=token)
