#Purpose: The courier directory "adapter".
#Sole responsibility: answer "who is this courier" and "who is active inside
#this box" and return normalized Courier objects.
#Two implementations:
#InMemoryCourierDirectory - simulation and tests
#HttpCourierDirectory - talks to the external courier directory service over HTTP
#It should not contain dispatch rules or ranking.

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple

import requests
from dotenv import load_dotenv

from .models import Courier, CourierStatus

# Read the courier directory base URL from environment
# Example in .env:
# COURIER_DIRECTORY_URL=http://couriers.internal:8080
load_dotenv()
COURIER_DIRECTORY_URL = os.getenv("COURIER_DIRECTORY_URL")

LatLon = Tuple[float, float]


class CourierDirectoryError(Exception):
    """Raised when the directory cannot answer (transport or payload problem)."""
    pass


class CourierDirectory(Protocol):
    def get(self, courier_id: str) -> Optional[Courier]:
        ...

    def active_within(self, min_lat: float, max_lat: float, min_lon: float, max_lon: float) -> List[Courier]:
        ...


@dataclass
class InMemoryCourierDirectory:
    _couriers: Dict[str, Courier] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def add(self, courier: Courier) -> Courier:
        with self._lock:
            self._couriers[courier.id] = courier
        return courier

    def get(self, courier_id: str) -> Optional[Courier]:
        return self._couriers.get(courier_id)

    def active_within(self, min_lat: float, max_lat: float, min_lon: float, max_lon: float) -> List[Courier]:
        return [
            courier
            for courier in list(self._couriers.values())
            if courier.status == CourierStatus.ACTIVE
            and min_lat <= courier.location[0] <= max_lat
            and min_lon <= courier.location[1] <= max_lon
        ]


class HttpCourierDirectory:
    """
    Courier directory client

    Sole responsibility:
    - Talk to the courier directory via HTTP
    - Return normalized Courier objects

    Expected endpoints:
    - GET {base}/couriers/{id}           -> {"id", "lat", "lon", "status", "name"?}
    - GET {base}/couriers?status=active&min_lat=..&max_lat=..&min_lon=..&max_lon=..
                                         -> {"couriers": [ ...same shape... ]}
    """
    def __init__(self, base_url: Optional[str] = None, timeout: float = 5, session: Optional[Any] = None):
        self.base_url = (base_url or COURIER_DIRECTORY_URL or "").rstrip("/")
        self.timeout = timeout  # seconds to wait for the directory before giving up
        self.session = session or requests.Session()

        if not self.base_url:
            raise ValueError("Courier directory URL not set. Please set COURIER_DIRECTORY_URL in the .env file.")

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise CourierDirectoryError(f"Courier directory unreachable: {exc}") from exc

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise CourierDirectoryError(f"Courier directory error {response.status_code} for {url}")

        try:
            return response.json()
        except ValueError as exc:
            raise CourierDirectoryError(f"Courier directory returned invalid JSON for {url}") from exc

    @staticmethod
    def _to_courier(payload: Dict[str, Any]) -> Courier:
        try:
            return Courier.new(
                courier_id=str(payload["id"]),
                lat=float(payload["lat"]),
                lon=float(payload["lon"]),
                status=payload.get("status", CourierStatus.ACTIVE.value),
                name=payload.get("name", ""),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise CourierDirectoryError(f"Malformed courier record: {payload!r}") from exc

    def get(self, courier_id: str) -> Optional[Courier]:
        data = self._get_json(f"/couriers/{courier_id}")
        if data is None:
            return None
        return self._to_courier(data)

    def active_within(self, min_lat: float, max_lat: float, min_lon: float, max_lon: float) -> List[Courier]:
        data = self._get_json(
            "/couriers",
            params={
                "status": CourierStatus.ACTIVE.value,
                "min_lat": min_lat,
                "max_lat": max_lat,
                "min_lon": min_lon,
                "max_lon": max_lon,
            },
        )
        if not data:
            return []
        return [self._to_courier(item) for item in data.get("couriers", [])]
