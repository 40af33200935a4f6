"""Reverse geocoding of GPS fixes via OpenStreetMap Nominatim."""

import json
import time
from pathlib import Path
from typing import Dict, Optional

import requests

from photoshelf import __version__
from photoshelf.core.logger import log_call, log_info, log_result, log_warning

# Location field -> Nominatim address keys, most specific first
ADDRESS_FIELDS = {
    "city": ("city", "town", "village", "municipality", "hamlet"),
    "state": ("state", "region", "county"),
    "country": ("country",),
}


class Geocoder:
    """Fills address/city/state/country for coordinates.

    Results are cached per ~11 m cell, in memory and optionally in a JSON
    file. Failed lookups return None and are retried next time.
    """

    NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"
    USER_AGENT = f"Photoshelf/{__version__}"
    MIN_REQUEST_INTERVAL = 1.1  # Nominatim allows one request per second

    def __init__(self, cache_file: Optional[Path] = None, language: str = "en"):
        """
        Args:
            cache_file: JSON file for persisting lookups across runs
            language: Preferred language of place names
        """
        self.cache_file = Path(cache_file) if cache_file else None
        self.language = language
        self._cache: Dict[str, Optional[dict]] = self._read_cache()
        self._last_request_time = 0.0

    def reverse(self, latitude: float, longitude: float) -> Optional[dict]:
        """Address parts for the coordinates, or None if nothing is known."""
        log_call("Geocoder", "reverse", lat=latitude, lng=longitude)

        key = f"{round(latitude, 4)},{round(longitude, 4)}"
        if key in self._cache:
            log_info(f"geocode cache hit for {key}")
            return self._cache[key]

        try:
            payload = self._fetch(latitude, longitude)
        except (requests.RequestException, ValueError) as e:
            log_warning(f"reverse geocoding of {key} failed: {e}")
            return None

        parts = self.address_parts(payload)
        self._cache[key] = parts
        self._write_cache()

        log_result("Geocoder", "reverse", parts)
        return parts

    def _fetch(self, latitude: float, longitude: float) -> dict:
        elapsed = time.time() - self._last_request_time
        if elapsed < self.MIN_REQUEST_INTERVAL:
            time.sleep(self.MIN_REQUEST_INTERVAL - elapsed)
        self._last_request_time = time.time()

        response = requests.get(
            self.NOMINATIM_URL,
            params={
                "lat": latitude,
                "lon": longitude,
                "format": "json",
                "zoom": 18,
                "addressdetails": 1,
            },
            headers={"User-Agent": self.USER_AGENT, "Accept-Language": self.language},
            timeout=10,
        )
        response.raise_for_status()
        return response.json()

    @staticmethod
    def address_parts(payload: Optional[dict]) -> Optional[dict]:
        """Maps a Nominatim response onto Location fields."""
        address = (payload or {}).get("address") or {}

        parts = {}
        street = " ".join(address[key] for key in ("road", "house_number") if key in address)
        if street:
            parts["address"] = street
        for field_name, candidates in ADDRESS_FIELDS.items():
            value = next((address[key] for key in candidates if key in address), None)
            if value:
                parts[field_name] = value

        return parts or None

    def _read_cache(self) -> Dict[str, Optional[dict]]:
        if not self.cache_file or not self.cache_file.exists():
            return {}
        try:
            with open(self.cache_file, "r", encoding="utf-8") as f:
                cache = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log_warning(f"ignoring unreadable geocode cache {self.cache_file}: {e}")
            return {}
        return cache if isinstance(cache, dict) else {}

    def _write_cache(self) -> None:
        if not self.cache_file:
            return
        tmp_path = self.cache_file.with_suffix(self.cache_file.suffix + ".tmp")
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._cache, f, ensure_ascii=False, indent=2)
            tmp_path.replace(self.cache_file)
        except OSError as e:
            log_warning(f"geocode cache not saved: {e}")
