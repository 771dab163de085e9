"""Google Maps Time Zone API client with response caching."""
import hashlib
import json
import logging
import time
from typing import Any, Dict, Optional, Union
from urllib.parse import quote_plus

import requests

from cache_store import CacheStoreBase, MemoryCacheStore
from timezone_response import TimezoneResponse
from timezone_result import ErrorKind, TimezoneFailure, TimezoneProviderError


class TimezoneClient:
    """
    Client for the Google Maps Time Zone API.

    API reference: https://developers.google.com/maps/documentation/timezone
    Successful payloads are cached under a key derived from every request
    parameter plus the API key, so different accounts, languages and
    timestamps never share an entry.
    """

    BASE_URL = "https://maps.googleapis.com/maps/api/timezone/json"
    CACHE_PREFIX = "google_timezone_"
    SUCCESS_STATUS = "OK"

    def __init__(
        self,
        api_key: str,
        enable_cache: bool = True,
        cache_expiration: int = 86400,  # 24 hours
        cache_store: Optional[CacheStoreBase] = None,
        timeout: int = 15
    ):
        """
        Initialize the timezone client.

        Args:
            api_key: Google Maps API key
            enable_cache: Whether to cache API payloads
            cache_expiration: Cache lifetime in seconds
            cache_store: Where to keep cached payloads (in-memory by default)
            timeout: HTTP request timeout in seconds
        """
        self._api_key = api_key
        self._enable_cache = enable_cache
        self._cache_expiration = cache_expiration
        self._timeout = timeout
        if cache_store is None and enable_cache:
            cache_store = MemoryCacheStore()
        self._cache_store = cache_store

    @property
    def enable_cache(self) -> bool:
        return self._enable_cache

    @property
    def cache_expiration(self) -> int:
        return self._cache_expiration

    @property
    def cache_store(self) -> Optional[CacheStoreBase]:
        return self._cache_store

    def get_timezone(
        self,
        latitude: float,
        longitude: float,
        timestamp: Optional[int] = None,
        language: Optional[str] = None
    ) -> Union[TimezoneResponse, TimezoneFailure]:
        """
        Look up the timezone for a location.

        Args:
            latitude: Latitude (-90 to 90)
            longitude: Longitude (-180 to 180)
            timestamp: UNIX timestamp the offsets should apply to (default: now)
            language: Language code for the localized timezone name (e.g. "fr")

        Returns:
            TimezoneResponse on success, TimezoneFailure otherwise
        """
        if not -90 <= latitude <= 90:
            logging.error(f"Rejected latitude {latitude}")
            return TimezoneFailure(
                ErrorKind.INVALID_LATITUDE,
                "Latitude must be between -90 and 90 degrees"
            )

        if not -180 <= longitude <= 180:
            logging.error(f"Rejected longitude {longitude}")
            return TimezoneFailure(
                ErrorKind.INVALID_LONGITUDE,
                "Longitude must be between -180 and 180 degrees"
            )

        if timestamp is None:
            timestamp = int(time.time())

        params = self.build_params(latitude, longitude, timestamp, language)

        cache_key = None
        if self._enable_cache and self._cache_store is not None:
            cache_key = self.cache_key(self.cache_identifier(params))
            cached_data = self._cache_store.get(cache_key)
            if cached_data:
                logging.debug(f"Using cached timezone data for location {params['location']}")
                return TimezoneResponse(cached_data)
            logging.debug(f"No cached timezone data for location {params['location']}")

        try:
            data = self._make_request(params)
        except TimezoneProviderError as e:
            return e.to_failure()

        if cache_key is not None:
            if self._cache_store.set(cache_key, data, self._cache_expiration):
                logging.debug(f"Cached timezone data for {self._cache_expiration}s")
            else:
                logging.warning("Failed to cache timezone data")

        return TimezoneResponse(data)

    def build_params(
        self,
        latitude: float,
        longitude: float,
        timestamp: int,
        language: Optional[str] = None
    ) -> Dict[str, Any]:
        """Assemble the ordered query parameters for one lookup."""
        params = {
            "location": f"{latitude},{longitude}",
            "timestamp": timestamp,
            "key": self._api_key,
        }
        if language:
            params["language"] = language
        return params

    @staticmethod
    def cache_identifier(params: Dict[str, Any]) -> str:
        """Canonical string form of a parameter set, in insertion order."""
        return json.dumps(params, separators=(",", ":"), ensure_ascii=False)

    def cache_key(self, identifier: str) -> str:
        """Namespaced cache key for an identifier and this client's API key."""
        digest = hashlib.md5((identifier + self._api_key).encode("utf-8")).hexdigest()
        return f"{self.CACHE_PREFIX}{digest}"

    def clear_cache(self, identifier: Optional[str] = None) -> bool:
        """
        Clear cached payloads.

        Args:
            identifier: Clear only the entry for this identifier
                (see cache_identifier); clear the whole namespace if None

        Returns:
            For a single entry, whether it was deleted; for the whole
            namespace, whether the store completed the delete
        """
        if self._cache_store is None:
            return False

        if identifier is not None:
            return self._cache_store.delete(self.cache_key(identifier))

        cleared = self._cache_store.delete_by_prefix(self.CACHE_PREFIX)
        logging.info(f"Timezone cache cleared: {cleared}")
        return cleared

    def _make_request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Perform the HTTP call and validate the payload.

        Raises:
            TimezoneProviderError: If the request or the payload is unusable
        """
        logging.info(f"Making Time Zone API request: {self.BASE_URL}")
        logging.debug(
            f"Request parameters: location={params['location']}, "
            f"timestamp={params['timestamp']}, language={params.get('language')}"
        )

        try:
            response = requests.get(
                self.BASE_URL,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
        except requests.exceptions.RequestException as e:
            message = self._redact(f"Timezone API request failed: {e}")
            logging.error(message)
            raise TimezoneProviderError(ErrorKind.API_TRANSPORT_ERROR, message)

        logging.info(f"API response status: {response.status_code}")

        if not 200 <= response.status_code < 300:
            message = f"Timezone API returned error code: {response.status_code}"
            logging.error(message)
            raise TimezoneProviderError(ErrorKind.API_STATUS_ERROR, message)

        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"Failed to parse API response: {e}")
            raise TimezoneProviderError(
                ErrorKind.API_PARSE_ERROR,
                "Failed to parse Timezone API response"
            )

        if not isinstance(data, dict):
            logging.error(f"Unexpected API response type: {type(data).__name__}")
            raise TimezoneProviderError(
                ErrorKind.API_PARSE_ERROR,
                "Failed to parse Timezone API response"
            )

        status = data.get("status")
        if status is not None and status != self.SUCCESS_STATUS:
            message = f"Timezone API returned error: {status}"
            logging.error(message)
            raise TimezoneProviderError(ErrorKind.API_LOGIC_ERROR, message)

        logging.info(f"Successfully fetched timezone {data.get('timeZoneId')}")
        return data

    def _redact(self, text: str) -> str:
        """Remove the API key from text that may echo the request URL."""
        if not self._api_key:
            return text
        for secret in (self._api_key, quote_plus(self._api_key)):
            text = text.replace(secret, "***")
        return text
