# auction_ingest/geocode.py
"""Kakao local-search geocoding.

Misses are normal here: a blank address, a 4xx other than 429, zero
documents or a server that keeps failing after the retry budget all come
back as None. 429 and 5xx are retried.
"""
from typing import Optional

import requests

from .config import GeocoderConfig
from .errors import TransientGeocodeError
from .schemas import GeoCoordinate
from .utils import logger, retry

ADDRESS_SEARCH_PATH = "/v2/local/search/address.json"


class GeocodingClient:
    def __init__(self, config: GeocoderConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.timeout = (config.connect_timeout, config.read_timeout)
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"KakaoAK {config.api_key}",
            "Accept": "application/json",
        })
        self._search = retry(
            TransientGeocodeError,
            tries=config.max_attempts,
            delay=config.retry_delay,
            backoff=1,
        )(self._search_once)

    def _search_once(self, address):
        try:
            resp = self.session.get(
                f"{self.base_url}{ADDRESS_SEARCH_PATH}",
                params={"query": address},
                timeout=self.timeout,
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            raise TransientGeocodeError(f"geocoder unreachable: {e}") from e
        if resp.status_code >= 500 or resp.status_code == 429:
            raise TransientGeocodeError(f"geocoder answered {resp.status_code}")
        resp.raise_for_status()
        return resp.json()

    def resolve(self, address) -> Optional[GeoCoordinate]:
        if address is None or not address.strip():
            return None

        logger.debug("Geocoding %s", address)
        try:
            payload = self._search(address)
        except TransientGeocodeError as e:
            logger.warning("Geocoding gave up after %d attempts for %s: %s",
                           self.config.max_attempts, address, e)
            return None
        except requests.HTTPError as e:
            logger.error("Geocoder rejected request for %s: %s", address, e)
            return None
        except (requests.RequestException, ValueError) as e:
            logger.error("Unexpected geocoder failure for %s: %s", address, e)
            return None

        documents = payload.get("documents") if isinstance(payload, dict) else None
        documents = documents or []
        if not documents:
            logger.warning("No coordinates found for %s", address)
            return None

        first = documents[0]
        try:
            coord = GeoCoordinate(
                latitude=float(first["y"]),
                longitude=float(first["x"]),
                address_name=first.get("address_name"),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Geocoder document without usable x/y for %s: %s", address, e)
            return None
        logger.info("Geocoded %s -> (%s, %s)", address, coord.latitude, coord.longitude)
        return coord
