"""
Time-card service client — fetch today's clock-in/out records.

Blocking, single attempt, bounded timeout. Call from a worker thread,
never from the Tk main thread.
"""

from datetime import date

import requests

from .constants import API_WORK_DAYS_PATH, API_VERSION, API_TIMEOUT_SEC, API_BASE_URL, STATIC_BROWSER_HEADERS
from .config import log
from .errors import ApiError, ConfigError
from . import http_client


class TimeCardClient:

    def __init__(self, base_url=API_BASE_URL, timeout=API_TIMEOUT_SEC,
                 session=None, today=date.today):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session
        self._today = today

    @property
    def url(self):
        return f"{self._base_url}{API_WORK_DAYS_PATH}"

    def _http(self):
        # Looked up per call so runner's reset_session() takes effect.
        return self._session or http_client.http

    @staticmethod
    def build_headers(config):
        headers = dict(STATIC_BROWSER_HEADERS)
        headers.update({
            "access-token": config.access_token,
            "token": config.access_token,
            "client": config.client,
            "uid": config.uid,
            "uuid": config.uuid,
            "api-version": API_VERSION,
            "content-type": "application/json",
        })
        return headers

    def build_params(self, config, day=None):
        day = (day or self._today()).isoformat()
        return {
            "employee_id": config.employee_id,
            "start_date": day,
            "end_date": day,
            "attributes": "time_cards",
        }

    def _get(self, config):
        try:
            resp = self._http().get(
                self.url,
                params=self.build_params(config),
                headers=self.build_headers(config),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            log.warning("Time-card request failed: %s", e)
            raise ApiError(f"Request to time-card service failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            log.warning("Time-card request failed: HTTP %d — %s", resp.status_code, resp.text[:200])
            raise ApiError(
                f"Time-card service returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                body=resp.text,
            )
        return resp

    def test_connection(self, config):
        """Raw response body for the settings "test" button."""
        resp = self._get(config)
        log.info("Time-card API test OK (%d bytes)", len(resp.content))
        return resp.text

    def fetch_today_records(self, config):
        """``time`` of every entry of the first work day; [] when there is none."""
        resp = self._get(config)
        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError("Time-card response is not valid JSON",
                           status_code=resp.status_code, body=resp.text) from e

        work_days = data.get("work_days") if isinstance(data, dict) else None
        if not work_days:
            log.info("No work day returned for today")
            return []

        try:
            times = [card["time"] for card in work_days[0].get("time_cards") or []]
        except (KeyError, TypeError, AttributeError) as e:
            raise ApiError(f"Unexpected time-card response shape: {e}",
                           status_code=resp.status_code, body=resp.text) from e

        log.info("Fetched %d time card(s) for today", len(times))
        return times

    def fetch_today_records_from_vault(self, vault):
        config = vault.load_config()
        if config is None:
            raise ConfigError("Time-card credentials are not configured")
        return self.fetch_today_records(config)
