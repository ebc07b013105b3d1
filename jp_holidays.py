"""Japanese public holidays: web lookup with a static fallback table."""

from __future__ import annotations

import logging
import threading
from typing import Callable

import requests

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://holidays-jp.github.io/api/v1/{year}/date.json"
DEFAULT_TIMEOUT = 5.0


# --- fallback table (used when the API is unreachable) -----------------------

FALLBACK_HOLIDAYS: dict[int, dict[str, str]] = {
    2025: {
        "2025-01-01": "元日",
        "2025-01-13": "成人の日",
        "2025-02-11": "建国記念の日",
        "2025-02-23": "天皇誕生日",
        "2025-03-20": "春分の日",
        "2025-04-29": "昭和の日",
        "2025-05-03": "憲法記念日",
        "2025-05-04": "みどりの日",
        "2025-05-05": "こどもの日",
        "2025-07-21": "海の日",
        "2025-08-11": "山の日",
        "2025-09-15": "敬老の日",
        "2025-09-23": "秋分の日",
        "2025-10-13": "スポーツの日",
        "2025-11-03": "文化の日",
        "2025-11-23": "勤労感謝の日",
    },
}


def fallback_holidays(year: int) -> dict[str, str]:
    """Return a copy of the static table for *year* ({} for unknown years)."""
    return dict(FALLBACK_HOLIDAYS.get(year, {}))


# --- web lookup ---------------------------------------------------------------

def fetch_holidays(
    year: int,
    url_template: str = DEFAULT_URL,
    timeout: float = DEFAULT_TIMEOUT,
    session: requests.Session | None = None,
) -> dict[str, str]:
    """Return ``{date_key: name}`` for *year* from the holiday API.

    Raises ``requests.RequestException`` on network errors and non-2xx
    responses, ``ValueError`` on a payload that is not a JSON object.
    """
    http = session or requests
    resp = http.get(url_template.format(year=year), timeout=timeout)
    resp.raise_for_status()
    data = resp.json()
    if not isinstance(data, dict):
        raise ValueError(f"unexpected holiday payload: {type(data).__name__}")
    return {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str)}


def load_holidays(
    year: int,
    url_template: str = DEFAULT_URL,
    timeout: float = DEFAULT_TIMEOUT,
    session: requests.Session | None = None,
) -> dict[str, str]:
    """Like :func:`fetch_holidays` but never raises; degrades to the fallback."""
    try:
        return fetch_holidays(year, url_template, timeout, session)
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Holiday lookup for %d failed (%s); using fallback data", year, exc)
        return fallback_holidays(year)


class HolidayFetcher:
    """Fire-and-forget background lookups, one daemon thread per request.

    *deliver* is called from the worker thread with ``(year, table)``; the
    caller is responsible for marshalling it onto its own thread.
    """

    def __init__(
        self,
        deliver: Callable[[int, dict[str, str]], None],
        url_template: str = DEFAULT_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._deliver = deliver
        self._url_template = url_template
        self._timeout = timeout

    def request(self, year: int) -> threading.Thread:
        thread = threading.Thread(
            target=self._run, args=(year,), name=f"holidays-{year}", daemon=True,
        )
        thread.start()
        return thread

    def _run(self, year: int) -> None:
        table = load_holidays(year, self._url_template, self._timeout)
        logger.debug("Loaded %d holidays for %d", len(table), year)
        self._deliver(year, table)
