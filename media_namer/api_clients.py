# media_namer/api_clients.py

import re
import time
import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import quote

import requests
import requests.exceptions as req_exceptions
from tenacity import AsyncRetrying, RetryError, stop_after_attempt, wait_fixed, retry_if_exception

from .enums import MediaFileType
from .exceptions import InvalidMediaTypeError, MetadataError
from .models import ExternalMedia
from .renamer_base import run_sync

log = logging.getLogger(__name__)


class ExternalSearcher(Protocol):
    async def search(self, kind: MediaFileType, query: str, year: Optional[int]) -> List[ExternalMedia]: ...


class AsyncRateLimiter:
    def __init__(self, delay: float):
        self.delay = delay
        self.last_call = 0.0
        self._lock = asyncio.Lock()

    async def wait(self):
        if self.delay <= 0: return
        async with self._lock:
            now = time.monotonic()
            since_last = now - self.last_call
            if since_last < self.delay:
                wait_time = self.delay - since_last
                log.debug(f"Rate limiting: sleeping for {wait_time:.2f}s")
                await asyncio.sleep(wait_time)
            self.last_call = time.monotonic()


def should_retry_api_error(exception: BaseException) -> bool:
    if isinstance(exception, (req_exceptions.ConnectionError, req_exceptions.Timeout)):
        log.debug(f"Retry check PASSED for Connection/Timeout Error: {type(exception).__name__}")
        return True
    if isinstance(exception, req_exceptions.HTTPError):
        status_code = getattr(getattr(exception, 'response', None), 'status_code', 0) or 0
        if status_code == 429: log.warning("Retry check PASSED for HTTP 429 (Rate Limit)."); return True
        if 500 <= status_code <= 599: log.warning(f"Retry check PASSED for HTTP {status_code} (Server Error)."); return True
        if status_code == 401: log.error("Retry check FAILED for HTTP 401 (Unauthorized - Check API Key)."); return False
        if status_code == 403: log.error("Retry check FAILED for HTTP 403 (Forbidden - Check API Key/Permissions)."); return False
        if status_code == 404: log.debug("Retry check FAILED for HTTP 404 (Not Found)."); return False
        log.debug(f"Retry check FAILED for other HTTP Status Code: {status_code}"); return False
    log.debug(f"Retry check FAILED by default for: {type(exception).__name__}: {exception}")
    return False


class TmdbSearcher:
    """
    Searches TMDB for movies or TV shows and enriches every result with the
    character names from its credits. URLs come from configurable templates
    using the placeholders {base_url}, {api_key}, {query}, {year} and {id}.
    """

    def __init__(self, api_key: str, base_url: str, search_movies_url: str, search_tv_url: str,
                 movie_credits_url: str, tv_credits_url: str, result_limit: int = 10,
                 language: Optional[str] = None, rate_limit_delay: float = 0.25,
                 retry_attempts: int = 3, retry_wait_seconds: float = 2.0, timeout: float = 15.0,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.search_templates = {MediaFileType.MOVIE: search_movies_url, MediaFileType.TV: search_tv_url}
        self.credits_templates = {MediaFileType.MOVIE: movie_credits_url, MediaFileType.TV: tv_credits_url}
        self.result_limit = result_limit
        self.language = language
        self.retry_attempts = retry_attempts
        self.retry_wait_seconds = retry_wait_seconds
        self.timeout = timeout
        self.session = session or requests.Session()
        self.rate_limiter = AsyncRateLimiter(rate_limit_delay)
        self.placeholder_regex = re.compile(r"\{(base_url|api_key|query|year|id)\}")

    @classmethod
    def from_config(cls, cfg_helper) -> "TmdbSearcher":
        api_key = cfg_helper.get_api_key('tmdb')
        if not api_key:
            raise MetadataError("TMDB API key not found. Set TMDB_API_KEY in the environment or a .env file.")
        return cls(
            api_key=api_key,
            base_url=cfg_helper('tmdb_base_url'),
            search_movies_url=cfg_helper('search_movies_url'),
            search_tv_url=cfg_helper('search_tv_url'),
            movie_credits_url=cfg_helper('movie_credits_url'),
            tv_credits_url=cfg_helper('tv_credits_url'),
            result_limit=int(cfg_helper('result_limit', 10)),
            language=cfg_helper('tmdb_language'),
            rate_limit_delay=float(cfg_helper('api_rate_limit_delay', 0.25)),
            retry_attempts=int(cfg_helper('api_retry_attempts', 3)),
            retry_wait_seconds=float(cfg_helper('api_retry_wait_seconds', 2.0)),
            timeout=float(cfg_helper('api_timeout_seconds', 15.0)),
        )

    def build_url(self, template: str, **values: Any) -> str:
        replacements = {'base_url': self.base_url, 'api_key': self.api_key}
        replacements.update({k: "" if v is None else str(v) for k, v in values.items()})
        url = self.placeholder_regex.sub(lambda m: replacements.get(m.group(1), ""), template)
        if self.language and 'language=' not in url:
            url += ('&' if '?' in url else '?') + f"language={quote(self.language)}"
        return url

    def _sync_get_json(self, url: str) -> Dict[str, Any]:
        # api_key is part of the query string, keep it out of the logs
        log.debug(f"GET {url.replace(self.api_key, '***') if self.api_key else url}")
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    async def _get_json(self, url: str, context: str) -> Dict[str, Any]:
        await self.rate_limiter.wait()
        async_retryer = AsyncRetrying(stop=stop_after_attempt(self.retry_attempts), wait=wait_fixed(self.retry_wait_seconds), retry=retry_if_exception(should_retry_api_error))
        try:
            return await async_retryer(run_sync, self._sync_get_json, url)
        except RetryError as e:
            last_exception = e.last_attempt.exception() if e.last_attempt else e
            final_error_msg = f"Failed to fetch TMDB data ({context}) after {self.retry_attempts} attempts."
            if isinstance(last_exception, (req_exceptions.ConnectionError, req_exceptions.Timeout)): final_error_msg += " Check network."
            elif isinstance(last_exception, req_exceptions.HTTPError): final_error_msg += " Likely TMDB server issue."
            raise MetadataError(final_error_msg) from last_exception
        except req_exceptions.JSONDecodeError as e:
            raise MetadataError(f"TMDB returned an invalid JSON response ({context}): {e}") from e
        except req_exceptions.RequestException as e:
            raise MetadataError(f"TMDB request failed ({context}): {e}") from e

    async def _fetch_cast(self, kind: MediaFileType, media_id: Any) -> List[str]:
        url = self.build_url(self.credits_templates[kind], id=media_id)
        data = await self._get_json(url, f"{kind} credits for id {media_id}")
        return [p['character'] for p in data.get('cast') or [] if isinstance(p, dict) and p.get('character')]

    def _to_external_media(self, kind: MediaFileType, result: Dict[str, Any]) -> ExternalMedia:
        if kind == MediaFileType.MOVIE:
            title, date = result.get('title'), result.get('release_date')
        else:
            title, date = result.get('name'), result.get('first_air_date')
        return ExternalMedia(
            title=title or "",
            date=date or "",
            description=result.get('overview') or "",
            poster_path=result.get('poster_path'),
            external_id=result.get('id'),
        )

    async def search(self, kind: MediaFileType, query: str, year: Optional[int]) -> List[ExternalMedia]:
        if kind not in self.search_templates:
            raise InvalidMediaTypeError(f"unknown media type provided for searcher: {kind}")

        url = self.build_url(self.search_templates[kind], query=quote(query), year=year)
        data = await self._get_json(url, f"{kind} search '{query}' ({year})")
        results = [r for r in data.get('results') or [] if isinstance(r, dict)][:self.result_limit]
        log.debug(f"TMDB {kind} search for '{query}' ({year}) returned {len(results)} result(s).")

        media = []
        for result in results:
            item = self._to_external_media(kind, result)
            if item.external_id is not None:
                item.cast = await self._fetch_cast(kind, item.external_id)
            media.append(item)
        return media
