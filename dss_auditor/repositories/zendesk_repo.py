# dss_auditor/repositories/zendesk_repo.py
import logging
import math
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, List, Optional, Set

import httpx

from dss_auditor.core.errors import ConfigError, TicketNotFoundError, ZendeskError
from dss_auditor.repositories.base import BaseHttpRepository

logger = logging.getLogger("dss.zendesk")


class ZendeskRepository(BaseHttpRepository):
    """
    Read-only Zendesk Support API access (tickets, comments, ticket fields).
    Auth: "{email}/token" + API token.
    """

    MAX_ATTEMPTS = 6
    MAX_PAGES = 100
    RETRY_AFTER_DEFAULT = 2.0
    RETRY_AFTER_MAX = 60.0

    def __init__(
        self,
        *,
        subdomain: str,
        email: str,
        api_token: str,
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
        sleep=time.sleep,
    ):
        if not subdomain or not email or not api_token:
            raise ConfigError("Missing ZENDESK_SUBDOMAIN, ZENDESK_EMAIL or ZENDESK_API_TOKEN")
        super().__init__(client, timeout=timeout)
        self.base = f"https://{subdomain}.zendesk.com/api/v2"
        self.auth = httpx.BasicAuth(f"{email}/token", api_token)
        self._sleep = sleep

    # -------------------------------------------------------
    # INTERNAL GET (429-aware)
    # -------------------------------------------------------
    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        for attempt in range(1, self.MAX_ATTEMPTS + 1):
            try:
                r = self.client.get(url, params=params, auth=self.auth)
            except httpx.HTTPError as e:
                logger.warning("Zendesk GET network error url=%s attempt=%d: %s", url, attempt, e)
                self._sleep(1.0)
                continue

            if r.status_code == 429:
                wait = self._retry_after(r.headers.get("retry-after"))
                logger.info("Zendesk rate limited; sleeping %ss", wait)
                self._sleep(wait)
                continue
            if r.status_code == 404:
                raise TicketNotFoundError(f"Not found: {url}", status_code=404)
            if r.status_code == 401:
                raise ZendeskError("401 Unauthorized; check the Zendesk API token", status_code=401)
            if r.status_code >= 400:
                raise ZendeskError(
                    f"Zendesk GET {url} -> {r.status_code}: {r.text[:200]}",
                    status_code=r.status_code,
                )
            return r.json()

        raise ZendeskError("Too many retries talking to Zendesk")

    def _retry_after(self, value: Optional[str]) -> float:
        """
        Retry-After is delay-seconds or an HTTP-date; capped at RETRY_AFTER_MAX.
        """
        if not value:
            return self.RETRY_AFTER_DEFAULT
        try:
            wait = float(value)
        except ValueError:
            try:
                at = parsedate_to_datetime(value)
            except (TypeError, ValueError):
                return self.RETRY_AFTER_DEFAULT
            if at.tzinfo is None:
                at = at.replace(tzinfo=timezone.utc)
            wait = (at - datetime.now(timezone.utc)).total_seconds()
        if math.isnan(wait):
            return self.RETRY_AFTER_DEFAULT
        return min(max(wait, 0.0), self.RETRY_AFTER_MAX)

    # -------------------------------------------------------
    # TICKETS
    # -------------------------------------------------------
    def get_ticket(self, ticket_id: int) -> Dict[str, Any]:
        data = self._get(f"{self.base}/tickets/{ticket_id}.json", params={"include": "users"})
        ticket = dict(data.get("ticket") or {})
        if not ticket:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found", status_code=404)

        users = {u.get("id"): u for u in data.get("users") or [] if isinstance(u, dict)}
        ticket["requester"] = users.get(ticket.get("requester_id"))
        ticket["assignee"] = users.get(ticket.get("assignee_id"))
        return ticket

    def list_comments(self, ticket_id: int) -> List[Dict[str, Any]]:
        url: Optional[str] = f"{self.base}/tickets/{ticket_id}/comments.json"
        params: Optional[Dict[str, Any]] = {"sort_order": "asc"}
        comments: List[Dict[str, Any]] = []
        seen: Set[str] = set()

        while url and url not in seen and len(seen) < self.MAX_PAGES:
            seen.add(url)
            data = self._get(url, params=params)
            comments.extend(data.get("comments") or [])
            url = data.get("next_page")
            params = None  # next_page already carries the query

        if url:
            logger.warning(
                "Zendesk comment paging stopped ticket_id=%s pages=%d next_page=%s",
                ticket_id, len(seen), url,
            )
        return comments

    def ticket_field_titles(self) -> Dict[str, str]:
        data = self._get(f"{self.base}/ticket_fields.json")
        return {
            str(f["id"]): f.get("title") or ""
            for f in data.get("ticket_fields") or []
            if isinstance(f, dict) and f.get("id") is not None
        }
