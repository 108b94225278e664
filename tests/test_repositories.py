"""Tests for the Zendesk and Sheets HTTP repositories (httpx.MockTransport)."""

import json
from datetime import date

import httpx
import pytest

from dss_auditor.core.errors import ConfigError, SheetsWriteError, TicketNotFoundError, ZendeskError
from dss_auditor.repositories.sheets_repo import SHEET_COLUMNS, SheetsProxyWriter
from dss_auditor.repositories.zendesk_repo import ZendeskRepository
from dss_auditor.services.engine.columns import ColumnKey
from dss_auditor.services.engine.models import AuditInput
from dss_auditor.services.engine.value_tier import ValueTier
from dss_auditor.services.engine.verdict import build_verdict
from dss_auditor.services.policy.schema import PolicyRow


def _zendesk(handler, sleeps=None):
    return ZendeskRepository(
        subdomain="acme",
        email="agent@acme.test",
        api_token="tok",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
        sleep=(sleeps.append if sleeps is not None else (lambda s: None)),
    )


class TestZendeskRepository:

    def test_requires_credentials(self):
        with pytest.raises(ConfigError):
            ZendeskRepository(subdomain="", email="a", api_token="b")

    def test_get_ticket_attaches_users(self):
        def handler(request):
            assert request.url.path == "/api/v2/tickets/7.json"
            assert request.url.params["include"] == "users"
            assert request.headers["authorization"].startswith("Basic ")
            return httpx.Response(200, json={
                "ticket": {"id": 7, "subject": "s", "requester_id": 1, "assignee_id": 2},
                "users": [{"id": 1, "name": "Req"}, {"id": 2, "name": "Agent"}],
            })

        ticket = _zendesk(handler).get_ticket(7)
        assert ticket["requester"]["name"] == "Req"
        assert ticket["assignee"]["name"] == "Agent"

    def test_comments_follow_next_page(self):
        page2 = "https://acme.zendesk.com/api/v2/tickets/7/comments.json?page=2"

        def handler(request):
            if request.url.params.get("page") == "2":
                return httpx.Response(200, json={"comments": [{"id": 2}], "next_page": None})
            return httpx.Response(200, json={"comments": [{"id": 1}], "next_page": page2})

        comments = _zendesk(handler).list_comments(7)
        assert [c["id"] for c in comments] == [1, 2]

    def test_next_page_query_is_sent_as_is(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            if request.url.params.get("page") == "2":
                return httpx.Response(200, json={"comments": [], "next_page": None})
            return httpx.Response(200, json={
                "comments": [],
                "next_page": "https://acme.zendesk.com/api/v2/tickets/7/comments.json?page=2&sort_order=asc",
            })

        _zendesk(handler).list_comments(7)
        assert seen[0] == "https://acme.zendesk.com/api/v2/tickets/7/comments.json?sort_order=asc"
        assert seen[1] == "https://acme.zendesk.com/api/v2/tickets/7/comments.json?page=2&sort_order=asc"

    def test_repeated_next_page_stops_paging(self):
        page2 = "https://acme.zendesk.com/api/v2/tickets/7/comments.json?page=2"
        calls = []

        def handler(request):
            calls.append(1)
            return httpx.Response(200, json={"comments": [{"id": len(calls)}], "next_page": page2})

        comments = _zendesk(handler).list_comments(7)
        assert [c["id"] for c in comments] == [1, 2]
        assert len(calls) == 2

    @pytest.mark.parametrize("header, wait", [
        ("3600", 60.0),
        ("-5", 0.0),
        ("soon", 2.0),
        ("Wed, 21 Oct 2015 07:28:00 GMT", 0.0),
    ])
    def test_retry_after_is_parsed_and_capped(self, header, wait):
        calls = []
        sleeps = []

        def handler(request):
            calls.append(1)
            if len(calls) == 1:
                return httpx.Response(429, headers={"retry-after": header})
            return httpx.Response(200, json={"ticket_fields": []})

        _zendesk(handler, sleeps).ticket_field_titles()
        assert sleeps == [wait]

    def test_close_keeps_injected_client_open(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))
        repo = ZendeskRepository(subdomain="acme", email="a@b.test", api_token="t", client=client)
        repo.close()
        assert client.is_closed is False

    def test_rate_limit_is_retried(self):
        calls = []
        sleeps = []

        def handler(request):
            calls.append(1)
            if len(calls) == 1:
                return httpx.Response(429, headers={"retry-after": "3"})
            return httpx.Response(200, json={"ticket_fields": [{"id": 9, "title": "Experience Type"}]})

        titles = _zendesk(handler, sleeps).ticket_field_titles()
        assert titles == {"9": "Experience Type"}
        assert sleeps == [3.0]

    def test_not_found(self):
        repo = _zendesk(lambda r: httpx.Response(404, json={"error": "RecordNotFound"}))
        with pytest.raises(TicketNotFoundError):
            repo.get_ticket(1)

    def test_server_error(self):
        repo = _zendesk(lambda r: httpx.Response(500, text="boom"))
        with pytest.raises(ZendeskError) as exc:
            repo.list_comments(1)
        assert exc.value.status_code == 500


def _verdict():
    row = PolicyRow(l1="Weather", l2="Storm", actions={"C": "Full refund to original payment method"})
    return build_verdict(
        AuditInput(experience_type="Partnered"),
        row,
        ColumnKey.PARTNERED_LOW,
        "full refund issued.",
        value_tier=ValueTier.LOW,
        reference_id="4821",
        audit_date=date(2024, 3, 1),
    )


class TestSheetsProxyWriter:

    def test_requires_proxy_url(self):
        with pytest.raises(ConfigError):
            SheetsProxyWriter(proxy_url="")

    def test_format_row_column_order(self):
        row = SheetsProxyWriter.format_row(_verdict())
        assert len(row) == len(SHEET_COLUMNS)
        assert row[:4] == ["4821", "2024-03-01", "Compliant", "≤ USD 125"]
        assert row[9] == "No"
        assert row[10] == "Match"

    def test_write_posts_row(self):
        seen = {}

        def handler(request):
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={"ok": True})

        writer = SheetsProxyWriter(
            proxy_url="https://script.example/exec",
            spreadsheet_id="sheet-1",
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        assert writer.write(_verdict()) == {"ok": True}
        assert seen["spreadsheetId"] == "sheet-1"
        assert seen["sheetName"] == "Refund Audits"
        assert seen["row"][0] == "4821"

    def test_write_many(self):
        seen = {}

        def handler(request):
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={"appended": 2})

        writer = SheetsProxyWriter(
            proxy_url="https://script.example/exec",
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        writer.write_many([_verdict(), _verdict()])
        assert len(seen["rows"]) == 2
        assert writer.write_many([]) == {"appended": 0}

    def test_proxy_failure(self):
        writer = SheetsProxyWriter(
            proxy_url="https://script.example/exec",
            client=httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(502))),
        )
        with pytest.raises(SheetsWriteError):
            writer.write(_verdict())
