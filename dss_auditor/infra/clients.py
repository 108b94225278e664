# dss_auditor/infra/clients.py
"""
Collaborator factories. Built from Settings at startup and stored on
app.state; nothing in the engine reads these.
"""

import logging
from typing import Optional

from dss_auditor.core.config import Settings
from dss_auditor.core.errors import ConfigError
from dss_auditor.repositories.sheets_repo import SheetsProxyWriter
from dss_auditor.repositories.zendesk_repo import ZendeskRepository
from dss_auditor.services.analysis.conversation_analyzer import ConversationAnalyzer
from dss_auditor.services.analysis.providers import HuggingFaceProvider, OpenAIProvider
from dss_auditor.services.ticket.context import TicketContextBuilder

logger = logging.getLogger("dss.boot")


def build_context_builder(settings: Settings) -> Optional[TicketContextBuilder]:
    try:
        repo = ZendeskRepository(
            subdomain=settings.ZENDESK_SUBDOMAIN,
            email=settings.ZENDESK_EMAIL,
            api_token=settings.ZENDESK_API_TOKEN,
            timeout=settings.ZENDESK_TIMEOUT_SECONDS,
        )
    except ConfigError as e:
        logger.warning("Zendesk disabled: %s", e)
        return None

    return TicketContextBuilder(
        zendesk_repo=repo,
        experience_field_id=settings.ZENDESK_EXPERIENCE_FIELD_ID or None,
        max_conversation_chars=settings.MAX_CONVERSATION_CHARS,
    )


def build_sheets_writer(settings: Settings) -> Optional[SheetsProxyWriter]:
    if not settings.SHEETS_PROXY_URL:
        logger.warning("Sheets writer disabled: SHEETS_PROXY_URL not set")
        return None
    return SheetsProxyWriter(
        proxy_url=settings.SHEETS_PROXY_URL,
        spreadsheet_id=settings.SHEETS_SPREADSHEET_ID,
        sheet_name=settings.SHEETS_SHEET_NAME,
    )


def build_analyzer(settings: Settings) -> Optional[ConversationAnalyzer]:
    try:
        primary = OpenAIProvider(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_CHAT_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            max_tokens=settings.LLM_MAX_TOKENS,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )
    except ConfigError as e:
        logger.warning("Conversation analyzer disabled: %s", e)
        return None

    fallback = None
    if settings.LLM_FALLBACK_ENABLED:
        try:
            fallback = HuggingFaceProvider(
                api_key=settings.HUGGINGFACE_API_KEY,
                endpoint=settings.HUGGINGFACE_ENDPOINT,
                temperature=settings.LLM_TEMPERATURE,
                max_tokens=settings.LLM_MAX_TOKENS,
                timeout=settings.LLM_TIMEOUT_SECONDS,
            )
        except ConfigError as e:
            logger.warning("Analyzer fallback disabled: %s", e)

    return ConversationAnalyzer(
        primary=primary,
        fallback=fallback,
        max_retries=settings.LLM_MAX_RETRIES,
        retry_delay=settings.LLM_RETRY_DELAY_SECONDS,
        fallback_on_primary_failure=settings.LLM_FALLBACK_ENABLED,
    )
