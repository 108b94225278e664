from pydantic import BaseModel
from dotenv import load_dotenv
import os
from pathlib import Path

load_dotenv()

_DEFAULT_GRID = Path(__file__).resolve().parents[1] / "policies" / "dss_grid.json"


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Zendesk
    ZENDESK_SUBDOMAIN: str = os.getenv("ZENDESK_SUBDOMAIN", "")
    ZENDESK_EMAIL: str = os.getenv("ZENDESK_EMAIL", "")
    ZENDESK_API_TOKEN: str = os.getenv("ZENDESK_API_TOKEN", "")
    ZENDESK_EXPERIENCE_FIELD_ID: str = os.getenv("ZENDESK_EXPERIENCE_FIELD_ID", "")
    ZENDESK_TIMEOUT_SECONDS: float = float(os.getenv("ZENDESK_TIMEOUT_SECONDS", "30"))
    MAX_CONVERSATION_CHARS: int = int(os.getenv("MAX_CONVERSATION_CHARS", "20000"))

    # DSS grid
    DSS_GRID_PATH: str = os.getenv("DSS_GRID_PATH", str(_DEFAULT_GRID))

    # Google Sheets (Apps Script proxy)
    SHEETS_PROXY_URL: str = os.getenv("SHEETS_PROXY_URL", "")
    SHEETS_SPREADSHEET_ID: str = os.getenv("SHEETS_SPREADSHEET_ID", "")
    SHEETS_SHEET_NAME: str = os.getenv("SHEETS_SHEET_NAME", "Refund Audits")

    # OpenAI (primary analyzer)
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_CHAT_MODEL: str = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini")

    # Hugging Face (fallback analyzer)
    HUGGINGFACE_API_KEY: str = os.getenv("HUGGINGFACE_API_KEY", "")
    HUGGINGFACE_ENDPOINT: str = os.getenv(
        "HUGGINGFACE_ENDPOINT",
        "https://api-inference.huggingface.co/models/mistralai/Mistral-7B-Instruct-v0.2",
    )

    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.1"))
    LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "2048"))
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "30"))
    LLM_MAX_RETRIES: int = int(os.getenv("LLM_MAX_RETRIES", "3"))
    LLM_RETRY_DELAY_SECONDS: float = float(os.getenv("LLM_RETRY_DELAY_SECONDS", "2"))
    LLM_FALLBACK_ENABLED: bool = _flag("LLM_FALLBACK_ENABLED", "true")

    # Tag trigger
    TRIGGER_TAG_PATTERN: str = os.getenv("TRIGGER_TAG_PATTERN", "refund")
    TRIGGER_AUTO_RUN: bool = _flag("TRIGGER_AUTO_RUN", "true")

    def validate_credentials(self) -> list[str]:
        """
        Missing credentials, one message each.
        Empty list means every collaborator can be reached.
        """
        errors: list[str] = []
        if not self.ZENDESK_SUBDOMAIN or not self.ZENDESK_EMAIL or not self.ZENDESK_API_TOKEN:
            errors.append("Missing Zendesk credentials")
        if not self.OPENAI_API_KEY:
            errors.append("Missing OpenAI API key")
        if self.LLM_FALLBACK_ENABLED and not self.HUGGINGFACE_API_KEY:
            errors.append("Missing Hugging Face API key")
        if not self.SHEETS_PROXY_URL:
            errors.append("Missing Google Sheets proxy URL")
        return errors


settings = Settings()
