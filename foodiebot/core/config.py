# foodiebot/core/config.py
import os
import logging
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    PROJECT_NAME: str = "FoodieBot"

    # Meta / WhatsApp Keys
    META_API_TOKEN: str = os.getenv("META_API_TOKEN")
    WHATSAPP_PHONE_ID: str = os.getenv("WHATSAPP_PHONE_ID")
    WHATSAPP_VERIFY_TOKEN: str = os.getenv("WHATSAPP_VERIFY_TOKEN", "foodiebot_verify")
    GRAPH_API_VERSION: str = os.getenv("GRAPH_API_VERSION", "v18.0")
    SEND_TIMEOUT_SECONDS: float = float(os.getenv("SEND_TIMEOUT_SECONDS", "2.0"))

    DATABASE_URL: str = os.getenv("DATABASE_URL")

    # "memory" keeps sessions in-process, "database" survives restarts
    SESSION_BACKEND: str = os.getenv("SESSION_BACKEND", "memory")

    # Bot variants
    PAYMENT_PROOF_FLOW: bool = _env_flag("PAYMENT_PROOF_FLOW", True)
    ADMIN_APPROVAL_GATE: bool = _env_flag("ADMIN_APPROVAL_GATE", True)

    # Shop defaults, used until the admin saves settings
    DEFAULT_SHOP_NAME: str = os.getenv("DEFAULT_SHOP_NAME", "FoodieBot Kitchen")
    DEFAULT_UPI_ID: str = os.getenv("DEFAULT_UPI_ID", "foodiebot@upi")
    CURRENCY_SYMBOL: str = os.getenv("CURRENCY_SYMBOL", "₹")
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")
    RECENT_ORDERS_LIMIT: int = int(os.getenv("RECENT_ORDERS_LIMIT", "5"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()

# Validation Check
if not settings.DATABASE_URL:
    # Fallback for local testing if .env is missing (Use SQLite)
    logger.warning("DATABASE_URL not found. Using SQLite for local testing.")
    settings.DATABASE_URL = "sqlite:///./foodiebot.db"
