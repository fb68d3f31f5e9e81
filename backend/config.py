# config.py
import os

from dotenv import load_dotenv

# Load .env locally; in production env vars are injected by the host.
load_dotenv()


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///journal.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # --- Telegram ---
    TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")
    TELEGRAM_WEBHOOK_SECRET = os.getenv("TELEGRAM_WEBHOOK_SECRET", "")

    # --- OpenAI-compatible chat completions ---
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_API_URL = os.getenv(
        "OPENAI_API_URL", "https://api.openai.com/v1/chat/completions"
    )

    HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30"))

    # Outbound pacing: steady messages per second, and how many may go at once
    SEND_RATE = float(os.getenv("SEND_RATE", "1.0"))
    SEND_BURST = int(os.getenv("SEND_BURST", "3"))

    # Bearer token for the read-only entries API; unset disables the API
    API_TOKEN = os.getenv("API_TOKEN", "")

    FRONTEND_ORIGIN = os.getenv("FRONTEND_ORIGIN")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
