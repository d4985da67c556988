# backend/config.py
import os
from functools import lru_cache
from dotenv import load_dotenv

# Load .env explicitly (values already in the environment win)
load_dotenv()


class Settings:
    def __init__(self):
        self.DATABASE_URL = os.getenv("DATABASE_URL")
        self.SUPABASE_URL = (os.getenv("SUPABASE_URL") or "").rstrip("/")
        self.SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY") or ""
        self.ALLOWED_ORIGINS = [
            o.strip()
            for o in (os.getenv("ALLOWED_ORIGINS") or "http://localhost:3000,http://localhost:5173").split(",")
            if o.strip()
        ]
        self.LOG_DIR = os.getenv("LOG_DIR", "logs")
        self.AUTH_TIMEOUT_SECONDS = float(os.getenv("AUTH_TIMEOUT_SECONDS", "10"))

        missing = []
        if not self.DATABASE_URL:
            missing.append("DATABASE_URL")

        if missing:
            raise RuntimeError(
                f"Missing required environment variables: {', '.join(missing)}. "
                f"Check your .env file."
            )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
