import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


class Settings:
    def __init__(self):
        # server
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", 3000))
        self.cors_origins: List[str] = [
            o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
        ]
        self.static_dir = os.getenv("STATIC_DIR", "public")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # websocket transport
        self.ws_max_size = int(os.getenv("WS_MAX_SIZE", 100_000_000))
        self.ws_ping_timeout = float(os.getenv("WS_PING_TIMEOUT", 60))


SETTINGS = Settings()
