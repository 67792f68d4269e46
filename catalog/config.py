# catalog/config.py
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _optional_limit(raw: str) -> Optional[int]:
    value = int(raw)
    return value if value > 0 else None


class Settings:
    storage_backend: str = os.getenv("STORAGE_BACKEND", "memory")  # "memory" | "mock" | "sql"
    database_url: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./catalog.db")
    database_echo: bool = os.getenv("DATABASE_ECHO", "False").lower() == "true"

    # Simulated collaborators: one time unit lasts `simulated_latency` seconds
    simulated_latency: float = float(os.getenv("SIMULATED_LATENCY", "1.0"))
    failure_rate: float = float(os.getenv("FAILURE_RATE", "0.1"))

    # 0 means unbounded fan-out
    fetch_concurrency: Optional[int] = _optional_limit(os.getenv("FETCH_CONCURRENCY", "32"))

    # Change events
    event_sink: str = os.getenv("EVENT_SINK", "memory")  # "memory" | "kafka" | "none"
    kafka_broker: str = os.getenv("KAFKA_BROKER", "localhost:9092")
    kafka_topic: str = os.getenv("KAFKA_TOPIC", "product-events")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    api_url: str = os.getenv("API_URL", "http://127.0.0.1:8085")


settings = Settings()
