"""
File: curbspace/settings.py
Purpose: Environment-backed configuration for the curbspace service.
Key responsibilities:
- Parse API, RabbitMQ and simulation settings.
- Define reporting service levels and catalog limits.
"""

from dataclasses import dataclass
import os


REPORTING_SERVICE_LEVELS = (0.95, 0.90, 0.85, 0.80, 0.75)

MAX_FUNCTIONS = 15
MAX_VEHICLES = 7
MAX_DISTRIBUTIONS = 18

MIN_INTERVAL_MINUTES = 1
MAX_INTERVAL_MINUTES = 60


def _int_env(name: str, default: int = 0) -> int:
    """Parse an integer env var with a fallback."""
    raw = os.getenv(name, "")
    if raw == "":
        return default
    return int(raw)


def _float_env(name: str, default: float = 0.0) -> float:
    """Parse a float env var with a fallback."""
    raw = os.getenv(name, "")
    if raw == "":
        return default
    return float(raw)


@dataclass(frozen=True)
class Settings:
    """Service configuration parsed from environment."""
    host: str = os.getenv("CURBSPACE_HOST", "0.0.0.0")
    port: int = _int_env("CURBSPACE_PORT", 8010)
    rabbit_host: str = os.getenv("RABBITMQ_HOST", "rabbitmq")
    rabbit_port: int = _int_env("RABBITMQ_PORT", 5672)
    rabbit_user: str = os.getenv("RABBITMQ_USER", "curb")
    rabbit_pass: str = os.getenv("RABBITMQ_PASS", "curbpass")
    exchange_name: str = "curbspace.events"
    num_simulations: int = _int_env("SIM_NUM_SIMULATIONS", 1000)
    min_simulations: int = _int_env("SIM_MIN_SIMULATIONS", 100)
    max_simulations: int = _int_env("SIM_MAX_SIMULATIONS", 50000)
    interval_minutes: int = _int_env("SIM_INTERVAL_MINUTES", 10)
    batch_size: int = _int_env("SIM_BATCH_SIZE", 5000)
    default_service_level: float = _float_env("SIM_DEFAULT_SERVICE_LEVEL", 0.95)
    peak_report_level: float = _float_env("SIM_PEAK_REPORT_LEVEL", 0.95)
    workers: int = _int_env("SIM_WORKERS", 2)


settings = Settings()


def rabbit_url() -> str:
    return f"amqp://{settings.rabbit_user}:{settings.rabbit_pass}@{settings.rabbit_host}:{settings.rabbit_port}/"
