import logging

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./precast_qa.db"
    LOG_LEVEL: str = "INFO"
    COMPANY_NAME: str = "Precast QA"

    # Gradation history: oldest tests drop off past this count
    MAX_TEST_HISTORY: int = 100
    MAX_DEFAULT_AGGREGATES: int = 8

    class Config:
        env_file = ".env"


settings = Settings()


def configure_logging(level: str = None) -> None:
    """Attach a stream handler to the package logger at the configured level."""
    logger = logging.getLogger("precast_qa")
    logger.setLevel((level or settings.LOG_LEVEL).upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
