"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    DATABASE_URL: str = "sqlite:///./gatherpress.db"
    CORS_ORIGINS: str = "http://localhost:3000"
    SITE_URL: str = "http://localhost:8000"
    LOG_LEVEL: str = "INFO"

    # RSVP admission
    MAX_ATTENDING_LIMIT: int = 50
    MAX_GUEST_LIMIT: int = 0  # default for newly created events
    RSVP_CACHE_TTL_SECONDS: int = 15 * 60
    RSVP_PAGE_SIZE: int = 500

    # Shared response cache; empty disables caching
    REDIS_URL: str = "redis://localhost:6379/0"

    # Leadership role labels, highest precedence first
    LEADERSHIP_ROLES: str = "Organizer,Assistant Organizer,Event Organizer"

    class Config:
        env_file = ".env"

    @property
    def leadership_roles(self) -> list[str]:
        return [role.strip() for role in self.LEADERSHIP_ROLES.split(",") if role.strip()]


settings = Settings()
