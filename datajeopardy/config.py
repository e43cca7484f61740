"""
Centralized configuration management for DataJeopardy.
All environment variables and settings are loaded and validated here.
"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from dotenv import load_dotenv

# Load .env file
load_dotenv()


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    All secrets must be stored in .env file (never commit .env to git).
    """

    # ═══════════════════════════════════════════
    # SERVER CONFIGURATION
    # ═══════════════════════════════════════════
    PORT: int = Field(default=5000, description="Server port")
    API_HOST: str = Field(default="0.0.0.0", description="Bind address")
    API_KEY: Optional[str] = Field(default=None, description="Admin API key (X-API-Key header)")

    # ═══════════════════════════════════════════
    # DATABASE
    # ═══════════════════════════════════════════
    DATABASE_URL: str = Field(default="sqlite:///./datajeopardy.db", description="Database connection URL")

    # ═══════════════════════════════════════════
    # MONITORING
    # ═══════════════════════════════════════════
    SENTRY_DSN: Optional[str] = Field(default=None, description="Sentry DSN (error tracking)")
    RATE_LIMIT_ADD_LOG: str = Field(default="120/minute", description="Rate limit for query submission")

    # ═══════════════════════════════════════════
    # RISK POLICY
    # ═══════════════════════════════════════════
    AUTO_LOCK_RISK_THRESHOLD: int = Field(default=60, description="Auto-lock when RiskScore >= threshold")

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env

    @field_validator("AUTO_LOCK_RISK_THRESHOLD")
    @classmethod
    def threshold_in_range(cls, value: int) -> int:
        if not 0 <= value <= 100:
            raise ValueError("AUTO_LOCK_RISK_THRESHOLD must be between 0 and 100")
        return value

    def get_service_status(self) -> dict:
        """
        Return configuration status for all services.
        Masks secrets for security.
        """
        is_sqlite = "sqlite" in self.DATABASE_URL.lower()
        return {
            "server": {
                "port": self.PORT,
                "host": self.API_HOST,
                "api_auth": "[OK] Configured" if self.API_KEY else "[WARN] Not set (admin routes open)",
            },
            "monitoring": {
                "sentry": "[OK] Configured" if self.SENTRY_DSN else "[X] Not configured",
                "add_log_rate_limit": self.RATE_LIMIT_ADD_LOG,
            },
            "risk": {
                "auto_lock_threshold": self.AUTO_LOCK_RISK_THRESHOLD,
            },
            "database": {
                "type": "SQLite" if is_sqlite else "Other",
                "url": self.DATABASE_URL.split("///")[-1] if is_sqlite else "***",
            },
        }

    def print_startup_summary(self):
        """Print a formatted startup configuration summary."""
        status = self.get_service_status()

        print("\n" + "=" * 60)
        print("  DATAJEOPARDY - Configuration Summary")
        print("=" * 60)

        print(f"\nSERVER")
        print(f"   Bind: {status['server']['host']}:{status['server']['port']}")
        print(f"   API Auth: {status['server']['api_auth']}")

        print(f"\nRISK POLICY")
        print(f"   Auto-lock threshold: {status['risk']['auto_lock_threshold']}")

        print(f"\nMONITORING")
        print(f"   Sentry: {status['monitoring']['sentry']}")
        print(f"   /add-log limit: {status['monitoring']['add_log_rate_limit']}")

        print(f"\nDATABASE")
        print(f"   Type: {status['database']['type']}")
        print(f"   Location: {status['database']['url']}")

        print("\n" + "=" * 60)

        if not self.API_KEY:
            print("\nWARNINGS:")
            print("   WARNING: API_KEY not set - lock/unlock routes accept any caller")
            print()


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
