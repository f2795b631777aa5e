from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field


class Settings(BaseSettings):
    """Relayer client settings loaded from environment variables."""

    # Relayer
    relayer_url: str = Field(
        default="https://relayer-v2.polymarket.com", description="Polymarket relayer base URL"
    )
    chain_id: int = Field(default=137, description="Chain ID (137 Polygon, 80002 Amoy)")

    # Signer
    private_key: str = Field(default="", description="Owner private key used to sign Safe transactions")

    # Polymarket Builder Program
    poly_builder_api_key: str = Field(default="", description="Polymarket Builder API key")
    poly_builder_secret: str = Field(default="", description="Polymarket Builder secret")
    poly_builder_passphrase: str = Field(default="", description="Polymarket Builder passphrase")

    # HTTP / polling
    http_timeout: float = Field(default=60.0, description="Relayer HTTP timeout in seconds")
    poll_max_attempts: int = Field(default=100, description="Max polls while waiting for a transaction")
    poll_interval: float = Field(default=2.0, description="Seconds between transaction polls")

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Allow extra fields in .env
    )

    @property
    def has_builder_credentials(self) -> bool:
        return bool(
            self.poly_builder_api_key and self.poly_builder_secret and self.poly_builder_passphrase
        )


# Global settings instance
settings = Settings()
