# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-08
# Updated: 2026-02-02
# Description: Config
# -----------------------------------------------------------------------------

import os
from dataclasses import dataclass
from dotenv import load_dotenv, find_dotenv

# Load .env once globally
load_dotenv(find_dotenv(usecwd=True), override=True)


@dataclass(frozen=True)
class Config:
    # Embedding model
    embedding_provider: str
    embedding_model_id: str
    aws_region: str

    # OpenAI direct / Azure OpenAI (only when embedding_provider == "openai")
    openai_base_url: str = ""
    openai_api_key: str = ""
    openai_azure_api_key: str = ""
    openai_azure_endpoint: str = ""

    # Chroma Vector Database
    chroma_mode: str = "persistent"
    chroma_path: str = "./.chroma"
    chroma_api_key: str = ""
    chroma_tenant: str = ""
    chroma_database: str = ""
    chroma_collection_prefix: str = "business-embeddings"

    # Generic cache (empty = in-process)
    redis_url: str = ""

    # Embedding status tracking
    status_db_path: str = "./embedding_status.db"

    # Geocoding
    geocoding_base_url: str = "https://nominatim.openstreetmap.org"
    geocoding_user_agent: str = "bizsearch/0.1"
    ip_geolocation_base_url: str = "https://ipapi.co"
    country_code: str = "IN"

    # ---- Single source of truth: field_name -> ENV VAR NAME ----
    ENV_VARS = {
        # Embedding model
        "embedding_provider": "EMBEDDING_PROVIDER",      # bedrock | openai
        "embedding_model_id": "EMBEDDING_MODEL_ID",      # e.g. amazon.titan-embed-text-v2:0
        "aws_region": "AWS_REGION",

        # OpenAI direct
        "openai_base_url": "OPENAI_BASE_URL",
        "openai_api_key": "OPENAI_API_KEY",

        # Azure OpenAI
        "openai_azure_api_key": "AZURE_OPENAI_API_KEY",
        "openai_azure_endpoint": "AZURE_OPENAI_ENDPOINT",

        # Chroma
        "chroma_mode": "CHROMA_MODE",                    # cloud | persistent | ephemeral
        "chroma_path": "CHROMA_PATH",
        "chroma_api_key": "CHROMA_API_KEY",
        "chroma_tenant": "CHROMA_TENANT",
        "chroma_database": "CHROMA_DATABASE",
        "chroma_collection_prefix": "CHROMA_COLLECTION_PREFIX",

        # Cache / status
        "redis_url": "REDIS_URL",
        "status_db_path": "EMBEDDING_STATUS_DB",

        # Geocoding
        "geocoding_base_url": "GEOCODING_BASE_URL",
        "geocoding_user_agent": "GEOCODING_USER_AGENT",
        "ip_geolocation_base_url": "IP_GEOLOCATION_BASE_URL",
        "country_code": "DEPLOYMENT_COUNTRY_CODE",
    }

    REQUIRED_FIELDS = ("embedding_provider", "embedding_model_id", "aws_region")

    # Convenient *groups* for use in tests / health checks
    BEDROCK_ENV_VARS = (
        "EMBEDDING_MODEL_ID",
        "AWS_REGION",
    )

    AZURE_OPENAI_ENV_VARS = (
        "AZURE_OPENAI_API_KEY",
        "AZURE_OPENAI_ENDPOINT",
    )

    OPENAI_DIRECT_ENV_VARS = (
        "OPENAI_API_KEY",
    )

    CHROMA_CLOUD_ENV_VARS = (
        "CHROMA_API_KEY",
        "CHROMA_TENANT",
        "CHROMA_DATABASE",
    )

    PROVIDERS = ("bedrock", "openai")
    CHROMA_MODES = ("cloud", "persistent", "ephemeral")

    @staticmethod
    def from_env() -> "Config":
        """Build Config object from environment variables."""
        kwargs = {}
        for field_name, env_name in Config.ENV_VARS.items():
            value = os.getenv(env_name)
            # Unset optional vars keep their dataclass defaults
            if value is None and field_name not in Config.REQUIRED_FIELDS:
                continue
            kwargs[field_name] = (value or "").strip()
        return Config(**kwargs)

    def __post_init__(self):
        """Fail fast if any required config is missing or malformed."""
        missing_fields = [f for f in self.REQUIRED_FIELDS if not getattr(self, f)]

        if missing_fields:
            missing_env_vars = [self.ENV_VARS[f] for f in missing_fields]
            raise ValueError(f"Missing required environment variables: {missing_env_vars}")

        if self.embedding_provider not in self.PROVIDERS:
            raise ValueError(
                f"EMBEDDING_PROVIDER must be one of {self.PROVIDERS}, got {self.embedding_provider!r}"
            )

        if self.chroma_mode not in self.CHROMA_MODES:
            raise ValueError(
                f"CHROMA_MODE must be one of {self.CHROMA_MODES}, got {self.chroma_mode!r}"
            )

    def validate_provider(self) -> None:
        """
        Check the credentials the selected embedding provider and Chroma mode need.
        Kept out of __post_init__ so offline tooling (stats, dry runs) can still
        build a Config.
        """
        missing = []
        if self.embedding_provider == "openai":
            has_azure = self.openai_azure_api_key and self.openai_azure_endpoint
            if not has_azure and not self.openai_api_key:
                missing.extend(self.OPENAI_DIRECT_ENV_VARS)

        if self.chroma_mode == "cloud":
            missing.extend(
                self.ENV_VARS[f]
                for f in ("chroma_api_key", "chroma_tenant", "chroma_database")
                if not getattr(self, f)
            )

        if missing:
            raise ValueError(f"Missing required environment variables: {missing}")

    @property
    def uses_azure_openai(self) -> bool:
        return bool(self.openai_azure_api_key and self.openai_azure_endpoint)

    def summary(self) -> dict:
        """Return a safe, non-sensitive summary for logging."""
        return {
            "embedding_provider": self.embedding_provider,
            "embedding_model_id": self.embedding_model_id,
            "aws_region": self.aws_region,
            "openai_base_url": self.openai_base_url,
            "openai_azure_endpoint": self.openai_azure_endpoint,
            "chroma_mode": self.chroma_mode,
            "chroma_tenant": self.chroma_tenant,
            "chroma_database": self.chroma_database,
            "chroma_collection_prefix": self.chroma_collection_prefix,
            "redis_enabled": bool(self.redis_url),
            "status_db_path": self.status_db_path,
            "geocoding_base_url": self.geocoding_base_url,
            "country_code": self.country_code,
        }
