import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

class ActivationSettings(BaseModel):
    # Workflow-automation endpoint that receives evaluation activation requests
    flow_url: Optional[str] = Field(default=os.getenv("ACTIVATION_FLOW_URL"))
    timeout_seconds: float = Field(default=float(os.getenv("ACTIVATION_TIMEOUT_SECONDS", "30")))

class Config(BaseModel):
    app_name: str = "Performance Evaluation Service"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Database. When unset the in-memory store is used instead.
    database_url: Optional[str] = os.getenv("DATABASE_URL") or None
    seed_demo_data: bool = os.getenv("SEED_DEMO_DATA", "true").lower() == "true"

    # Outbound notification
    activation: ActivationSettings = ActivationSettings()

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # Identity headers forwarded by the hosting platform's authentication proxy
    principal_header: str = "X-MS-CLIENT-PRINCIPAL"
    principal_name_header: str = "X-MS-CLIENT-PRINCIPAL-NAME"

    # CORS: comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

    # Scoring rules
    improvement_threshold: int = 76
    follow_up_interval_months: int = 6

    @property
    def uses_memory_store(self) -> bool:
        return not self.database_url

settings = Config()

_logger = logging.getLogger(__name__)
if settings.uses_memory_store and settings.environment == "production":
    _logger.warning("DATABASE_URL is not set; evaluations are kept in process memory only.")
