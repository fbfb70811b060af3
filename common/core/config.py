from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.core.constants import IdempotencyProvider, MeteringProvider

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Service
    debug: bool = False

    # Redis (idempotency store)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0

    # Idempotency
    idempotency_provider: IdempotencyProvider = IdempotencyProvider.REDIS
    idempotency_ttl_seconds: int = 86400  # 24 hours
    idempotency_key_prefix: str = "idempotency:"

    # RabbitMQ (transport + event bus)
    rabbitmq_host: str = "localhost"
    rabbitmq_port: int = 5672
    rabbitmq_username: str = "guest"
    rabbitmq_password: str = "guest"
    rabbitmq_vhost: str = "/"

    subscription_updated_queue: str = "stripe.subscription-updated"
    usage_batch_queue: str = "stripe.usage-batches"
    usage_worker_prefetch_count: int = 5

    # Event bus
    event_bus_exchange: str = "service-stripe-events"
    event_source: str = "service.stripe"

    # Temporal (deferred cancellation triggers)
    temporal_host: str = "localhost:7233"
    temporal_namespace: str = "default"
    temporal_api_key: Optional[str] = None
    temporal_task_queue: str = "billing-triggers-queue"

    # OpenTelemetry
    otel_service_name: str = "service-stripe"
    otel_service_version: str = "0.1.0"

    # Axiom (exporters are only attached when a token is configured)
    axiom_token: Optional[str] = None
    axiom_dataset: str = "service-stripe"

    # Billing - Stripe
    stripe_secret_key: str = ""
    stripe_api_version: Optional[str] = None
    metering_provider: MeteringProvider = MeteringProvider.STRIPE
    # Price used for TEAM / ENTERPRISE usage regardless of per-record price
    stripe_enterprise_usage_price_id: str = ""
    metering_standard_event_name: str = "cdk_insights_usage"
    metering_enterprise_event_name: str = "cdk_insights_enterprise_usage"

settings = Settings()
