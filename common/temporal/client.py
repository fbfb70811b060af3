from typing import Any, Dict, Optional

from temporalio.client import Client

from common.core.config import settings
from common.core.exceptions import DependencyError
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)

# Shared connection; Temporal clients are safe to reuse across tasks
_client: Optional[Client] = None


def _connect_options() -> Dict[str, Any]:
    """API key enables TLS (Temporal Cloud); no key means a self-hosted server."""
    options: Dict[str, Any] = {"namespace": settings.temporal_namespace}
    if settings.temporal_api_key:
        options.update(api_key=settings.temporal_api_key, tls=True)
    return options


async def get_temporal_client() -> Client:
    """Return the shared Temporal client, connecting on first use.

    Raises:
        DependencyError: If the Temporal server cannot be reached
    """
    global _client

    if _client is None:
        logger.info(
            f"Connecting to Temporal at {settings.temporal_host} "
            f"(namespace: {settings.temporal_namespace})"
        )
        try:
            _client = await Client.connect(settings.temporal_host, **_connect_options())
        except RuntimeError as e:
            raise DependencyError(f"Temporal is unavailable: {e}") from e
        logger.info("Connected to Temporal")

    return _client
