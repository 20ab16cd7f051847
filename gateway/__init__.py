"""Backend gateway implementations (REST and in-memory)."""

from gateway.memory_gateway import InMemoryBackendGateway
from gateway.rest_gateway import RestBackendGateway

__all__ = ["InMemoryBackendGateway", "RestBackendGateway"]
