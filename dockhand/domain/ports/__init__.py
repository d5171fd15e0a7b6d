"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the domain needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from dockhand.domain.ports.remote_channel_port import RemoteChannelPort
from dockhand.domain.ports.container_backend_port import ContainerBackendPort
from dockhand.domain.ports.health_probe_port import HealthProbePort
from dockhand.domain.ports.backup_repository_port import BackupRepositoryPort
from dockhand.domain.ports.event_bus_port import EventBusPort, EventHandler

__all__ = [
    "RemoteChannelPort",
    "ContainerBackendPort",
    "HealthProbePort",
    "BackupRepositoryPort",
    "EventBusPort",
    "EventHandler",
]
