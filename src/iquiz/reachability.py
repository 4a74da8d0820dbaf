import logging
import socket
from abc import ABC, abstractmethod
from urllib.parse import urlsplit

from .config import settings

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}


# --- Strategy Pattern: connectivity probes ---
class Reachability(ABC):
    """Answers whether the data source can be reached before a fetch."""

    @abstractmethod
    def is_connected(self, url: str) -> bool:
        pass


class AlwaysReachable(Reachability):
    """Probe that never blocks a fetch."""

    def is_connected(self, url: str) -> bool:
        return True


class SocketReachability(Reachability):
    """Opens a TCP connection to the data source host and closes it again."""

    def __init__(self, timeout: float = settings.REACHABILITY_TIMEOUT):
        self.timeout = timeout

    def is_connected(self, url: str) -> bool:
        parts = urlsplit(url)
        host = parts.hostname
        if not host:
            return False
        port = parts.port or DEFAULT_PORTS.get(parts.scheme, 80)
        try:
            with socket.create_connection((host, port), timeout=self.timeout):
                return True
        except OSError as e:
            logger.warning(f"Reachability probe to {host}:{port} failed: {e}")
            return False
