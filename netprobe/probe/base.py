"""
Abstract base class for probe implementations
"""

from abc import ABC, abstractmethod
from typing import Optional
from ..models import ProbeResult


class BaseProbe(ABC):
    """Abstract base class for reachability probes"""

    mode: str = ''

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout

    @abstractmethod
    def probe(self, target: str, port: Optional[int] = None) -> ProbeResult:
        """
        Run one check against the target and return the result.

        Args:
            target: IP address or hostname
            port: Destination port for transport probes

        Returns:
            ProbeResult; failures are reported with success=False
        """
        pass

    def close(self):
        """Clean up resources"""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
