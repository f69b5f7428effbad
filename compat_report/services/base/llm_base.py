from abc import ABC, abstractmethod
from typing import Optional

class LLMClientBase(ABC):
    @abstractmethod
    def generate(self, prompt: str, timeout: Optional[float] = None) -> str:
        """Return the raw model text for `prompt`. Raises UpstreamError on failure."""
        pass
