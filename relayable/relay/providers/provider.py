from abc import ABC, abstractmethod
from relayable.relay.providers.backend import Backend
from relayable.relay.functions import ToolExecutor
from relayable.relay.runs import RunController
import logging
LOGGER = logging.getLogger(__name__)


class Provider(ABC):

    backend: Backend = None
    tool_executor: ToolExecutor = None
    controller: RunController = None

    @classmethod
    @abstractmethod
    def provider(cls, config) -> "Provider":
        """
        Returns the (cached) provider instance for the given config.
        """
        pass

    def middleware(self):
        from relayable.relay.middleware import OpenAIMiddleware
        if not self.controller:
            raise RuntimeError("RunController not initialized. Cannot create middleware.")
        return OpenAIMiddleware(backend=self.backend, controller=self.controller)
