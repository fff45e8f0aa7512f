from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolCall:
    id: str
    type: str = "function"
    name: Optional[str] = None
    arguments: Optional[str] = None


@dataclass(frozen=True)
class ToolOutput:
    tool_call_id: str
    output: str

    def to_dict(self) -> Dict[str, str]:
        return {"tool_call_id": self.tool_call_id, "output": self.output}


@dataclass(frozen=True)
class RunState:
    id: str
    thread_id: str
    status: str
    tool_calls: List[ToolCall] = field(default_factory=list)


@dataclass(frozen=True)
class ThreadMessage:
    id: str
    thread_id: str
    run_id: Optional[str]
    role: str
    content: List[Dict[str, Any]] = field(default_factory=list)


class Backend(ABC):
    """
    The thread/run assistant API as seen by the run controller.
    Implementations raise BackendError for any rejected request.
    """

    @abstractmethod
    def create_thread(self) -> str:
        """
        Creates a new thread.
        Returns the thread_id of the created thread.
        """
        pass

    @abstractmethod
    def create_message(self, thread_id: str, role: str, content: str) -> str:
        """
        Appends a message to the thread. Returns the message id.
        """
        pass

    @abstractmethod
    def create_run(self, thread_id: str, assistant_id: str) -> RunState:
        pass

    @abstractmethod
    def retrieve_run(self, thread_id: str, run_id: str) -> RunState:
        pass

    @abstractmethod
    def submit_tool_outputs(self, thread_id: str, run_id: str, outputs: List[ToolOutput]) -> None:
        pass

    @abstractmethod
    def list_messages(self, thread_id: str, order: str = "desc", limit: int = 20) -> List[ThreadMessage]:
        """
        Returns up to `limit` messages of the thread in the requested order,
        each with its raw content item payloads.
        """
        pass

    @abstractmethod
    def download_file(self, file_id: str) -> Dict[str, Any]:
        """
        Looks up a file. The returned payload carries a 'url' field when the
        file can be displayed.
        """
        pass
