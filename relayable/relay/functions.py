import json
import logging
from typing import List
from abc import ABC, abstractmethod

from relayable.relay.providers.backend import ToolCall, ToolOutput

LOGGER = logging.getLogger(__name__)


class Functions(ABC):
    """
    Holder for the callables an assistant may request through function tool
    calls. Each public method is exposed under its own name.
    """

    def __init__(self, *args, **kwargs):
        self.config = kwargs.get('config')
        if self.config is None:
            LOGGER.debug("No config provided to functions")

    def get_config(self):
        return self.config


class DefaultFunctions(Functions):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)


class ToolExecutor(ABC):

    @classmethod
    def from_config(cls, config) -> "ToolExecutor":
        return cls()

    @abstractmethod
    def run(self, thread_id: str, run_id: str, tool_calls: List[ToolCall]) -> List[ToolOutput]:
        """
        Executes the pending tool calls of a run.
        Implementations should return one output per tool call id.
        """
        pass


class DefaultToolExecutor(ToolExecutor):
    """No tools are configured; always answers with an empty output list."""

    def run(self, thread_id: str, run_id: str, tool_calls: List[ToolCall]) -> List[ToolOutput]:
        if tool_calls:
            LOGGER.debug(f"No tools configured, ignoring {len(tool_calls)} tool call(s) for run {run_id}")
        return []


class FunctionsToolExecutor(ToolExecutor):
    """
    Dispatches function tool calls to the methods of a Functions instance.
    Every tool call gets an output; failures are reported to the assistant as
    'Error: ...' strings.
    """

    def __init__(self, functions: Functions):
        self.functions = functions

    @classmethod
    def from_config(cls, config) -> "ToolExecutor":
        functions_class = config.get_class_from_env('RELAY_FUNCTIONS_CLASS', 'relayable.relay.functions.DefaultFunctions', Functions)
        return cls(functions=functions_class(config=config))

    def _call(self, tool_call: ToolCall) -> str:
        if tool_call.type != "function":
            raise ValueError(f"Unhandled tool call type: {tool_call.type}")

        function_name = tool_call.name or ""
        function_to_call = getattr(self.functions, function_name, None) if not function_name.startswith("_") else None
        if not callable(function_to_call):
            raise AttributeError(f"Function {function_name} not found")

        arguments = json.loads(tool_call.arguments) if tool_call.arguments else {}
        LOGGER.debug(f"Calling function {function_name}")
        result = function_to_call(**arguments)
        return result if isinstance(result, str) else json.dumps(result)

    def run(self, thread_id: str, run_id: str, tool_calls: List[ToolCall]) -> List[ToolOutput]:
        tool_outputs = []
        for tool_call in tool_calls:
            try:
                output = self._call(tool_call)
            except Exception as e:
                LOGGER.error(f"Error calling {tool_call.name} for run {run_id}: {e}")
                output = f"Error: {str(e)}"
            tool_outputs.append(ToolOutput(tool_call_id=tool_call.id, output=output))
        LOGGER.info(f"Executed {len(tool_outputs)} tool call(s) for run {run_id} on thread {thread_id}")
        return tool_outputs
