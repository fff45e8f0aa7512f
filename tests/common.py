import logging
LOGGER = logging.getLogger(__name__)

import json
from typing import Dict, List, Optional
from relayable.relay.config import RelaySettings
from relayable.relay.functions import Functions
from relayable.relay.providers.backend import Backend, RunState, ThreadMessage, ToolCall, ToolOutput


def make_settings(**overrides) -> RelaySettings:
  values = dict(assistant_id="asst_test", api_key="sk-test")
  values.update(overrides)
  return RelaySettings(**values)


def text_item(value: str, *annotations: str) -> Dict:
  return {
    "type": "text",
    "text": {
      "value": value,
      "annotations": [{"type": "file_citation", "text": literal} for literal in annotations],
    },
  }


def image_item(file_id: str) -> Dict:
  return {"type": "image_file", "image_file": {"file_id": file_id}}


class FakeBackend(Backend):
  """
  Scripted backend. retrieve_run walks through `statuses` and then keeps
  returning the last one. Every call is appended to `calls` in order.
  """

  def __init__(self, statuses: List[str], messages: Optional[List[ThreadMessage]] = None,
               tool_calls: Optional[List[ToolCall]] = None, files: Optional[Dict[str, Dict]] = None,
               thread_id: str = "t1", run_id: str = "r1", initial_status: str = "queued"):
    self.statuses = list(statuses)
    self.messages = messages or []
    self.tool_calls = tool_calls or []
    self.files = files or {}
    self.thread_id = thread_id
    self.run_id = run_id
    self.initial_status = initial_status
    self.calls = []
    self.submitted: List[List[ToolOutput]] = []
    self.retrieve_count = 0

  def _run(self, status: str) -> RunState:
    tool_calls = self.tool_calls if status == "requires_action" else []
    return RunState(id=self.run_id, thread_id=self.thread_id, status=status, tool_calls=tool_calls)

  def create_thread(self) -> str:
    self.calls.append(("create_thread",))
    return self.thread_id

  def create_message(self, thread_id: str, role: str, content: str) -> str:
    self.calls.append(("create_message", thread_id, role, content))
    return "msg_user"

  def create_run(self, thread_id: str, assistant_id: str) -> RunState:
    self.calls.append(("create_run", thread_id, assistant_id))
    return self._run(self.initial_status)

  def retrieve_run(self, thread_id: str, run_id: str) -> RunState:
    self.calls.append(("retrieve_run", thread_id, run_id))
    index = min(self.retrieve_count, len(self.statuses) - 1)
    self.retrieve_count += 1
    return self._run(self.statuses[index])

  def submit_tool_outputs(self, thread_id: str, run_id: str, outputs: List[ToolOutput]) -> None:
    self.calls.append(("submit_tool_outputs", thread_id, run_id))
    self.submitted.append(list(outputs))

  def list_messages(self, thread_id: str, order: str = "desc", limit: int = 20) -> List[ThreadMessage]:
    self.calls.append(("list_messages", thread_id, order, limit))
    return list(self.messages)

  def download_file(self, file_id: str) -> Dict:
    self.calls.append(("download_file", file_id))
    return self.files.get(file_id, {})

  def count(self, name: str) -> int:
    return len([call for call in self.calls if call[0] == name])


class RecordingWait:
  """Stands in for the cancellable sleep; records every requested delay."""

  def __init__(self, cancel_after: Optional[int] = None):
    self.delays = []
    self.cancel_after = cancel_after

  def __call__(self, cancel_event, seconds) -> bool:
    self.delays.append(seconds)
    if self.cancel_after is not None and len(self.delays) >= self.cancel_after:
      cancel_event.set()
      return True
    return False


class MyFunctions(Functions):

  def use_numbers(self, a, b):
      try:
        return json.dumps({"value": a - b})
      except Exception as e:
        LOGGER.error(f"Error in use_numbers: {e}")
        return '{"error": "Error in use_numbers"}'

  def describe(self, name):
      return {"name": name, "length": len(name)}

  def explode(self):
      raise RuntimeError("boom")
