from relayable.relay.providers.backend import Backend, RunState, ThreadMessage, ToolCall, ToolOutput
from relayable.relay.errors import BackendError
from contextlib import contextmanager
from typing_extensions import override
from typing import Any, Dict, List
import openai
import logging
import base64

LOGGER = logging.getLogger(__name__)

IMAGE_MIME_TYPE = 'image/png'


@contextmanager
def backend_errors(operation: str):
    try:
        yield
    except openai.APIStatusError as e:
        LOGGER.error(f"Backend rejected {operation} ({e.status_code}): {e}", exc_info=True)
        raise BackendError(f"{operation} failed: {e}", operation=operation, status_code=e.status_code) from e
    except openai.OpenAIError as e:
        LOGGER.error(f"Error during {operation}: {e}", exc_info=True)
        raise BackendError(f"{operation} failed: {e}", operation=operation) from e


def _to_payload(part) -> Dict[str, Any]:
    if isinstance(part, dict):
        return part
    return part.model_dump(exclude_none=True)


def _to_tool_calls(run) -> List[ToolCall]:
    required_action = getattr(run, 'required_action', None)
    if required_action is None:
        return []
    tool_calls = []
    for tool_call in required_action.submit_tool_outputs.tool_calls:
        function = getattr(tool_call, 'function', None)
        tool_calls.append(ToolCall(
            id=tool_call.id,
            type=tool_call.type,
            name=getattr(function, 'name', None),
            arguments=getattr(function, 'arguments', None),
        ))
    return tool_calls


def _to_run_state(run) -> RunState:
    return RunState(id=run.id, thread_id=run.thread_id, status=run.status, tool_calls=_to_tool_calls(run))


class OAIABackend(Backend):
    """Backend over the OpenAI Assistants API (client.beta.threads)."""

    def __init__(self, openai_client):
        self.openai_client = openai_client

    @override
    def create_thread(self) -> str:
        with backend_errors('create_thread'):
            openai_thread = self.openai_client.beta.threads.create()
        LOGGER.info(f"Successfully created thread {openai_thread.id} from provider")
        return openai_thread.id

    @override
    def create_message(self, thread_id: str, role: str, content: str) -> str:
        with backend_errors('create_message'):
            msg = self.openai_client.beta.threads.messages.create(
                thread_id=thread_id,
                role=role,
                content=content,
            )
        return msg.id

    @override
    def create_run(self, thread_id: str, assistant_id: str) -> RunState:
        with backend_errors('create_run'):
            run = self.openai_client.beta.threads.runs.create(
                thread_id=thread_id,
                assistant_id=assistant_id,
            )
        return _to_run_state(run)

    @override
    def retrieve_run(self, thread_id: str, run_id: str) -> RunState:
        with backend_errors('retrieve_run'):
            run = self.openai_client.beta.threads.runs.retrieve(run_id=run_id, thread_id=thread_id)
        LOGGER.debug(f"Run {run_id} status: {run.status}")
        return _to_run_state(run)

    @override
    def submit_tool_outputs(self, thread_id: str, run_id: str, outputs: List[ToolOutput]) -> None:
        with backend_errors('submit_tool_outputs'):
            self.openai_client.beta.threads.runs.submit_tool_outputs(
                run_id=run_id,
                thread_id=thread_id,
                tool_outputs=[output.to_dict() for output in outputs],
            )
        LOGGER.debug(f"Submitted {len(outputs)} tool output(s) for run {run_id}")

    @override
    def list_messages(self, thread_id: str, order: str = "desc", limit: int = 20) -> List[ThreadMessage]:
        with backend_errors('list_messages'):
            messages = self.openai_client.beta.threads.messages.list(thread_id=thread_id, order=order, limit=limit)
        return [
            ThreadMessage(
                id=message.id,
                thread_id=message.thread_id,
                run_id=message.run_id,
                role=message.role,
                content=[_to_payload(part) for part in message.content],
            )
            for message in messages.data
        ]

    @override
    def download_file(self, file_id: str) -> Dict[str, Any]:
        """
        Fetches the file content and returns it as a data url, the form chat
        front ends can render inline. An empty file yields an empty url.
        """
        with backend_errors('download_file'):
            data_in_bytes = self.openai_client.files.content(file_id).read()
        if not data_in_bytes:
            LOGGER.warning(f"File {file_id} has no content")
            return {"id": file_id, "url": ""}
        img_src = f'data:{IMAGE_MIME_TYPE};base64,' + base64.b64encode(data_in_bytes).decode('utf-8')
        return {"id": file_id, "url": img_src}
