import logging
LOGGER = logging.getLogger(__name__)

import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from relayable.relay.config import RelaySettings
from relayable.relay.functions import DefaultToolExecutor, ToolExecutor
from relayable.relay.providers.backend import Backend, RunState
from relayable.relay.responses import NormalizedResponse, normalize_payloads

QUEUED = "queued"
IN_PROGRESS = "in_progress"
REQUIRES_ACTION = "requires_action"
COMPLETED = "completed"
FAILED = "failed"
# local outcome, never reported by the backend
CANCELLED = "cancelled"

LOOP_EXIT_STATUSES = frozenset({COMPLETED, FAILED})


@dataclass
class RunResult:
    status: str
    responses: List[NormalizedResponse] = field(default_factory=list)
    run_id: Optional[str] = None
    iterations: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.status == CANCELLED


def wait_for(cancel_event: threading.Event, seconds: float) -> bool:
    """Sleep for `seconds`; returns True if the cancel event was raised meanwhile."""
    return cancel_event.wait(seconds)


def next_delay(delay: float, step: float, maximum: float) -> float:
    return min(delay + step, maximum)


class RunController:
    """
    Drives one assistant run per user message: posts the message, starts a
    run, polls it until it completes, fails or the iteration budget is spent,
    answers tool calls along the way, and collects the assistant output that
    the run produced.
    """

    def __init__(self, backend: Backend, settings: RelaySettings,
                 tool_executor: Optional[ToolExecutor] = None,
                 wait: Optional[Callable[[threading.Event, float], bool]] = None):
        self.backend = backend
        self.assistant_id = settings.assistant_id
        self.max_iterations = settings.max_iterations
        self.message_limit = settings.message_limit
        self.initial_delay = settings.initial_delay
        self.delay_step = settings.delay_step
        self.max_delay = settings.max_delay
        self.tool_executor = tool_executor if tool_executor is not None else DefaultToolExecutor()
        self.wait = wait if wait is not None else wait_for
        LOGGER.debug(f"Initialized RunController for assistant id: {self.assistant_id}")

    def execute(self, thread_id: str, text: str, cancel_event: Optional[threading.Event] = None) -> RunResult:
        if cancel_event is None:
            cancel_event = threading.Event()

        message_id = self.backend.create_message(thread_id=thread_id, role="user", content=text)
        LOGGER.debug(f"Created user message {message_id} on thread {thread_id}")

        run = self.backend.create_run(thread_id=thread_id, assistant_id=self.assistant_id)
        LOGGER.info(f"Created run {run.id} on thread {thread_id} with status {run.status}")

        run, iterations, cancelled = self._poll(run, cancel_event)
        if cancelled:
            LOGGER.info(f"Run {run.id} was cancelled by the caller after {iterations} iterations.")
            return RunResult(status=CANCELLED, run_id=run.id, iterations=iterations)

        LOGGER.info(f"Run ended after {iterations} iterations.")
        if run.status != COMPLETED:
            LOGGER.warning(f"Run {run.id} on thread {thread_id} ended with status {run.status}")

        responses = self.collect_responses(thread_id=thread_id, run_id=run.id)
        return RunResult(status=run.status, responses=responses, run_id=run.id, iterations=iterations)

    def _poll(self, run: RunState, cancel_event: threading.Event):
        iteration = 0
        delay = self.initial_delay
        while True:
            if cancel_event.is_set():
                return run, iteration, True

            if run.status == REQUIRES_ACTION:
                self._handle_tool_calls(run)

            LOGGER.info(f"About to poll run {run.id} after a delay of {delay} seconds.")
            if self.wait(cancel_event, delay):
                return run, iteration, True

            run = self.backend.retrieve_run(thread_id=run.thread_id, run_id=run.id)
            iteration += 1
            delay = next_delay(delay, self.delay_step, self.max_delay)

            if run.status in LOOP_EXIT_STATUSES or iteration >= self.max_iterations:
                return run, iteration, False

    def _handle_tool_calls(self, run: RunState) -> None:
        LOGGER.debug(f"Run {run.id} requires action for {len(run.tool_calls)} tool call(s)")
        tool_outputs = self.tool_executor.run(thread_id=run.thread_id, run_id=run.id, tool_calls=run.tool_calls)
        self.backend.submit_tool_outputs(thread_id=run.thread_id, run_id=run.id, outputs=tool_outputs)

    def collect_responses(self, thread_id: str, run_id: str) -> List[NormalizedResponse]:
        """
        Normalized content of the assistant messages this run added to the
        thread, in the order the backend listed them.
        """
        messages = self.backend.list_messages(thread_id=thread_id, order="desc", limit=self.message_limit)
        responses = []
        for message in messages:
            if message.run_id != run_id or message.role != "assistant":
                continue
            responses.extend(normalize_payloads(message.content, self.backend.download_file))
        LOGGER.debug(f"Collected {len(responses)} response(s) for run {run_id}")
        return responses
