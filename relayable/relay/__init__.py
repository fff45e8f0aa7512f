from relayable.relay.errors import RelayError, BackendError, MalformedResponseError, ConfigurationError
from relayable.relay.responses import TextResponse, ImageResponse
from relayable.relay.runs import RunController, RunResult

__all__ = [
    "RelayError",
    "BackendError",
    "MalformedResponseError",
    "ConfigurationError",
    "TextResponse",
    "ImageResponse",
    "RunController",
    "RunResult",
]
