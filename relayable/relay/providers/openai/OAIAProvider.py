import logging
from relayable.relay.cache import relay_cache
from relayable.relay.config import Config, RelaySettings
from relayable.relay.functions import ToolExecutor
from relayable.relay.providers.provider import Provider
from relayable.relay.providers.openai.OAIABackend import OAIABackend
from relayable.relay.runs import RunController
from openai import OpenAI, AzureOpenAI

LOGGER = logging.getLogger(__name__)

ASSISTANTS_BETA_HEADER = {"OpenAI-Beta": "assistants=v2"}
DEFAULT_TOOL_EXECUTOR_CLASS = 'relayable.relay.functions.DefaultToolExecutor'


def create_openai_client(settings: RelaySettings):
    # Use OpenAI by default
    if not settings.uses_azure():
        openai_client = OpenAI(
            api_key=settings.api_key,
            organization=settings.organization,
            project=settings.project,
            timeout=settings.request_timeout,
            default_headers=ASSISTANTS_BETA_HEADER,
        )
        LOGGER.info("Using OpenAI API")
    else:
        openai_client = AzureOpenAI(
            api_key=settings.azure_api_key,
            azure_endpoint=settings.azure_endpoint,
            api_version=settings.azure_api_version,
            timeout=settings.request_timeout,
            default_headers=ASSISTANTS_BETA_HEADER,
        )
        LOGGER.info("Using Azure OpenAI API")
    return openai_client


class OAIAProvider(Provider):

    def __init__(self, config: Config, openai_client=None):
        super().__init__()
        self.config = config
        settings = config.get_settings()

        if openai_client is None:
            openai_client = create_openai_client(settings)
        self.openai_client = openai_client

        executor_class = config.get_class_from_env('RELAY_TOOL_EXECUTOR_CLASS', DEFAULT_TOOL_EXECUTOR_CLASS, ToolExecutor)
        self.backend = OAIABackend(openai_client)
        self.tool_executor = executor_class.from_config(config)
        self.controller = RunController(backend=self.backend, settings=settings, tool_executor=self.tool_executor)
        LOGGER.info(f"Created OAIAProvider for assistant {settings.assistant_id} with {executor_class.__name__}")

    @classmethod
    @relay_cache
    def provider(cls, config: Config) -> Provider:
        return OAIAProvider(config)
