import logging
LOGGER = logging.getLogger(__name__)

from dotenv import load_dotenv
from dataclasses import dataclass
from typing import Optional, Type, TypeVar
import importlib
import os

from relayable.relay.cache import relay_cache
from relayable.relay.errors import ConfigurationError

load_dotenv()

T = TypeVar("T")

DEFAULT_PROVIDER_CLASS = 'relayable.relay.providers.openai.OAIAProvider.OAIAProvider'


@dataclass(frozen=True)
class RelaySettings:
    """
    Values the run controller and the OpenAI client need. Built once and
    passed explicitly; nothing below the Config layer reads the environment.
    """
    assistant_id: str
    api_key: Optional[str] = None
    organization: Optional[str] = None
    project: Optional[str] = None
    request_timeout: float = 30.0
    azure_api_key: Optional[str] = None
    azure_endpoint: Optional[str] = None
    azure_api_version: str = "2025-04-01-preview"
    max_iterations: int = 150
    message_limit: int = 20
    initial_delay: float = 0.25
    delay_step: float = 0.25
    max_delay: float = 2.0

    def uses_azure(self) -> bool:
        return bool(self.azure_api_key)


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got '{value}'")


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{value}'")


class Config:

    provider = None

    def __init__(self, settings: Optional[RelaySettings] = None):
        self.settings = settings if settings is not None else self.settings_from_env()
        LOGGER.info("Created Config instance")

    @classmethod
    @relay_cache
    def config(cls):
        return Config()

    @staticmethod
    def settings_from_env() -> RelaySettings:
        assistant_id = os.getenv('OPENAI_ASSISTANT_ID')
        if not assistant_id:
            raise ConfigurationError("OPENAI_ASSISTANT_ID is not set. Please set it in the environment or the .env file.")

        api_key = os.getenv('OPENAI_API_KEY')
        azure_api_key = os.getenv('AZURE_OPENAI_API_KEY')
        if not api_key and not azure_api_key:
            raise ConfigurationError("API key is not set. Please ensure the OPENAI_API_KEY or AZURE_OPENAI_API_KEY is set in the .env file.")

        settings = RelaySettings(
            assistant_id=assistant_id,
            api_key=api_key,
            organization=os.getenv('OPENAI_ORGANIZATION') or None,
            project=os.getenv('OPENAI_PROJECT') or None,
            request_timeout=_float_env('OPENAI_REQUEST_TIMEOUT', 30.0),
            azure_api_key=azure_api_key,
            azure_endpoint=os.getenv('AZURE_OPENAI_ENDPOINT'),
            azure_api_version=os.getenv('AZURE_OPENAI_API_VERSION', "2025-04-01-preview"),
            max_iterations=_int_env('RELAY_MAX_ITERATIONS', 150),
            message_limit=_int_env('RELAY_MESSAGE_LIMIT', 20),
        )
        LOGGER.debug(f"Loaded settings for assistant {settings.assistant_id} (timeout={settings.request_timeout}s)")
        return settings

    def get_settings(self) -> RelaySettings:
        return self.settings

    def get_class_from_env(self, env_var: str, default: str, expected_type: Type[T]) -> Type[T]:
        path = os.getenv(env_var, default)
        LOGGER.info(f"Using class for {env_var}: {path}")

        try:
            module_path, class_name = path.rsplit(".", 1)
            module = importlib.import_module(module_path)
            cls = getattr(module, class_name)

            if not isinstance(cls, type) or not issubclass(cls, expected_type):
                raise TypeError(f"Class {path} is not a subclass of {expected_type.__name__}")

            return cls
        except (ValueError, ImportError, AttributeError, TypeError) as e:
            LOGGER.error(f"Failed to load or validate class {path}: {e}")
            raise ConfigurationError(f"Cannot load {env_var}={path}: {e}") from e

    def get_provider(self):
        """
        Have to lazy init the provider here to avoid circular imports.
        """
        if self.provider is None:
            from relayable.relay.providers.provider import Provider
            provider_class = self.get_class_from_env('RELAY_PROVIDER_CLASS', DEFAULT_PROVIDER_CLASS, Provider)
            self.provider = provider_class.provider(self)
        return self.provider
