import logging
LOGGER = logging.getLogger(__name__)

import os
import pytest
from unittest.mock import patch, MagicMock

from relayable.relay.cache import relay_cache_clear
from relayable.relay.config import Config
from relayable.relay.errors import ConfigurationError
from relayable.relay.functions import DefaultToolExecutor, FunctionsToolExecutor, ToolExecutor
from relayable.relay.middleware import OpenAIMiddleware
from relayable.relay.providers.openai.OAIAProvider import OAIAProvider, create_openai_client
from tests.common import MyFunctions, make_settings


BASE_ENV = {
  'OPENAI_API_KEY': 'sk-test',
  'OPENAI_ASSISTANT_ID': 'asst_test',
}


class TestConfig:

  @pytest.fixture
  def setup(self):
    yield
    relay_cache_clear()

  def test_settings_from_env_defaults(self, setup):
    with patch.dict(os.environ, BASE_ENV, clear=True):
      settings = Config.settings_from_env()
    assert settings.assistant_id == 'asst_test'
    assert settings.api_key == 'sk-test'
    assert settings.organization is None
    assert settings.request_timeout == 30.0
    assert settings.max_iterations == 150
    assert settings.message_limit == 20
    assert (settings.initial_delay, settings.delay_step, settings.max_delay) == (0.25, 0.25, 2.0)
    assert not settings.uses_azure()

  def test_settings_from_env_overrides(self, setup):
    env = dict(BASE_ENV, OPENAI_ORGANIZATION='org-1', OPENAI_REQUEST_TIMEOUT='12.5',
               RELAY_MAX_ITERATIONS='10', RELAY_MESSAGE_LIMIT='5')
    with patch.dict(os.environ, env, clear=True):
      settings = Config.settings_from_env()
    assert settings.organization == 'org-1'
    assert settings.request_timeout == 12.5
    assert settings.max_iterations == 10
    assert settings.message_limit == 5

  def test_missing_assistant_id(self, setup):
    with patch.dict(os.environ, {'OPENAI_API_KEY': 'sk-test'}, clear=True):
      with pytest.raises(ConfigurationError):
        Config.settings_from_env()

  def test_missing_api_key(self, setup):
    with patch.dict(os.environ, {'OPENAI_ASSISTANT_ID': 'asst_test'}, clear=True):
      with pytest.raises(ConfigurationError):
        Config.settings_from_env()

  def test_bad_timeout(self, setup):
    with patch.dict(os.environ, dict(BASE_ENV, OPENAI_REQUEST_TIMEOUT='soon'), clear=True):
      with pytest.raises(ConfigurationError):
        Config.settings_from_env()

  def test_azure_settings(self, setup):
    env = {'AZURE_OPENAI_API_KEY': 'az-key', 'AZURE_OPENAI_ENDPOINT': 'https://example.openai.azure.com',
           'OPENAI_ASSISTANT_ID': 'asst_test'}
    with patch.dict(os.environ, env, clear=True):
      settings = Config.settings_from_env()
    assert settings.uses_azure()
    assert settings.azure_endpoint == 'https://example.openai.azure.com'

  def test_get_config(self, setup):
    with patch.dict(os.environ, BASE_ENV, clear=True):
      config = Config.config()
      config2 = Config.config()
    assert config is not None
    assert id(config) == id(config2)

  def test_get_class_from_env(self, setup):
    config = Config(settings=make_settings())
    with patch.dict(os.environ, {'RELAY_TOOL_EXECUTOR_CLASS': 'relayable.relay.functions.FunctionsToolExecutor'}):
      cls = config.get_class_from_env('RELAY_TOOL_EXECUTOR_CLASS', 'relayable.relay.functions.DefaultToolExecutor', ToolExecutor)
    assert cls is FunctionsToolExecutor

  @pytest.mark.parametrize("path", [
    'relayable.relay.functions.NoSuchExecutor',
    'no_such_module.Executor',
    'tests.common.MyFunctions',
    'NoDots',
  ])
  def test_get_class_from_env_invalid(self, setup, path):
    config = Config(settings=make_settings())
    with patch.dict(os.environ, {'RELAY_TOOL_EXECUTOR_CLASS': path}):
      with pytest.raises(ConfigurationError):
        config.get_class_from_env('RELAY_TOOL_EXECUTOR_CLASS', 'relayable.relay.functions.DefaultToolExecutor', ToolExecutor)


class TestProvider:

  @pytest.fixture
  def setup(self):
    yield
    relay_cache_clear()

  def test_openai_client_settings(self, setup):
    client = create_openai_client(make_settings(organization='org-1', request_timeout=12.0))
    assert client.api_key == 'sk-test'
    assert client.organization == 'org-1'
    assert client.timeout == 12.0
    assert client.default_headers['OpenAI-Beta'] == 'assistants=v2'

  def test_default_provider(self, setup):
    config = Config(settings=make_settings())
    with patch.dict(os.environ, {}, clear=True):
      provider = OAIAProvider(config, openai_client=MagicMock())
    assert isinstance(provider.tool_executor, DefaultToolExecutor)
    assert provider.controller.assistant_id == 'asst_test'
    assert provider.controller.backend is provider.backend
    assert isinstance(provider.middleware(), OpenAIMiddleware)

  def test_functions_provider(self, setup):
    config = Config(settings=make_settings())
    env = {'RELAY_TOOL_EXECUTOR_CLASS': 'relayable.relay.functions.FunctionsToolExecutor',
           'RELAY_FUNCTIONS_CLASS': 'tests.common.MyFunctions'}
    with patch.dict(os.environ, env, clear=True):
      provider = OAIAProvider(config, openai_client=MagicMock())
    assert isinstance(provider.tool_executor, FunctionsToolExecutor)
    assert isinstance(provider.tool_executor.functions, MyFunctions)

  def test_get_provider_is_cached(self, setup):
    config = Config(settings=make_settings())
    with patch.dict(os.environ, {}, clear=True):
      provider = config.get_provider()
      assert isinstance(provider, OAIAProvider)
      assert OAIAProvider.provider(config) is provider
