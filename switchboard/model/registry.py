"""Explicit registry mapping model names to backend factories."""

from importlib import import_module
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from switchboard.exceptions import ModelNotFoundError
from switchboard.model.base import ModelBackend
from switchboard.utils.log import log_debug

BackendFactory = Callable[[], ModelBackend]

# Provider registry: provider_name -> (module_path, class_name)
# Lazy imports, the provider module only loads when a factory runs.
_PROVIDER_MAP: Dict[str, Tuple[str, str]] = {
  "openai": ("switchboard.model.openai", "OpenAIChat"),
}

OPENAI_MODELS: Tuple[str, ...] = (
  "gpt-4.1",
  "gpt-4.1-mini",
  "gpt-4.1-nano",
  "gpt-4o",
  "gpt-4o-mini",
  "o3",
  "o4-mini",
)


def get_supported_providers() -> List[str]:
  """Return sorted list of supported provider names."""
  return sorted(_PROVIDER_MAP.keys())


class ModelRegistry:
  """
  Maps model names to zero-argument backend factories.

  A registry is an ordinary object: construct one, register factories,
  hand it to a ``Runner``, and ``clear`` it on teardown. Nothing is
  registered implicitly.

  Example:
      registry = ModelRegistry()
      registry.register_openai_models(api_key="sk-...")
      backend = registry.get("gpt-4o-mini")
  """

  def __init__(self) -> None:
    self._factories: Dict[str, BackendFactory] = {}
    self._instances: Dict[str, ModelBackend] = {}

  def register(self, name: str, factory: BackendFactory) -> None:
    """Register (or replace) the factory for *name*. Drops any cached instance."""
    self._factories[name] = factory
    self._instances.pop(name, None)
    log_debug(f"Registered model backend '{name}'")

  def unregister(self, name: str) -> None:
    self._factories.pop(name, None)
    self._instances.pop(name, None)

  def get(self, name: str) -> ModelBackend:
    """Return the backend for *name*, constructing it on first use.

    Raises:
        ModelNotFoundError: If no factory is registered under *name*.
    """
    if name in self._instances:
      return self._instances[name]
    factory = self._factories.get(name)
    if factory is None:
      raise ModelNotFoundError(name)
    backend = factory()
    self._instances[name] = backend
    return backend

  def __contains__(self, name: object) -> bool:
    return name in self._factories

  @property
  def names(self) -> List[str]:
    return sorted(self._factories.keys())

  def clear(self) -> None:
    self._factories.clear()
    self._instances.clear()

  def register_provider_models(self, provider: str, models: Iterable[str], **client_kwargs) -> None:
    """Register one factory per model id, all served by *provider*'s backend class."""
    provider = provider.strip().lower()
    if provider not in _PROVIDER_MAP:
      supported = ", ".join(get_supported_providers())
      raise ValueError(f"Unknown model provider '{provider}'. Supported providers: {supported}")
    module_path, class_name = _PROVIDER_MAP[provider]

    def _factory_for(model_id: str) -> BackendFactory:
      def _factory() -> ModelBackend:
        backend_class = getattr(import_module(module_path), class_name)
        return backend_class(id=model_id, **client_kwargs)

      return _factory

    for model_id in models:
      self.register(model_id, _factory_for(model_id))

  def register_openai_models(
    self,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    models: Iterable[str] = OPENAI_MODELS,
  ) -> None:
    """Register the OpenAI chat models. Credentials fall back to the environment."""
    self.register_provider_models("openai", models, api_key=api_key, base_url=base_url)
