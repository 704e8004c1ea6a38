"""Language-model provider access."""

from .parsing import extract_json_array, extract_json_object
from .router import PROVIDERS, Completion, ProviderRouter, alternative_provider

__all__ = [
    "PROVIDERS",
    "Completion",
    "ProviderRouter",
    "alternative_provider",
    "extract_json_array",
    "extract_json_object",
]
