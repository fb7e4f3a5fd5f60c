from flightcal.providers.base import BaseProvider
from flightcal.providers.openai_compatible_provider import OpenAICompatibleProvider


__all__ = [
    "BaseProvider",
    "OpenAICompatibleProvider",
]
