from .base import ChatTransport, ProviderCallError
from .openai_style import OpenAIStyleTransport

__all__ = ["ChatTransport", "OpenAIStyleTransport", "ProviderCallError"]
