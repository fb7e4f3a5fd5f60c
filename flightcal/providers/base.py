from abc import ABC, abstractmethod


class BaseProvider(ABC):
    """Abstract base class for chat-completion providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The name of this provider (e.g. 'openai-compatible')."""
        ...

    @abstractmethod
    async def chat(self, messages: list[dict], model: str | None = None, **options) -> dict:
        """
        Send a chat completion request.

        Args:
            messages: List of message dicts with 'role' and 'content' keys.
            model: Optional model identifier. Provider uses its default if None.
            options: Extra body fields such as temperature or max_tokens.

        Returns:
            dict with keys:
                - text: str | None  — the generated text
                - provider: str     — provider name
                - model: str        — model used
                - status: "success" | "failed"
                - status_code: int | None — HTTP status of the upstream reply
                - error: str | None — error message on failure
        """
        ...
