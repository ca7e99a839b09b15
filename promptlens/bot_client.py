"""Abstract interfaces for transport-agnostic bot clients."""
from abc import ABC, abstractmethod


class TypingIndicator(ABC):
    @abstractmethod
    async def start(self) -> None: ...

    @abstractmethod
    async def stop(self) -> None: ...


class BotClient(ABC):
    @abstractmethod
    def run(self) -> None: ...

    @abstractmethod
    async def send_message(self, to: str, text: str) -> bool: ...
