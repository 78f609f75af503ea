"""DisplaySurface ABC — the viewport the scheduler writes rendered text into."""

from abc import ABC, abstractmethod


class DisplaySurface(ABC):
    """A surface may be closed from another thread at any time.

    The scheduler checks is_open() at the top of every tick and treats a
    closed surface as a request to stop.
    """

    @abstractmethod
    def open(self) -> None:
        ...

    @abstractmethod
    def is_open(self) -> bool:
        ...

    @abstractmethod
    def write(self, contents: str) -> None:
        """Replace the surface contents. Ignored once closed."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the surface. Idempotent."""
        ...
