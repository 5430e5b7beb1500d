"""
Base class for renderers.

Renderers convert DisplayData to specific output formats
(plain text, HTML, etc.)
"""

from abc import ABC, abstractmethod
from typing import Any
from busmap.providers.base import DisplayData


class Renderer(ABC):
    """
    Base class for renderers.

    Renderers convert provider-generated DisplayData into specific output
    formats. The return type of render() varies by renderer implementation.
    """

    @abstractmethod
    def render(self, data: DisplayData) -> Any:
        """
        Render DisplayData to target format.

        Args:
            data: Structured data from a provider

        Returns:
            Rendered output (type varies by renderer implementation)
            - TextRenderer: str

        Raises:
            ValueError: If data content type is not supported
        """
        pass
