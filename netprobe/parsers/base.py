"""
Abstract base class for OS tool transcript parsers
"""

from abc import ABC, abstractmethod


class ToolParser(ABC):
    """
    Builds the command line for one OS tool on one platform and turns
    its transcript into structured data.
    """

    tool: str = ''
    platform: str = ''

    @abstractmethod
    def command(self, target: str, options) -> list[str]:
        """
        Build the argv for this tool.

        Args:
            target: Address or hostname to probe
            options: Tool-specific options object

        Returns:
            Command line ready for process.run_tool
        """
        pass

    @abstractmethod
    def parse(self, output: str, options):
        """
        Parse a (possibly partial) transcript.

        Never raises on unexpected text: whatever can be recovered is
        returned and the rest is left at defaults.
        """
        pass
