"""consult-llm-mcp - ask a more powerful model for a second opinion."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("consult-llm-mcp")
except PackageNotFoundError:
    __version__ = "1.1.0"
