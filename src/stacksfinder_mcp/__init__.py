"""StacksFinder MCP Server.

Discover, analyze and compare web technologies, and get full-stack
recommendations from the StacksFinder scoring service.
"""

__version__ = "0.1.0"
