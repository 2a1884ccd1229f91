"""Core business logic: catalog, scoring, comparison and the StacksFinder API client.

This module is framework-agnostic. It has no dependency on MCP, FastMCP,
or any server framework; configuration arrives as constructor arguments.
"""
