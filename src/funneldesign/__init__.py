"""Funnel design: persistent marketing funnel documents served over MCP."""

__version__ = "1.0.0"
