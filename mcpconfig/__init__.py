"""Manage MCP server templates, profiles and MCP configuration files."""

__version__ = "0.1.0"