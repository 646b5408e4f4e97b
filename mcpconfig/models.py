"""Data types for MCP server settings and server templates."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

FILE_EXTENSION = ".jsonc"

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
_FRACTION = re.compile(r"\.(\d+)")


class TemplateError(Exception):
    """Raised when a server template or an MCP config cannot be used."""


def _now() -> datetime:
    return datetime.now().astimezone()


def _format_timestamp(moment: datetime) -> str:
    return moment.isoformat()


def _parse_timestamp(text: Any) -> datetime:
    """Parse an RFC 3339 timestamp, including ``Z`` and nanosecond fractions."""
    if not isinstance(text, str):
        raise ValueError("timestamp must be a string")
    normalized = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    normalized = _FRACTION.sub(
        lambda m: "." + m.group(1)[:6].ljust(6, "0"), normalized, count=1
    )
    moment = datetime.fromisoformat(normalized)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object")
    return data


def _optional(data: Mapping[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ValueError(f"field '{key}' must be of type {kind.__name__}")
    return value


def _string_list(data: Mapping[str, Any], key: str) -> list[str] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"field '{key}' must be a list of strings")
    return list(value)


def _string_map(data: Mapping[str, Any], key: str) -> dict[str, str] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise ValueError(f"field '{key}' must map strings to strings")
    return dict(value)


@dataclass
class MCPServer:
    """How one MCP server is started."""

    command: str = ""
    args: list[str] | None = None
    env: dict[str, str] | None = None
    timeout: int | None = None
    env_file: str | None = None
    transport_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form, leaving out empty optional fields."""
        result: dict[str, Any] = {"command": self.command}
        if self.args:
            result["args"] = list(self.args)
        if self.env:
            result["env"] = dict(self.env)
        if self.timeout is not None:
            result["timeout"] = self.timeout
        if self.env_file is not None:
            result["envFile"] = self.env_file
        if self.transport_type is not None:
            result["transportType"] = self.transport_type
        return result

    @classmethod
    def from_dict(cls, data: Any) -> MCPServer:
        """Build a server from its JSON form; raise ValueError on a bad shape."""
        data = _mapping(data, "server config")
        return cls(
            command=_optional(data, "command", str) or "",
            args=_string_list(data, "args"),
            env=_string_map(data, "env"),
            timeout=_optional(data, "timeout", int),
            env_file=_optional(data, "envFile", str),
            transport_type=_optional(data, "transportType", str),
        )


@dataclass
class ServerTemplate:
    """A named, reusable server configuration."""

    name: str
    server_config: MCPServer = field(default_factory=MCPServer)
    description: str | None = None
    created_at: datetime = field(default_factory=_now)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form stored in a template file."""
        return {
            "name": self.name,
            "description": self.description,
            "createdAt": _format_timestamp(self.created_at),
            "serverConfig": self.server_config.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> ServerTemplate:
        """Build a template from its JSON form; raise ValueError on a bad shape."""
        data = _mapping(data, "server template")
        raw_created = data.get("createdAt")
        return cls(
            name=_optional(data, "name", str) or "",
            description=_optional(data, "description", str),
            created_at=_ZERO_TIME if raw_created is None else _parse_timestamp(raw_created),
            server_config=MCPServer.from_dict(data.get("serverConfig") or {}),
        )


@dataclass
class MCPConfig:
    """The contents of an MCP settings file."""

    mcp_servers: dict[str, MCPServer] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the settings file."""
        return {
            "mcpServers": {
                name: server.to_dict() for name, server in self.mcp_servers.items()
            }
        }

    @classmethod
    def from_dict(cls, data: Any) -> MCPConfig:
        """Build the settings from their JSON form; raise ValueError on a bad shape."""
        data = _mapping(data, "MCP config")
        servers = data.get("mcpServers")
        if servers is None:
            return cls()
        servers = _mapping(servers, "mcpServers")
        return cls(
            {name: MCPServer.from_dict(server) for name, server in servers.items()}
        )


def create_server_template(
    name: str,
    command: str,
    args: list[str] | None,
    env: dict[str, str] | None,
) -> ServerTemplate:
    """Return a new template stamped with the current time."""
    return ServerTemplate(
        name=name,
        description=None,
        created_at=_now(),
        server_config=MCPServer(command=command, args=args, env=env),
    )