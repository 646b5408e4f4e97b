"""One entry point for server templates and for editing MCP settings files."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping

from mcpconfig.display import TemplateDisplay
from mcpconfig.fileio import file_exists, save_json
from mcpconfig.models import MCPConfig, MCPServer, ServerTemplate, TemplateError
from mcpconfig.templates import (
    TemplateManager,
    _format_list,
    _load_mcp_config,
    _ProfileReferences,
)
from mcpconfig.updater import TemplateUpdater


def _save_mcp_config(config: MCPConfig, path: str | os.PathLike[str]) -> None:
    try:
        save_json(path, config.to_dict())
    except OSError as exc:
        raise TemplateError(f"MCP設定ファイルの保存に失敗しました: {exc}") from exc


def _print_server(name: str, server: MCPServer) -> None:
    print(f"サーバー名: {name}")
    print(f"  コマンド: {server.command}")
    if server.args:
        print(f"  引数: {_format_list(server.args)}")
    if server.env:
        print("  環境変数:")
        for key, value in server.env.items():
            print(f"    {key}: {value}")


class ServerManager:
    """Manage templates in ``servers_dir`` and apply them to MCP settings files."""

    def __init__(
        self,
        servers_dir: str | os.PathLike[str],
        confirm: Callable[[str], bool] | None = None,
    ) -> None:
        self._templates = TemplateManager(servers_dir, confirm)
        self._updater = TemplateUpdater(self._templates)
        self._display = TemplateDisplay(servers_dir)

    def save_from_file(
        self,
        template_name: str,
        server_name: str,
        mcp_config_path: str | os.PathLike[str],
        force: bool = False,
    ) -> None:
        """Store a server of an MCP settings file as a template."""
        self._templates.save_from_file(template_name, server_name, mcp_config_path, force)

    def save_manual(
        self,
        template_name: str,
        command: str,
        args: list[str] | None = None,
        env: dict[str, str] | None = None,
        force: bool = False,
    ) -> None:
        """Create or update a template from explicit values."""
        self._updater.save_manual(template_name, command, args, env, force)

    def list(self, detail: bool = False) -> None:
        """Print all templates."""
        self._display.list(detail)

    def delete(
        self,
        name: str,
        force: bool = False,
        profile_manager: _ProfileReferences | None = None,
    ) -> None:
        """Delete a template."""
        self._templates.delete(name, force, profile_manager)

    def rename(self, old_name: str, new_name: str, force: bool = False) -> None:
        """Rename a template."""
        self._templates.rename(old_name, new_name, force)

    def add_to_mcp_config(
        self,
        mcp_config_path: str | os.PathLike[str],
        template_name: str,
        server_name: str = "",
        env_overrides: Mapping[str, str] | None = None,
    ) -> None:
        """Add a server built from a template to an MCP settings file."""
        try:
            template = self._templates.load(template_name)
        except TemplateError as exc:
            raise TemplateError(
                f"テンプレート '{template_name}' の読み込みに失敗しました: {exc}"
            ) from exc

        config = (
            _load_mcp_config(mcp_config_path)
            if file_exists(mcp_config_path)
            else MCPConfig()
        )

        server_name = server_name or template_name
        if server_name in config.mcp_servers:
            raise TemplateError(f"サーバー '{server_name}' は既にMCP設定ファイルに存在します")

        config.mcp_servers[server_name] = self._build_server(template, env_overrides)
        _save_mcp_config(config, mcp_config_path)

        print(f"サーバー '{server_name}' をMCP設定ファイルに追加しました: {mcp_config_path}")

    @staticmethod
    def _build_server(
        template: ServerTemplate, env_overrides: Mapping[str, str] | None
    ) -> MCPServer:
        source = template.server_config
        env = {**(source.env or {}), **(env_overrides or {})}
        return MCPServer(
            command=source.command,
            args=source.args,
            env=env,
            timeout=source.timeout,
            env_file=source.env_file,
            transport_type=source.transport_type,
        )

    def remove_from_mcp_config(
        self, mcp_config_path: str | os.PathLike[str], server_name: str
    ) -> None:
        """Remove ``server_name`` from an MCP settings file."""
        config = _load_mcp_config(mcp_config_path)
        if server_name not in config.mcp_servers:
            raise TemplateError(
                f"サーバー '{server_name}' がMCP設定ファイルに見つかりません\n"
                f"ファイル: {mcp_config_path}\n"
                f"利用可能なサーバー: {_format_list(list(config.mcp_servers))}"
            )

        del config.mcp_servers[server_name]
        _save_mcp_config(config, mcp_config_path)

        print(f"サーバー '{server_name}' をMCP設定ファイルから削除しました: {mcp_config_path}")

    def show(self, mcp_config_path: str | os.PathLike[str], server_name: str = "") -> None:
        """Print one server of an MCP settings file, or all of them."""
        config = _load_mcp_config(mcp_config_path)

        if server_name:
            server = config.mcp_servers.get(server_name)
            if server is None:
                raise TemplateError(
                    f"MCPサーバー '{server_name}' がMCP設定ファイルに見つかりません\n"
                    f"ファイル: {mcp_config_path}\n"
                    f"利用可能なサーバー: {_format_list(list(config.mcp_servers))}"
                )
            _print_server(server_name, server)
            return

        if not config.mcp_servers:
            print("MCPサーバーが設定されていません")
            return

        for name, server in config.mcp_servers.items():
            _print_server(name, server)
            print()

    def load(self, name: str) -> ServerTemplate:
        """Read a template."""
        return self._templates.load(name)

    def exists(self, name: str) -> bool:
        """Return True when the template exists."""
        return self._templates.exists(name)

    def save_from_config(self, name: str, server: MCPServer) -> None:
        """Store ``server`` as a template."""
        self._templates.save_from_config(name, server)

    def reset(self, force: bool = False) -> None:
        """Delete all templates."""
        self._templates.reset(force)

    def get_template_path(self, name: str):
        """Return the file of an existing template."""
        return self._templates.get_template_path(name)