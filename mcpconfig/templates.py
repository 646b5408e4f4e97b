"""Storage of server templates as files in a directory."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from mcpconfig.fileio import load_json, save_json
from mcpconfig.models import (
    FILE_EXTENSION,
    MCPConfig,
    MCPServer,
    ServerTemplate,
    TemplateError,
    _now,
)

_RESOURCE = "サーバーテンプレート"


class _ProfileReferences(Protocol):
    def find_profiles_using_template(self, template_name: str) -> list[str]: ...

    def remove_template_references_from_all_profiles(self, template_name: str) -> None: ...


def _prompt_yes_no(message: str) -> bool:
    try:
        answer = input(f"{message} (y/N): ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def _overwrite_prompt(resource_type: str, name: str) -> str:
    return f"{resource_type} '{name}' は既に存在します。上書きしますか？"


def _format_list(items: list[str]) -> str:
    return "[" + " ".join(items) + "]"


def _load_mcp_config(path: str | os.PathLike[str]) -> MCPConfig:
    try:
        return MCPConfig.from_dict(load_json(path))
    except (OSError, ValueError) as exc:
        raise TemplateError(f"MCP設定ファイルの読み込みに失敗しました: {exc}") from exc


class TemplateManager:
    """Create, load, rename and delete server templates in ``servers_dir``."""

    def __init__(
        self,
        servers_dir: str | os.PathLike[str],
        confirm: Callable[[str], bool] | None = None,
    ) -> None:
        self.servers_dir = Path(servers_dir)
        self.confirm = confirm or _prompt_yes_no

    def _path(self, name: str) -> Path:
        return self.servers_dir / (name + FILE_EXTENSION)

    def save_from_file(
        self,
        template_name: str,
        server_name: str,
        mcp_config_path: str | os.PathLike[str],
        force: bool = False,
    ) -> None:
        """Store the server ``server_name`` of an MCP config as a template."""
        if not force and self.exists(template_name):
            if not self.confirm(_overwrite_prompt(_RESOURCE, template_name)):
                raise TemplateError("上書きをキャンセルしました")

        config = _load_mcp_config(mcp_config_path)
        server = config.mcp_servers.get(server_name)
        if server is None:
            raise TemplateError(
                f"MCPサーバー '{server_name}' がMCP設定ファイルに見つかりません"
            )

        self.save(ServerTemplate(name=template_name, server_config=server, created_at=_now()))

        print(f"サーバーテンプレート '{template_name}' を保存しました")
        print(f"コマンド: {server.command}")
        if server.args:
            print(f"引数: {_format_list(server.args)}")

    def save_from_config(self, name: str, server: MCPServer) -> None:
        """Store ``server`` as the template ``name``."""
        self.save(ServerTemplate(name=name, server_config=server, created_at=_now()))

    def load(self, name: str) -> ServerTemplate:
        """Read the template ``name``; raise TemplateError if missing or broken."""
        try:
            return ServerTemplate.from_dict(load_json(self._path(name)))
        except FileNotFoundError as exc:
            raise TemplateError(f"サーバーテンプレート '{name}' が見つかりません") from exc
        except (OSError, ValueError) as exc:
            raise TemplateError(
                f"サーバーテンプレートの読み込みに失敗しました: {exc}"
            ) from exc

    def exists(self, name: str) -> bool:
        """Return True when a template file for ``name`` exists."""
        try:
            self._path(name).stat()
        except OSError:
            return False
        return True

    def delete(
        self,
        name: str,
        force: bool = False,
        profile_manager: _ProfileReferences | None = None,
    ) -> None:
        """Delete a template, optionally dropping profile references to it."""
        path = self._path(name)
        if not path.exists():
            raise TemplateError(f"サーバーテンプレート '{name}' が見つかりません")

        using: list[str] = []
        if profile_manager is not None:
            try:
                using = list(profile_manager.find_profiles_using_template(name))
            except Exception as exc:
                raise TemplateError(
                    f"プロファイルでの使用状況確認に失敗しました: {exc}"
                ) from exc

        if using:
            print(f"警告: サーバーテンプレート '{name}' は以下のプロファイルで使用されています:")
            for profile_name in using:
                print(f"  - {profile_name}")
            print()

        if not force and not self.confirm(f"サーバーテンプレート '{name}' を削除しますか？"):
            print("削除をキャンセルしました")
            return

        if using and profile_manager is not None:
            if force:
                print("強制削除: プロファイルからの参照も削除します")
                self._remove_references(profile_manager, name)
            elif self.confirm("プロファイルからの参照も削除しますか？"):
                self._remove_references(profile_manager, name)

        try:
            path.unlink()
        except OSError as exc:
            raise TemplateError(f"サーバーテンプレートの削除に失敗しました: {exc}") from exc

        print(f"サーバーテンプレート '{name}' を削除しました")

    @staticmethod
    def _remove_references(profile_manager: _ProfileReferences, name: str) -> None:
        try:
            profile_manager.remove_template_references_from_all_profiles(name)
        except Exception as exc:  # a failure here only warns; the template still goes
            print(f"警告: プロファイルからの参照削除に失敗しました: {exc}")

    def rename(self, old_name: str, new_name: str, force: bool = False) -> None:
        """Rename a template; an existing target needs ``force``."""
        if not self._path(old_name).exists():
            raise TemplateError(f"サーバーテンプレート '{old_name}' が見つかりません")
        if self.exists(new_name) and not force:
            raise TemplateError(
                f"サーバーテンプレート '{new_name}' は既に存在します\n"
                "別の名前を指定するか、--force オプションで上書きしてください"
            )

        template = self.load(old_name)
        template.name = new_name
        self.save(template)

        try:
            self._path(old_name).unlink()
        except OSError as exc:
            raise TemplateError(
                f"古いサーバーテンプレートの削除に失敗しました: {exc}"
            ) from exc

        print(f"サーバーテンプレート '{old_name}' を '{new_name}' に変更しました")

    def get_template_path(self, name: str) -> Path:
        """Return the file of an existing template."""
        path = self._path(name)
        if not path.exists():
            raise TemplateError(f"サーバーテンプレート '{name}' が見つかりません")
        return path

    def save(self, template: ServerTemplate) -> None:
        """Write ``template`` to its file."""
        save_json(self._path(template.name), template.to_dict())

    def reset(self, force: bool = False) -> None:
        """Delete every template file in the directory."""
        if not self.servers_dir.exists():
            print("サーバーテンプレートディレクトリが存在しません")
            return

        try:
            entries = sorted(os.listdir(self.servers_dir))
        except OSError as exc:
            raise TemplateError(
                f"サーバーテンプレートディレクトリの読み込みに失敗しました: {exc}"
            ) from exc

        files = [entry for entry in entries if entry.endswith(FILE_EXTENSION)]
        if not files:
            print("削除するサーバーテンプレートが存在しません")
            return

        if not force:
            print(f"以下の{len(files)}個のサーバーテンプレートを削除します:")
            for entry in files:
                print(f"  - {entry[: -len(FILE_EXTENSION)]}")
            print()
            if not self.confirm("すべてのサーバーテンプレートを削除しますか？"):
                print("リセットをキャンセルしました")
                return

        deleted = 0
        for entry in files:
            try:
                (self.servers_dir / entry).unlink()
            except OSError as exc:
                print(f"警告: {entry} の削除に失敗しました: {exc}")
            else:
                deleted += 1

        print(f"サーバーテンプレートを{deleted}個削除しました")