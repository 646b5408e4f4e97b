"""Listing server templates on standard output."""

from __future__ import annotations

import os
from pathlib import Path

from mcpconfig.models import FILE_EXTENSION, ServerTemplate, TemplateError
from mcpconfig.templates import TemplateManager, _format_list

LIST_COLUMN_WIDTH = 20
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
_SEPARATOR = "-" * 60


class TemplateDisplay:
    """Print the templates stored in ``servers_dir`` as a table or in detail."""

    def __init__(self, servers_dir: str | os.PathLike[str]) -> None:
        self.servers_dir = Path(servers_dir)
        self._templates = TemplateManager(self.servers_dir)

    def list(self, detail: bool = False) -> None:
        """Print every template; raise TemplateError if the directory is unreadable."""
        try:
            entries = sorted(os.listdir(self.servers_dir))
        except OSError as exc:
            raise TemplateError(
                f"サーバーディレクトリの読み込みに失敗しました: {exc}"
            ) from exc

        if not entries:
            print("サーバーテンプレートが存在しません")
            return

        names = [
            entry[: -len(FILE_EXTENSION)]
            for entry in entries
            if entry.endswith(FILE_EXTENSION)
        ]
        if detail:
            self._list_detailed(names)
        else:
            self._list_summary(names)

    def _list_detailed(self, names: list[str]) -> None:
        for name in names:
            try:
                template = self._templates.load(name)
            except TemplateError as exc:
                print(f"エラー: {name} の読み込みに失敗しました: {exc}")
                continue
            self._print_detail(template)

    def _list_summary(self, names: list[str]) -> None:
        width = LIST_COLUMN_WIDTH
        print(f"{'テンプレート名':<{width}} {'作成日時':<{width}} コマンド")
        print(_SEPARATOR)
        for name in names:
            try:
                template = self._templates.load(name)
            except TemplateError:
                continue
            created = template.created_at.strftime(TIMESTAMP_FORMAT)
            print(
                f"{template.name:<{width}} {created:<{width}} "
                f"{template.server_config.command}"
            )

    @staticmethod
    def _print_detail(template: ServerTemplate) -> None:
        config = template.server_config
        print(f"\nテンプレート: {template.name}")
        if template.description is not None:
            print(f"  説明: {template.description}")
        print(f"  作成日時: {template.created_at.strftime(TIMESTAMP_FORMAT)}")
        print(f"  コマンド: {config.command}")
        if config.args:
            print(f"  引数: {_format_list(config.args)}")
        if config.env:
            print("  環境変数:")
            for key, value in config.env.items():
                print(f"    {key}={value}")