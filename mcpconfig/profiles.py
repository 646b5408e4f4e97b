"""Profiles: named sets of server template references stored as files."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from mcpconfig.fileio import load_json, save_json
from mcpconfig.models import (
    _ZERO_TIME,
    FILE_EXTENSION,
    _format_timestamp,
    _mapping,
    _now,
    _optional,
    _parse_timestamp,
    _string_map,
)
from mcpconfig.templates import _prompt_yes_no

LIST_COLUMN_WIDTH = 20
DATE_COLUMN_WIDTH = 20
TABLE_SEPARATOR = "-" * 60


class ProfileError(Exception):
    """Raised when a profile cannot be found, read, written or changed."""


def _rfc3339(moment: datetime) -> str:
    text = moment.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        return text[: -len("+00:00")] + "Z"
    return text


def _timestamp(data: Mapping[str, Any], key: str) -> datetime:
    raw = data.get(key)
    return _ZERO_TIME if raw is None else _parse_timestamp(raw)


@dataclass
class ServerOverrides:
    """Values of a server reference that replace those of its template."""

    env: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form, leaving out empty fields."""
        return {"env": dict(self.env)} if self.env else {}

    @classmethod
    def from_dict(cls, data: Any) -> ServerOverrides:
        """Build overrides from their JSON form."""
        if data is None:
            return cls()
        return cls(env=_string_map(_mapping(data, "overrides"), "env"))


@dataclass
class ServerRef:
    """A server in a profile, named and built from a template."""

    name: str
    template: str
    overrides: ServerOverrides = field(default_factory=ServerOverrides)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form stored in a profile file."""
        result: dict[str, Any] = {"name": self.name, "template": self.template}
        overrides = self.overrides.to_dict()
        if overrides:
            result["overrides"] = overrides
        return result

    @classmethod
    def from_dict(cls, data: Any) -> ServerRef:
        """Build a reference from its JSON form; raise ValueError on a bad shape."""
        data = _mapping(data, "server reference")
        return cls(
            name=_optional(data, "name", str) or "",
            template=_optional(data, "template", str) or "",
            overrides=ServerOverrides.from_dict(data.get("overrides")),
        )


@dataclass
class Profile:
    """A named collection of server references."""

    name: str
    description: str = ""
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
    servers: list[ServerRef] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form stored in a profile file."""
        return {
            "name": self.name,
            "description": self.description,
            "createdAt": _format_timestamp(self.created_at),
            "updatedAt": _format_timestamp(self.updated_at),
            "servers": [server.to_dict() for server in self.servers],
        }

    @classmethod
    def from_dict(cls, data: Any) -> Profile:
        """Build a profile from its JSON form; raise ValueError on a bad shape."""
        data = _mapping(data, "profile")
        servers = data.get("servers")
        if servers is None:
            servers = []
        if not isinstance(servers, list):
            raise ValueError("field 'servers' must be a list")
        return cls(
            name=_optional(data, "name", str) or "",
            description=_optional(data, "description", str) or "",
            created_at=_timestamp(data, "createdAt"),
            updated_at=_timestamp(data, "updatedAt"),
            servers=[ServerRef.from_dict(server) for server in servers],
        )


class ProfileManager:
    """Create, edit, list and delete profiles in ``profiles_dir``."""

    def __init__(
        self,
        profiles_dir: str | os.PathLike[str],
        confirm: Callable[[str], bool] | None = None,
    ) -> None:
        self.profiles_dir = Path(profiles_dir)
        self.confirm = confirm or _prompt_yes_no

    def _path(self, name: str) -> Path:
        return self.profiles_dir / (name + FILE_EXTENSION)

    def _write(self, profile: Profile) -> None:
        save_json(self._path(profile.name), profile.to_dict())

    def _entries(self) -> list[str]:
        try:
            return sorted(os.listdir(self.profiles_dir))
        except OSError as exc:
            raise ProfileError(
                f"プロファイルディレクトリの読み込みに失敗しました: {exc}"
            ) from exc

    @staticmethod
    def _profile_names(entries: list[str]) -> list[str]:
        return [
            entry[: -len(FILE_EXTENSION)]
            for entry in entries
            if entry.endswith(FILE_EXTENSION)
        ]

    def create(self, name: str, description: str = "") -> None:
        """Create an empty profile; raise ProfileError if it already exists."""
        if self._path(name).exists():
            raise ProfileError(f"プロファイル '{name}' は既に存在します")
        now = _now()
        self._write(Profile(name=name, description=description, created_at=now, updated_at=now))

    def list(self, detail: bool = False) -> None:
        """Print all profiles as a table or in detail."""
        entries = self._entries()
        if not entries:
            print("プロファイルが存在しません")
            return

        names = self._profile_names(entries)
        if detail:
            for name in names:
                try:
                    profile = self.load(name)
                except ProfileError as exc:
                    print(f"エラー: {name} の読み込みに失敗しました: {exc}")
                    continue
                self._print_details(profile)
            return

        print(
            f"{'プロファイル名':<{LIST_COLUMN_WIDTH}} "
            f"{'作成日時':<{DATE_COLUMN_WIDTH}} サーバー数"
        )
        print(TABLE_SEPARATOR)
        for name in names:
            try:
                profile = self.load(name)
            except ProfileError:
                continue
            print(
                f"{profile.name:<{LIST_COLUMN_WIDTH}} "
                f"{_rfc3339(profile.created_at):<{DATE_COLUMN_WIDTH}} "
                f"{len(profile.servers)}"
            )

    @staticmethod
    def _print_details(profile: Profile) -> None:
        print(f"\nプロファイル: {profile.name}")
        print(f"  説明: {profile.description}")
        print(f"  作成日時: {_rfc3339(profile.created_at)}")
        print(f"  更新日時: {_rfc3339(profile.updated_at)}")
        print(f"  サーバー数: {len(profile.servers)}")
        if profile.servers:
            print("  サーバー:")
            for server in profile.servers:
                print(f"    - {server.name} (テンプレート: {server.template})")

    def delete(self, name: str, force: bool = False) -> None:
        """Delete a profile, asking first unless ``force`` is set."""
        path = self._path(name)
        if not path.exists():
            raise ProfileError(f"プロファイル '{name}' が見つかりません")

        if not force and not self.confirm(f"プロファイル '{name}' を削除しますか？"):
            print("削除をキャンセルしました")
            return

        try:
            path.unlink()
        except OSError as exc:
            raise ProfileError(f"プロファイルの削除に失敗しました: {exc}") from exc

        print(f"プロファイル '{name}' を削除しました")

    def rename(self, old_name: str, new_name: str, force: bool = False) -> None:
        """Rename a profile; an existing target needs ``force``."""
        old_path = self._path(old_name)
        if not old_path.exists():
            raise ProfileError(f"プロファイル '{old_name}' が見つかりません")
        if self._path(new_name).exists() and not force:
            raise ProfileError(
                f"プロファイル '{new_name}' は既に存在します。"
                "別の名前を指定するか、--force オプションで上書きしてください"
            )

        profile = self.load(old_name)
        profile.name = new_name
        profile.updated_at = _now()
        self._write(profile)

        try:
            old_path.unlink()
        except OSError as exc:
            raise ProfileError(f"古いプロファイルの削除に失敗しました: {exc}") from exc

        print(f"プロファイル '{old_name}' を '{new_name}' に変更しました")

    def load(self, name: str) -> Profile:
        """Read a profile; raise ProfileError if it is missing or broken."""
        try:
            return Profile.from_dict(load_json(self._path(name)))
        except FileNotFoundError as exc:
            raise ProfileError(f"プロファイル '{name}' が見つかりません") from exc
        except (OSError, ValueError) as exc:
            raise ProfileError(f"プロファイルの読み込みに失敗しました: {exc}") from exc

    def add_server(
        self,
        profile_name: str,
        template_name: str,
        server_name: str = "",
        env_overrides: Mapping[str, str] | None = None,
    ) -> None:
        """Add a reference to ``template_name``, named ``server_name`` or the template."""
        profile = self.load(profile_name)
        server_name = server_name or template_name

        if any(server.name == server_name for server in profile.servers):
            raise ProfileError(
                f"サーバー名 '{server_name}' は既にプロファイル '{profile_name}' に存在します。"
                "別の名前を指定してください（--as オプションを使用）"
            )

        ref = ServerRef(name=server_name, template=template_name)
        if env_overrides:
            ref.overrides.env = dict(env_overrides)

        profile.servers.append(ref)
        profile.updated_at = _now()
        self._write(profile)

        print(f"サーバー '{server_name}' をプロファイル '{profile_name}' に追加しました")

    def remove_server(self, profile_name: str, server_name: str) -> None:
        """Remove every reference named ``server_name`` from a profile."""
        profile = self.load(profile_name)
        kept = [server for server in profile.servers if server.name != server_name]

        if len(kept) == len(profile.servers):
            raise ProfileError(
                f"サーバー '{server_name}' がプロファイル '{profile_name}' に見つかりません"
            )

        profile.servers = kept
        profile.updated_at = _now()
        self._write(profile)

        print(f"サーバー '{server_name}' をプロファイル '{profile_name}' から削除しました")

    def get_profile_path(self, name: str) -> Path:
        """Return the file of an existing profile."""
        path = self._path(name)
        if not path.exists():
            raise ProfileError(f"プロファイル '{name}' が見つかりません")
        return path

    def reset(self, force: bool = False) -> None:
        """Delete every profile file in the directory."""
        if not self.profiles_dir.exists():
            print("プロファイルディレクトリが存在しません")
            return

        files = [entry for entry in self._entries() if entry.endswith(FILE_EXTENSION)]
        if not files:
            print("削除するプロファイルが存在しません")
            return

        if not force:
            print(f"以下の{len(files)}個のプロファイルを削除します:")
            for entry in files:
                print(f"  - {entry[: -len(FILE_EXTENSION)]}")
            print()
            if not self.confirm("すべてのプロファイルを削除しますか？"):
                print("リセットをキャンセルしました")
                return

        deleted = 0
        for entry in files:
            try:
                (self.profiles_dir / entry).unlink()
            except OSError as exc:
                print(f"警告: {entry} の削除に失敗しました: {exc}")
            else:
                deleted += 1

        print(f"プロファイルを{deleted}個削除しました")

    def find_profiles_using_template(self, template_name: str) -> list[str]:
        """Return the names of profiles that reference ``template_name``."""
        using: list[str] = []
        for name in self._profile_names(self._entries()):
            try:
                profile = self.load(name)
            except ProfileError:
                continue
            if any(server.template == template_name for server in profile.servers):
                using.append(name)
        return using

    def remove_template_references_from_profile(
        self, profile_name: str, template_name: str
    ) -> None:
        """Drop every reference to ``template_name`` from one profile."""
        profile = self.load(profile_name)
        kept = [server for server in profile.servers if server.template != template_name]
        removed = len(profile.servers) - len(kept)
        if removed == 0:
            return

        profile.servers = kept
        profile.updated_at = _now()
        self._write(profile)

        print(
            f"プロファイル '{profile_name}' からサーバーテンプレート "
            f"'{template_name}' の参照を{removed}個削除しました"
        )

    def remove_template_references_from_all_profiles(self, template_name: str) -> None:
        """Drop references to ``template_name`` from every profile that has them."""
        total = 0
        for profile_name in self.find_profiles_using_template(template_name):
            try:
                self.remove_template_references_from_profile(profile_name, template_name)
            except ProfileError as exc:
                print(f"警告: プロファイル '{profile_name}' からの参照削除に失敗しました: {exc}")
            else:
                total += 1

        if total > 0:
            print(
                f"合計{total}個のプロファイルからサーバーテンプレート "
                f"'{template_name}' の参照を削除しました"
            )