import json
from datetime import datetime, timedelta, timezone

import pytest

from mcpconfig.profiles import (
    Profile,
    ProfileError,
    ProfileManager,
    ServerOverrides,
    ServerRef,
)
from mcpconfig.servers import ServerManager


@pytest.fixture
def manager(tmp_path):
    return ProfileManager(tmp_path)


def _profile_file(directory, name):
    return directory / f"{name}.jsonc"


def test_create_writes_file(manager, tmp_path):
    manager.create("test-profile", "テスト用プロファイル")
    assert _profile_file(tmp_path, "test-profile").exists()
    loaded = manager.load("test-profile")
    assert loaded.name == "test-profile"
    assert loaded.description == "テスト用プロファイル"
    assert loaded.servers == []


def test_create_duplicate_raises(manager):
    manager.create("test-profile", "テスト用プロファイル")
    with pytest.raises(ProfileError, match="既に存在します"):
        manager.create("test-profile", "重複テスト")


def test_load_existing_file_written_externally(manager, tmp_path):
    data = {
        "name": "test-profile",
        "description": "テスト用",
        "createdAt": "2024-01-02T03:04:05.123456789+09:00",
        "updatedAt": "2024-01-02T03:04:05Z",
        "servers": [],
    }
    _profile_file(tmp_path, "test-profile").write_text(json.dumps(data), encoding="utf-8")
    loaded = manager.load("test-profile")
    assert loaded.name == "test-profile"
    assert loaded.created_at == datetime(
        2024, 1, 2, 3, 4, 5, 123456, tzinfo=timezone(timedelta(hours=9))
    )
    assert loaded.updated_at == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def test_load_nonexistent_raises(manager):
    with pytest.raises(ProfileError, match="'nonexistent' が見つかりません"):
        manager.load("nonexistent")


def test_load_corrupted_raises(manager, tmp_path):
    _profile_file(tmp_path, "broken").write_text("broken json", encoding="utf-8")
    with pytest.raises(ProfileError, match="読み込みに失敗しました"):
        manager.load("broken")


def test_delete_force(manager, tmp_path, capsys):
    manager.create("test-profile", "テスト用")
    manager.delete("test-profile", True)
    assert not _profile_file(tmp_path, "test-profile").exists()
    assert "プロファイル 'test-profile' を削除しました" in capsys.readouterr().out
    with pytest.raises(ProfileError, match="'test-profile' が見つかりません"):
        manager.load("test-profile")


def test_delete_nonexistent_raises(manager):
    with pytest.raises(ProfileError):
        manager.delete("nonexistent", True)


def test_delete_cancelled_keeps_file(tmp_path, capsys):
    manager = ProfileManager(tmp_path, confirm=lambda _message: False)
    manager.create("test-profile", "テスト用")
    manager.delete("test-profile", False)
    assert _profile_file(tmp_path, "test-profile").exists()
    assert "削除をキャンセルしました" in capsys.readouterr().out


def test_add_server(manager):
    manager.create("test-profile", "テスト用")
    manager.add_server("test-profile", "test-template", "test-server", {"ENV_VAR": "value"})
    loaded = manager.load("test-profile")
    assert loaded.servers == [
        ServerRef("test-server", "test-template", ServerOverrides({"ENV_VAR": "value"}))
    ]


def test_add_server_to_nonexistent_profile_raises(manager):
    with pytest.raises(ProfileError):
        manager.add_server("nonexistent", "test-template", "test-server", None)


def test_add_server_duplicate_raises(manager):
    manager.create("test-profile", "テスト用")
    manager.add_server("test-profile", "test-template", "duplicate-server", None)
    with pytest.raises(ProfileError, match="duplicate-server"):
        manager.add_server("test-profile", "test-template", "duplicate-server", None)


def test_add_server_empty_name_uses_template(manager):
    manager.create("test-profile", "テスト用")
    manager.add_server("test-profile", "template-name", "", None)
    loaded = manager.load("test-profile")
    assert [s.name for s in loaded.servers] == ["template-name"]
    assert loaded.servers[0].overrides.env is None


def test_remove_server(manager):
    manager.create("test-profile", "テスト用")
    manager.add_server("test-profile", "test-template", "test-server", None)
    manager.remove_server("test-profile", "test-server")
    assert manager.load("test-profile").servers == []


def test_remove_nonexistent_server_raises(manager):
    manager.create("test-profile", "テスト用")
    manager.add_server("test-profile", "test-template", "test-server", None)
    with pytest.raises(ProfileError, match="nonexistent-server"):
        manager.remove_server("test-profile", "nonexistent-server")
    assert len(manager.load("test-profile").servers) == 1


def test_reset_empty_directory(manager, capsys):
    manager.reset(True)
    assert "削除するプロファイルが存在しません" in capsys.readouterr().out


@pytest.mark.parametrize(
    "names", [["profile1", "profile2", "profile3"], ["single-profile"]]
)
def test_reset_deletes_profiles(manager, tmp_path, capsys, names):
    for name in names:
        manager.create(name, "テスト用プロファイル")
    manager.reset(True)
    for name in names:
        assert not _profile_file(tmp_path, name).exists()
    assert f"プロファイルを{len(names)}個削除しました" in capsys.readouterr().out


def test_reset_nonexistent_directory(tmp_path, capsys):
    manager = ProfileManager(tmp_path / "nonexistent-dir")
    manager.reset(True)
    assert "プロファイルディレクトリが存在しません" in capsys.readouterr().out


def test_reset_keeps_other_files(manager, tmp_path, capsys):
    manager.create("p", "")
    other = tmp_path / "not-a-profile.txt"
    other.write_text("test", encoding="utf-8")
    manager.reset(True)
    assert other.read_text(encoding="utf-8") == "test"
    assert not _profile_file(tmp_path, "p").exists()
    assert "プロファイルを1個削除しました" in capsys.readouterr().out
    with pytest.raises(ProfileError):
        manager.load("p")


def test_reset_cancelled(tmp_path):
    manager = ProfileManager(tmp_path, confirm=lambda _message: False)
    manager.create("p", "")
    manager.reset(False)
    assert _profile_file(tmp_path, "p").exists()


def test_rename_success(manager, tmp_path):
    manager.create("old-profile", "古いプロファイル")
    manager.rename("old-profile", "new-profile", False)
    assert _profile_file(tmp_path, "new-profile").exists()
    assert not _profile_file(tmp_path, "old-profile").exists()
    loaded = manager.load("new-profile")
    assert loaded.name == "new-profile"
    assert loaded.description == "古いプロファイル"


def test_rename_nonexistent_raises(manager):
    with pytest.raises(ProfileError):
        manager.rename("nonexistent-profile", "new-profile", False)


def test_rename_force_overwrite(manager, tmp_path):
    manager.create("old-profile", "古いプロファイル")
    manager.create("existing-new", "既存の新しいプロファイル")
    manager.rename("old-profile", "existing-new", True)
    assert not _profile_file(tmp_path, "old-profile").exists()
    loaded = manager.load("existing-new")
    assert loaded.name == "existing-new"
    assert loaded.description == "古いプロファイル"


def test_rename_conflict_without_force(manager, tmp_path):
    manager.create("old-profile", "古いプロファイル")
    manager.create("existing-new", "既存の新しいプロファイル")
    with pytest.raises(ProfileError, match="既に存在します"):
        manager.rename("old-profile", "existing-new", False)
    assert _profile_file(tmp_path, "old-profile").exists()


def test_list_empty_directory(manager, capsys):
    manager.list(False)
    assert capsys.readouterr().out == "プロファイルが存在しません\n"


def test_list_summary(manager, capsys):
    manager.create("profile1", "テスト用プロファイル")
    manager.create("profile2", "テスト用プロファイル")
    manager.add_server("profile2", "tmpl", "srv", None)
    capsys.readouterr()
    manager.list(False)
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("プロファイル名")
    assert lines[1] == "-" * 60
    assert lines[2].startswith("profile1") and lines[2].endswith(" 0")
    assert lines[3].startswith("profile2") and lines[3].endswith(" 1")


def test_list_detailed(manager, capsys):
    manager.create("detailed-profile", "テスト用プロファイル")
    manager.add_server("detailed-profile", "tmpl", "srv", None)
    capsys.readouterr()
    manager.list(True)
    out = capsys.readouterr().out
    assert "プロファイル: detailed-profile" in out
    assert "  説明: テスト用プロファイル" in out
    assert "  サーバー数: 1" in out
    assert "    - srv (テンプレート: tmpl)" in out


def test_list_detailed_reports_broken_profile(manager, tmp_path, capsys):
    _profile_file(tmp_path, "broken").write_text("broken json", encoding="utf-8")
    manager.list(True)
    assert "エラー: broken の読み込みに失敗しました" in capsys.readouterr().out


def test_list_nonexistent_directory_raises(tmp_path):
    manager = ProfileManager(tmp_path / "nonexistent" / "directory")
    with pytest.raises(ProfileError):
        manager.list(False)


def test_get_profile_path(manager, tmp_path):
    manager.create("p", "")
    assert manager.get_profile_path("p") == _profile_file(tmp_path, "p")
    with pytest.raises(ProfileError):
        manager.get_profile_path("missing")


def test_find_profiles_using_template(manager):
    manager.create("a", "")
    manager.create("b", "")
    manager.create("c", "")
    manager.add_server("a", "tmpl", "one", None)
    manager.add_server("a", "tmpl", "two", None)
    manager.add_server("c", "tmpl", "x", None)
    manager.add_server("b", "other", "y", None)
    assert manager.find_profiles_using_template("tmpl") == ["a", "c"]
    assert manager.find_profiles_using_template("unused") == []


def test_remove_template_references_from_profile(manager):
    manager.create("a", "")
    manager.add_server("a", "tmpl", "one", None)
    manager.add_server("a", "tmpl", "two", None)
    manager.add_server("a", "other", "three", None)
    manager.remove_template_references_from_profile("a", "tmpl")
    assert [s.name for s in manager.load("a").servers] == ["three"]


def test_remove_template_references_from_all_profiles(manager, capsys):
    manager.create("a", "")
    manager.create("b", "")
    manager.add_server("a", "tmpl", "one", None)
    manager.add_server("b", "tmpl", "two", None)
    manager.remove_template_references_from_all_profiles("tmpl")
    assert manager.find_profiles_using_template("tmpl") == []
    assert "合計2個のプロファイル" in capsys.readouterr().out


def test_profile_round_trip():
    created = datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)
    profile = Profile(
        name="p",
        description="d",
        created_at=created,
        updated_at=created,
        servers=[
            ServerRef("s", "t", ServerOverrides({"K": "v"})),
            ServerRef("u", "t"),
        ],
    )
    data = profile.to_dict()
    assert data["servers"][0] == {"name": "s", "template": "t", "overrides": {"env": {"K": "v"}}}
    assert data["servers"][1] == {"name": "u", "template": "t"}
    assert Profile.from_dict(data) == profile


def test_profile_from_dict_rejects_bad_servers():
    with pytest.raises(ValueError):
        Profile.from_dict({"name": "p", "servers": "nope"})


def test_workflow_with_server_templates(tmp_path):
    servers_dir = tmp_path / "servers"
    profiles_dir = tmp_path / "profiles"
    servers_dir.mkdir()
    profiles_dir.mkdir()
    server_manager = ServerManager(servers_dir)
    profile_manager = ProfileManager(profiles_dir)

    server_manager.save_manual("test-server", "python", ["-m", "test"], {"TEST_ENV": "value"}, False)
    assert server_manager.exists("test-server") is True

    profile_manager.create("test-profile", "統合テスト用プロファイル")
    assert profile_manager.load("test-profile").name == "test-profile"

    profile_manager.add_server(
        "test-profile", "test-server", "my-server", {"OVERRIDE_ENV": "override_value"}
    )
    loaded = profile_manager.load("test-profile")
    assert len(loaded.servers) == 1
    assert loaded.servers[0].name == "my-server"

    server_manager.delete("test-server", True, profile_manager)
    assert server_manager.exists("test-server") is False
    assert profile_manager.load("test-profile").servers == []

    profile_manager.delete("test-profile", True)
    with pytest.raises(ProfileError):
        profile_manager.load("test-profile")