"""Validation of resource names and parsing of comma separated options."""

from __future__ import annotations

import re

MAX_NAME_LENGTH = 50

RESERVED_WORDS = (
    "help",
    "version",
    "list",
    "server",
    "apply",
    "save",
    "create",
    "delete",
    "rename",
    "add",
    "remove",
    "show",
)

_NAME_PATTERN = re.compile(r"[a-zA-Z0-9_-]+")
_ENV_KEY_PATTERN = re.compile(r"[a-zA-Z][a-zA-Z0-9_]*")


class ValidationError(ValueError):
    """Raised when a name or option value is not acceptable."""


def validate_name(name: str, resource_type: str) -> None:
    """Check that ``name`` is usable as a profile or template name."""
    if not name:
        raise ValidationError(f"{resource_type}名が指定されていません")

    if len(name.encode("utf-8")) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"{resource_type}名は{MAX_NAME_LENGTH}文字以内で指定してください"
        )

    if not _NAME_PATTERN.fullmatch(name):
        raise ValidationError(
            f"{resource_type}名に使用できない文字が含まれています"
            "（使用可能: 英数字、ハイフン、アンダースコア）"
        )

    if name in RESERVED_WORDS:
        raise ValidationError(f"{resource_type}名に予約語 '{name}' は使用できません")


def parse_env_vars(env_str: str) -> dict[str, str] | None:
    """Parse ``KEY=VALUE,KEY2=VALUE2``; return None for an empty string."""
    if not env_str:
        return None

    env: dict[str, str] = {}
    for pair in env_str.split(","):
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValidationError(f"環境変数の形式が不正です: '{pair}'")
        key = key.strip()
        if not _ENV_KEY_PATTERN.fullmatch(key):
            raise ValidationError(f"環境変数名が不正です: '{key}'")
        env[key] = value.strip()
    return env


def parse_args(args_str: str) -> list[str] | None:
    """Split a comma separated argument list, dropping empty items.

    Returns None for an empty string.
    """
    if not args_str:
        return None
    return [arg.strip() for arg in args_str.split(",") if arg.strip()]