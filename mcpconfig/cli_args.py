"""Exit codes, error reporting and small helpers for positional arguments."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes used by the command line interface."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    RESOURCE_ERROR = 2
    FILE_ERROR = 3
    FORMAT_ERROR = 4
    ENVIRONMENT = 5
    SERVER_ERROR = 6
    ARGUMENT_ERROR = 7
    REFERENCE_ERROR = 8


class ArgumentError(ValueError):
    """Raised when command line arguments are missing or malformed."""


def handle_error(err: BaseException | None, exit_code: int) -> None:
    """Report ``err`` on stderr and exit with ``exit_code``; do nothing for None."""
    if err is None:
        return
    print("エラー:", err, file=sys.stderr)
    raise SystemExit(int(exit_code))


def _announce_default(default_name: str) -> None:
    print(f"プロファイル名が指定されていないため、デフォルト '{default_name}' を使用します")


def parse_profile_name(args: Sequence[str], default_name: str) -> tuple[str, int]:
    """Return the profile name and how many arguments it took.

    Falls back to ``default_name`` when no name is given or the first
    argument is an option.
    """
    if not args or args[0].startswith("-"):
        _announce_default(default_name)
        return default_name, 0
    return args[0], 1


def parse_flag(args: Sequence[str], index: int, flag: str) -> tuple[str, int]:
    """Return the value following the flag at ``index`` and its index."""
    if index + 1 >= len(args):
        raise ArgumentError(f"{flag} オプションに値が指定されていません")
    return args[index + 1], index + 1


def parse_rename_args(
    args: Sequence[str], default_name: str
) -> tuple[str, str, int]:
    """Return ``(old_name, new_name, consumed)`` for a rename command."""
    if not args:
        raise ArgumentError(
            "新しいプロファイル名が指定されていません\n"
            "使用方法: mcpconfig rename [現在のプロファイル名] <新しいプロファイル名>"
        )
    if len(args) < 2:
        print(f"元のプロファイル名が指定されていないため、デフォルト '{default_name}' を使用します")
        return default_name, args[0], 1
    return args[0], args[1], 2