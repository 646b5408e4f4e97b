"""Reading and writing JSON/JSONC documents and dotenv-style files."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

_COMMENT_OR_STRING = re.compile(
    r'"(?:\\.|[^"\\])*"|//[^\n]*|/\*.*?(?:\*/|\Z)',
    re.DOTALL,
)
_TRAILING_COMMA_OR_STRING = re.compile(r'"(?:\\.|[^"\\])*"|,(?=\s*[}\]])')
_NON_NEWLINE = re.compile(r"[^\n]")


class EnvFileError(ValueError):
    """Raised when an environment file is missing or malformed."""


def file_exists(path: str | os.PathLike[str]) -> bool:
    """Return True when ``path`` can be stat'ed."""
    try:
        os.stat(path)
    except OSError:
        return False
    return True


def _blank_comment(match: re.Match[str]) -> str:
    text = match.group(0)
    if text.startswith('"'):
        return text
    return _NON_NEWLINE.sub(" ", text)


def _drop_trailing_comma(match: re.Match[str]) -> str:
    text = match.group(0)
    return text if text.startswith('"') else ""


def _jsonc_to_json(text: str) -> str:
    without_comments = _COMMENT_OR_STRING.sub(_blank_comment, text)
    return _TRAILING_COMMA_OR_STRING.sub(_drop_trailing_comma, without_comments)


def load_json(path: str | os.PathLike[str]) -> Any:
    """Load a JSON document, accepting comments and trailing commas.

    Raises FileNotFoundError (or another OSError) when the file cannot be
    read and ``json.JSONDecodeError`` when the content is not valid.
    """
    text = Path(path).read_text(encoding="utf-8")
    return json.loads(_jsonc_to_json(text))


def save_json(path: str | os.PathLike[str], data: Any) -> None:
    """Write ``data`` as JSON indented by two spaces."""
    Path(path).write_text(
        json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
    )


def load_env_file(path: str | os.PathLike[str]) -> dict[str, str]:
    """Parse a ``KEY=VALUE`` file, skipping blank lines and ``#`` comments."""
    try:
        handle = open(path, encoding="utf-8")
    except OSError as exc:
        raise EnvFileError(f"環境変数ファイルが見つかりません: '{path}'") from exc

    env: dict[str, str] = {}
    with handle:
        try:
            for line_num, raw in enumerate(handle, start=1):
                line = raw.strip()
                if not line or line.startswith("#"):
                    continue
                key, sep, value = line.partition("=")
                if not sep:
                    raise EnvFileError(
                        f"環境変数ファイルの形式が不正です: '{path}' 行{line_num}"
                    )
                env[key.strip()] = value.strip().strip("\"'")
        except (OSError, UnicodeDecodeError) as exc:
            raise EnvFileError(
                f"環境変数ファイルの読み込みに失敗しました: '{path}'"
            ) from exc
    return env