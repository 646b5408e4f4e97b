"""Creating and updating server templates from command line values."""

from __future__ import annotations

from mcpconfig.models import ServerTemplate, TemplateError, create_server_template
from mcpconfig.templates import TemplateManager, _overwrite_prompt


class TemplateUpdater:
    """Apply manual edits to the templates held by a TemplateManager."""

    def __init__(self, template_manager: TemplateManager | None) -> None:
        self.template_manager = template_manager

    def save_manual(
        self,
        template_name: str,
        command: str,
        args: list[str] | None = None,
        env: dict[str, str] | None = None,
        force: bool = False,
    ) -> None:
        """Create ``template_name`` or update it with the given values."""
        manager = self._manager()
        existing = manager.exists(template_name)

        if existing and not force:
            if not manager.confirm(_overwrite_prompt("サーバーテンプレート", template_name)):
                raise TemplateError("上書きをキャンセルしました")

        if existing:
            template = self._update_existing(template_name, command, args, env)
            print(f"サーバーテンプレート '{template_name}' を更新しました")
        else:
            template = self._create_new(template_name, command, args, env)
            print(f"サーバーテンプレート '{template_name}' を作成しました")

        manager.save(template)

    def _manager(self) -> TemplateManager:
        if self.template_manager is None:
            raise TemplateError("テンプレートマネージャーが設定されていません")
        return self.template_manager

    def _update_existing(
        self,
        template_name: str,
        command: str,
        args: list[str] | None,
        env: dict[str, str] | None,
    ) -> ServerTemplate:
        template = self._manager().load(template_name)
        if command:
            template.server_config.command = command
        self.update_template_args(template, args)
        self.update_template_env(template, env)
        return template

    @staticmethod
    def _create_new(
        template_name: str,
        command: str,
        args: list[str] | None,
        env: dict[str, str] | None,
    ) -> ServerTemplate:
        if not command:
            raise TemplateError("コマンドが指定されていません")
        return create_server_template(template_name, command, args, env)

    def update_template_args(
        self, template: ServerTemplate, args: list[str] | None
    ) -> None:
        """Replace the arguments; None keeps them and ``[""]`` clears them."""
        if args is None:
            return
        if list(args) == [""]:
            template.server_config.args = None
        else:
            template.server_config.args = list(args)

    def update_template_env(
        self, template: ServerTemplate, env: dict[str, str] | None
    ) -> None:
        """Merge ``env`` into the template.

        None keeps the variables, an empty mapping clears them, and an empty
        value removes that variable.
        """
        if env is None:
            return
        if not env:
            template.server_config.env = None
            return
        current = template.server_config.env
        if current is None:
            current = template.server_config.env = {}
        for key, value in env.items():
            if value == "":
                current.pop(key, None)
            else:
                current[key] = value