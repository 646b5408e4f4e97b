# mcpconfig

A Python library for keeping MCP server definitions as reusable templates,
grouping them into profiles, and editing MCP configuration files (the JSON
documents with a top-level `mcpServers` object).

Everything is stored as plain files on disk, one `.jsonc` file per item:

- **Server templates** live in a servers directory. A template holds a
  command, its arguments, environment variables and the optional settings
  `timeout`, `envFile` and `transportType`.
- **Profiles** live in a profiles directory. A profile is a named list of
  server references; each reference names a template and may carry
  environment variable overrides.

Files are read as JSON with comments: `//` and `/* */` comments and
trailing commas are accepted. Files are written as JSON indented by two
spaces.

## Installation

The package has no runtime dependencies and supports Python 3.10 and later.
The `test` extra installs pytest.

## Server templates

```python
from mcpconfig.servers import ServerManager

servers = ServerManager("/path/to/servers")

# Create a template from explicit values.
servers.save_manual("files", "python", ["-m", "file_server"], {"PORT": "3000"}, force=False)

# Or copy one server out of an existing MCP configuration file.
servers.save_from_file("api", "api-server", "mcp_config.json", force=False)

servers.exists("files")                 # True
template = servers.load("files")
print(template.server_config.command)   # "python"

servers.list(detail=True)
servers.rename("files", "file-server", force=False)
servers.get_template_path("file-server")
servers.delete("file-server", force=True)
servers.reset(force=True)               # removes every template file
```

When `save_manual` updates an existing template, an empty command keeps the
old one, `None` for arguments or environment keeps them, an argument list of
`[""]` clears the arguments, an empty environment mapping clears all
variables, and a variable given an empty value is removed. Creating a new
template without a command raises `TemplateError`.

`mcpconfig.templates.TemplateManager`, `mcpconfig.updater.TemplateUpdater`
and `mcpconfig.display.TemplateDisplay` are the pieces `ServerManager` is
built from and can be used on their own.

### Editing MCP configuration files

```python
servers.add_to_mcp_config("mcp_config.json", "api", "my-api", {"PORT": "4000"})
servers.show("mcp_config.json", "my-api")   # or show("mcp_config.json") for all
servers.remove_from_mcp_config("mcp_config.json", "my-api")
```

`add_to_mcp_config` creates the file if it does not exist, uses the template
name when no server name is given, refuses to replace an entry of the same
name, and merges the overrides on top of the template's environment.

## Profiles

```python
from mcpconfig.profiles import ProfileManager

profiles = ProfileManager("/path/to/profiles")

profiles.create("work", "Servers I use at work")
profiles.add_server("work", "api", "my-api", {"PORT": "5000"})
profiles.list(detail=False)

profiles.find_profiles_using_template("api")   # ["work"]
profiles.remove_server("work", "my-api")
profiles.rename("work", "office", force=False)
profiles.delete("office", force=True)
```

`ServerManager.delete` accepts a `ProfileManager` as its third argument.
Profiles that still refer to the template are listed, and their references
are removed too: automatically with `force=True`, after a prompt otherwise.
`remove_template_references_from_profile` and
`remove_template_references_from_all_profiles` do the same directly.

## Confirmation prompts

Operations that overwrite or delete without `force` ask for confirmation on
standard input (`(y/N)`; end of input counts as no). `ServerManager`,
`TemplateManager` and `ProfileManager` take an optional `confirm` callable,
receiving the question and returning a bool, to answer these prompts
another way.

## Helpers

- `mcpconfig.validation` – `validate_name` (letters, digits, `-` and `_`,
  at most 50 characters, no reserved words such as `help` or `list`),
  `parse_env_vars` for `KEY=value,KEY2=value2` strings, and `parse_args`
  for comma-separated argument lists.
- `mcpconfig.fileio` – `load_json`, `save_json`, `file_exists` and
  `load_env_file` for `KEY=VALUE` files with `#` comments and optional
  quotes.
- `mcpconfig.cli_args` – `parse_profile_name`, `parse_flag` and
  `parse_rename_args` for positional arguments, the `ExitCode` values, and
  `handle_error`, which prints an error to standard error and exits with a
  given code.
- `mcpconfig.models` – the `MCPServer`, `ServerTemplate` and `MCPConfig`
  dataclasses with `to_dict` / `from_dict`.

Failing operations raise exceptions carrying a readable message:
`TemplateError`, `ProfileError`, `ValidationError`, `EnvFileError` and
`ArgumentError`.

## What it does not do

- There is no command-line program; the package is used from Python.
- `ProfileManager` does not build a profile from an MCP configuration file,
  nor write a profile out as an MCP configuration file. Use
  `ServerManager.save_from_file` and `ServerManager.add_to_mcp_config` for
  single servers.
- There is no default location for the servers and profiles directories;
  pass them to the managers yourself.