# stakpak

Building blocks for working with Stakpak flows and agents from Python.

## Installation

```
pip install .
```

## Modules

- `stakpak.config`: `AppConfig` holds `api_endpoint`, `api_key` and
  `mcp_server_host`. `AppConfig.load()` begins with the default endpoint
  `https://apiv2.stakpak.dev`. `STAKPAK_*` environment variables such as
  `STAKPAK_API_ENDPOINT` and `STAKPAK_API_KEY` override it, and the TOML file
  at `config_path()` (`$HOME/.stakpak/config.toml`) overrides those in turn.
  `AppConfig.save()` writes the set values back. Failures raise
  `ConfigError`.
- `stakpak.local_context`: `analyze_local_context()` returns a
  `LocalContext`. It records the operating system, the shell, whether the
  process runs in a container, the working directory and its immediate
  entries (`FileInfo`), and the git state (`GitInfo`). `str()` on it gives a
  readable summary. Helpers: `format_file_size`, `get_operating_system`,
  `get_shell_type`, `detect_container_environment`, `get_file_structure`,
  `get_git_info`.
- `stakpak.network`: `find_available_port_descending(host)` searches ports
  from 65535 down to 1024 and returns the first one that is free.
  `find_available_bind_address_descending()` returns `host:port`. The host is
  `0.0.0.0` inside a container and `localhost` elsewhere.
- `stakpak.update`: `get_latest_cli_version()` fetches the tag of the latest
  published release. `format_update_notice()` builds the banner, and
  `check_update(current_version)` prints it when the versions differ.
- `stakpak.edits`: `collect_edits(base_dir, documents, ignore_delete)`
  compares the supported files under a directory with a flow's `Document`s.
  Supported files are `.tf`, `.yaml`, `.yml` and Dockerfiles; hidden entries
  are skipped. It returns an `EditPlan` of whole-document `Edit`s. Also
  provided: `is_supported_file`, `create_edit`, `document_uri` and
  `confirm_action`.
- `stakpak.workspace`: `write_documents()` writes documents under a
  directory. `Workspace` tracks the files there and turns local deletions and
  modifications into edits. It also applies a server-side `DocumentsChange`
  to the directory.
- `stakpak.actions`: `run_shell_command(command, emit, clean)` runs a command
  through `sh -c` and streams its output line by line. It returns a
  `CommandResult`. Also provided: `strip_ansi` and `truncate_output`, which
  keeps the head and tail of long output.
- `stakpak.prompting`: `add_local_context()` adds the local context to the
  first prompt of a conversation.

## Example

```python
from stakpak.config import AppConfig
from stakpak.local_context import analyze_local_context
from stakpak.edits import collect_edits
from stakpak.actions import run_shell_command

config = AppConfig(api_key="placeholder")
print(analyze_local_context())

plan = collect_edits(".", documents=[], ignore_delete=False)
print(plan.files_synced, plan.files_deleted)

result = run_shell_command("echo hello", emit=print, clean=True)
print(result.exit_code, result.output)
```

## What it does not do

The package has no command-line program. It also has no client for the
Stakpak API: it does not log in, push edits to a flow, transpile files or
run agent sessions. It computes and applies the local side of these
operations. The caller sends the results.

## Tests

```
pip install .[test]
pytest
```