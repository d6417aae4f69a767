"""Gathering a description of the machine and directory the agent runs in."""

from __future__ import annotations

import os
import platform
import stat
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
_CONTAINER_ENV_VARS = (
    "DOCKER_CONTAINER",
    "KUBERNETES_SERVICE_HOST",
    "container",
    "PODMAN_VERSION",
)
_COMMON_SHELLS = ("bash", "zsh", "fish", "sh", "tcsh", "csh")
_UNIX_LIKE = ("linux", "freebsd", "openbsd", "netbsd")
_NAMED_SYSTEMS = {"freebsd": "FreeBSD", "openbsd": "OpenBSD", "netbsd": "NetBSD"}


@dataclass
class FileInfo:
    is_directory: bool
    size: int | None = None
    children: list[str] | None = None


@dataclass
class GitInfo:
    is_git_repo: bool
    current_branch: str | None = None
    has_uncommitted_changes: bool | None = None
    remote_url: str | None = None


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def _describe_entry(name: str, info: FileInfo) -> str:
    if info.is_directory:
        text = f"{name}/"
        if info.children is not None:
            text += f" ({len(info.children)} items)" if info.children else " (empty)"
        return text
    if info.size is not None:
        return f"{name} ({format_file_size(info.size)})"
    return name


@dataclass
class LocalContext:
    operating_system: str
    shell_type: str
    is_container: bool
    working_directory: str
    file_structure: dict[str, FileInfo] = field(default_factory=dict)
    git_info: GitInfo | None = None

    def __str__(self) -> str:
        lines = [
            "# System Details",
            f"Operating System: {self.operating_system}",
            f"Shell Type: {self.shell_type}",
            f"Running in Container Environment: {_yes_no(self.is_container)}",
        ]
        git = self.git_info
        if git is not None:
            if git.is_git_repo:
                lines.append("Git Repository: yes")
                if git.current_branch is not None:
                    lines.append(f"Current Branch: {git.current_branch}")
                lines.append(
                    f"Uncommitted Changes: {_yes_no(bool(git.has_uncommitted_changes))}"
                )
                if git.remote_url is not None:
                    lines.append(f"Remote URL: {git.remote_url}")
            else:
                lines.append("Git Repository: no")

        lines.append(f"# Current Working Directory ({self.working_directory})")
        if not self.file_structure:
            lines.append("(No files or directories found)")
        else:
            entries = sorted(
                self.file_structure.items(),
                key=lambda item: (item[1].is_directory, item[0].lower()),
            )
            last = len(entries) - 1
            for position, (name, info) in enumerate(entries):
                prefix = "└── " if position == last else "├── "
                lines.append(prefix + _describe_entry(name, info))
        return "\n".join(lines) + "\n"


def format_file_size(size: int) -> str:
    """Render a byte count with a binary unit, one decimal above bytes."""
    value = float(size)
    unit_index = 0
    while value >= 1024.0 and unit_index < len(_SIZE_UNITS) - 1:
        value /= 1024.0
        unit_index += 1
    if unit_index == 0:
        return f"{size} {_SIZE_UNITS[0]}"
    return f"{value:.1f} {_SIZE_UNITS[unit_index]}"


def _run(args: list[str], cwd: str | os.PathLike[str] | None = None):
    try:
        return subprocess.run(
            args, cwd=cwd, capture_output=True, stdin=subprocess.DEVNULL, check=False
        )
    except OSError:
        return None


def _success_output(result) -> str | None:
    if result is None or result.returncode != 0:
        return None
    return result.stdout.decode("utf-8", errors="replace").strip()


def _uname() -> str | None:
    return _success_output(_run(["uname", "-s"])) or None


def _parse_os_release(text: str) -> str | None:
    for key in ("PRETTY_NAME=", "NAME="):
        for line in text.splitlines():
            if line.startswith(key):
                return line[len(key):].strip('"')
    return None


def get_operating_system() -> str:
    """Return a human-readable name of the operating system."""
    system = platform.system().lower()
    if system == "windows":
        return "Windows"
    if system == "darwin":
        return "macOS"
    if system in _NAMED_SYSTEMS:
        return _NAMED_SYSTEMS[system]
    if system == "linux":
        try:
            name = _parse_os_release(Path("/etc/os-release").read_text(encoding="utf-8"))
        except (OSError, ValueError):
            name = None
        if name is not None:
            return name
        return _uname() or "Linux"
    uname = _uname()
    if uname:
        return uname
    return system[:1].upper() + system[1:] if system else "Unknown"


def get_shell_type() -> str:
    """Guess the shell the user is running."""
    shell_path = os.environ.get("SHELL")
    if shell_path is not None:
        name = Path(shell_path).name
        if name:
            return name

    if platform.system().lower() == "windows":
        if "PSModulePath" in os.environ:
            return "PowerShell"
        comspec = os.environ.get("COMSPEC")
        if comspec is not None and Path(comspec).name:
            return Path(comspec).name
        return "cmd"

    ppid = _success_output(_run(["ps", "-p", str(os.getpid()), "-o", "ppid="]))
    if ppid is not None:
        parent = _success_output(_run(["ps", "-p", ppid, "-o", "comm="]))
        if parent and parent != "ps":
            return parent

    for shell in _COMMON_SHELLS:
        result = _run(["which", shell])
        if result is not None and result.returncode == 0:
            return shell
    return "Unknown"


def detect_container_environment() -> bool:
    """Tell whether the process appears to run inside a container."""
    if Path("/.dockerenv").exists():
        return True
    if any(var in os.environ for var in _CONTAINER_ENV_VARS):
        return True
    if platform.system().lower() in _UNIX_LIKE:
        try:
            cgroup = Path("/proc/1/cgroup").read_text(encoding="utf-8")
        except (OSError, ValueError):
            cgroup = ""
        if any(marker in cgroup for marker in ("docker", "containerd", "podman")):
            return True
    return False


def get_file_structure(dir_path: str | os.PathLike[str]) -> dict[str, FileInfo]:
    """Describe the immediate entries of a directory."""
    path = Path(dir_path)
    if not path.exists():
        return {}
    structure: dict[str, FileInfo] = {}
    with os.scandir(path) as entries:
        for entry in entries:
            metadata = entry.stat(follow_symlinks=False)
            is_directory = stat.S_ISDIR(metadata.st_mode)
            if is_directory:
                try:
                    children: list[str] | None = os.listdir(entry.path)
                except OSError:
                    children = None
                structure[entry.name] = FileInfo(True, None, children)
            else:
                structure[entry.name] = FileInfo(False, metadata.st_size, None)
    return structure


def get_git_info(dir_path: str | os.PathLike[str]) -> GitInfo:
    """Collect branch, change and remote information for a git checkout."""
    path = Path(dir_path)
    if not (path / ".git").exists():
        return GitInfo(is_git_repo=False)

    info = GitInfo(is_git_repo=True)

    branch = _success_output(_run(["git", "rev-parse", "--abbrev-ref", "HEAD"], cwd=path))
    if branch and branch != "HEAD":
        info.current_branch = branch

    status = _success_output(_run(["git", "status", "--porcelain"], cwd=path))
    if status is not None:
        info.has_uncommitted_changes = bool(status)

    origin = _run(["git", "remote", "get-url", "origin"], cwd=path)
    if origin is not None:
        url = _success_output(origin)
        if url:
            info.remote_url = url
    else:
        remotes = _success_output(_run(["git", "remote"], cwd=path))
        if remotes:
            first_remote = remotes.splitlines()[0]
            url = _success_output(_run(["git", "remote", "get-url", first_remote], cwd=path))
            if url:
                info.remote_url = url

    return info


def analyze_local_context() -> LocalContext:
    """Build a full description of the current environment."""
    working_directory = os.getcwd()
    return LocalContext(
        operating_system=get_operating_system(),
        shell_type=get_shell_type(),
        is_container=detect_container_environment(),
        working_directory=working_directory,
        file_structure=get_file_structure(working_directory),
        git_info=get_git_info(working_directory),
    )