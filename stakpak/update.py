"""Checking whether a newer release of the tool is published."""

from __future__ import annotations

import json
import urllib.error
import urllib.request

RELEASES_URL = "https://api.github.com/repos/stakpak/cli/releases/latest"
USER_AGENT = "update-checker"
_TIMEOUT_SECONDS = 10

_SEPARATOR = "\x1b[1;34m═\x1b[0m" * 40


class UpdateCheckError(Exception):
    """Raised when the latest release cannot be determined."""


def get_latest_cli_version() -> str:
    """Return the tag name of the latest published release."""
    request = urllib.request.Request(RELEASES_URL, headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(request, timeout=_TIMEOUT_SECONDS) as response:
            status = getattr(response, "status", 200)
            if not 200 <= status < 300:
                raise UpdateCheckError("Failed to fetch release info")
            payload = json.loads(response.read())
    except urllib.error.HTTPError as exc:
        raise UpdateCheckError("Failed to fetch release info") from exc
    except (urllib.error.URLError, OSError, ValueError) as exc:
        raise UpdateCheckError(str(exc)) from exc
    tag_name = payload.get("tag_name") if isinstance(payload, dict) else None
    if not isinstance(tag_name, str):
        raise UpdateCheckError("release info has no tag_name")
    return tag_name


def format_update_notice(current_version: str, latest_version: str) -> str:
    """Return the coloured banner announcing a newer version."""
    return "\n".join(
        [
            "\n\x1b[1;34m┏━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┓\x1b[0m",
            "\x1b[1;34m┃\x1b[0m\x1b[1;36m⮕ \x1b[1;37m Version Update Available!"
            "\x1b[0m\x1b[1;34m ┃\x1b[0m",
            "\x1b[1;34m┗━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┛\x1b[0m",
            f"\x1b[1;37m \x1b[1;33m{current_version}\x1b[0m → "
            f"\x1b[1;32m{latest_version}\x1b[0m",
            f"\x1b[1;35m{_SEPARATOR}\x1b[0m",
            "\x1b[1;37m Upgrade to access the latest features! 🚀\x1b[0m",
            f"\x1b[1;35m{_SEPARATOR}\x1b[0m",
        ]
    )


def check_update(current_version: str) -> bool:
    """Print a notice if the latest release differs; return whether it did."""
    latest = get_latest_cli_version()
    if current_version == latest:
        return False
    print(format_update_notice(current_version, latest))
    return True