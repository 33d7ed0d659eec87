"""Decides which discovered directories are unsafe to delete unattended.

A sensitive entry is still listed, it is just not selected by default.
Flagging a safe directory costs the operator one keypress; missing a
load-bearing one can break an installed application, so every rule here
leans towards flagging.
"""

from __future__ import annotations

import os

# Prefixes under the home directory that belong to installed software.
_HOME_SENSITIVE_PREFIXES = (".config", ".local/share", ".cache")

# Dotted package manager caches under the home directory that are safe.
_HOME_CACHE_WHITELIST = (".npm", ".pnpm")

# Cache segments that make an AppData/Local path safe.
_APPDATA_LOCAL_WHITELIST = (".cache", ".npm", ".pnpm")


def normalize_path(path: str) -> str:
    """Normalize *path* for comparison only.

    Backslashes become forward slashes, the result is lower-cased, and a
    leading ``C:`` style drive prefix is removed.
    """
    s = path.replace("\\", "/").lower()
    if len(s) >= 3 and s[1] == ":" and s[2] == "/":
        s = s[2:]
    return s


def _home_dir() -> str:
    return os.environ.get("HOME") or os.environ.get("USERPROFILE") or ""


def _absolute(path: str) -> str:
    if os.path.isabs(path):
        return path
    try:
        return os.path.join(os.getcwd(), path)
    except OSError:
        return path


def _is_unc(path: str) -> bool:
    return path.startswith("\\\\") or path.startswith("//")


def _home_rule(norm: str) -> bool | None:
    """Classify paths under the home directory, or None to fall through."""
    home = _home_dir()
    if not home:
        return None

    norm_home = normalize_path(_absolute(home)).rstrip("/") or "/"
    if norm != norm_home and not norm.startswith(norm_home + "/"):
        return None

    rel = norm[len(norm_home):].lstrip("/")
    top = rel.split("/", 1)[0]

    if rel.startswith(_HOME_SENSITIVE_PREFIXES):
        return True
    if top in _HOME_CACHE_WHITELIST:
        return False
    if top.startswith(".") and top not in (".", ".."):
        return True
    return None


def _in_app_bundle(norm: str) -> bool:
    """macOS: anything inside /Applications/<Name>.app/."""
    idx = norm.find("/applications/")
    if idx == -1:
        return False
    rest = norm[idx + len("/applications/"):]
    app_end = rest.find(".app/")
    return app_end != -1 and "/" not in rest[:app_end]


def _hidden_on_share(norm_original: str) -> bool:
    """Network paths: a dotted segment below //server/share/.

    Splitting ``//server/share/a`` on ``/`` gives two empty segments, the
    server and the share before the first real path segment. This is a
    heuristic for the ``//`` convention, not a full UNC parser.
    """
    if not norm_original.startswith("//"):
        return False
    return any(part.startswith(".") for part in norm_original.split("/")[4:] if part)


def _has_segment(norm: str, name: str) -> bool:
    return f"/{name}/" in norm or norm.endswith(f"/{name}")


def is_sensitive_dir(path: str | os.PathLike[str]) -> bool:
    """Return True if *path* should not be selected for deletion by default.

    Rules are evaluated in order and the first one that decides wins:

    1. Under the home directory: ``.config``, ``.local/share`` and
       ``.cache`` are sensitive, ``.npm`` and ``.pnpm`` are not, any other
       dotted top-level directory is.
    2. Inside a ``/Applications/<Name>.app/`` bundle.
    3. A dotted directory below ``//server/share/``.
    4. Anything under ``AppData/Roaming``.
    5. Anything under ``AppData/Local`` unless it sits in a known cache.

    The stored path keeps its case; comparisons here are case-insensitive.
    """
    original = os.fspath(path)
    absolute = original if _is_unc(original) else _absolute(original)

    norm = normalize_path(absolute)
    norm_original = normalize_path(original)

    decision = _home_rule(norm)
    if decision is not None:
        return decision

    if _in_app_bundle(norm):
        return True

    if _hidden_on_share(norm_original):
        return True

    if "/appdata/roaming" in norm:
        return True

    if "/appdata/local" in norm:
        return not any(_has_segment(norm, name) for name in _APPDATA_LOCAL_WHITELIST)

    return False
