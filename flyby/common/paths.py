# flyby/common/paths.py
#!/usr/bin/env python3
# XDG search path resolution

import os
from dataclasses import dataclass
from pathlib import Path

APP_DIR = "flyby"
DB_FILENAME = "flyby.db"

DEFAULT_DATA_HOME = Path.home() / ".local" / "share"
DEFAULT_DATA_DIRS = "/usr/local/share/:/usr/share/"
DEFAULT_CONFIG_HOME = Path.home() / ".config"


def _env_value(env, key):
    env = os.environ if env is None else env
    value = env.get(key, "")
    return value.strip()


def data_home(env=None):
    """
    Writable user data directory

    Args:
        env (Mapping): Optional environment, defaults to os.environ

    Returns:
        Path: $XDG_DATA_HOME, or ~/.local/share when unset or empty
    """
    value = _env_value(env, "XDG_DATA_HOME")
    return Path(value).expanduser() if value else DEFAULT_DATA_HOME


def data_dirs(env=None):
    """
    Read-only system data directories, highest precedence first

    Args:
        env (Mapping): Optional environment, defaults to os.environ

    Returns:
        list: $XDG_DATA_DIRS entries as Paths, or the built-in default list
    """
    value = _env_value(env, "XDG_DATA_DIRS") or DEFAULT_DATA_DIRS
    dirs = [Path(part).expanduser() for part in value.split(":") if part.strip()]
    if not dirs:
        dirs = [Path(part) for part in DEFAULT_DATA_DIRS.split(":") if part]
    return dirs


def config_home(env=None):
    """User configuration directory ($XDG_CONFIG_HOME or ~/.config)"""
    value = _env_value(env, "XDG_CONFIG_HOME")
    return Path(value).expanduser() if value else DEFAULT_CONFIG_HOME


@dataclass(frozen=True)
class SearchPaths:
    """Candidate database files: one writable primary and ordered shared files"""

    primary: Path
    shared: tuple = ()

    def application_order(self):
        """
        Files in the order they are merged, lowest precedence first

        Returns:
            list: (is_primary, Path) tuples, shared files reversed, primary last
        """
        order = [(False, path) for path in reversed(self.shared)]
        order.append((True, self.primary))
        return order


def resolve_db_paths(env=None, filename=DB_FILENAME):
    """
    Compute the transponder database search paths. No files are touched.

    Args:
        env (Mapping): Optional environment, defaults to os.environ
        filename (str): Database file name inside each flyby directory

    Returns:
        SearchPaths: Primary path under XDG_DATA_HOME, shared paths under XDG_DATA_DIRS
    """
    primary = data_home(env) / APP_DIR / filename
    shared = tuple(directory / APP_DIR / filename for directory in data_dirs(env))
    return SearchPaths(primary=primary, shared=shared)
