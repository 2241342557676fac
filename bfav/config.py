"""
Settings for bfav.

Settings are layered, later sources winning over earlier ones:

1. built-in defaults
2. the user file, ``~/.config/bfav/config.toml``
3. a project file in the working directory (``bfav.toml``, else ``.bfavrc``)
4. the file given with ``--config``
5. ``BFAV_<SETTING>`` environment variables
6. command-line options (see ``init_config``)
"""
import os
import tomli
import tomli_w
from pathlib import Path
from typing import Any, Dict, Iterator, Optional
from dataclasses import dataclass, field, fields, asdict

ENV_PREFIX = "BFAV_"
LOCAL_CONFIG_NAMES = ("bfav.toml", ".bfavrc")
_TRUE_VALUES = ("true", "1", "yes")


def user_config_path() -> Path:
    return Path.home() / ".config" / "bfav" / "config.toml"


def _coerce(raw: str, like: Any) -> Any:
    """Convert an environment string to the type of a setting's default."""
    # bool first, it is a subclass of int
    if isinstance(like, bool):
        return raw.lower() in _TRUE_VALUES
    if isinstance(like, (int, float)):
        return type(like)(raw)
    return raw


@dataclass
class BfavConfig:
    """Where bookmark documents live and how the accessibility pass behaves."""

    vault_path: str = field(default=".")
    output_folder_path: str = field(default="Browser Favorites")

    check_accessibility: bool = field(default=True)
    check_delay: float = field(default=1.0)  # seconds between two fetches
    timeout: int = field(default=10)
    user_agent: str = field(default="Mozilla/5.0 (compatible; bfav/0.3)")
    verify_ssl: bool = field(default=True)

    log_level: str = field(default="INFO")

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "BfavConfig":
        """
        Build the effective settings from every source except the command line.

        A ``config_file`` that does not exist is ignored like the other files.
        """
        config = cls()
        for path in cls._config_files(config_file):
            with open(path, "rb") as f:
                config.update(tomli.load(f))

        config.update(cls._env_overrides())
        config.vault_path = os.path.expanduser(os.path.expandvars(config.vault_path))
        return config

    @staticmethod
    def _config_files(config_file: Optional[Path]) -> Iterator[Path]:
        if user_config_path().exists():
            yield user_config_path()

        local = next((Path.cwd() / name for name in LOCAL_CONFIG_NAMES
                      if (Path.cwd() / name).exists()), None)
        if local is not None:
            yield local

        if config_file and config_file.exists():
            yield config_file

    @classmethod
    def _env_overrides(cls) -> Dict[str, Any]:
        overrides = {}
        for f in fields(cls):
            raw = os.environ.get(ENV_PREFIX + f.name.upper())
            if raw is not None:
                overrides[f.name] = _coerce(raw, f.default)
        return overrides

    def update(self, values: Dict[str, Any]):
        """Apply known settings from a mapping; unknown keys are ignored."""
        known = {f.name for f in fields(self)}
        for key, value in values.items():
            if key in known:
                setattr(self, key, value)

    def save(self, path: Optional[Path] = None):
        """Write the settings as TOML (default: the user file)."""
        path = path or user_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            tomli_w.dump(asdict(self), f)

    def get_vault_path(self) -> Path:
        """Vault directory, relative paths taken from the working directory."""
        path = Path(self.vault_path)
        return path if path.is_absolute() else Path.cwd() / path


_config: Optional[BfavConfig] = None


def get_config(reload: bool = False, config_file: Optional[Path] = None) -> BfavConfig:
    """Process-wide settings, loaded on first use."""
    global _config
    if _config is None or reload:
        _config = BfavConfig.load(config_file)
    return _config


def init_config(config_file: Optional[Path] = None, **overrides) -> BfavConfig:
    """
    Load the settings and apply command-line overrides.

    Overrides that are None (options not given) leave the loaded value alone.
    """
    config = get_config(reload=config_file is not None, config_file=config_file)
    config.update({key: value for key, value in overrides.items() if value is not None})
    return config
