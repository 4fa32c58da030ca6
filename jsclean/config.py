"""Configuration management for jsclean.

Loads environment variables (optionally from a .env file) and provides
centralized config access. Command-line flags override these values.
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

__version__ = "1.0.0"

PROJECT_ROOT = Path(__file__).parent.parent

_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off'}


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_path: Optional[str | Path] = None):
        """Initialize config by loading a .env file.

        Args:
            env_path: Explicit .env file; defaults to the one in the
                project root, if any
        """
        if env_path is None:
            # Load .env from project root
            env_path = PROJECT_ROOT / ".env"
        load_dotenv(env_path)
        self._validate()

    def _validate(self):
        """Validate values that have a restricted range.

        Raises:
            ValueError: If a variable holds an unusable value
        """
        if self.max_passes < 1:
            raise ValueError(f"JSCLEAN_MAX_PASSES must be at least 1, got {self.max_passes}")
        if self.format_timeout <= 0:
            raise ValueError(f"JSCLEAN_FORMAT_TIMEOUT must be positive, got {self.format_timeout}")
        if self.grammar not in ('auto', 'tsx', 'typescript', 'javascript'):
            raise ValueError(f"JSCLEAN_GRAMMAR must be auto, tsx, typescript or javascript, got {self.grammar!r}")

    @property
    def output_suffix(self) -> str:
        """Suffix inserted before the extension of the output file.

        Returns:
            Suffix string, '.cleaned' by default
        """
        return os.getenv("JSCLEAN_OUTPUT_SUFFIX", ".cleaned")

    @property
    def format_output(self) -> bool:
        """Whether rendered output goes through prettier."""
        return _env_flag("JSCLEAN_FORMAT", True)

    @property
    def prettier_command(self) -> str:
        """Command line used to invoke prettier."""
        return os.getenv("JSCLEAN_PRETTIER_CMD", "npx --yes prettier")

    @property
    def format_timeout(self) -> float:
        """Seconds to wait for the formatter."""
        return float(os.getenv("JSCLEAN_FORMAT_TIMEOUT", "60"))

    @property
    def until_stable(self) -> bool:
        """Repeat elimination passes until nothing more is removed."""
        return _env_flag("JSCLEAN_UNTIL_STABLE", False)

    @property
    def max_passes(self) -> int:
        """Upper bound on passes when until_stable is on."""
        return int(os.getenv("JSCLEAN_MAX_PASSES", "10"))

    @property
    def grammar(self) -> str:
        """Grammar override: 'auto' picks one from the file extension."""
        return os.getenv("JSCLEAN_GRAMMAR", "auto").lower()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got {raw!r}")


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Drop the cached Config so the next get_config() re-reads the environment."""
    global _config
    _config = None
