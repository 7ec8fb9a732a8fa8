"""Configuration management for latex-fast-compile."""

import re
from dataclasses import dataclass, field, fields
from enum import IntEnum
from pathlib import Path
from typing import List, Optional

import yaml

from .errors import ConfigurationError


PROJECT_CONFIG_FILE = ".latex-fast-compile.yml"

DEFAULT_LOG_SANITIZE = r"(?ms)^(?:! |l\.|<recently read> ).*?$(?:\s^.*?$){0,2}"
DEFAULT_SPLIT = r"(?m)^\s*(?:%\s*end\s*preamble|\\begin{document})"
DEFAULT_AUX_EXTENSIONS = "aux,bbl,blg,fmt,fff,glg,glo,gls,idx,ilg,ind,lof,lot,nav,out,ptc,snm,sta,stp,toc"
CLEAR_MODES = ("auto", "yes", "no")


class InfoLevel(IntEnum):
    """How much the tool prints, from nothing to full debug output."""
    NO = 0
    ERRORS = 1
    ERRORS_AND_LOG = 2
    ACTIONS = 3
    DEBUG = 4

    @classmethod
    def parse(cls, value: str) -> 'InfoLevel':
        """Convert an ``--info`` value to the corresponding level.

        Raises:
            ConfigurationError: If the value is not a known level.
        """
        levels = {
            "no": cls.NO,
            "errors": cls.ERRORS,
            "errors+log": cls.ERRORS_AND_LOG,
            "actions": cls.ACTIONS,
            "debug": cls.DEBUG,
        }
        try:
            return levels[value]
        except KeyError:
            raise ConfigurationError(
                f"Invalid info level '{value}', expected one of: {'|'.join(levels)}."
            ) from None


@dataclass
class CompileConfig:
    """Resolved configuration for one latex-fast-compile run."""
    source: Optional[Path] = None
    precompile: bool = False
    skip_fmt: bool = False
    no_synctex: bool = False
    no_watch: bool = False
    xelatex: bool = False
    compiles_at_start: int = 1
    info: str = "actions"
    log_sanitize: str = DEFAULT_LOG_SANITIZE
    split: str = DEFAULT_SPLIT
    strict_split: bool = False
    temp_folder: str = ""
    clear: str = "auto"
    aux_extensions: str = DEFAULT_AUX_EXTENSIONS
    no_normalize: bool = False
    options: List[str] = field(default_factory=list)
    debounce: float = 0.05
    poll_interval: float = 0.0
    kill_on_exit: bool = False

    @classmethod
    def from_project_file(cls, directory: Path = Path("."), **overrides) -> 'CompileConfig':
        """Create configuration from the project file with command-line overrides.

        Args:
            directory: Directory searched for ``.latex-fast-compile.yml``.
            **overrides: Command-line values; ``None`` means "not given".

        Returns:
            CompileConfig: Validated configuration.

        Raises:
            ConfigurationError: If the project file or a value is invalid.
        """
        config = cls()
        known = {f.name: f.type for f in fields(cls)}

        config_path = Path(directory) / PROJECT_CONFIG_FILE
        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Cannot read {config_path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigurationError(f"{config_path} must contain a mapping of options.")

            for key, value in data.items():
                name = str(key).replace('-', '_')
                if name not in known or name == 'source':
                    raise ConfigurationError(f"Unknown option '{key}' in {config_path}.")
                setattr(config, name, _coerce_project_value(name, value, known[name], key, config_path))

        # Apply command-line overrides (highest priority)
        for key, value in overrides.items():
            if value is not None:
                setattr(config, key, value)

        config.validate()
        return config

    def validate(self):
        """Check option values, raising ConfigurationError on the first problem."""
        InfoLevel.parse(self.info)
        if self.clear not in CLEAR_MODES:
            raise ConfigurationError(
                f"Invalid clear mode '{self.clear}', expected one of: {'|'.join(CLEAR_MODES)}."
            )
        if not isinstance(self.compiles_at_start, int) or self.compiles_at_start < 1:
            raise ConfigurationError("The number of compiles at start must be at least 1.")
        if self.debounce < 0 or self.poll_interval < 0:
            raise ConfigurationError("Delays cannot be negative.")
        if isinstance(self.options, str):
            self.options = [self.options]
        for pattern, option in ((self.log_sanitize, "--log-sanitize"), (self.split, "--split")):
            if pattern:
                _compile_bytes_pattern(pattern, option)

    @property
    def info_level(self) -> InfoLevel:
        return InfoLevel.parse(self.info)

    @property
    def compile_all(self) -> bool:
        """Full-document mode: skip the format file entirely."""
        return self.skip_fmt or not self.split

    @property
    def split_pattern(self) -> Optional[re.Pattern]:
        if not self.split:
            return None
        return _compile_bytes_pattern(self.split, "--split")

    @property
    def sanitize_pattern(self) -> Optional[re.Pattern]:
        if not self.log_sanitize:
            return None
        return _compile_bytes_pattern(self.log_sanitize, "--log-sanitize")

    @property
    def must_clear(self) -> bool:
        """Remove auxiliary files at the end of the run?

        ``auto`` clears only when watching; debug mode never clears.
        """
        if self.info_level >= InfoLevel.DEBUG:
            return False
        return self.clear == "yes" or (self.clear == "auto" and not self.no_watch)


def _compile_bytes_pattern(pattern: str, option: str) -> re.Pattern:
    # Sources are handled as raw bytes, so patterns are too.
    try:
        return re.compile(pattern.encode('utf-8'))
    except re.error as e:
        raise ConfigurationError(f"Invalid regular expression for {option}: {e}") from e


def _coerce_project_value(name: str, value, expected, key, config_path: Path):
    """Check a project file value against the type of its option.

    Raises:
        ConfigurationError: If the value has the wrong type.
    """
    if name == 'clear' and isinstance(value, bool):
        # YAML 1.1 reads unquoted yes/no as booleans.
        return "yes" if value else "no"
    if expected == List[str]:
        if isinstance(value, str):
            return [value]
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return value
    elif expected is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif expected is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif isinstance(value, expected):
        return value

    expected_name = "list of strings" if expected == List[str] else expected.__name__
    raise ConfigurationError(
        f"Invalid value {value!r} for option '{key}' in {config_path}: expected {expected_name}."
    )
