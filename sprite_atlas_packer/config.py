import copy
import enum
import json
import pathlib
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

import structlog
import yaml

from .errors import ConfigError

logger = structlog.get_logger()

DEFAULT_CONFIG: Dict[str, Any] = {
    "output_path": ".",
    "output_type": "json",
    "template_path": None,
    "options": {
        "max_size": 1024,
        "show_extension": True,
        "rotation": False
    }
}

YAML_SUFFIXES = {".yaml", ".yml"}


class OutputType(enum.Enum):
    JSON = "json"
    YAML = "yaml"
    BINARY = "binary"
    TEMPLATE = "template"


@dataclass(frozen=True)
class PackerOptions:
    max_size: int = 1024
    show_extension: bool = True
    rotation: bool = False


@dataclass(frozen=True)
class PackerConfig:
    name: str
    output_path: pathlib.Path
    output_type: OutputType
    folders: Tuple[pathlib.Path, ...]
    template_path: Optional[pathlib.Path] = None
    options: PackerOptions = field(default_factory=PackerOptions)

    def with_output_type(self, output_type: OutputType) -> "PackerConfig":
        return replace(self, output_type=output_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "output_path": self.output_path.as_posix(),
            "output_type": self.output_type.value,
            "folders": [folder.as_posix() for folder in self.folders],
            "template_path": self.template_path.as_posix() if self.template_path is not None else None,
            "options": {
                "max_size": self.options.max_size,
                "show_extension": self.options.show_extension,
                "rotation": self.options.rotation,
            },
        }


def deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def read_config_document(path: pathlib.Path) -> Dict[str, Any]:
    if not path.exists() or path.stat().st_size == 0:
        raise ConfigError(f"Config file {path} does not exist or is empty.")
    try:
        with path.open("r", encoding="utf-8") as handle:
            if path.suffix.lower() in YAML_SUFFIXES:
                document = yaml.safe_load(handle)
            else:
                document = json.load(handle)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Config file {path} could not be parsed: {exc}") from exc
    if not isinstance(document, dict):
        raise ConfigError(f"Config file {path} must contain a mapping.")
    return document


def round_down_power_of_two(value: int) -> int:
    return 1 << (value.bit_length() - 1)


def _parse_max_size(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"options.max_size must be a positive integer, got {value!r}.")
    rounded = round_down_power_of_two(value)
    if rounded != value:
        logger.warning("max_size is not a power of two, rounding down", max_size=value, rounded=rounded)
    return rounded


def _parse_flag(options: Dict[str, Any], key: str) -> bool:
    value = options.get(key)
    if not isinstance(value, bool):
        raise ConfigError(f"options.{key} must be true or false, got {value!r}.")
    return value


def _parse_output_type(value: Any) -> OutputType:
    try:
        return OutputType(str(value).lower())
    except ValueError as exc:
        choices = ", ".join(member.value for member in OutputType)
        raise ConfigError(f"Unsupported output_type {value!r}; expected one of: {choices}.") from exc


def config_from_dict(document: Dict[str, Any]) -> PackerConfig:
    merged = deep_merge(copy.deepcopy(DEFAULT_CONFIG), document)

    name = merged.get("name")
    if not name or not isinstance(name, str):
        raise ConfigError("The 'name' field must be specified in the config.")

    folders = merged.get("folders")
    if not folders or not isinstance(folders, list):
        raise ConfigError("The 'folders' field must be a non-empty list of directories.")
    for folder in folders:
        if not folder or not isinstance(folder, str):
            raise ConfigError(f"Every entry in 'folders' must be a directory path, got {folder!r}.")

    options_json = merged.get("options")
    if not isinstance(options_json, dict):
        raise ConfigError("The 'options' field must be a mapping.")
    options = PackerOptions(
        max_size=_parse_max_size(options_json.get("max_size")),
        show_extension=_parse_flag(options_json, "show_extension"),
        rotation=_parse_flag(options_json, "rotation"),
    )

    template_path = merged.get("template_path")

    return PackerConfig(
        name=name,
        output_path=pathlib.Path(merged.get("output_path") or "."),
        output_type=_parse_output_type(merged.get("output_type")),
        folders=tuple(pathlib.Path(folder) for folder in folders),
        template_path=pathlib.Path(template_path) if template_path else None,
        options=options,
    )


def load_config(path: pathlib.Path) -> PackerConfig:
    """Load a packer config from a JSON or YAML file.

    Missing keys fall back to ``DEFAULT_CONFIG``; nested mappings are merged
    key by key.
    """
    path = pathlib.Path(path)
    config = config_from_dict(read_config_document(path))
    logger.debug("Loaded config", path=str(path), name=config.name, output_type=config.output_type.value)
    return config
