"""Metadata encoders.

Each output variant carries only what its encoder needs. ``select_output``
is the one place that maps the configured ``OutputType`` to a variant.

Binary layout (little endian)::

    b"ATLS"  u16 version  u32 frame_count
    u32 len  sheet_path (utf-8)
    frame_count times:
        u32 len  name (utf-8)
        u32 x  u32 y  u32 width  u32 height  u8 rotated
"""

import json
import pathlib
import struct
from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union

import jinja2
import yaml

from .config import OutputType, PackerConfig
from .errors import MissingTemplateError
from .metadata import AtlasMetadata

BINARY_MAGIC = b"ATLS"
BINARY_VERSION = 1
HEADER_FMT = "<HI"
LENGTH_FMT = "<I"
FRAME_FMT = "<IIIIB"


@dataclass(frozen=True)
class JsonOutput:
    extension = "json"

    def encode(self, metadata: AtlasMetadata, config: PackerConfig) -> bytes:
        return (json.dumps(metadata.to_dict(), indent=2) + "\n").encode("utf-8")


@dataclass(frozen=True)
class YamlOutput:
    extension = "yaml"

    def encode(self, metadata: AtlasMetadata, config: PackerConfig) -> bytes:
        return yaml.safe_dump(metadata.to_dict(), sort_keys=False).encode("utf-8")


def _pack_string(value: str) -> bytes:
    encoded = value.encode("utf-8")
    return struct.pack(LENGTH_FMT, len(encoded)) + encoded


@dataclass(frozen=True)
class BinaryOutput:
    extension = "bin"

    def encode(self, metadata: AtlasMetadata, config: PackerConfig) -> bytes:
        payload = metadata.to_dict()
        chunks = [
            BINARY_MAGIC,
            struct.pack(HEADER_FMT, BINARY_VERSION, len(payload["frames"])),
            _pack_string(payload["sheet_path"]),
        ]
        for name, frame in payload["frames"].items():
            chunks.append(_pack_string(name))
            chunks.append(struct.pack(
                FRAME_FMT,
                frame["x"],
                frame["y"],
                frame["width"],
                frame["height"],
                1 if frame["rotated"] else 0,
            ))
        return b"".join(chunks)


def _unpack_string(data: bytes, offset: int) -> Tuple[str, int]:
    (length,) = struct.unpack_from(LENGTH_FMT, data, offset)
    offset += struct.calcsize(LENGTH_FMT)
    value = data[offset:offset + length].decode("utf-8")
    return value, offset + length


def decode_binary(data: bytes) -> Dict[str, Any]:
    if data[:len(BINARY_MAGIC)] != BINARY_MAGIC:
        raise ValueError("Not an atlas binary file: bad magic.")
    offset = len(BINARY_MAGIC)
    version, frame_count = struct.unpack_from(HEADER_FMT, data, offset)
    if version != BINARY_VERSION:
        raise ValueError(f"Unsupported atlas binary version {version}.")
    offset += struct.calcsize(HEADER_FMT)

    sheet_path, offset = _unpack_string(data, offset)
    frames: Dict[str, Dict[str, Any]] = {}
    for _ in range(frame_count):
        name, offset = _unpack_string(data, offset)
        x, y, width, height, rotated = struct.unpack_from(FRAME_FMT, data, offset)
        offset += struct.calcsize(FRAME_FMT)
        frames[name] = {"x": x, "y": y, "width": width, "height": height, "rotated": bool(rotated)}
    return {"sheet_path": sheet_path, "frames": frames}


@dataclass(frozen=True)
class TemplateOutput:
    template_path: pathlib.Path

    @property
    def extension(self) -> str:
        return self.template_path.suffix.lstrip(".")

    def render(self, metadata: AtlasMetadata, config: PackerConfig) -> str:
        source = self.template_path.read_text(encoding="utf-8")
        environment = jinja2.Environment(
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
        template = environment.from_string(source)
        rendered = template.render(atlas=metadata.to_dict(), config=config.to_dict())
        return rendered.replace("\\", "/")

    def encode(self, metadata: AtlasMetadata, config: PackerConfig) -> bytes:
        return self.render(metadata, config).encode("utf-8")


OutputFormat = Union[JsonOutput, YamlOutput, BinaryOutput, TemplateOutput]


def select_output(config: PackerConfig) -> OutputFormat:
    if config.output_type is OutputType.JSON:
        return JsonOutput()
    if config.output_type is OutputType.YAML:
        return YamlOutput()
    if config.output_type is OutputType.BINARY:
        return BinaryOutput()
    if config.template_path is None:
        raise MissingTemplateError("output_type 'template' requires 'template_path' in the config.")
    return TemplateOutput(config.template_path)


def metadata_path(config: PackerConfig, output: OutputFormat) -> pathlib.Path:
    if output.extension:
        return config.output_path / f"{config.name}.{output.extension}"
    return config.output_path / config.name
