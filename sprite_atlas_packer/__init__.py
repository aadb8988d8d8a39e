"""Pack a folder tree of sprites into a single power-of-two texture atlas."""

from .errors import (
    ConfigError,
    DuplicateFrameError,
    DuplicateSpriteError,
    InternalGeometryError,
    MissingTemplateError,
    PackerError,
    PackingInfeasibleError,
    SourceError,
)
from .config import OutputType, PackerConfig, PackerOptions, load_config
from .metadata import AtlasMetadata
from .packer import PackItem, PackResult, Placement, pack
from .compositor import composite
from .pipeline import AtlasResult, build_atlas, pack_atlas

__version__ = "0.3.0"

__all__ = [
    "AtlasMetadata",
    "AtlasResult",
    "ConfigError",
    "DuplicateFrameError",
    "DuplicateSpriteError",
    "InternalGeometryError",
    "MissingTemplateError",
    "OutputType",
    "PackItem",
    "PackResult",
    "PackerConfig",
    "PackerError",
    "PackerOptions",
    "PackingInfeasibleError",
    "Placement",
    "SourceError",
    "build_atlas",
    "composite",
    "load_config",
    "pack",
    "pack_atlas",
]
