class PackerError(Exception):
    """Base class for every failure the atlas packer reports."""


class ConfigError(PackerError):
    pass


class SourceError(PackerError):
    pass


class DuplicateSpriteError(PackerError):
    pass


class PackingInfeasibleError(PackerError):
    """No power-of-two canvas up to the maximum size holds every item."""


class InternalGeometryError(PackerError):
    """A placement does not fit the canvas it was packed for.

    This is a defect in the packer, not a user error.
    """


class DuplicateFrameError(PackerError):
    pass


class MissingTemplateError(PackerError):
    pass
