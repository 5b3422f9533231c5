"""Exceptions raised while resolving shading networks and packing textures."""


class ExportError(Exception):
    """Base class for failures that abort one unit of export work."""


class MissingAttributeError(ExportError):
    """A node of a recognised type lacks an attribute the exporter relies on."""

    def __init__(self, node_name: str, attribute: str):
        super().__init__(f"{node_name} has no {attribute} attribute")
        self.node_name = node_name
        self.attribute = attribute


class UnsupportedInputError(ExportError):
    """Unrecognised texture node kind, missing path or disallowed image format."""


class ChannelPackError(ExportError):
    """Loading, validating or writing a packed composite image failed."""
