"""DollForge error hierarchy.

All custom exceptions inherit from DollForgeError, enabling callers
to catch the base class for blanket error handling or specific
subclasses for targeted recovery.

A missing part image or a part with no opaque pixels is not an error:
the compositor skips those silently.
"""


class DollForgeError(Exception):
    """Base exception for all DollForge errors."""


class ConfigError(DollForgeError):
    """Raised when scene configuration loading or validation fails."""


class RegistryError(DollForgeError):
    """Raised when the static character registry is malformed or incomplete."""


class AssetError(DollForgeError):
    """Raised when a part image exists on disk but cannot be decoded."""


class RenderError(DollForgeError):
    """Raised when a draw command cannot be replayed onto a canvas."""
