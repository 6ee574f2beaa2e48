"""Data models shared by the resolution, overlay and config generation steps."""

from dataclasses import dataclass, field
from enum import Enum


class ResolutionMethod(str, Enum):
    """How a plugin identifier was mapped to a local package."""

    MULTI_MODULE_OVERRIDE = "multi_module_override"
    OVERRIDE = "override"
    AUTOMATIC = "automatic"
    UNRESOLVED = "unresolved"


class ConfigOrigin(str, Enum):
    """Where a user configuration fragment came from."""

    SCANNED_FILE = "scanned_file"
    INLINE_DECLARATION = "inline_declaration"


CONFIG_UNITS = ("autocmds", "keymaps", "options")


@dataclass(frozen=True)
class MultiModuleEntry:
    """An override mapping one module of a shared package."""

    package: str
    module: str
    subpath: str = ""


@dataclass
class PluginRecord:
    """A plugin record as emitted by the external scanner."""

    name: str
    dependencies: list[str] = field(default_factory=list)
    multi_module: dict | None = None
    source_file: str = ""
    is_core: bool = False
    user_plugin: bool = False


@dataclass
class ResolvedPlugin:
    """Outcome of resolving one plugin identifier."""

    identifier: str
    local_package: str | None
    resolution_method: ResolutionMethod
    verified: bool = False
    module_name: str | None = None
    subpath: str = ""
    candidate: str | None = None  # automatic candidate that was checked

    @property
    def is_resolved(self) -> bool:
        """Return True unless the identifier stayed unresolved."""
        return self.resolution_method is not ResolutionMethod.UNRESOLVED


@dataclass(frozen=True)
class DevPathEntry:
    """A single symlink inside the dev path overlay."""

    link_name: str
    target_path: str
    identifier: str
    source_module: str | None = None


@dataclass(frozen=True)
class ConfigFragment:
    """A piece of user configuration destined for one logical unit."""

    logical_unit: str  # autocmds/keymaps/options or plugins/<name>
    origin: ConfigOrigin
    content: str
    source: str = ""  # file path for scanned fragments

    @property
    def target_path(self) -> str:
        """Return the path of the fragment relative to the config directory."""
        if self.logical_unit in CONFIG_UNITS:
            return f"lua/config/{self.logical_unit}.lua"
        return f"lua/{self.logical_unit}.lua"


@dataclass(frozen=True)
class AnchorPatch:
    """An exact-text substitution applied to an upstream artifact."""

    name: str
    anchor_text: str
    replacement_text: str
    marker: str  # a line of the anchor that must be gone after patching
