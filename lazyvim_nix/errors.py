"""Fatal error types raised while generating the LazyVim configuration."""


class LazyNixError(Exception):
    """Base class for errors that abort a generation run."""


class MalformedIdentifierError(LazyNixError):
    """A plugin identifier could not be parsed or expanded from an alias."""

    def __init__(self, identifier: object) -> None:
        """Record the offending identifier."""
        self.identifier = identifier
        super().__init__(
            f"Malformed plugin identifier {identifier!r}: expected 'owner/repo' "
            "or a known short alias"
        )


class ConfigConflictError(LazyNixError):
    """Two configuration origins claim the same logical unit."""

    def __init__(self, logical_unit: str, first: str, second: str) -> None:
        """Record the contested unit and both contributors."""
        self.logical_unit = logical_unit
        self.contributors = (first, second)
        super().__init__(
            f"Conflict: '{logical_unit}' is defined by both {first} and {second}. "
            "Remove one of them."
        )


class LinkCollisionError(LazyNixError):
    """Two plugins map to the same dev path link name."""

    def __init__(self, link_name: str, first: str, second: str) -> None:
        """Record the link name and both identifiers."""
        self.link_name = link_name
        self.contributors = (first, second)
        super().__init__(
            f"Dev path collision: '{first}' and '{second}' both map to link "
            f"'{link_name}'"
        )


class MissingConfigSourceError(LazyNixError):
    """A configured config file root does not exist."""

    def __init__(self, root: object) -> None:
        """Record the missing root."""
        self.root = root
        super().__init__(f"Configured config files directory does not exist: {root}")


class UpstreamDriftError(LazyNixError):
    """An anchor expected in an upstream artifact was not found."""

    def __init__(self, patch_name: str, anchor: str, source_name: str) -> None:
        """Record the failing patch, anchor and file to inspect."""
        self.patch_name = patch_name
        self.anchor = anchor
        self.source_name = source_name
        super().__init__(
            f"Failed to patch the {patch_name} section of {source_name}.\n"
            "The upstream starter structure may have changed.\n"
            f"Expected pattern not found: {anchor!r}\n"
            f"Please review {source_name} and update lazyvim_nix/starter_patcher.py"
        )


class MappingMergeError(LazyNixError):
    """A generated mapping disagrees with an existing curated mapping."""
