"""Exceptions raised while analysing and rewriting manifests."""

from __future__ import annotations

from pathlib import Path


class EasyDepError(Exception):
    """Base class for every error the engine reports."""


class DiscoveryError(EasyDepError):
    """The workspace inventory could not be obtained."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to retrieve cargo metadata: {message}")


class ConfigError(EasyDepError):
    """An invalid ``[workspace.metadata.easydep]`` setting."""

    def __init__(self, path: Path | None, message: str) -> None:
        self.path = path
        where = f" in '{path}'" if path else ""
        super().__init__(f"Invalid configuration{where}: {message}")


class ManifestIOError(EasyDepError):
    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"IO error at '{path}': {cause}")


class ManifestParseError(EasyDepError):
    def __init__(
        self,
        path: Path | None,
        message: str,
        line: int | None = None,
        col: int | None = None,
    ) -> None:
        self.path = path
        self.line = line
        self.col = col
        location = f" at line {line} column {col}" if line is not None else ""
        super().__init__(f"TOML parse error in '{path}'{location}: {message}")


class SchemaError(EasyDepError):
    """A key that must hold a table holds something else."""

    def __init__(self, path: Path | None, key: str) -> None:
        self.path = path
        self.key = key
        super().__init__(f"'{key}' is not a table in '{path}'")


class MalformedDeclaration(EasyDepError):
    """A dependency entry whose value has no recognised shape."""

    def __init__(self, path: Path | None, name: str, shape: str) -> None:
        self.path = path
        self.name = name
        self.shape = shape
        super().__init__(
            f"Unrecognised declaration for dependency '{name}' in '{path}': {shape}"
        )
