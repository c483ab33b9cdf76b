"""Normalise the dependency layout of a Cargo manifest."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import tomlkit
from tomlkit.container import OutOfOrderTableProxy
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import Array, InlineTable, Table
from tomlkit.toml_document import TOMLDocument

DEPENDENCIES = "dependencies"
WORKSPACE = "workspace"
MEMBERS = "members"
VERSION = "version"


@dataclass
class Flags:
    """What to rewrite and where the result goes."""

    toml: str
    write: bool = False
    dependencies_into_workspace: bool = False

    def toml_path(self) -> Path:
        return Path(self.toml)


def _is_table(item: Any) -> bool:
    return isinstance(item, (Table, OutOfOrderTableProxy))


def _unwrap(item: Any) -> Any:
    return item.unwrap() if hasattr(item, "unwrap") else item


def _inline(values: Mapping[str, Any]) -> InlineTable:
    table = tomlkit.inline_table()
    table.update(values)
    return table


def _single_version_tabled(item: Any) -> Any:
    value = _unwrap(item)
    if isinstance(value, str):
        table = tomlkit.table()
        table[VERSION] = value
        return table
    if isinstance(item, InlineTable):
        return _inline(value)
    if _is_table(item):
        table = tomlkit.table()
        table.update(value)
        return table
    return tomlkit.item(value)


def _refactor_workspace(document: TOMLDocument, existing: list[str]) -> Table:
    built = tomlkit.table()
    if WORKSPACE not in document:
        return built

    workspace = document[WORKSPACE]
    if not _is_table(workspace):
        raise ValueError("workspace must be a table")

    if MEMBERS in workspace:
        members = workspace[MEMBERS]
        if not isinstance(members, Array):
            raise ValueError("workspace.members must be array")
        names = sorted(m for m in _unwrap(members) if isinstance(m, str))
        array = tomlkit.array()
        array.extend(names)
        built[MEMBERS] = array

    if DEPENDENCIES in workspace:
        dependencies = workspace[DEPENDENCIES]
        if not _is_table(dependencies):
            raise ValueError("workspace.dependencies must be table")
        table = tomlkit.table()
        for key in sorted(dependencies):
            existing.append(key)
            table[key] = _single_version_tabled(dependencies[key])
        built[DEPENDENCIES] = table

    return built


def _refactor_dependencies(document: TOMLDocument, existing: list[str]) -> Table:
    built = tomlkit.table()
    if DEPENDENCIES not in document:
        return built

    dependencies = document[DEPENDENCIES]
    if not _is_table(dependencies):
        raise ValueError("dependencies must be a table")

    for key in sorted(dependencies):
        if key in existing:
            entry: Mapping[str, Any] = {WORKSPACE: True}
        else:
            value = _unwrap(dependencies[key])
            if isinstance(value, str):
                entry = {VERSION: value}
            elif isinstance(value, dict):
                entry = value
            else:
                raise ValueError("dependencies are not a table")
        built[key] = _inline(entry)
    return built


def _normalise(document: TOMLDocument) -> list[str]:
    existing: list[str] = []
    workspace = _refactor_workspace(document, existing)
    dependencies = _refactor_dependencies(document, existing)
    document[WORKSPACE] = workspace
    document[DEPENDENCIES] = dependencies
    return existing


def refactor(flags: Flags, content: str) -> TOMLDocument:
    """Sort members and dependencies, and point dependencies at workspace entries.

    With ``dependencies_into_workspace`` every dependency not yet in
    ``workspace.dependencies`` is moved there first. Raise ValueError on bad input.
    """
    try:
        document = tomlkit.parse(content)
    except TOMLKitError as exc:
        raise ValueError(f"failed to parse content as toml document: {exc}") from exc

    existing = _normalise(document)

    if flags.dependencies_into_workspace:
        workspace = document[WORKSPACE]
        if DEPENDENCIES not in workspace:
            raise ValueError("workspace.dependencies is missing")
        workspace_dependencies = workspace[DEPENDENCIES]
        dependencies = document[DEPENDENCIES]
        moved = False
        for key in list(dependencies):
            if key not in existing:
                workspace_dependencies[key] = _inline(_unwrap(dependencies[key]))
                moved = True
        if moved:
            _normalise(document)

    return document


def cargo(flags: Flags) -> str:
    """Rewrite the manifest in place or print it; return the new text."""
    path = flags.toml_path()
    content = path.read_text(encoding="utf-8")
    text = tomlkit.dumps(refactor(flags, content))
    if flags.write:
        path.write_text(text, encoding="utf-8")
    else:
        print(text)
    return text


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Normalise the dependencies of a Cargo manifest.")
    parser.add_argument("manifest", nargs="?", default="Cargo.toml", help="path of Cargo.toml")
    parser.add_argument("--dry-run", action="store_true", help="print the result instead of writing it")
    parser.add_argument(
        "--keep-dependencies",
        action="store_true",
        help="do not move dependencies into workspace.dependencies",
    )
    args = parser.parse_args(argv)

    flags = Flags(
        toml=args.manifest,
        write=not args.dry_run,
        dependencies_into_workspace=not args.keep_dependencies,
    )
    try:
        cargo(flags)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0