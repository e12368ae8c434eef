"""Dependency collection loading and validation.

The collection lists every installable component (chart) with the names of
the components it depends on and the integrations it requires::

    version: 1
    components:
      - name: tssc-dh
        dependsOn: [tssc-integrations]
        integrations: "github || gitlab"

``load_collection`` is a pure transformation of the decoded document;
``read_collection_source`` performs the I/O for the bundled default or a
user supplied file.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from .errors import InvalidCollectionError

DEFAULT_COLLECTION_RESOURCE = "collection.yaml"
SUPPORTED_VERSION = 1


@dataclass(frozen=True)
class Component:
    """An installable unit with its dependencies and integration requirement."""

    name: str
    depends_on: tuple[str, ...] = ()
    integrations: str = ""


class Collection(Mapping[str, Component]):
    """Immutable mapping of component name to Component."""

    def __init__(self, components: Mapping[str, Component], version: int = SUPPORTED_VERSION):
        self._components = MappingProxyType(dict(components))
        self.version = version

    def __getitem__(self, name: str) -> Component:
        return self._components[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._components)

    def __len__(self) -> int:
        return len(self._components)

    def __repr__(self) -> str:
        return f"Collection(version={self.version}, components={sorted(self._components)})"


def _parse_depends_on(name: str, raw: Any) -> tuple[str, ...]:
    """Normalise a dependsOn value to an ordered, de-duplicated tuple."""
    if raw is None:
        return ()
    if isinstance(raw, str):
        items = [item.strip() for item in raw.split(",") if item.strip()]
    elif isinstance(raw, list):
        items = []
        for item in raw:
            if not isinstance(item, str) or not item.strip():
                raise InvalidCollectionError(
                    reason=f"component {name!r} has an invalid dependency entry: {item!r}"
                )
            items.append(item.strip())
    else:
        raise InvalidCollectionError(
            reason=f"component {name!r}: dependsOn must be a list or a comma separated string"
        )
    return tuple(dict.fromkeys(items))


def load_collection(source: Any) -> Collection:
    """Build a Collection from a decoded collection document.

    Args:
        source: Mapping with a ``components`` list (see module docstring).

    Returns:
        Validated, immutable Collection.

    Raises:
        InvalidCollectionError: If the document is malformed.
    """
    if not isinstance(source, Mapping):
        raise InvalidCollectionError(reason="collection must be a mapping")

    version = source.get("version", SUPPORTED_VERSION)
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        raise InvalidCollectionError(reason=f"invalid collection version: {version!r}")
    if version > SUPPORTED_VERSION:
        raise InvalidCollectionError(reason=f"unsupported collection version: {version}")

    entries = source.get("components")
    if not isinstance(entries, list):
        raise InvalidCollectionError(reason="'components' must be a list")

    components: dict[str, Component] = {}
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise InvalidCollectionError(reason=f"component #{index} must be a mapping")

        name = entry.get("name")
        if not isinstance(name, str) or not name.strip():
            raise InvalidCollectionError(reason=f"component #{index} has no name")
        name = name.strip()
        if name in components:
            raise InvalidCollectionError(reason=f"duplicate component name: {name!r}")

        integrations = entry.get("integrations", "")
        if integrations is None:
            integrations = ""
        if not isinstance(integrations, str):
            raise InvalidCollectionError(
                reason=f"component {name!r}: integrations must be a string"
            )

        components[name] = Component(
            name=name,
            depends_on=_parse_depends_on(name, entry.get("dependsOn")),
            integrations=integrations.strip(),
        )

    return Collection(components, version=version)


def read_collection_source(path: str | Path | None = None) -> dict[str, Any]:
    """Read a collection document.

    Args:
        path: YAML or JSON file. ``None`` reads the bundled default.

    Returns:
        The decoded document, ready for ``load_collection``.

    Raises:
        InvalidCollectionError: If the source cannot be read or decoded.
    """
    try:
        if path is None:
            text = (
                resources.files("tssc_cli.data")
                .joinpath(DEFAULT_COLLECTION_RESOURCE)
                .read_text(encoding="utf-8")
            )
            return yaml.safe_load(text)

        file_path = Path(path)
        text = file_path.read_text(encoding="utf-8")
        if file_path.suffix == ".json":
            return json.loads(text)
        if file_path.suffix in (".yaml", ".yml"):
            return yaml.safe_load(text)
        raise InvalidCollectionError(
            reason=f"unsupported collection file format: {file_path.suffix or file_path.name}"
        )
    except OSError as e:
        raise InvalidCollectionError(reason=f"cannot read collection: {e}") from e
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise InvalidCollectionError(reason=f"cannot decode collection: {e}") from e
