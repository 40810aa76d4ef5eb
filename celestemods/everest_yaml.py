"""Reading and writing of a mod's ``everest.yaml`` metadata file."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Optional, Union

import yaml

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_INT_RE = re.compile(r"[+-]?[0-9]+")
_FILENAMES = ("everest.yaml", "everest.yml")


class EverestYamlError(ValueError):
    """Base class of everest.yaml loading errors."""


class EverestYamlParseError(EverestYamlError):
    """The file is not valid YAML or does not have the expected shape."""


class NotOneEntryError(EverestYamlError):
    """The file holds a list with other than exactly one entry."""

    def __init__(self, count: int) -> None:
        super().__init__(f"found array of {count}, expected 1")
        self.count = count


class EverestYamlMissingError(EverestYamlError):
    """The module has no everest.yaml or everest.yml."""

    def __init__(self) -> None:
        super().__init__("No such file")


class _Loader(yaml.SafeLoader):
    """Safe loader that keeps numeric scalars as written, e.g. ``1.10``."""


def _scalar_text(loader: yaml.SafeLoader, node: yaml.Node) -> str:
    return loader.construct_scalar(node)


_Loader.add_constructor("tag:yaml.org,2002:int", _scalar_text)
_Loader.add_constructor("tag:yaml.org,2002:float", _scalar_text)


@dataclass(frozen=True, order=True)
class EverestModuleVersion:
    """A dotted version number such as ``1.4.0.0``."""

    parts: tuple[int, ...]

    @classmethod
    def parse(cls, text: str) -> EverestModuleVersion:
        parts = []
        for piece in text.split("."):
            if not _INT_RE.fullmatch(piece):
                raise ValueError("unable to parse integer")
            number = int(piece)
            if not _I32_MIN <= number <= _I32_MAX:
                raise ValueError("unable to parse integer")
            parts.append(number)
        return cls(tuple(parts))

    def __str__(self) -> str:
        return ".".join(str(p) for p in self.parts)


def _version(data: Any) -> EverestModuleVersion:
    if isinstance(data, bool) or not isinstance(data, (str, int, float)):
        raise EverestYamlParseError(f"invalid type for Version: {data!r}, expected a string")
    try:
        return EverestModuleVersion.parse(str(data))
    except ValueError as err:
        raise EverestYamlParseError(f"invalid value: {err}, expected 1.2.3") from None


def _string(data: Mapping, key: str) -> str:
    if key not in data:
        raise EverestYamlParseError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, str):
        raise EverestYamlParseError(f"invalid type for {key}: {value!r}, expected a string")
    return value


def _required(data: Mapping, key: str) -> Any:
    if key not in data:
        raise EverestYamlParseError(f"missing field `{key}`")
    return data[key]


@dataclass
class EverestYamlDependency:
    name: str
    version: EverestModuleVersion

    @classmethod
    def from_data(cls, data: Any) -> EverestYamlDependency:
        if not isinstance(data, Mapping):
            raise EverestYamlParseError("dependency: expected a mapping")
        return cls(_string(data, "Name"), _version(_required(data, "Version")))

    def to_data(self) -> dict:
        return {"Name": self.name, "Version": str(self.version)}


@dataclass
class EverestYaml:
    name: str
    version: EverestModuleVersion
    dll: Optional[str] = None
    dependencies: list[EverestYamlDependency] = field(default_factory=list)

    @classmethod
    def from_data(cls, data: Any) -> EverestYaml:
        if not isinstance(data, Mapping):
            raise EverestYamlParseError("module entry: expected a mapping")
        dll = data.get("DLL")
        if dll is not None and not isinstance(dll, str):
            raise EverestYamlParseError(f"invalid type for DLL: {dll!r}, expected a string")
        deps = data.get("Dependencies", [])
        if not isinstance(deps, list):
            raise EverestYamlParseError("Dependencies: expected a sequence")
        return cls(
            name=_string(data, "Name"),
            version=_version(_required(data, "Version")),
            dll=dll,
            dependencies=[EverestYamlDependency.from_data(d) for d in deps],
        )

    def to_data(self) -> dict:
        return {
            "Name": self.name,
            "Version": str(self.version),
            "DLL": self.dll,
            "Dependencies": [d.to_data() for d in self.dependencies],
        }

    @classmethod
    def from_text(cls, text: str) -> EverestYaml:
        """Parse the text of an everest.yaml; it must list exactly one module."""
        try:
            data = yaml.load(text.lstrip("\ufeff"), Loader=_Loader)
        except yaml.YAMLError as err:
            raise EverestYamlParseError(str(err)) from err
        if not isinstance(data, list):
            raise EverestYamlParseError("invalid type: expected a sequence")
        if len(data) != 1:
            raise NotOneEntryError(len(data))
        return cls.from_data(data[0])

    @classmethod
    def from_reader(cls, reader: IO) -> EverestYaml:
        content: Union[str, bytes] = reader.read()
        if isinstance(content, bytes):
            content = content.decode("utf-8")
        return cls.from_text(content)

    @classmethod
    def from_folder(cls, path: Union[str, Path]) -> EverestYaml:
        """Load the metadata of an unpacked module folder."""
        root = Path(path)
        for filename in _FILENAMES:
            candidate = root / filename
            if candidate.is_file():
                with candidate.open("rb") as reader:
                    return cls.from_reader(reader)
        raise EverestYamlMissingError()

    def save(self, mod_path: Union[str, Path]) -> None:
        """Write this metadata to ``everest.yaml`` inside ``mod_path``."""
        target = Path(mod_path) / "everest.yaml"
        with target.open("w", encoding="utf-8") as out:
            yaml.safe_dump([self.to_data()], out, sort_keys=False)


def celeste_module_yaml() -> EverestYaml:
    """Metadata describing the base game itself."""
    return EverestYaml(name="Celeste", version=EverestModuleVersion((1, 4, 0, 0)))