"""
Interface Registry - Declared method signatures of a contract.

Signatures come from a declarative description: Solidity ABI JSON (a bare
list, or a Foundry/Hardhat artifact with an "abi" key) or human-readable
lines of the form

    function sum(uint256[] memory values) external pure returns (string memory, uint256)

A registry is filled once when it is built and is read-only afterwards.
"""

from __future__ import annotations

import enum
import json
import logging
import re
from dataclasses import dataclass, field
from functools import cached_property, lru_cache
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, Sequence

from ..errors import DuplicateSignature, RegistryFrozen, UnknownMethod, UnsupportedType
from .codec import function_selector
from .types import TypeDescriptor, TypeLike, as_descriptor, parse_type

logger = logging.getLogger(__name__)


class Mutability(str, enum.Enum):
    PURE = "pure"
    VIEW = "view"
    PAYABLE = "payable"
    NONPAYABLE = "nonpayable"

    @property
    def is_read_only(self) -> bool:
        return self in (Mutability.PURE, Mutability.VIEW)

    @property
    def is_payable(self) -> bool:
        return self is Mutability.PAYABLE


@dataclass(frozen=True)
class MethodSignature:
    name: str
    inputs: tuple[TypeDescriptor, ...]
    outputs: tuple[TypeDescriptor, ...] = ()
    mutability: Mutability = Mutability.NONPAYABLE
    input_names: tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "outputs", tuple(self.outputs))
        object.__setattr__(self, "mutability", Mutability(self.mutability))

    @classmethod
    def build(
        cls,
        name: str,
        inputs: Sequence[TypeLike] = (),
        outputs: Sequence[TypeLike] = (),
        mutability: Mutability | str = Mutability.NONPAYABLE,
    ) -> "MethodSignature":
        return cls(
            name=name,
            inputs=tuple(as_descriptor(t) for t in inputs),
            outputs=tuple(as_descriptor(t) for t in outputs),
            mutability=Mutability(mutability),
        )

    @property
    def key(self) -> tuple[str, tuple[str, ...]]:
        return self.name, tuple(t.canonical for t in self.inputs)

    @property
    def signature(self) -> str:
        """Canonical signature string, e.g. ``sum(uint256[])``."""
        return f"{self.name}({','.join(t.canonical for t in self.inputs)})"

    @cached_property
    def selector(self) -> bytes:
        return function_selector(self.name, self.inputs)

    @property
    def is_read_only(self) -> bool:
        return self.mutability.is_read_only

    def __str__(self) -> str:
        text = f"function {self.signature} {self.mutability.value}"
        if self.outputs:
            text += f" returns ({','.join(t.canonical for t in self.outputs)})"
        return text


# ============ Registry ============


class InterfaceRegistry:
    """Set of method signatures keyed by (name, argument types)."""

    def __init__(self, signatures: Iterable[MethodSignature] = (), *, freeze: bool = True) -> None:
        self._by_key: dict[tuple[str, tuple[str, ...]], MethodSignature] = {}
        self._by_name: dict[str, list[MethodSignature]] = {}
        self._frozen = False
        for signature in signatures:
            self.register(signature)
        if freeze:
            self.freeze()

    @classmethod
    def from_abi(cls, abi: Iterable[dict[str, Any]], skip_unsupported: bool = False) -> "InterfaceRegistry":
        signatures = []
        for entry in abi:
            if entry.get("type", "function") != "function":
                continue
            try:
                signatures.append(signature_from_abi_entry(entry))
            except UnsupportedType:
                if not skip_unsupported:
                    raise
                logger.debug("Skipping %s: unsupported parameter type", entry.get("name"))
        return cls(signatures)

    @classmethod
    def from_artifact(cls, path: Path, skip_unsupported: bool = False) -> "InterfaceRegistry":
        return cls.from_abi(load_abi(Path(path)), skip_unsupported=skip_unsupported)

    @classmethod
    def from_human_readable(cls, lines: Iterable[str]) -> "InterfaceRegistry":
        return cls(
            parse_human_readable(line)
            for line in lines
            if line.strip() and not line.strip().startswith("//")
        )

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def register(self, signature: MethodSignature) -> None:
        if self._frozen:
            raise RegistryFrozen("Interface registry is read-only once built.")
        if signature.key in self._by_key:
            raise DuplicateSignature(f"Method already registered: {signature.signature}")
        self._by_key[signature.key] = signature
        self._by_name.setdefault(signature.name, []).append(signature)

    def resolve(self, name: str, arg_types: Sequence[TypeLike]) -> MethodSignature:
        try:
            key = (name, tuple(as_descriptor(t).canonical for t in arg_types))
        except UnsupportedType:
            raise UnknownMethod(name, tuple(str(t) for t in arg_types)) from None
        try:
            return self._by_key[key]
        except KeyError:
            raise UnknownMethod(name, key[1]) from None

    def overloads(self, name: str) -> tuple[MethodSignature, ...]:
        return tuple(self._by_name.get(name, ()))

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[MethodSignature]:
        return iter(self._by_key.values())

    def __len__(self) -> int:
        return len(self._by_key)


# ============ ABI JSON ============


@lru_cache(maxsize=16)
def load_abi(path: Path) -> tuple[dict[str, Any], ...]:
    """
    Load an ABI from a JSON file.

    Accepts either a bare ABI list or a compiler artifact (Foundry,
    Hardhat) carrying the ABI under its "abi" key.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file holds no ABI
    """
    if not path.exists():
        raise FileNotFoundError(f"ABI not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        artifact = json.load(f)

    if isinstance(artifact, dict):
        artifact = artifact.get("abi")
    if not isinstance(artifact, list):
        raise ValueError(f"No ABI in {path}")

    return tuple(artifact)


def _mutability_of(entry: dict[str, Any]) -> Mutability:
    if "stateMutability" in entry:
        return Mutability(entry["stateMutability"])
    # Pre-0.4.16 ABI output
    if entry.get("constant"):
        return Mutability.VIEW
    if entry.get("payable"):
        return Mutability.PAYABLE
    return Mutability.NONPAYABLE


def signature_from_abi_entry(entry: dict[str, Any]) -> MethodSignature:
    inputs = entry.get("inputs", [])
    return MethodSignature(
        name=entry["name"],
        inputs=tuple(parse_type(p["type"]) for p in inputs),
        outputs=tuple(parse_type(p["type"]) for p in entry.get("outputs", [])),
        mutability=_mutability_of(entry),
        input_names=tuple(p.get("name", "") for p in inputs),
    )


# ============ Human-readable signatures ============

_HUMAN_RE = re.compile(
    r"^\s*(?:function\s+)?(?P<name>[A-Za-z_$][\w$]*)\s*"
    r"\((?P<params>[^()]*)\)"
    r"(?P<modifiers>[^()]*?)"
    r"(?:\breturns\s*\((?P<returns>[^()]*)\))?\s*;?\s*$"
)
_DATA_LOCATIONS = {"memory", "calldata", "storage"}
# words that qualify a parameter without naming it (`address payable to`)
_PARAM_QUALIFIERS = _DATA_LOCATIONS | {"payable"}
_MUTABILITY_WORDS = {m.value for m in Mutability}


def _parse_params(text: Optional[str]) -> tuple[tuple[TypeDescriptor, ...], tuple[str, ...]]:
    types: list[TypeDescriptor] = []
    names: list[str] = []
    if not text or not text.strip():
        return (), ()
    for param in text.split(","):
        words = [w for w in param.split() if w not in _PARAM_QUALIFIERS]
        if not words:
            raise ValueError(f"Empty parameter in {text!r}")
        types.append(parse_type(words[0]))
        names.append(words[1] if len(words) > 1 else "")
    return tuple(types), tuple(names)


def parse_human_readable(line: str) -> MethodSignature:
    """
    Parse one human-readable function declaration.

    Raises:
        ValueError: If the line is not a function declaration
        UnsupportedType: If a parameter type is not supported
    """
    match = _HUMAN_RE.match(line)
    if not match:
        raise ValueError(f"Not a function declaration: {line!r}")

    inputs, names = _parse_params(match.group("params"))
    outputs, _ = _parse_params(match.group("returns"))

    mutability = Mutability.NONPAYABLE
    for word in match.group("modifiers").split():
        if word in _MUTABILITY_WORDS:
            mutability = Mutability(word)

    return MethodSignature(
        name=match.group("name"),
        inputs=inputs,
        outputs=outputs,
        mutability=mutability,
        input_names=names,
    )
