"""
fieldwalk — type descriptors

File: src/fieldwalk/domain/schema.py
Last updated: 2026-10-18

Purpose
- Describe the shape of a value tree: primitives, text, sequences, aggregates and variants.
- Give every operation the same ordered field list for each aggregate type.

Functional requirements
- Descriptors are immutable; aggregate field lists are resolved once and cached.
- Primitive descriptors normalise values to their declared width, so encoders never fail.

Non-functional requirements
- Standard library only.
"""

from __future__ import annotations

import codecs
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, replace
from dataclasses import fields as dataclass_fields
from enum import Enum, StrEnum
from typing import Any, ClassVar, Final

from fieldwalk.constants import SUPPORTED_INT_WIDTHS
from fieldwalk.errors import SchemaError

FieldSource = Sequence["FieldSpec"] | Callable[[], Sequence["FieldSpec"]]


class NodeKind(StrEnum):
    PRIMITIVE = "primitive"
    TEXT = "text"
    SEQUENCE = "sequence"
    AGGREGATE = "aggregate"
    VARIANT = "variant"


class TypeSpec:
    """Base descriptor. Subclasses pin ``kind`` and describe defaults and membership."""

    __slots__ = ()

    kind: ClassVar[NodeKind]

    @property
    def name(self) -> str:
        raise NotImplementedError

    @property
    def min_wire_size(self) -> int:
        """Smallest number of bytes any value of this type occupies on the wire."""
        return 1

    def default(self) -> Any:
        raise NotImplementedError

    def accepts(self, value: object) -> bool:
        raise NotImplementedError


def wrap_to_width(raw: int, width: int, *, signed: bool) -> int:
    """Reduce ``raw`` modulo ``2**width``; signed widths use two's complement."""

    truncated = raw & ((1 << width) - 1)
    if signed and truncated >> (width - 1):
        return truncated - (1 << width)
    return truncated


class PrimitiveSpec(TypeSpec):
    """Integer-valued leaf. ``to_wire``/``from_wire`` convert to and from the varint domain."""

    __slots__ = ()

    kind: ClassVar[NodeKind] = NodeKind.PRIMITIVE
    width: int
    signed: bool

    def to_wire(self, value: Any) -> int:
        return wrap_to_width(int(value), self.width, signed=self.signed)

    def from_wire(self, raw: int) -> Any:
        return wrap_to_width(raw, self.width, signed=self.signed)


@dataclass(frozen=True, slots=True)
class IntSpec(PrimitiveSpec):
    width: int
    signed: bool

    def __post_init__(self) -> None:
        if self.width not in SUPPORTED_INT_WIDTHS:
            allowed = ", ".join(str(item) for item in SUPPORTED_INT_WIDTHS)
            raise SchemaError(f"unsupported integer width {self.width}; expected one of: {allowed}")

    @property
    def name(self) -> str:
        return f"{'int' if self.signed else 'uint'}{self.width}"

    def default(self) -> int:
        return 0

    def accepts(self, value: object) -> bool:
        return isinstance(value, int) and not isinstance(value, (bool, Enum))


@dataclass(frozen=True, slots=True)
class BoolSpec(PrimitiveSpec):
    width: ClassVar[int] = 8
    signed: ClassVar[bool] = False

    @property
    def name(self) -> str:
        return "bool"

    def to_wire(self, value: Any) -> int:
        return 1 if value else 0

    def from_wire(self, raw: int) -> bool:
        return raw != 0

    def default(self) -> bool:
        return False

    def accepts(self, value: object) -> bool:
        return isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class EnumSpec(PrimitiveSpec):
    """Enumeration carried as its underlying integer.

    Decoded integers that are not members come back as plain ``int``; membership
    is not validated.
    """

    enum_type: type[Enum]
    width: int = 32
    signed: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.enum_type, type) or not issubclass(self.enum_type, Enum):
            raise SchemaError(f"{self.enum_type!r} is not an Enum subclass")
        if self.width not in SUPPORTED_INT_WIDTHS:
            raise SchemaError(f"unsupported enum width {self.width}")
        for member in self.enum_type:
            if isinstance(member.value, bool) or not isinstance(member.value, int):
                raise SchemaError(
                    f"{self.enum_type.__name__}.{member.name} must have an integer value"
                )

    @property
    def name(self) -> str:
        return self.enum_type.__name__

    def to_wire(self, value: Any) -> int:
        raw = value.value if isinstance(value, Enum) else value
        return wrap_to_width(int(raw), self.width, signed=self.signed)

    def from_wire(self, raw: int) -> Any:
        number = wrap_to_width(raw, self.width, signed=self.signed)
        try:
            return self.enum_type(number)
        except ValueError:
            return number

    def default(self) -> Any:
        try:
            return self.enum_type(0)
        except ValueError:
            return next(iter(self.enum_type))

    def accepts(self, value: object) -> bool:
        return isinstance(value, self.enum_type)


@dataclass(frozen=True, slots=True)
class TextSpec(TypeSpec):
    """Length-prefixed byte string; with an ``encoding`` the Python value is ``str``."""

    encoding: str | None = "utf-8"

    kind: ClassVar[NodeKind] = NodeKind.TEXT

    def __post_init__(self) -> None:
        if self.encoding is None:
            return
        try:
            codecs.lookup(self.encoding)
        except LookupError as exc:
            raise SchemaError(f"unknown text encoding {self.encoding!r}") from exc

    @property
    def name(self) -> str:
        return "bytes" if self.encoding is None else "str"

    def default(self) -> str | bytes:
        return b"" if self.encoding is None else ""

    def accepts(self, value: object) -> bool:
        if self.encoding is None:
            return isinstance(value, (bytes, bytearray, memoryview))
        return isinstance(value, str)

    def to_bytes(self, value: Any) -> bytes:
        if self.encoding is None:
            return bytes(value)
        text = str(value)
        try:
            # surrogateescape keeps undecodable input lossless across a round trip.
            return text.encode(self.encoding, "surrogateescape")
        except UnicodeEncodeError:
            # Characters the encoding cannot hold are written as backslash escapes.
            return text.encode(self.encoding, "backslashreplace")

    def from_bytes(self, raw: bytes) -> str | bytes:
        """Decode ``raw``; raises ``UnicodeDecodeError`` when the encoding rejects it."""

        if self.encoding is None:
            return raw
        return raw.decode(self.encoding, "surrogateescape")


@dataclass(frozen=True, slots=True)
class SequenceSpec(TypeSpec):
    element: TypeSpec

    kind: ClassVar[NodeKind] = NodeKind.SEQUENCE

    def __post_init__(self) -> None:
        if not isinstance(self.element, TypeSpec):
            raise SchemaError(f"sequence element must be a TypeSpec, got {self.element!r}")

    @property
    def name(self) -> str:
        return f"list[{self.element.name}]"

    def default(self) -> list[Any]:
        return []

    def accepts(self, value: object) -> bool:
        return isinstance(value, (list, tuple))


@dataclass(frozen=True, slots=True)
class VariantSpec(TypeSpec):
    """Tagged union; the tag is the index of the first alternative accepting the value."""

    alternatives: tuple[TypeSpec, ...]

    kind: ClassVar[NodeKind] = NodeKind.VARIANT

    def __post_init__(self) -> None:
        if not self.alternatives:
            raise SchemaError("variant needs at least one alternative")
        for alternative in self.alternatives:
            if not isinstance(alternative, TypeSpec):
                raise SchemaError(f"variant alternative must be a TypeSpec, got {alternative!r}")

    @property
    def name(self) -> str:
        return " | ".join(alternative.name for alternative in self.alternatives)

    def default(self) -> Any:
        return self.alternatives[0].default()

    def accepts(self, value: object) -> bool:
        return any(alternative.accepts(value) for alternative in self.alternatives)

    def which(self, value: object) -> int:
        for index, alternative in enumerate(self.alternatives):
            if alternative.accepts(value):
                return index
        raise SchemaError(f"{type(value).__name__} value matches no alternative of {self.name}")


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One (name, type, accessor) entry of an aggregate schema."""

    name: str
    type: TypeSpec
    getter: Callable[[Any], Any] | None = None
    setter: Callable[[Any, Any], None] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.isidentifier():
            raise SchemaError(f"field name must be an identifier, got {self.name!r}")
        if not isinstance(self.type, TypeSpec):
            raise SchemaError(f"field {self.name!r} type must be a TypeSpec, got {self.type!r}")

    def get(self, obj: Any) -> Any:
        if self.getter is not None:
            return self.getter(obj)
        return getattr(obj, self.name)

    def set(self, obj: Any, value: Any) -> None:
        if self.setter is not None:
            self.setter(obj, value)
        else:
            setattr(obj, self.name, value)


class AggregateSchema(TypeSpec):
    """Ordered field list for one aggregate type.

    ``fields`` may be given as a zero-argument callable so a type can refer to
    itself; it is called once, on first use, and the result is frozen.
    """

    __slots__ = ("_cls", "_factory", "_field_source", "_fields", "_min_size", "_name")

    kind: ClassVar[NodeKind] = NodeKind.AGGREGATE

    def __init__(
        self,
        cls: type,
        fields: FieldSource,
        *,
        name: str | None = None,
        factory: Callable[[], Any] | None = None,
    ) -> None:
        if not isinstance(cls, type):
            raise SchemaError(f"aggregate target must be a class, got {cls!r}")
        self._cls = cls
        self._name = name or cls.__name__
        self._factory: Callable[[], Any] = factory if factory is not None else cls
        self._field_source = fields
        self._fields: tuple[FieldSpec, ...] | None = None
        self._min_size: int | None = None

    def __repr__(self) -> str:
        return f"AggregateSchema({self._name!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def cls(self) -> type:
        return self._cls

    @property
    def fields(self) -> tuple[FieldSpec, ...]:
        if self._fields is None:
            source = self._field_source
            entries = tuple(source() if callable(source) else source)
            _check_unique_names(self._name, entries)
            if self.frozen:
                _check_replaceable(self._cls, entries)
            self._fields = entries
        return self._fields

    @property
    def frozen(self) -> bool:
        """``True`` for frozen dataclasses; readers then build a new instance."""

        params = getattr(self._cls, "__dataclass_params__", None)
        return bool(params is not None and params.frozen)

    def assign(self, target: Any, changes: Mapping[FieldSpec, Any]) -> Any:
        """Store decoded field values and return the resulting instance.

        Mutable targets are updated in place. Frozen dataclasses are rebuilt with
        ``dataclasses.replace``; fields with an explicit setter still go through it.
        """

        if not changes:
            return target
        if not self.frozen:
            for entry, value in changes.items():
                entry.set(target, value)
            return target
        replaced: dict[str, Any] = {}
        for entry, value in changes.items():
            if entry.setter is not None:
                entry.setter(target, value)
            else:
                replaced[entry.name] = value
        return replace(target, **replaced) if replaced else target

    @property
    def min_wire_size(self) -> int:
        if self._min_size is None:
            # Provisional value breaks cycles through directly nested aggregates.
            self._min_size = 0
            self._min_size = max((item.type.min_wire_size for item in self.fields), default=0)
        return self._min_size

    def field(self, name: str) -> FieldSpec:
        for entry in self.fields:
            if entry.name == name:
                return entry
        raise KeyError(f"{self._name} has no field {name!r}")

    def default(self) -> Any:
        return self._factory()

    def accepts(self, value: object) -> bool:
        return isinstance(value, self._cls)


def _check_unique_names(schema_name: str, entries: tuple[FieldSpec, ...]) -> None:
    seen: set[str] = set()
    for entry in entries:
        if not isinstance(entry, FieldSpec):
            raise SchemaError(f"{schema_name} fields must be FieldSpec entries, got {entry!r}")
        if entry.name in seen:
            raise SchemaError(f"{schema_name} declares field {entry.name!r} twice")
        seen.add(entry.name)


def _check_replaceable(cls: type, entries: tuple[FieldSpec, ...]) -> None:
    init_names = {item.name for item in dataclass_fields(cls) if item.init}
    for entry in entries:
        if entry.setter is None and entry.name not in init_names:
            raise SchemaError(
                f"frozen {cls.__qualname__} needs an __init__ parameter or a setter for field {entry.name!r}"
            )

INT8: Final[IntSpec] = IntSpec(8, signed=True)
INT16: Final[IntSpec] = IntSpec(16, signed=True)
INT32: Final[IntSpec] = IntSpec(32, signed=True)
INT64: Final[IntSpec] = IntSpec(64, signed=True)
UINT8: Final[IntSpec] = IntSpec(8, signed=False)
UINT16: Final[IntSpec] = IntSpec(16, signed=False)
UINT32: Final[IntSpec] = IntSpec(32, signed=False)
UINT64: Final[IntSpec] = IntSpec(64, signed=False)
BOOL: Final[BoolSpec] = BoolSpec()
STRING: Final[TextSpec] = TextSpec("utf-8")
BYTES: Final[TextSpec] = TextSpec(None)

__all__ = [
    "BOOL",
    "BYTES",
    "INT8",
    "INT16",
    "INT32",
    "INT64",
    "STRING",
    "UINT8",
    "UINT16",
    "UINT32",
    "UINT64",
    "AggregateSchema",
    "BoolSpec",
    "EnumSpec",
    "FieldSpec",
    "IntSpec",
    "NodeKind",
    "PrimitiveSpec",
    "SequenceSpec",
    "TextSpec",
    "TypeSpec",
    "VariantSpec",
    "wrap_to_width",
]
