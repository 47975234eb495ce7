from typing import Any, BinaryIO, ClassVar, Dict, Iterator, List, Optional, Tuple, Union
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from itertools import zip_longest
import logging
import struct

from .errors import EncodeError, IPPIOError, InvalidCollectionError
from .tags import ValueTag

logger = logging.getLogger(__name__)

# Las cadenas se decodifican de forma que los bytes originales se recuperen al escribir
STRING_ENCODING = "utf-8"
STRING_ERRORS = "surrogateescape"

RESOLUTION_UNITS_PER_INCH = 3
RESOLUTION_UNITS_PER_CM = 4

# Lee exactamente `size` bytes; una lectura corta es un error de E/S
def read_exact(stream: BinaryIO, size: int) -> bytes:
    if size == 0:
        return b""
    try:
        data = stream.read(size)
    except OSError as e:
        raise IPPIOError(f"Read failure: {e}") from e
    if data is None or len(data) < size:
        received = len(data) if data else 0
        raise IPPIOError(
            f"Unexpected end of stream: expected {size} bytes, got {received}",
            expected=size,
            received=received,
        )
    return data

def read_u8(stream: BinaryIO) -> int:
    return read_exact(stream, 1)[0]

def read_u16(stream: BinaryIO) -> int:
    return struct.unpack(">H", read_exact(stream, 2))[0]

# Empaqueta con struct convirtiendo los desbordes en EncodeError
def pack(fmt: str, *args) -> bytes:
    try:
        return struct.pack(fmt, *args)
    except struct.error as e:
        raise EncodeError(f"Cannot encode {args!r} as '{fmt}': {e}") from e

# Escribe todos los bytes aunque el destino acepte escrituras parciales
def write_bytes(stream: BinaryIO, data: bytes) -> int:
    view = memoryview(data)
    while view:
        accepted = stream.write(view)
        if not accepted:
            raise OSError(f"Sink accepted no bytes ({len(view)} pending)")
        view = view[accepted:]
    return len(data)

# Escribe longitud (u16) + datos y devuelve los bytes escritos
def write_sized(stream: BinaryIO, data: bytes) -> int:
    if len(data) > 0xffff:
        raise EncodeError(f"Value too long for IPP: {len(data)} bytes")
    return write_bytes(stream, pack(">H", len(data)) + data)

def encode_string(text: str) -> bytes:
    try:
        return text.encode(STRING_ENCODING, STRING_ERRORS)
    except UnicodeEncodeError as e:
        raise EncodeError(f"Cannot encode {text!r} as {STRING_ENCODING}: {e}") from e

def decode_string(data: bytes) -> str:
    return data.decode(STRING_ENCODING, STRING_ERRORS)


# Valor IPP: unión etiquetada con lectura/escritura binaria por variante
class IPPValue:

    def to_tag(self) -> Union[ValueTag, int]:
        raise NotImplementedError

    # Codifica longitud + contenido; el llamador ya escribió etiqueta y nombre
    def write(self, stream: BinaryIO) -> int:
        raise NotImplementedError

    def to_python(self) -> Any:
        raise NotImplementedError

    # Un escalar se recorre como una secuencia de un único elemento
    def __iter__(self) -> Iterator["IPPValue"]:
        return iter((self,))

    # Lee un valor a partir de su etiqueta; etiquetas desconocidas producen Other
    @staticmethod
    def read(tag: int, stream: BinaryIO) -> "IPPValue":
        vsize = read_u16(stream)
        data = read_exact(stream, vsize)

        value_tag = ValueTag.from_byte(tag)
        if value_tag is None:
            logger.debug(f"Etiqueta de valor desconocida 0x{tag:02x}, {vsize} bytes sin interpretar")
            return Other(tag, data)

        if value_tag in (ValueTag.BEG_COLLECTION, ValueTag.END_COLLECTION):
            if data:
                logger.error(f"Delimitador de colección 0x{tag:02x} con contenido de {vsize} bytes")
                raise InvalidCollectionError(
                    f"Collection delimiter 0x{tag:02x} carries a {vsize}-byte payload"
                )
            return Other(tag, data)

        string_type = _STRING_TYPES.get(value_tag)
        if string_type is not None:
            return string_type(decode_string(data))

        decoder = _FIXED_DECODERS.get(value_tag)
        if decoder is None:
            return Other(tag, data)

        size, decode = decoder
        if vsize < size:
            logger.warning(
                f"Valor {value_tag.name} demasiado corto ({vsize} < {size} bytes), se conserva sin interpretar"
            )
            return Other(tag, data)
        if vsize > size:
            logger.warning(f"Valor {value_tag.name} de {vsize} bytes, se esperaban {size}")
        return decode(data[:size])


@dataclass
class Integer(IPPValue):
    value: int

    def to_tag(self):
        return ValueTag.INTEGER

    def write(self, stream):
        return write_sized(stream, pack(">i", self.value))

    def to_python(self):
        return self.value

    def __str__(self):
        return str(self.value)


@dataclass
class Enum(IPPValue):
    value: int

    def to_tag(self):
        return ValueTag.ENUM

    def write(self, stream):
        return write_sized(stream, pack(">i", self.value))

    def to_python(self):
        return self.value

    def __str__(self):
        return str(self.value)


@dataclass
class Boolean(IPPValue):
    value: bool

    def to_tag(self):
        return ValueTag.BOOLEAN

    def write(self, stream):
        return write_sized(stream, pack(">B", 1 if self.value else 0))

    def to_python(self):
        return self.value

    def __str__(self):
        return "true" if self.value else "false"


@dataclass
class RangeOfInteger(IPPValue):
    min: int
    max: int

    def to_tag(self):
        return ValueTag.RANGE_OF_INTEGER

    def write(self, stream):
        return write_sized(stream, pack(">ii", self.min, self.max))

    def to_python(self):
        return (self.min, self.max)

    def __str__(self):
        return f"{self.min}..{self.max}"


@dataclass
class Resolution(IPPValue):
    crossfeed: int
    feed: int
    units: int = RESOLUTION_UNITS_PER_INCH

    def to_tag(self):
        return ValueTag.RESOLUTION

    def write(self, stream):
        return write_sized(stream, pack(">iib", self.crossfeed, self.feed, self.units))

    def to_python(self):
        return (self.crossfeed, self.feed, self.units)

    def __str__(self):
        units = "in" if self.units == RESOLUTION_UNITS_PER_INCH else "cm"
        return f"{self.crossfeed}x{self.feed}{units}"


# DateAndTime de RFC 2579 (11 bytes)
@dataclass
class DateTime(IPPValue):
    year: int
    month: int
    day: int
    hour: int
    minutes: int
    seconds: int
    deciseconds: int = 0
    utc_dir: str = "+"
    utc_hours: int = 0
    utc_mins: int = 0

    def to_tag(self):
        return ValueTag.DATETIME

    def write(self, stream):
        try:
            direction = self.utc_dir.encode("latin-1")
        except UnicodeEncodeError as e:
            raise EncodeError(f"Invalid UTC direction: {self.utc_dir!r}") from e
        return write_sized(stream, pack(
            ">HBBBBBBcBB",
            self.year, self.month, self.day,
            self.hour, self.minutes, self.seconds, self.deciseconds,
            direction, self.utc_hours, self.utc_mins,
        ))

    @classmethod
    def from_datetime(cls, value: datetime) -> "DateTime":
        offset = value.utcoffset() or timedelta(0)
        direction = "-" if offset < timedelta(0) else "+"
        minutes = abs(int(offset.total_seconds())) // 60
        return cls(
            value.year, value.month, value.day,
            value.hour, value.minute, value.second, value.microsecond // 100000,
            direction, minutes // 60, minutes % 60,
        )

    def to_datetime(self) -> datetime:
        offset = timedelta(hours=self.utc_hours, minutes=self.utc_mins)
        if self.utc_dir == "-":
            offset = -offset
        return datetime(
            self.year, self.month, self.day,
            self.hour, self.minutes, self.seconds, self.deciseconds * 100000,
            tzinfo=timezone(offset),
        )

    # Campos fuera de rango no forman un datetime válido; se devuelve el texto
    def to_python(self):
        try:
            return self.to_datetime()
        except ValueError:
            return str(self)

    def __str__(self):
        return (
            f"{self.year}-{self.month}-{self.day},"
            f"{self.hour}:{self.minutes}:{self.seconds}.{self.deciseconds},"
            f"{self.utc_dir}{self.utc_hours}utc"
        )


# Variantes de texto: solo se distinguen por la etiqueta
@dataclass
class _StringValue(IPPValue):
    value: str
    TAG: ClassVar[ValueTag]

    def to_tag(self):
        return self.TAG

    def write(self, stream):
        return write_sized(stream, encode_string(self.value))

    def to_python(self):
        return self.value

    def __str__(self):
        return self.value


class OctetString(_StringValue):
    TAG = ValueTag.OCTET_STRING


class TextWithoutLanguage(_StringValue):
    TAG = ValueTag.TEXT_WITHOUT_LANGUAGE


class NameWithoutLanguage(_StringValue):
    TAG = ValueTag.NAME_WITHOUT_LANGUAGE


class Charset(_StringValue):
    TAG = ValueTag.CHARSET


class NaturalLanguage(_StringValue):
    TAG = ValueTag.NATURAL_LANGUAGE


class Uri(_StringValue):
    TAG = ValueTag.URI


class Keyword(_StringValue):
    TAG = ValueTag.KEYWORD


class MimeMediaType(_StringValue):
    TAG = ValueTag.MIME_MEDIA_TYPE


class MemberAttrName(_StringValue):
    TAG = ValueTag.MEMBER_ATTR_NAME


# Conjunto de valores de un mismo atributo (1setOf); nunca vacío
@dataclass
class ListOf(IPPValue):
    values: List[IPPValue]

    def __post_init__(self):
        self.values = list(self.values)
        if not self.values:
            raise ValueError("ListOf requires at least one value")
        if any(isinstance(item, ListOf) for item in self.values):
            raise ValueError("ListOf cannot contain another ListOf")

    def to_tag(self):
        return self.values[0].to_tag()

    # Primer valor completo; los siguientes repiten etiqueta con nombre vacío
    def write(self, stream):
        written = self.values[0].write(stream)
        for item in self.values[1:]:
            written += write_bytes(stream, pack(">BH", item.to_tag(), 0))
            written += item.write(stream)
        return written

    def to_python(self):
        return [item.to_python() for item in self.values]

    def __iter__(self):
        return iter(self.values)

    def __str__(self):
        return "[" + ", ".join(str(item) for item in self.values) + "]"


# Colección: miembros entre begCollection y endCollection
# Escritura, comparación y representación recorren el árbol con una pila explícita, sin recursión
@dataclass(eq=False, repr=False)
class Collection(IPPValue):
    values: List[IPPValue] = field(default_factory=list)

    # Un ListOf miembro se aplana: en el cable sus valores son entradas sueltas
    def __post_init__(self):
        members = []
        for item in self.values:
            if isinstance(item, ListOf):
                members.extend(item.values)
            else:
                members.append(item)
        self.values = members

    def to_tag(self):
        return ValueTag.BEG_COLLECTION

    # Eventos del recorrido: ("open", colección), ("value", valor), ("close", None)
    def walk(self) -> Iterator[Tuple[str, Optional[IPPValue]]]:
        yield "open", self
        stack = [iter(self.values)]
        while stack:
            item = next(stack[-1], None)
            if item is None:
                stack.pop()
                yield "close", None
            elif isinstance(item, Collection):
                yield "open", item
                stack.append(iter(item.values))
            else:
                yield "value", item

    def write(self, stream):
        written = 0
        for event, item in self.walk():
            if event == "open":
                if item is not self:
                    written += write_bytes(stream, pack(">BH", ValueTag.BEG_COLLECTION, 0))
                written += write_bytes(stream, pack(">H", 0))
            elif event == "value":
                written += write_bytes(stream, pack(">BH", item.to_tag(), 0))
                written += item.write(stream)
            else:
                written += write_bytes(stream, pack(">BI", ValueTag.END_COLLECTION, 0))
        return written

    # Miembros con memberAttrName se devuelven como diccionario
    def to_python(self):
        frames: List[List[Tuple[Optional[IPPValue], Any]]] = []
        result = None
        for event, item in self.walk():
            if event == "open":
                frames.append([])
            elif event == "value":
                frames[-1].append((item, item.to_python()))
            else:
                result = _members_to_python(frames.pop())
                if frames:
                    frames[-1].append((None, result))
        return result

    def __eq__(self, other):
        if not isinstance(other, Collection):
            return NotImplemented
        for mine, theirs in zip_longest(self.walk(), other.walk()):
            if mine is None or theirs is None or mine[0] != theirs[0]:
                return False
            if mine[0] == "value" and mine[1] != theirs[1]:
                return False
        return True

    def __iter__(self):
        return iter(self.values)

    def _render(self, opening: str, closing: str, leaf) -> str:
        parts: List[str] = []
        separate = False
        for event, item in self.walk():
            if event == "close":
                parts.append(closing)
                separate = True
                continue
            if separate:
                parts.append(", ")
            if event == "open":
                parts.append(opening)
                separate = False
            else:
                parts.append(leaf(item))
                separate = True
        return "".join(parts)

    def __repr__(self):
        return self._render("Collection(values=[", "])", repr)

    def __str__(self):
        return self._render("<", ">", str)

def _members_to_python(members: List[Tuple[Optional[IPPValue], Any]]) -> Any:
    if not members or not isinstance(members[0][0], MemberAttrName):
        return [value for _, value in members]
    grouped: Dict[str, List[Any]] = {}
    name = None
    for item, value in members:
        if isinstance(item, MemberAttrName):
            name = value
            grouped[name] = []
        else:
            grouped[name].append(value)
    return {key: items[0] if len(items) == 1 else items for key, items in grouped.items()}


# Valor con etiqueta no interpretada; se conserva tal cual para reenviarlo
@dataclass
class Other(IPPValue):
    tag: int
    data: bytes = b""

    def to_tag(self):
        value_tag = ValueTag.from_byte(self.tag)
        return value_tag if value_tag is not None else self.tag

    def write(self, stream):
        return write_sized(stream, bytes(self.data))

    def to_python(self):
        return bytes(self.data)

    def __str__(self):
        return f"{self.tag:0x}: {bytes(self.data)!r}"


_STRING_TYPES: Dict[ValueTag, type] = {
    cls.TAG: cls
    for cls in (
        OctetString, TextWithoutLanguage, NameWithoutLanguage, Charset,
        NaturalLanguage, Uri, Keyword, MimeMediaType, MemberAttrName,
    )
}

def _decode_datetime(data: bytes) -> DateTime:
    fields = list(struct.unpack(">HBBBBBBcBB", data))
    fields[7] = fields[7].decode("latin-1")
    return DateTime(*fields)

# Tamaño fijo esperado y decodificador de cada tipo binario
_FIXED_DECODERS = {
    ValueTag.INTEGER: (4, lambda data: Integer(struct.unpack(">i", data)[0])),
    ValueTag.ENUM: (4, lambda data: Enum(struct.unpack(">i", data)[0])),
    ValueTag.BOOLEAN: (1, lambda data: Boolean(data[0] != 0)),
    ValueTag.RANGE_OF_INTEGER: (8, lambda data: RangeOfInteger(*struct.unpack(">ii", data))),
    ValueTag.RESOLUTION: (9, lambda data: Resolution(*struct.unpack(">iib", data))),
    ValueTag.DATETIME: (11, _decode_datetime),
}


# Convierte un valor Python al tipo IPP equivalente
def to_ipp_value(value: Any) -> IPPValue:
    if isinstance(value, IPPValue):
        return value
    if isinstance(value, bool):
        return Boolean(value)
    if isinstance(value, int):
        return Integer(value)
    if isinstance(value, str):
        return TextWithoutLanguage(value)
    if isinstance(value, (bytes, bytearray)):
        return OctetString(decode_string(bytes(value)))
    if isinstance(value, datetime):
        return DateTime.from_datetime(value)
    if isinstance(value, tuple) and len(value) == 3:
        return Resolution(int(value[0]), int(value[1]), int(value[2]))
    if isinstance(value, tuple) and len(value) == 2:
        return RangeOfInteger(int(value[0]), int(value[1]))
    if isinstance(value, list):
        if not value:
            raise ValueError("Cannot build an IPP value from an empty list")
        items = [to_ipp_value(item) for item in value]
        return items[0] if len(items) == 1 else ListOf(items)
    if isinstance(value, dict):
        members: List[IPPValue] = []
        for name, item in value.items():
            members.append(MemberAttrName(name))
            item = to_ipp_value(item)
            if isinstance(item, ListOf):
                members.extend(item.values)
            else:
                members.append(item)
        return Collection(members)
    raise TypeError(f"Unsupported value type for IPP: {type(value).__name__}")
