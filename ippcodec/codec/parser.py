from typing import BinaryIO, List, Optional
import logging

from .attribute import IPPAttribute, IPPAttributes
from .errors import InvalidCollectionError, InvalidTagError
from .header import IPPHeader
from .tags import DELIMITER_TAG_RANGE, VALUE_TAG_RANGE, DelimiterTag, ValueTag
from .value import Collection, IPPValue, ListOf, decode_string, read_exact, read_u16, read_u8

logger = logging.getLogger(__name__)

# Un solo valor se devuelve como escalar; varios como ListOf
def list_or_value(values: List[IPPValue]) -> IPPValue:
    if len(values) == 1:
        return values[0]
    return ListOf(values)

# Resultado de un parseo completo: encabezado + atributos
class IPPParseResult:

    def __init__(self, header: IPPHeader, attributes: IPPAttributes):
        self.header = header
        self.attributes = attributes

    def __repr__(self):
        return f"IPPParseResult(header={self.header!r}, attributes={self.attributes!r})"

# Analizador IPP sobre un flujo de bytes
# Las colecciones anidadas se resuelven con una pila explícita de marcos, sin recursión
class IPPParser:

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.current_group = DelimiterTag.END_OF_ATTRIBUTES
        self.pending_name: Optional[str] = None
        self.pending_group = DelimiterTag.END_OF_ATTRIBUTES
        self.frames: List[List[IPPValue]] = [[]]
        self.attributes = IPPAttributes()

    # Parsea el encabezado y todos los grupos hasta end-of-attributes
    def parse(self) -> IPPParseResult:
        header = IPPHeader.from_stream(self.stream)

        while True:
            tag = read_u8(self.stream)
            if tag in DELIMITER_TAG_RANGE:
                if self._parse_delimiter(tag):
                    break
            elif tag in VALUE_TAG_RANGE:
                self._parse_value(tag)
            else:
                logger.error(f"Etiqueta fuera de la gramática IPP: 0x{tag:02x}")
                raise InvalidTagError(tag)

        logger.debug(f"Parseo IPP completo: {len(self.attributes)} atributos")
        return IPPParseResult(header, self.attributes)

    # Devuelve True al llegar a end-of-attributes
    def _parse_delimiter(self, tag: int) -> bool:
        delimiter = DelimiterTag.from_byte(tag)
        if delimiter is None:
            logger.error(f"Delimitador desconocido: 0x{tag:02x}")
            raise InvalidTagError(tag)

        logger.debug(f"Delimitador de grupo: {delimiter.name}")
        if len(self.frames) > 1:
            logger.error(f"Delimitador {delimiter.name} dentro de una colección abierta")
            raise InvalidCollectionError(f"Unterminated collection before {delimiter.name}")

        self._flush()
        if delimiter == DelimiterTag.END_OF_ATTRIBUTES:
            return True

        self.current_group = delimiter
        self.attributes.start_group(delimiter)
        return False

    def _parse_value(self, tag: int):
        name_length = read_u16(self.stream)
        name = decode_string(read_exact(self.stream, name_length))
        value = IPPValue.read(tag, self.stream)

        logger.debug(f"Valor 0x{tag:02x}: '{name}': {value}")

        if name_length > 0:
            # Atributo nuevo o inicio de un arreglo
            if len(self.frames) > 1:
                logger.error(f"Atributo '{name}' dentro de una colección abierta")
                raise InvalidCollectionError(f"Named attribute '{name}' inside an open collection")
            self._flush()
            self.pending_name = name
            self.pending_group = self.current_group

        if tag == ValueTag.BEG_COLLECTION:
            self.frames.append([])
        elif tag == ValueTag.END_COLLECTION:
            if len(self.frames) < 2:
                logger.error("endCollection sin begCollection previo")
                raise InvalidCollectionError("End of collection without a matching begin")
            members = self.frames.pop()
            self._append(Collection(members))
        else:
            self._append(value)

    def _append(self, value: IPPValue):
        if len(self.frames) == 1 and self.pending_name is None:
            logger.warning(f"Valor sin atributo previo descartado: {value}")
            return
        self.frames[-1].append(value)

    # Agrega el atributo pendiente al grupo recordado y reinicia el marco superior
    def _flush(self):
        if self.pending_name is None:
            return
        values = self.frames.pop()
        if values:
            attribute = IPPAttribute(self.pending_name, list_or_value(values))
            self.attributes.add(self.pending_group, attribute)
        self.frames.append([])
        self.pending_name = None

# Atajo: parsea un flujo completo
def parse(stream: BinaryIO) -> IPPParseResult:
    return IPPParser(stream).parse()
