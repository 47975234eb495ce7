from typing import BinaryIO, Dict, List, Optional, Sequence, Tuple
import logging

from .errors import RequestError
from .tags import DelimiterTag
from .value import IPPValue, encode_string, pack, write_bytes

logger = logging.getLogger(__name__)

# Nombres de atributos usados por el codec y los constructores de mensajes
ATTRIBUTES_CHARSET = "attributes-charset"
ATTRIBUTES_NATURAL_LANGUAGE = "attributes-natural-language"
PRINTER_URI = "printer-uri"
REQUESTING_USER_NAME = "requesting-user-name"
REQUESTED_ATTRIBUTES = "requested-attributes"
JOB_ID = "job-id"
JOB_NAME = "job-name"
JOB_URI = "job-uri"
JOB_STATE = "job-state"
DOCUMENT_FORMAT = "document-format"
LAST_DOCUMENT = "last-document"
OPERATIONS_SUPPORTED = "operations-supported"
PRINTER_STATE = "printer-state"
STATUS_MESSAGE = "status-message"

# Atributos de operación obligatorios, en el orden en que se serializan
REQUEST_HEADER_ATTRS = (ATTRIBUTES_CHARSET, ATTRIBUTES_NATURAL_LANGUAGE, PRINTER_URI)
RESPONSE_HEADER_ATTRS = (ATTRIBUTES_CHARSET, ATTRIBUTES_NATURAL_LANGUAGE)

# Grupos que se serializan tras los atributos de operación
TRAILING_GROUPS = (DelimiterTag.JOB_ATTRIBUTES, DelimiterTag.PRINTER_ATTRIBUTES)

# Atributo IPP: nombre + valor
class IPPAttribute:

    def __init__(self, name: str, value: IPPValue):
        self.name = name
        self.value = value

    def __eq__(self, other):
        if not isinstance(other, IPPAttribute):
            return NotImplemented
        return self.name == other.name and self.value == other.value

    def __repr__(self):
        return f"IPPAttribute(name='{self.name}', value={self.value!r})"

    def __str__(self):
        return f"{self.name}: {self.value}"

    # Etiqueta + longitud del nombre + nombre + valor codificado
    def write(self, stream: BinaryIO) -> int:
        name_bytes = encode_string(self.name)
        written = write_bytes(stream, pack(">BH", self.value.to_tag(), len(name_bytes)) + name_bytes)
        return written + self.value.write(stream)

# Atributos indexados por grupo y nombre, en orden de inserción
# Cada aparición de un delimitador se conserva como grupo propio (p. ej. un grupo de trabajo por trabajo)
class IPPAttributes:

    def __init__(self):
        self._groups: Dict[DelimiterTag, Dict[str, IPPAttribute]] = {}
        self._occurrences: List[Tuple[DelimiterTag, Dict[str, IPPAttribute]]] = []

    # Abre una nueva aparición del grupo; los add siguientes van a ella
    def start_group(self, group: DelimiterTag):
        self._occurrences.append((DelimiterTag(group), {}))

    # Inserta o reemplaza por nombre dentro del grupo; un reemplazo conserva la posición
    def add(self, group: DelimiterTag, attribute: IPPAttribute):
        group = DelimiterTag(group)
        self._groups.setdefault(group, {})[attribute.name] = attribute
        self._last_occurrence(group)[attribute.name] = attribute

    def _last_occurrence(self, group: DelimiterTag) -> Dict[str, IPPAttribute]:
        for tag, attributes in reversed(self._occurrences):
            if tag == group:
                return attributes
        self.start_group(group)
        return self._occurrences[-1][1]

    def get(self, group: DelimiterTag, name: str) -> Optional[IPPAttribute]:
        return self._groups.get(group, {}).get(name)

    # Vista combinada: ante grupos repetidos gana el último valor de cada nombre
    def get_group(self, group: DelimiterTag) -> Dict[str, IPPAttribute]:
        return self._groups.get(group, {})

    # Una entrada por cada aparición del grupo, en orden de llegada
    def groups_of(self, group: DelimiterTag) -> List[Dict[str, IPPAttribute]]:
        return [attributes for tag, attributes in self._occurrences if tag == group]

    def has_group(self, group: DelimiterTag) -> bool:
        return group in self._groups

    def groups(self) -> List[DelimiterTag]:
        return list(self._groups)

    # Quita el nombre de todas las apariciones del grupo; devuelve el valor visible
    def remove(self, group: DelimiterTag, name: str) -> Optional[IPPAttribute]:
        attributes = self._groups.get(group)
        if attributes is None:
            return None
        attribute = attributes.pop(name, None)
        if not attributes:
            del self._groups[group]
        if attribute is not None:
            for tag, occurrence in self._occurrences:
                if tag == group:
                    occurrence.pop(name, None)
            self._occurrences = [
                (tag, occurrence) for tag, occurrence in self._occurrences
                if tag != group or occurrence
            ]
        return attribute

    @property
    def operation_attributes(self) -> Dict[str, IPPAttribute]:
        return self.get_group(DelimiterTag.OPERATION_ATTRIBUTES)

    @property
    def job_attributes(self) -> Dict[str, IPPAttribute]:
        return self.get_group(DelimiterTag.JOB_ATTRIBUTES)

    @property
    def printer_attributes(self) -> Dict[str, IPPAttribute]:
        return self.get_group(DelimiterTag.PRINTER_ATTRIBUTES)

    @property
    def unsupported_attributes(self) -> Dict[str, IPPAttribute]:
        return self.get_group(DelimiterTag.UNSUPPORTED_ATTRIBUTES)

    def __len__(self):
        return sum(len(attributes) for _, attributes in self._occurrences)

    def __repr__(self):
        groups = ", ".join(f"{group.name}={list(attrs)}" for group, attrs in self._groups.items())
        return f"IPPAttributes({groups})"

    # Serializa los grupos; los atributos obligatorios se validan antes de escribir nada
    def write(self, stream: BinaryIO, required: Sequence[str] = REQUEST_HEADER_ATTRS) -> int:
        headers = []
        for name in required:
            attribute = self.get(DelimiterTag.OPERATION_ATTRIBUTES, name)
            if attribute is None:
                logger.error(f"Falta el atributo de operación obligatorio: {name}")
                raise RequestError(name)
            headers.append(attribute)

        written = write_bytes(stream, pack(">B", DelimiterTag.OPERATION_ATTRIBUTES))
        for attribute in headers:
            written += attribute.write(stream)

        for name, attribute in self.operation_attributes.items():
            if name not in required:
                written += attribute.write(stream)

        # Cada aparición de un grupo se escribe con su propio delimitador
        for group in TRAILING_GROUPS:
            for attributes in self.groups_of(group):
                if not attributes:
                    continue
                written += write_bytes(stream, pack(">B", group))
                for attribute in attributes.values():
                    written += attribute.write(stream)

        written += write_bytes(stream, pack(">B", DelimiterTag.END_OF_ATTRIBUTES))
        return written
