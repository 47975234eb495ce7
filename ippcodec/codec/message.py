from typing import Any, BinaryIO, Optional, Sequence, Union
import io
import logging

from ..config.settings import settings
from .attribute import (
    ATTRIBUTES_CHARSET,
    ATTRIBUTES_NATURAL_LANGUAGE,
    PRINTER_URI,
    REQUEST_HEADER_ATTRS,
    RESPONSE_HEADER_ATTRS,
    IPPAttribute,
    IPPAttributes,
)
from .errors import IPPIOError
from .header import IPPHeader
from .parser import IPPParser
from .tags import DelimiterTag, IPPVersion, Operation, StatusCode
from .value import Charset, NaturalLanguage, Uri, to_ipp_value, write_bytes

logger = logging.getLogger(__name__)

# Mensaje IPP completo: encabezado, atributos y datos del documento que siguen
class IPPMessage:

    def __init__(
        self,
        header: IPPHeader,
        attributes: Optional[IPPAttributes] = None,
        payload: bytes = b"",
        required: Sequence[str] = REQUEST_HEADER_ATTRS,
    ):
        self.header = header
        self.attributes = attributes if attributes is not None else IPPAttributes()
        self.payload = payload
        self.required = tuple(required)

    # Solicitud con charset, idioma y printer-uri ya cargados
    @classmethod
    def new_request(
        cls,
        operation: Union[Operation, int],
        uri: Optional[str] = None,
        version: Optional[IPPVersion] = None,
        request_id: Optional[int] = None,
    ) -> "IPPMessage":
        header = IPPHeader(
            version or settings.default_version(),
            operation,
            request_id if request_id is not None else settings.IPP_REQUEST_ID,
        )
        message = cls(header, required=REQUEST_HEADER_ATTRS)
        message._add_language_attributes()
        if uri is not None:
            message.add(DelimiterTag.OPERATION_ATTRIBUTES, PRINTER_URI, Uri(uri))
        return message

    # Respuesta: solo charset e idioma son obligatorios
    @classmethod
    def new_response(
        cls,
        status: Union[StatusCode, int],
        request_id: int,
        version: Optional[IPPVersion] = None,
    ) -> "IPPMessage":
        header = IPPHeader(version or settings.default_version(), status, request_id)
        message = cls(header, required=RESPONSE_HEADER_ATTRS)
        message._add_language_attributes()
        return message

    # Parsea un mensaje; lo que sigue a end-of-attributes es el documento
    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "IPPMessage":
        result = IPPParser(stream).parse()
        try:
            payload = stream.read()
        except OSError as e:
            raise IPPIOError(f"Read failure: {e}") from e
        payload = payload or b""
        if payload:
            logger.debug(f"Datos de documento: {len(payload)} bytes")
        return cls(result.header, result.attributes, payload)

    @classmethod
    def from_bytes(cls, data: bytes) -> "IPPMessage":
        return cls.from_stream(io.BytesIO(data))

    def _add_language_attributes(self):
        self.add(DelimiterTag.OPERATION_ATTRIBUTES, ATTRIBUTES_CHARSET, Charset(settings.IPP_CHARSET))
        self.add(
            DelimiterTag.OPERATION_ATTRIBUTES,
            ATTRIBUTES_NATURAL_LANGUAGE,
            NaturalLanguage(settings.IPP_NATURAL_LANGUAGE),
        )

    # Agrega un atributo; acepta IPPValue o un valor Python simple
    def add(self, group: DelimiterTag, name: str, value: Any) -> IPPAttribute:
        attribute = IPPAttribute(name, to_ipp_value(value))
        self.attributes.add(group, attribute)
        return attribute

    def get(self, group: DelimiterTag, name: str) -> Optional[IPPAttribute]:
        return self.attributes.get(group, name)

    # Encabezado + atributos + documento; valida los atributos obligatorios antes de escribir
    def write(self, stream: BinaryIO) -> int:
        # El encabezado solo se emite si los atributos son válidos
        body = io.BytesIO()
        attributes_size = self.attributes.write(body, self.required)
        written = self.header.write(stream)
        written += write_bytes(stream, body.getvalue())
        if self.payload:
            written += write_bytes(stream, self.payload)
        logger.debug(
            f"Mensaje IPP serializado: {written} bytes "
            f"(atributos={attributes_size}, documento={len(self.payload)})"
        )
        return written

    def to_bytes(self) -> bytes:
        stream = io.BytesIO()
        self.write(stream)
        return stream.getvalue()

    def __repr__(self):
        return (
            f"IPPMessage(header={self.header!r}, attributes={self.attributes!r}, "
            f"payload={len(self.payload)} bytes)"
        )
