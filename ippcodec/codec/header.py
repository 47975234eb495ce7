from typing import BinaryIO, Union
from dataclasses import dataclass
import logging
import struct

from .errors import InvalidVersionError
from .tags import IPPVersion, Operation, StatusCode
from .value import pack, read_exact, write_bytes

logger = logging.getLogger(__name__)

HEADER_FORMAT = ">HHI"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)

# Encabezado IPP de 8 bytes: versión, operación/estado e identificador de solicitud
# operation_status es operation-id en solicitudes y status-code en respuestas
@dataclass(frozen=True)
class IPPHeader:
    version: IPPVersion
    operation_status: int
    request_id: int

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "IPPHeader":
        raw_version, operation_status, request_id = struct.unpack(
            HEADER_FORMAT, read_exact(stream, HEADER_SIZE)
        )
        try:
            version = IPPVersion(raw_version)
        except ValueError:
            logger.error(f"Versión IPP no soportada: {raw_version >> 8}.{raw_version & 0xff}")
            raise InvalidVersionError(raw_version) from None

        header = cls(version, operation_status, request_id)
        logger.debug(
            f"Encabezado IPP: version={version}, operacion/estado=0x{operation_status:04x}, "
            f"request_id={request_id}"
        )
        return header

    def write(self, stream: BinaryIO) -> int:
        return write_bytes(stream, pack(HEADER_FORMAT, self.version, self.operation_status, self.request_id))

    # Interpreta el campo como operación (solicitudes)
    def operation(self) -> Union[Operation, int]:
        try:
            return Operation(self.operation_status)
        except ValueError:
            return self.operation_status

    # Interpreta el campo como código de estado (respuestas)
    def status(self) -> Union[StatusCode, int]:
        try:
            return StatusCode(self.operation_status)
        except ValueError:
            return self.operation_status
