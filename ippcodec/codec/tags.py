from typing import Optional
from enum import IntEnum

# Rangos de bytes de la gramática IPP
DELIMITER_TAG_RANGE = range(0x00, 0x10)
VALUE_TAG_RANGE = range(0x10, 0x4b)

# Etiquetas delimitadoras de grupos de atributos
class DelimiterTag(IntEnum):
    OPERATION_ATTRIBUTES = 0x01
    JOB_ATTRIBUTES = 0x02
    END_OF_ATTRIBUTES = 0x03
    PRINTER_ATTRIBUTES = 0x04
    UNSUPPORTED_ATTRIBUTES = 0x05

    @classmethod
    def from_byte(cls, value: int) -> Optional["DelimiterTag"]:
        try:
            return cls(value)
        except ValueError:
            return None

# Etiquetas de valor (tipo del valor que sigue)
class ValueTag(IntEnum):
    # Fuera de banda
    UNSUPPORTED = 0x10
    DEFAULT = 0x11
    UNKNOWN = 0x12
    NO_VALUE = 0x13
    NOT_SETTABLE = 0x15
    DELETE_ATTRIBUTE = 0x16
    ADMIN_DEFINE = 0x17

    # Enteros
    INTEGER = 0x21
    BOOLEAN = 0x22
    ENUM = 0x23

    # Cadenas binarias y estructuras
    OCTET_STRING = 0x30
    DATETIME = 0x31
    RESOLUTION = 0x32
    RANGE_OF_INTEGER = 0x33
    BEG_COLLECTION = 0x34
    TEXT_WITH_LANGUAGE = 0x35
    NAME_WITH_LANGUAGE = 0x36
    END_COLLECTION = 0x37

    # Cadenas de caracteres
    TEXT_WITHOUT_LANGUAGE = 0x41
    NAME_WITHOUT_LANGUAGE = 0x42
    KEYWORD = 0x44
    URI = 0x45
    URI_SCHEME = 0x46
    CHARSET = 0x47
    NATURAL_LANGUAGE = 0x48
    MIME_MEDIA_TYPE = 0x49
    MEMBER_ATTR_NAME = 0x4a

    @classmethod
    def from_byte(cls, value: int) -> Optional["ValueTag"]:
        try:
            return cls(value)
        except ValueError:
            return None

# Versiones IPP admitidas, codificadas como (mayor << 8) | menor
class IPPVersion(IntEnum):
    IPP_10 = 0x0100
    IPP_11 = 0x0101
    IPP_20 = 0x0200
    IPP_21 = 0x0201
    IPP_22 = 0x0202

    @property
    def major(self) -> int:
        return self.value >> 8

    @property
    def minor(self) -> int:
        return self.value & 0xff

    def __str__(self):
        return f"{self.major}.{self.minor}"

    @classmethod
    def from_string(cls, text: str) -> "IPPVersion":
        major, _, minor = text.strip().partition(".")
        return cls((int(major) << 8) | int(minor or 0))

# Operaciones IPP (campo operation-id de una solicitud)
class Operation(IntEnum):
    PRINT_JOB = 0x0002
    PRINT_URI = 0x0003
    VALIDATE_JOB = 0x0004
    CREATE_JOB = 0x0005
    SEND_DOCUMENT = 0x0006
    SEND_URI = 0x0007
    CANCEL_JOB = 0x0008
    GET_JOB_ATTRIBUTES = 0x0009
    GET_JOBS = 0x000a
    GET_PRINTER_ATTRIBUTES = 0x000b
    HOLD_JOB = 0x000c
    RELEASE_JOB = 0x000d
    RESTART_JOB = 0x000e
    PAUSE_PRINTER = 0x0010
    RESUME_PRINTER = 0x0011
    PURGE_JOBS = 0x0012

    # Nombre en notación IPP, p.ej. "Get-Printer-Attributes"
    @property
    def label(self) -> str:
        return "-".join(part.capitalize() for part in self.name.split("_"))

# Códigos de estado IPP (campo status-code de una respuesta)
class StatusCode(IntEnum):
    # Éxito
    SUCCESSFUL_OK = 0x0000
    SUCCESSFUL_OK_IGNORED_OR_SUBSTITUTED_ATTRIBUTES = 0x0001
    SUCCESSFUL_OK_CONFLICTING_ATTRIBUTES = 0x0002

    # Errores del cliente
    CLIENT_ERROR_BAD_REQUEST = 0x0400
    CLIENT_ERROR_FORBIDDEN = 0x0401
    CLIENT_ERROR_NOT_AUTHENTICATED = 0x0402
    CLIENT_ERROR_NOT_AUTHORIZED = 0x0403
    CLIENT_ERROR_NOT_POSSIBLE = 0x0404
    CLIENT_ERROR_TIMEOUT = 0x0405
    CLIENT_ERROR_NOT_FOUND = 0x0406
    CLIENT_ERROR_GONE = 0x0407
    CLIENT_ERROR_REQUEST_ENTITY_TOO_LARGE = 0x0408
    CLIENT_ERROR_REQUEST_VALUE_TOO_LONG = 0x0409
    CLIENT_ERROR_DOCUMENT_FORMAT_NOT_SUPPORTED = 0x040a
    CLIENT_ERROR_ATTRIBUTES_OR_VALUES_NOT_SUPPORTED = 0x040b
    CLIENT_ERROR_URI_SCHEME_NOT_SUPPORTED = 0x040c
    CLIENT_ERROR_CHARSET_NOT_SUPPORTED = 0x040d
    CLIENT_ERROR_CONFLICTING_ATTRIBUTES = 0x040e
    CLIENT_ERROR_COMPRESSION_NOT_SUPPORTED = 0x040f
    CLIENT_ERROR_COMPRESSION_ERROR = 0x0410
    CLIENT_ERROR_DOCUMENT_FORMAT_ERROR = 0x0411
    CLIENT_ERROR_DOCUMENT_ACCESS_ERROR = 0x0412

    # Errores del servidor
    SERVER_ERROR_INTERNAL_ERROR = 0x0500
    SERVER_ERROR_OPERATION_NOT_SUPPORTED = 0x0501
    SERVER_ERROR_SERVICE_UNAVAILABLE = 0x0502
    SERVER_ERROR_VERSION_NOT_SUPPORTED = 0x0503
    SERVER_ERROR_DEVICE_ERROR = 0x0504
    SERVER_ERROR_TEMPORARY_ERROR = 0x0505
    SERVER_ERROR_NOT_ACCEPTING_JOBS = 0x0506
    SERVER_ERROR_BUSY = 0x0507
    SERVER_ERROR_JOB_CANCELED = 0x0508
    SERVER_ERROR_MULTIPLE_DOCUMENT_JOBS_NOT_SUPPORTED = 0x0509

    @property
    def is_success(self) -> bool:
        return self.value < 0x0100
