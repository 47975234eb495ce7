from typing import Optional


# Error base del codec IPP
class IPPError(Exception):
    pass


# Errores de decodificación: abortan el parseo sin resultado parcial
class ParseError(IPPError):
    pass


class InvalidTagError(ParseError):

    def __init__(self, tag: int):
        super().__init__(f"Invalid IPP tag: 0x{tag:02x}")
        self.tag = tag


class InvalidVersionError(ParseError):

    def __init__(self, version: int):
        super().__init__(f"Unsupported IPP version: {version >> 8}.{version & 0xff}")
        self.version = version


class InvalidCollectionError(ParseError):

    def __init__(self, message: str = "Invalid collection delimiter"):
        super().__init__(message)


# Lectura corta o fallo del lector subyacente
class IPPIOError(ParseError):

    def __init__(self, message: str, expected: Optional[int] = None, received: Optional[int] = None):
        super().__init__(message)
        self.expected = expected
        self.received = received


# Valor que no cabe en el formato binario (enteros fuera de rango, cadenas > 65535 bytes)
class EncodeError(IPPError):
    pass


# Falta un atributo de cabecera obligatorio; se lanza antes de escribir ningún byte
class RequestError(IPPError):

    def __init__(self, attribute: str):
        super().__init__(f"Missing required operation attribute: {attribute}")
        self.attribute = attribute
