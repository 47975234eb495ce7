from typing import List, Optional
import os

from dotenv import load_dotenv

from ..codec.tags import IPPVersion

class CodecSettings:

    def __init__(self):
        # Configuración IPP por defecto para mensajes nuevos
        self.IPP_VERSION = os.getenv('IPP_VERSION', '1.1')
        self.IPP_CHARSET = os.getenv('IPP_CHARSET', 'utf-8')
        self.IPP_NATURAL_LANGUAGE = os.getenv('IPP_NATURAL_LANGUAGE', 'en')
        self.IPP_REQUEST_ID = int(os.getenv('IPP_REQUEST_ID', 1))

        # Configuración de registro/logging
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
        self.LOG_FILE = os.getenv('LOG_FILE', None)  # Ninguno = salida a consola

    # Versión por defecto como IPPVersion
    def default_version(self) -> IPPVersion:
        return IPPVersion.from_string(self.IPP_VERSION)

    def validate_config(self) -> List[str]:
        errors = []

        try:
            self.default_version()
        except ValueError:
            errors.append(f"IPP_VERSION must be one of 1.0, 1.1, 2.0, 2.1, 2.2 (got {self.IPP_VERSION!r})")

        if not self.IPP_CHARSET:
            errors.append("IPP_CHARSET cannot be empty")

        if not self.IPP_NATURAL_LANGUAGE:
            errors.append("IPP_NATURAL_LANGUAGE cannot be empty")

        if self.IPP_REQUEST_ID < 1 or self.IPP_REQUEST_ID > 0xffffffff:
            errors.append("IPP_REQUEST_ID must be between 1 and 4294967295")

        if self.LOG_LEVEL.upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            errors.append(f"LOG_LEVEL is not a valid logging level: {self.LOG_LEVEL}")

        return errors

# Cargar configuración por defecto
settings = CodecSettings()

# Carga variables desde un archivo .env y actualiza la configuración compartida
def load_env_file(path: Optional[str] = None, override: bool = False) -> CodecSettings:
    load_dotenv(path, override=override)
    settings.__init__()
    return settings
