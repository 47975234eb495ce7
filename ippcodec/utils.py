import logging
import logging.handlers
import sys
import os
from typing import Any, Dict, Optional

from .config.settings import settings
from .codec.message import IPPMessage
from .codec.tags import Operation, StatusCode

# Global logger instance
logger = logging.getLogger(__name__)

def setup_logging(log_level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:

    # Determine log level
    level = log_level or settings.LOG_LEVEL
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler if specified
    file_path = log_file or settings.LOG_FILE
    if file_path:
        try:
            directory = os.path.dirname(file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            # Rotating file handler to prevent huge log files
            file_handler = logging.handlers.RotatingFileHandler(
                file_path, maxBytes=10*1024*1024, backupCount=5
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

            logger.info(f"Logging to file: {file_path}")

        except OSError as e:
            logger.warning(f"Failed to setup file logging: {e}")

    logger.info(f"Logging initialized - Level: {level}")
    return root_logger

def validate_configuration() -> bool:
    logger.info("Validating configuration...")

    errors = settings.validate_config()
    if errors:
        logger.error("Configuration validation failed:")
        for error in errors:
            logger.error(f"  - {error}")
        return False

    logger.info("Configuration validation passed")
    return True

def format_bytes(size: int) -> str:
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"

def describe_message(message: IPPMessage, is_request: bool = True) -> Dict[str, Any]:
    header = message.header
    if is_request:
        operation = header.operation()
        label_key = 'operation_name'
        label = operation.label if isinstance(operation, Operation) else f'Unknown-0x{operation:04x}'
    else:
        status = header.status()
        label_key = 'status_name'
        label = status.name.lower().replace('_', '-') if isinstance(status, StatusCode) else f'Unknown-0x{status:04x}'

    report = {
        'header': {
            'version': str(header.version),
            'operation_status': f"0x{header.operation_status:04x}",
            label_key: label,
            'request_id': header.request_id,
        },
        'groups': {},
        'document_data_size': format_bytes(len(message.payload)),
    }

    for group in message.attributes.groups():
        report['groups'][group.name.lower()] = {
            name: {
                'tag': f"0x{int(attribute.value.to_tag()):02x}",
                'value': attribute.value.to_python(),
                'display': str(attribute.value),
            }
            for name, attribute in message.attributes.get_group(group).items()
        }

    return report
