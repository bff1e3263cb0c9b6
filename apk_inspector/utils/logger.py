"""
Configuración del logging del inspector
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger as loguru_logger

COMPONENT_LOGGERS = ["PackageInspector", "ContainerUnwrapper", "IconResolver"]

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(
    name: str,
    level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configura y retorna un logger con nombre

    Args:
        name: Nombre del logger
        level: Nivel de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Ruta al archivo de log (opcional)
        console: Si debe mostrar logs en consola

    Returns:
        Logger configurado
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Evitar duplicación de handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_logging(logging_config: Dict[str, Any], names: Optional[List[str]] = None) -> logging.Logger:
    """
    Configura los loggers de los componentes a partir de la sección ``logging``

    Returns:
        El logger ``PackageInspector``
    """
    level = logging_config.get('level', 'INFO')
    log_file = logging_config.get('file')

    # androguard registra con loguru
    logging.getLogger('androguard').setLevel(logging.ERROR)
    loguru_logger.disable("androguard")

    loggers = [setup_logger(name, level, log_file) for name in (names or COMPONENT_LOGGERS)]
    return loggers[0]
