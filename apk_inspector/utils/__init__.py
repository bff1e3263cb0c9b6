"""Paquete de utilidades del inspector"""

from .logger import setup_logger
from .config_loader import load_config
from .report_generator import ReportGenerator

__all__ = ['setup_logger', 'load_config', 'ReportGenerator']
