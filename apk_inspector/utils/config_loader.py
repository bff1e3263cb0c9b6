"""
Carga de la configuración YAML del inspector
"""

import copy
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    'logging': {
        'level': 'INFO',
        'file': None,
    },
    'inspection': {
        'placeholder': 'unspecified',
        'manifest_entry': 'AndroidManifest.xml',
        'bundle_extensions': ['.xapk'],
        'inner_package_names': ['base.apk', 'split_config.base.apk'],
        'package_extension': '.apk',
        'diagnostic_entry_limit': 10,
        'scratch_dir': None,
        'max_workers': 4,
    },
}

ENV_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Carga configuración desde archivo YAML sobre los valores por defecto

    Args:
        config_path: Ruta al archivo YAML; ``None`` devuelve los valores por defecto

    Returns:
        Diccionario con configuración
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path is None:
        return config

    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Archivo de configuración no encontrado: {config_path}")

    with open(config_file, 'r', encoding='utf-8') as f:
        loaded = yaml.safe_load(f) or {}

    return _merge(config, _replace_env_variables(loaded))


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(base[key], value)
        else:
            base[key] = value
    return base


def _replace_env_variables(config: Any) -> Any:
    """
    Reemplaza variables de entorno en la configuración (formato: ${VAR_NAME})

    Las variables no definidas se dejan tal cual.
    """
    if isinstance(config, dict):
        return {k: _replace_env_variables(v) for k, v in config.items()}
    elif isinstance(config, list):
        return [_replace_env_variables(item) for item in config]
    elif isinstance(config, str):
        return ENV_PATTERN.sub(lambda m: os.getenv(m.group(1), m.group(0)), config)
    else:
        return config
