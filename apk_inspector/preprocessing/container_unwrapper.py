"""
Desempaquetado de contenedores XAPK

Un XAPK es un ZIP que envuelve el APK instalable junto a metadatos
(``manifest.json``, iconos, OBBs). Se extrae el APK interno a un archivo
temporal, se inspecciona y el temporal se elimina siempre.
"""

import itertools
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

from apk_inspector.preprocessing.archive import ArchiveHandle, open_archive
from apk_inspector.preprocessing.errors import ContainerEmptyError, InspectionIOError

T = TypeVar("T")

DEFAULT_BUNDLE_EXTENSIONS = [".xapk"]
DEFAULT_INNER_PACKAGE_NAMES = ["base.apk", "split_config.base.apk"]
DEFAULT_PACKAGE_EXTENSION = ".apk"
DEFAULT_DIAGNOSTIC_ENTRY_LIMIT = 10

_scratch_sequence = itertools.count()


class ContainerUnwrapper:

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        self.logger = logging.getLogger("ContainerUnwrapper")
        self.bundle_extensions = [
            ext.lower() for ext in config.get('bundle_extensions', DEFAULT_BUNDLE_EXTENSIONS)
        ]
        self.inner_package_names = config.get('inner_package_names', DEFAULT_INNER_PACKAGE_NAMES)
        self.package_extension = config.get('package_extension', DEFAULT_PACKAGE_EXTENSION).lower()
        self.diagnostic_entry_limit = config.get('diagnostic_entry_limit', DEFAULT_DIAGNOSTIC_ENTRY_LIMIT)
        scratch_dir = config.get('scratch_dir')
        self.scratch_dir = Path(scratch_dir) if scratch_dir else None

    def is_bundle(self, path: Union[str, Path]) -> bool:
        return Path(path).suffix.lower() in self.bundle_extensions

    def select_inner_package(self, entries: List[str]) -> Optional[str]:
        for name in self.inner_package_names:
            if name in entries:
                return name

        for entry in entries:
            if entry.lower().endswith(self.package_extension):
                self.logger.warning(f"Sin APK base conocido; se usa {entry}")
                return entry

        return None

    def unwrap(self, bundle_path: Union[str, Path], inspect: Callable[[Path], T]) -> T:
        """
        Extrae el APK interno del bundle y ejecuta ``inspect`` sobre él

        Args:
            bundle_path: Ruta al XAPK
            inspect: Inspección de un APK directo

        Returns:
            El resultado de ``inspect`` sobre el APK interno
        """
        with open_archive(bundle_path) as bundle:
            entries = bundle.list_entries()
            inner_name = self.select_inner_package(entries)
            if inner_name is None:
                raise ContainerEmptyError(str(bundle_path), entries[:self.diagnostic_entry_limit])

            self.logger.info(f"APK interno seleccionado: {inner_name}")
            scratch_path = self._extract(bundle, inner_name)

        try:
            return inspect(scratch_path)
        finally:
            self._remove(scratch_path)

    def scratch_path_for(self) -> Path:
        directory = self.scratch_dir or Path(tempfile.gettempdir())
        name = f"apk_inspector_{os.getpid()}_{time.time_ns()}_{next(_scratch_sequence)}{self.package_extension}"
        return directory / name

    def _extract(self, bundle: ArchiveHandle, inner_name: str) -> Path:
        data = bundle.read_entry(inner_name)
        scratch_path = self.scratch_path_for()

        try:
            scratch_file = open(scratch_path, 'xb')
        except OSError as e:
            raise InspectionIOError(f"No se pudo crear el archivo temporal {scratch_path}: {e}") from e

        try:
            with scratch_file:
                scratch_file.write(data)
        except OSError as e:
            self._remove(scratch_path, missing_ok=True)
            raise InspectionIOError(f"No se pudo escribir el archivo temporal {scratch_path}: {e}") from e

        self.logger.debug(f"APK interno extraído en {scratch_path}")
        return scratch_path

    def _remove(self, scratch_path: Path, missing_ok: bool = False) -> None:
        try:
            scratch_path.unlink()
        except FileNotFoundError:
            if not missing_ok:
                raise InspectionIOError(f"Archivo temporal desaparecido: {scratch_path}")
        except OSError as e:
            raise InspectionIOError(f"No se pudo eliminar el archivo temporal {scratch_path}: {e}") from e
