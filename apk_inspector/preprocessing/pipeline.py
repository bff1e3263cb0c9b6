"""
Pipeline de inspección de paquetes Android (APK / XAPK)

Clasifica el contenedor, abre el APK, decodifica el manifest, extrae los
metadatos y busca el icono. La inspección es síncrona; ``inspect_async`` y
``inspect_many`` la ejecutan en un pool de hilos acotado.
"""

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from apk_inspector.preprocessing.archive import open_archive
from apk_inspector.preprocessing.container_unwrapper import ContainerUnwrapper
from apk_inspector.preprocessing.errors import InspectionError
from apk_inspector.preprocessing.icon_resolver import IconResolver
from apk_inspector.preprocessing.manifest_decoder import AndroguardManifestDecoder
from apk_inspector.preprocessing.metadata_extractor import (
    UNSPECIFIED,
    MetadataExtractor,
    PackageMetadata,
    format_file_size,
)

MANIFEST_ENTRY = "AndroidManifest.xml"
DEFAULT_MAX_WORKERS = 4


class PackageInspector:
    """
    Orquesta los componentes de inspección

    Args:
        config: Sección ``inspection`` de la configuración
        decoder: Objeto con ``decode(raw) -> ManifestTree``; por defecto androguard
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, decoder=None):
        self.config = config or {}
        self.logger = logging.getLogger("PackageInspector")
        self.manifest_entry = self.config.get('manifest_entry', MANIFEST_ENTRY)
        self.max_workers = self.config.get('max_workers', DEFAULT_MAX_WORKERS)

        self.decoder = decoder or AndroguardManifestDecoder()
        self.unwrapper = ContainerUnwrapper(self.config)
        self.extractor = MetadataExtractor(self.config.get('placeholder', UNSPECIFIED))
        self.icon_resolver = IconResolver()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    def inspect(self, package_path: Union[str, Path]) -> PackageMetadata:
        """
        Inspecciona un APK o XAPK

        Args:
            package_path: Ruta al paquete

        Returns:
            Metadatos del paquete (del APK interno si es un bundle)
        """
        package_path = Path(package_path)
        self.logger.info(f"Inspeccionando: {package_path}")

        try:
            if self.unwrapper.is_bundle(package_path):
                self.logger.info("Contenedor XAPK detectado, extrayendo APK interno...")
                return self.unwrapper.unwrap(package_path, self.inspect_package)
            return self.inspect_package(package_path)
        except InspectionError as e:
            self.logger.error(f"Inspección fallida de {package_path}: {e}")
            raise

    def inspect_package(self, apk_path: Path) -> PackageMetadata:
        """Inspecciona un APK directo (sin desempaquetar)"""
        with open_archive(apk_path) as archive:
            raw_manifest = archive.read_entry(self.manifest_entry)

            self.logger.debug("Decodificando AndroidManifest.xml...")
            tree = self.decoder.decode(raw_manifest)

            metadata = self.extractor.extract(tree)

            self.logger.debug("Buscando icono del launcher...")
            metadata.icon_base64 = self.icon_resolver.resolve(archive)

        metadata.file_size = apk_path.stat().st_size
        metadata.file_size_readable = format_file_size(metadata.file_size)

        self.logger.info(
            f"Paquete {metadata.package_name} {metadata.version_name} ({metadata.version_code}) "
            f"- {len(metadata.permissions)} permisos, {len(metadata.activities)} activities"
        )
        return metadata

    @property
    def executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="package-inspector"
                )
            return self._executor

    async def inspect_async(self, package_path: Union[str, Path]) -> PackageMetadata:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, self.inspect, package_path)

    def inspect_many(self, package_paths: List[Union[str, Path]]) -> List[Dict[str, Any]]:
        """
        Inspecciona varios paquetes en el pool; los errores quedan en el resultado

        Returns:
            Lista con un diccionario por paquete, en el mismo orden de entrada
        """
        futures = [(path, self.executor.submit(self.inspect, path)) for path in package_paths]

        results = []
        for path, future in futures:
            try:
                result = future.result().to_dict()
            except InspectionError as e:
                result = {'error': str(e)}
            result['apk_path'] = str(path)
            results.append(result)
        return results

    def close(self) -> None:
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def __enter__(self) -> "PackageInspector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
