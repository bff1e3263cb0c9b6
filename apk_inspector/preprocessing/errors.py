"""
Excepciones del pipeline de inspección de paquetes
"""

from typing import List


class InspectionError(Exception):
    """Error terminal de una inspección"""


class PackageNotFoundError(InspectionError):
    pass


class ArchiveError(InspectionError):
    pass


class EntryNotFoundError(InspectionError):
    pass


class ManifestDecodeError(InspectionError):
    pass


class ContainerEmptyError(InspectionError):

    def __init__(self, container: str, entries: List[str]):
        self.container = container
        self.entries = entries
        super().__init__(
            f"No se encontró ningún APK instalable en {container}. "
            f"Entradas: {', '.join(entries) if entries else '(vacío)'}"
        )


class InspectionIOError(InspectionError):
    """Fallo al crear, escribir o eliminar el archivo temporal de un bundle"""
