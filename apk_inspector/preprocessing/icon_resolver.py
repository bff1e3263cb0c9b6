"""
Búsqueda del icono del launcher dentro del APK

Tres fases independientes producen listas ordenadas de candidatos y un único
lector intenta leerlos en orden:

1. ``scan_by_name``: cualquier ``ic_launcher*.png`` del archivo, sin importar
   el directorio (algunas herramientas generan el icono fuera de ``res/``).
2. ``scan_by_bucket``: recorrido por directorios de densidad, de mayor a
   menor resolución, cuando la primera fase no encuentra nada legible.
3. ``scan_other_formats``: ``ic_launcher*`` en WebP o JPEG, ordenados por
   densidad, solo si no hay ningún PNG legible.

La ausencia de icono no es un error: ``resolve`` devuelve ``None``.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from apk_inspector.preprocessing.archive import ArchiveHandle
from apk_inspector.preprocessing.errors import InspectionError

ICON_PREFIX = "ic_launcher"
ICON_EXTENSION = ".png"
# Formatos aceptados solo cuando no hay ningún PNG legible
FALLBACK_EXTENSIONS = (".webp", ".jpg", ".jpeg")

# De mayor a menor resolución
DENSITIES = ["xxxhdpi", "xxhdpi", "xhdpi", "hdpi", "mdpi", "ldpi"]

DENSITY_BUCKETS = (
    [f"mipmap-{d}" for d in DENSITIES] + ["mipmap"] +
    [f"drawable-{d}" for d in DENSITIES] + ["drawable"]
)

BUCKET_NAME_ORDER = ["ic_launcher.png", "ic_launcher_round.png"]

MIME_TYPES = {
    'png': 'image/png',
    'webp': 'image/webp',
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
}


@dataclass
class IconCandidate:
    path: str
    rank: tuple


def split_path(path: str) -> List[str]:
    return [part for part in path.replace("\\", "/").split("/") if part]


def file_name(path: str) -> str:
    parts = split_path(path)
    return parts[-1] if parts else ""


def is_launcher_png(path: str) -> bool:
    lower_path = path.lower()
    return lower_path.endswith(ICON_EXTENSION) and file_name(lower_path).startswith(ICON_PREFIX)


def density_rank(path: str) -> int:
    """
    Posición de la densidad del directorio en ``DENSITIES``

    Se revisan los calificadores de cada directorio (``mipmap-xxxhdpi-v4``
    cuenta como xxxhdpi). Sin calificador de densidad va al final.
    """
    best = len(DENSITIES)
    for directory in split_path(path.lower())[:-1]:
        for qualifier in directory.split("-")[1:]:
            if qualifier in DENSITIES:
                best = min(best, DENSITIES.index(qualifier))
    return best


def scan_by_name(entries: Iterable[str]) -> List[IconCandidate]:
    candidates = [
        IconCandidate(path=entry, rank=(density_rank(entry), len(entry)))
        for entry in entries
        if is_launcher_png(entry)
    ]
    # sort() es estable: los empates conservan el orden del archivo
    candidates.sort(key=lambda c: c.rank)
    return candidates


def in_bucket(path: str, bucket: str) -> bool:
    return bucket in split_path(path.lower())[:-1]


def bucket_name_rank(path: str) -> int:
    name = file_name(path.lower())
    if name in BUCKET_NAME_ORDER:
        return BUCKET_NAME_ORDER.index(name)
    return len(BUCKET_NAME_ORDER)


def scan_by_bucket(entries: Iterable[str], bucket: str) -> List[IconCandidate]:
    candidates = [
        IconCandidate(path=entry, rank=(bucket_name_rank(entry), file_name(entry).lower()))
        for entry in entries
        if in_bucket(entry, bucket) and is_launcher_png(entry)
    ]
    candidates.sort(key=lambda c: c.rank)
    return candidates


def is_launcher_fallback_image(path: str) -> bool:
    lower_path = path.lower()
    return lower_path.endswith(FALLBACK_EXTENSIONS) and file_name(lower_path).startswith(ICON_PREFIX)


def scan_other_formats(entries: Iterable[str]) -> List[IconCandidate]:
    candidates = [
        IconCandidate(path=entry, rank=(density_rank(entry), len(entry)))
        for entry in entries
        if is_launcher_fallback_image(entry)
    ]
    candidates.sort(key=lambda c: c.rank)
    return candidates


def to_data_uri(path: str, data: bytes) -> str:
    extension = path.rsplit(".", 1)[-1].lower() if "." in file_name(path) else ""
    mime_type = MIME_TYPES.get(extension, 'image/png')
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


class IconResolver:

    def __init__(self):
        self.logger = logging.getLogger("IconResolver")

    def resolve(self, archive: ArchiveHandle) -> Optional[str]:
        """
        Devuelve el icono del launcher como data URI, o ``None`` si no hay

        Args:
            archive: APK abierto

        Returns:
            ``data:<mime>;base64,...`` o ``None``
        """
        entries = archive.list_entries()

        icon = self._read_first(archive, scan_by_name(entries))
        if icon is not None:
            return icon

        for bucket in DENSITY_BUCKETS:
            icon = self._read_first(archive, scan_by_bucket(entries, bucket))
            if icon is not None:
                return icon

        icon = self._read_first(archive, scan_other_formats(entries))
        if icon is not None:
            return icon

        self.logger.info(f"No se encontró icono en {archive.path.name}")
        return None

    def _read_first(self, archive: ArchiveHandle, candidates: List[IconCandidate]) -> Optional[str]:
        for candidate in candidates:
            try:
                data = archive.read_entry(candidate.path)
            except InspectionError as e:
                self.logger.debug(f"Candidato de icono descartado {candidate.path}: {e}")
                continue
            self.logger.debug(f"Icono seleccionado: {candidate.path}")
            return to_data_uri(candidate.path, data)
        return None
