from pathlib import Path
from typing import List, Union
import zipfile
import zlib

from apk_inspector.preprocessing.errors import (
    ArchiveError,
    EntryNotFoundError,
    InspectionIOError,
    PackageNotFoundError,
)

# Entradas corruptas, cifradas o con compresión no soportada
READ_ERRORS = (
    zipfile.BadZipFile, zlib.error, OSError, EOFError,
    ValueError, RuntimeError, NotImplementedError
)


class ArchiveHandle:

    def __init__(self, path: Path, zip_file: zipfile.ZipFile):
        self.path = path
        self._zip = zip_file
        self._entries: List[str] = zip_file.namelist()

    def __enter__(self) -> "ArchiveHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._zip.close()

    def list_entries(self) -> List[str]:
        return list(self._entries)

    def read_entry(self, name: str) -> bytes:
        # coincidencia exacta con el nombre almacenado
        try:
            return self._zip.read(name)
        except KeyError:
            raise EntryNotFoundError(f"Entrada no encontrada en {self.path.name}: {name}")
        except READ_ERRORS as e:
            raise InspectionIOError(f"No se pudo leer {name} de {self.path.name}: {e}") from e


def open_archive(path: Union[str, Path]) -> ArchiveHandle:
    archive_path = Path(path)

    if not archive_path.exists():
        raise PackageNotFoundError(f"Archivo no encontrado: {archive_path}")

    try:
        zip_file = zipfile.ZipFile(archive_path, 'r')
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveError(f"No se pudo abrir {archive_path} como ZIP: {e}") from e

    return ArchiveHandle(archive_path, zip_file)
