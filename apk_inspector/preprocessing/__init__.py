"""Inspección de paquetes Android: APK y contenedores XAPK"""

from .errors import (
    InspectionError,
    PackageNotFoundError,
    ArchiveError,
    EntryNotFoundError,
    ManifestDecodeError,
    ContainerEmptyError,
    InspectionIOError
)
from .manifest_decoder import AndroguardManifestDecoder, ManifestNode, ManifestTree
from .metadata_extractor import MetadataExtractor, PackageMetadata, format_file_size
from .package_loader import PackageFile, PackageLoader
from .pipeline import PackageInspector

__all__ = [
    'InspectionError',
    'PackageNotFoundError',
    'ArchiveError',
    'EntryNotFoundError',
    'ManifestDecodeError',
    'ContainerEmptyError',
    'InspectionIOError',
    'AndroguardManifestDecoder',
    'ManifestNode',
    'ManifestTree',
    'MetadataExtractor',
    'PackageMetadata',
    'format_file_size',
    'PackageFile',
    'PackageLoader',
    'PackageInspector'
]
