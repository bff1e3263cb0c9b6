from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Sequence

from apk_inspector.preprocessing.attribute_normalizer import normalize_value
from apk_inspector.preprocessing.manifest_decoder import ManifestNode, ManifestTree

UNSPECIFIED = "unspecified"

KB = 1024
MB = KB * 1024
GB = MB * 1024


@dataclass
class PackageMetadata:
    package_name: str = UNSPECIFIED
    version_name: str = UNSPECIFIED
    version_code: str = UNSPECIFIED
    min_sdk_version: str = UNSPECIFIED
    target_sdk_version: str = UNSPECIFIED
    compile_sdk_version: str = UNSPECIFIED
    permissions: List[str] = field(default_factory=list)
    activities: List[str] = field(default_factory=list)
    services: List[str] = field(default_factory=list)
    receivers: List[str] = field(default_factory=list)
    providers: List[str] = field(default_factory=list)
    file_size: int = 0
    file_size_readable: str = "0 Bytes"
    icon_base64: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def attribute_keys(name: str) -> List[str]:
    """Claves candidatas para un atributo: con prefijo ``android:`` y sin él"""
    return [f"android:{name}", name]


# Cada campo se resuelve con la primera lista de claves que produzca valor
MANIFEST_FIELDS = {
    'package_name': [attribute_keys('package')],
    'version_name': [attribute_keys('versionName')],
    'version_code': [attribute_keys('versionCode')],
    'compile_sdk_version': [
        attribute_keys('compileSdkVersion'),
        attribute_keys('compileSdkVersionCodename'),
    ],
}

USES_SDK_FIELDS = {
    'min_sdk_version': [attribute_keys('minSdkVersion')],
    'target_sdk_version': [attribute_keys('targetSdkVersion')],
}

COMPONENT_TAGS = {
    'permissions': 'uses-permission',
    'activities': 'activity',
    'services': 'service',
    'receivers': 'receiver',
    'providers': 'provider',
}

NAME_KEYS = attribute_keys('name')


class MetadataExtractor:

    def __init__(self, placeholder: str = UNSPECIFIED):
        self.placeholder = placeholder

    def extract(self, tree: ManifestTree) -> PackageMetadata:
        metadata = PackageMetadata()

        self._fill_fields(metadata, tree.find_first('manifest'), MANIFEST_FIELDS)
        self._fill_fields(metadata, tree.find_first('uses-sdk'), USES_SDK_FIELDS)

        for attr, tag in COMPONENT_TAGS.items():
            setattr(metadata, attr, self.get_component_names(tree, tag))

        return metadata

    def get_component_names(self, tree: ManifestTree, tag: str) -> List[str]:
        names = []
        for node in tree.find_all(tag):
            name = lookup_attribute(node, NAME_KEYS)
            if name is not None:
                names.append(name)
        return names

    def _fill_fields(
        self,
        metadata: PackageMetadata,
        node: Optional[ManifestNode],
        fields: Dict[str, List[List[str]]]
    ) -> None:
        for attr, key_groups in fields.items():
            value = None
            if node is not None:
                for keys in key_groups:
                    value = lookup_attribute(node, keys)
                    # Un valor vacío pasa al siguiente grupo (p. ej. el codename)
                    if value:
                        break
            setattr(metadata, attr, value or self.placeholder)


def lookup_attribute(node: ManifestNode, keys: Sequence[str]) -> Optional[str]:
    """Valor de la primera clave presente (aunque esté vacío), ya normalizado"""
    for key in keys:
        value = node.attributes.get(key)
        if value is not None:
            return normalize_value(value)
    return None


def format_file_size(size: int) -> str:
    if size >= GB:
        return f"{size / GB:.2f} GB"
    elif size >= MB:
        return f"{size / MB:.2f} MB"
    elif size >= KB:
        return f"{size / KB:.2f} KB"
    else:
        return f"{size} Bytes"
