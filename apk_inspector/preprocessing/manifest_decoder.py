"""
Decodificación del AndroidManifest.xml binario

El formato AXML lo decodifica androguard; este módulo lo adapta a un árbol
de atributos inmutable (``ManifestTree``) donde los nodos viven en una
lista y los hijos se referencian por índice.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from androguard.core.axml import AXMLPrinter
from loguru import logger

from apk_inspector.preprocessing.errors import ManifestDecodeError

# Suprimir logs de androguard
logger.disable("androguard")

ANDROID_NAMESPACE = "http://schemas.android.com/apk/res/android"


@dataclass(frozen=True)
class ManifestNode:
    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: Tuple[int, ...] = ()


class ManifestTree:
    """Árbol de nodos del manifest almacenado como arena"""

    def __init__(self, nodes: List[ManifestNode]):
        self._nodes = nodes

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def root(self) -> Optional[ManifestNode]:
        return self._nodes[0] if self._nodes else None

    def node(self, index: int) -> ManifestNode:
        return self._nodes[index]

    def children_of(self, node: ManifestNode) -> List[ManifestNode]:
        return [self._nodes[i] for i in node.children]

    def iter_nodes(self) -> Iterator[ManifestNode]:
        # Los nodos se agregan en preorden, así que el orden de la arena es
        # el orden de declaración del documento
        return iter(self._nodes)

    def find_all(self, tag: str) -> List[ManifestNode]:
        return [node for node in self._nodes if node.tag == tag]

    def find_first(self, tag: str) -> Optional[ManifestNode]:
        for node in self._nodes:
            if node.tag == tag:
                return node
        return None

    @classmethod
    def from_element(cls, element) -> "ManifestTree":
        """
        Construye el árbol a partir de un elemento XML (lxml o ElementTree)

        Los atributos con namespace se guardan con su prefijo
        (``android:versionCode``); los que no tienen namespace quedan con el
        nombre simple.
        """
        nodes: List[ManifestNode] = []
        cls._append(element, nodes)
        return cls(nodes)

    @classmethod
    def _append(cls, element, nodes: List[ManifestNode]) -> int:
        index = len(nodes)
        # Reservar la posición del padre antes de visitar los hijos
        nodes.append(ManifestNode(tag=""))

        prefixes = _namespace_prefixes(element)
        attributes = {
            _qualified_name(key, prefixes): value
            for key, value in element.attrib.items()
        }

        children = []
        for child in element:
            # lxml entrega comentarios e instrucciones como elementos sin tag str
            if not isinstance(child.tag, str):
                continue
            children.append(cls._append(child, nodes))

        nodes[index] = ManifestNode(
            tag=_local_name(element.tag),
            attributes=attributes,
            children=tuple(children),
        )
        return index


def _namespace_prefixes(element) -> Dict[str, str]:
    prefixes = {}
    nsmap = getattr(element, "nsmap", None) or {}
    for prefix, uri in nsmap.items():
        if prefix:
            prefixes[uri] = prefix
    # El namespace de Android siempre se guarda como ``android:``, sin
    # importar el prefijo declarado en el documento
    prefixes[ANDROID_NAMESPACE] = "android"
    return prefixes


def _local_name(tag: str) -> str:
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _qualified_name(key: str, prefixes: Dict[str, str]) -> str:
    if not key.startswith("{"):
        return key
    uri, name = key[1:].split("}", 1)
    prefix = prefixes.get(uri)
    return f"{prefix}:{name}" if prefix else name


class AndroguardManifestDecoder:
    """Decodifica bytes AXML con androguard y devuelve un ``ManifestTree``"""

    def decode(self, raw: bytes) -> ManifestTree:
        try:
            printer = AXMLPrinter(raw)
            root = printer.get_xml_obj() if printer.is_valid() else None
        except Exception as e:
            raise ManifestDecodeError(f"No se pudo decodificar AndroidManifest.xml: {e}") from e

        if root is None:
            raise ManifestDecodeError("AndroidManifest.xml no es un AXML válido")

        return ManifestTree.from_element(root)
