from pathlib import Path
from typing import Iterable, List, Optional
from dataclasses import dataclass

from apk_inspector.preprocessing.container_unwrapper import DEFAULT_BUNDLE_EXTENSIONS


@dataclass
class PackageFile:
    name: str
    path: Path
    kind: str
    size: int


class PackageLoader:

    def __init__(self, root_path: Path, bundle_extensions: Optional[Iterable[str]] = None):
        self.root_path = root_path
        self.bundle_extensions = [
            ext.lower() for ext in (bundle_extensions or DEFAULT_BUNDLE_EXTENSIONS)
        ]
        self.packages: List[PackageFile] = []

    def load_dataset(self) -> List[PackageFile]:
        self.packages = []
        package_files = sorted(p for p in self.root_path.rglob("*") if p.is_file())

        for package_file in package_files:
            kind = self._extract_kind(package_file)
            if kind is None:
                continue
            package_info = PackageFile(
                name=package_file.stem,
                path=package_file,
                kind=kind,
                size=package_file.stat().st_size
            )
            self.packages.append(package_info)

        return self.packages

    def _extract_kind(self, package_path: Path) -> Optional[str]:
        suffix = package_path.suffix.lower()
        if suffix == ".apk":
            return "apk"
        if suffix in self.bundle_extensions:
            return suffix.lstrip(".")
        return None

    def get_package_by_name(self, name: str) -> Optional[PackageFile]:
        for package in self.packages:
            if package.name == name:
                return package
        return None

    def get_packages_by_kind(self, kind: str) -> List[PackageFile]:
        return [package for package in self.packages if package.kind == kind]
