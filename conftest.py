import xml.etree.ElementTree as ET
import zipfile
from pathlib import Path
from typing import Dict

import pytest

from apk_inspector.preprocessing.errors import ManifestDecodeError
from apk_inspector.preprocessing.manifest_decoder import ManifestTree
from apk_inspector.preprocessing.pipeline import PackageInspector

MANIFEST_XML = b"""<?xml version="1.0" encoding="utf-8"?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android"
    package="com.example.app"
    android:versionCode="42"
    android:versionName="1.2.3"
    android:compileSdkVersion="(type 0x10) 0x22">
  <uses-sdk android:minSdkVersion="21" android:targetSdkVersion="(type 0x10) 0x1f"/>
  <uses-permission android:name="android.permission.INTERNET"/>
  <uses-permission android:name="android.permission.CAMERA"/>
  <uses-permission android:name="android.permission.INTERNET"/>
  <application android:label="Example">
    <activity android:name="com.example.app.MainActivity"/>
    <activity android:name="com.example.app.SettingsActivity"/>
    <service android:name="com.example.app.SyncService"/>
    <receiver android:name="com.example.app.BootReceiver"/>
    <provider android:name="com.example.app.DataProvider"/>
  </application>
</manifest>
"""

PNG_HEADER = b"\x89PNG\r\n\x1a\n"


class PlainXmlManifestDecoder:
    """Decodificador de pruebas: manifest en XML de texto plano"""

    def decode(self, raw: bytes) -> ManifestTree:
        try:
            root = ET.fromstring(raw)
        except ET.ParseError as e:
            raise ManifestDecodeError(f"XML inválido: {e}") from e
        return ManifestTree.from_element(root)


def png_bytes(tag: str) -> bytes:
    return PNG_HEADER + tag.encode('utf-8')


def build_zip(path: Path, entries: Dict[str, bytes]) -> Path:
    with zipfile.ZipFile(path, 'w') as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return path


def build_apk_bytes(tmp_path: Path, entries: Dict[str, bytes]) -> bytes:
    apk = build_zip(tmp_path / "inner_build.apk", entries)
    data = apk.read_bytes()
    apk.unlink()
    return data


@pytest.fixture
def scratch_dir(tmp_path):
    directory = tmp_path / "scratch"
    directory.mkdir()
    return directory


@pytest.fixture
def inspector(scratch_dir):
    inspector = PackageInspector(
        {'scratch_dir': str(scratch_dir), 'max_workers': 2},
        decoder=PlainXmlManifestDecoder()
    )
    yield inspector
    inspector.close()


@pytest.fixture
def sample_apk(tmp_path):
    return build_zip(tmp_path / "app.apk", {
        "AndroidManifest.xml": MANIFEST_XML,
        "classes.dex": b"dex\n035\x00",
        "res/mipmap-mdpi/ic_launcher.png": png_bytes("mdpi"),
        "res/mipmap-xxxhdpi/ic_launcher.png": png_bytes("xxxhdpi"),
    })
