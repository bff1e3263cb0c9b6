import asyncio
import base64
import threading

import pytest

from apk_inspector.preprocessing.errors import (
    ArchiveError,
    ContainerEmptyError,
    EntryNotFoundError,
    ManifestDecodeError,
    PackageNotFoundError,
)
from apk_inspector.preprocessing.metadata_extractor import UNSPECIFIED, format_file_size
from apk_inspector.preprocessing.pipeline import PackageInspector
from conftest import MANIFEST_XML, PlainXmlManifestDecoder, build_apk_bytes, build_zip, png_bytes


def test_inspects_direct_package(inspector, sample_apk):
    metadata = inspector.inspect(sample_apk)

    assert metadata.package_name == "com.example.app"
    assert metadata.version_code == "42"
    assert metadata.target_sdk_version == "31"
    assert metadata.activities == ["com.example.app.MainActivity", "com.example.app.SettingsActivity"]
    assert metadata.file_size == sample_apk.stat().st_size
    assert metadata.file_size_readable == format_file_size(metadata.file_size)

    header, payload = metadata.icon_base64.split(",", 1)
    assert header == "data:image/png;base64"
    assert base64.b64decode(payload) == png_bytes("xxxhdpi")


def test_package_without_icon(inspector, tmp_path):
    apk = build_zip(tmp_path / "noicon.apk", {"AndroidManifest.xml": MANIFEST_XML})

    metadata = inspector.inspect(apk)

    assert metadata.icon_base64 is None
    assert metadata.package_name == "com.example.app"


def test_missing_manifest_fails_without_scratch_files(inspector, tmp_path, scratch_dir):
    apk = build_zip(tmp_path / "nomanifest.apk", {"classes.dex": b""})

    with pytest.raises(EntryNotFoundError, match="AndroidManifest.xml"):
        inspector.inspect(apk)
    assert list(scratch_dir.iterdir()) == []


def test_missing_file(inspector, tmp_path):
    with pytest.raises(PackageNotFoundError):
        inspector.inspect(tmp_path / "nothing.apk")


def test_invalid_archive(inspector, tmp_path):
    path = tmp_path / "bad.apk"
    path.write_bytes(b"PK but not really")

    with pytest.raises(ArchiveError):
        inspector.inspect(path)


def test_manifest_decode_failure(inspector, tmp_path):
    apk = build_zip(tmp_path / "bad_manifest.apk", {"AndroidManifest.xml": b"\x03\x00\x08\x00garbage"})

    with pytest.raises(ManifestDecodeError):
        inspector.inspect(apk)


def test_manifest_without_uses_sdk(inspector, tmp_path):
    apk = build_zip(tmp_path / "nosdk.apk", {
        "AndroidManifest.xml": b'<manifest package="a.b"><application/></manifest>',
    })

    metadata = inspector.inspect(apk)

    assert metadata.min_sdk_version == UNSPECIFIED
    assert metadata.target_sdk_version == UNSPECIFIED


def test_bundle_returns_inner_package_metadata(inspector, tmp_path, scratch_dir):
    inner = build_apk_bytes(tmp_path, {
        "AndroidManifest.xml": MANIFEST_XML,
        "res/mipmap-hdpi/ic_launcher.png": png_bytes("inner"),
    })
    bundle = build_zip(tmp_path / "app.xapk", {
        "manifest.json": b'{"package_name": "com.example.app"}',
        "icon.png": png_bytes("bundle icon"),
        "split_config.base.apk": inner,
        "other.apk": b"not used",
    })

    metadata = inspector.inspect(bundle)

    assert metadata.package_name == "com.example.app"
    assert metadata.file_size == len(inner)
    assert base64.b64decode(metadata.icon_base64.split(",", 1)[1]) == png_bytes("inner")
    assert list(scratch_dir.iterdir()) == []


def test_bundle_cleanup_when_inner_decode_fails(inspector, tmp_path, scratch_dir):
    inner = build_apk_bytes(tmp_path, {"AndroidManifest.xml": b"<manifest"})
    bundle = build_zip(tmp_path / "app.xapk", {"base.apk": inner})

    before = len(list(scratch_dir.iterdir()))
    with pytest.raises(ManifestDecodeError):
        inspector.inspect(bundle)
    after = len(list(scratch_dir.iterdir()))

    assert before == after == 0


def test_bundle_without_apk(inspector, tmp_path):
    bundle = build_zip(tmp_path / "empty.xapk", {"manifest.json": b"{}"})

    with pytest.raises(ContainerEmptyError, match="manifest.json"):
        inspector.inspect(bundle)


def test_inspect_async(inspector, sample_apk):
    metadata = asyncio.run(inspector.inspect_async(sample_apk))

    assert metadata.package_name == "com.example.app"


def test_inspect_many_keeps_order_and_captures_errors(inspector, sample_apk, tmp_path):
    missing = tmp_path / "missing.apk"

    results = inspector.inspect_many([sample_apk, missing, sample_apk])

    assert [r['apk_path'] for r in results] == [str(sample_apk), str(missing), str(sample_apk)]
    assert results[0]['package_name'] == "com.example.app"
    assert 'error' in results[1]
    assert results[2]['version_name'] == "1.2.3"


def test_custom_placeholder(tmp_path):
    apk = build_zip(tmp_path / "a.apk", {"AndroidManifest.xml": b"<manifest/>"})

    with PackageInspector({'placeholder': 'N/A'}, decoder=PlainXmlManifestDecoder()) as inspector:
        metadata = inspector.inspect(apk)

    assert metadata.package_name == "N/A"
    assert metadata.compile_sdk_version == "N/A"


def test_executor_created_once_under_concurrent_access():
    inspector = PackageInspector({'max_workers': 2}, decoder=PlainXmlManifestDecoder())
    barrier = threading.Barrier(8)
    seen = []

    def grab():
        barrier.wait()
        seen.append(inspector.executor)

    threads = [threading.Thread(target=grab) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    try:
        assert len(seen) == 8
        assert all(executor is seen[0] for executor in seen)
    finally:
        inspector.close()


def test_executor_recreated_after_close(sample_apk):
    inspector = PackageInspector(decoder=PlainXmlManifestDecoder())
    first = inspector.executor
    inspector.close()

    with inspector:
        assert inspector.executor is not first
        assert inspector.inspect_many([sample_apk])[0]['package_name'] == "com.example.app"
