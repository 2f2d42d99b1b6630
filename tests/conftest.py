"""Shared fakes and builders for ModPortal tests."""

import fnmatch
import io
import json
import zipfile
from typing import Dict, List, Optional

import pytest

from modportal.download.verifier import FileVerifier
from modportal.exceptions import FileStoreError, InsufficientCredentialsError, NotFoundError
from modportal.models import Credentials, Package, Release, Version
from modportal.storage import FileStore


class FakeFileStore(FileStore):
    """In-memory file store keyed by relative path."""

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.files: Dict[str, bytes] = dict(files or {})
        self.removed: List[str] = []
        self.written: List[str] = []

    async def write(self, path, data):
        self.files[path] = data
        self.written.append(path)

    async def find(self, pattern):
        return sorted(p for p in self.files if fnmatch.fnmatchcase(p, pattern))

    async def remove(self, path):
        if path not in self.files:
            raise FileStoreError(f"missing: {path}")
        del self.files[path]
        self.removed.append(path)

    async def read_buffer(self, path):
        if path not in self.files:
            raise FileStoreError(f"missing: {path}")
        return self.files[path]

    async def exists(self, path):
        return path in self.files


class FakeClient:
    """Metadata source backed by a dict of packages."""

    def __init__(self, packages: Optional[Dict[str, Package]] = None):
        self.packages = dict(packages or {})
        self.closed = False

    async def get_package(self, name):
        if name not in self.packages:
            raise NotFoundError(f"not found: {name}")
        return self.packages[name]

    async def search_packages(self, query="", **params):
        return [p for n, p in self.packages.items() if query in n]

    async def authenticate(self, username, password=None, token=None, require_ownership=False):
        if username and token:
            return Credentials(username=username, token=token)
        raise InsufficientCredentialsError("insufficient")

    async def close(self):
        self.closed = True


class FakeDownloader:
    """Downloader returning canned bytes per download reference."""

    def __init__(self, payloads: Optional[Dict[str, bytes]] = None):
        self.payloads = dict(payloads or {})
        self.verifier = FileVerifier()
        self.calls: List[str] = []
        self.closed = False

    async def download(self, reference, credentials, expected_sha1=None, progress_callback=None):
        if credentials is None:
            raise InsufficientCredentialsError("no credentials")
        self.calls.append(reference)
        return self.payloads.get(reference, reference.encode())

    async def close(self):
        self.closed = True


def make_release(
    version: str,
    game_version: str = "0.14",
    name: str = "mod",
    dependencies: Optional[List[str]] = None,
    sha1: Optional[str] = None,
) -> Release:
    return Release(
        version=Version.parse(version),
        game_version=Version.parse(game_version),
        download_url=f"/download/{name}/{name}_{version}.zip",
        sha1=sha1,
        dependencies=list(dependencies or []),
    )


def make_zip(entries: Dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as z:
        for name, data in entries.items():
            z.writestr(name, data)
    return buffer.getvalue()


def make_mod_zip(name: str, version: str) -> bytes:
    info = {"name": name, "version": version, "title": name.title()}
    return make_zip({f"{name}_{version}/info.json": json.dumps(info).encode()})


def make_level_init(mods, reserved: bytes = b"\x00\x00\x00\x00") -> bytes:
    """Builds a mod-list record: count at 48, entries from 52."""
    record = bytearray(52)
    record[48] = len(mods)
    for name, (major, minor, patch) in mods:
        encoded = name.encode("utf-8")
        record.append(len(encoded))
        record.extend(encoded)
        record.extend(bytes([major, minor, patch]))
        record.extend(reserved)
    return bytes(record)


@pytest.fixture
def store():
    return FakeFileStore()
