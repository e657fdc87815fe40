"""Shared fixtures for deploy-sync tests."""

import zipfile
from pathlib import Path

import pytest

from deploy_sync.constants import METADATA_FILE
from deploy_sync.models.config import DeployerConfig


def write(path: Path, content: str = "") -> Path:
    """Write a text file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def project(tmp_path):
    """Create a small Laravel-like project tree."""
    root = tmp_path / "project"
    write(root / "app" / "Http" / "Controller.php", "<?php // controller")
    write(root / "app" / "Models" / "User.php", "<?php // user")
    write(root / "routes" / "web.php", "<?php // routes")
    write(root / "public" / "index.php", "<?php // front controller")
    write(root / "composer.json", '{"require": {"laravel/framework": "^10.0"}}')
    write(root / "composer.lock", '{"packages": []}')
    write(root / "vendor" / "autoload.php", "<?php // autoload")
    write(root / "vendor" / "laravel" / "framework" / "src.php", "<?php // framework")
    write(root / "storage" / "app" / ".gitignore", "*\n")
    (root / "storage" / "framework" / "cache").mkdir(parents=True)
    (root / "storage" / "logs").mkdir(parents=True)
    (root / "bootstrap" / "cache").mkdir(parents=True)
    write(root / ".env", "APP_KEY=local")
    write(root / "node_modules" / "lib" / "index.js", "module.exports = 1")
    write(root / "tests" / "ExampleTest.php", "<?php // test")
    return root


@pytest.fixture
def target(tmp_path):
    """Create an empty deployment target root."""
    root = tmp_path / "target"
    root.mkdir()
    return root


@pytest.fixture
def config():
    """Configuration with a production environment."""
    return DeployerConfig.from_dict({
        "default_commands": ["migrate --force", "config:cache"],
        "environments": {
            "production": {
                "remote_base_url": "http://receiver.test",
                "deploy_token": "secret-token",
            },
            "staging": {
                "remote_base_url": "http://receiver.test",
                "deploy_token": "staging-token",
                "commands": ["cache:clear"],
            },
        },
    })


def make_package(path: Path, members: dict, metadata=None) -> Path:
    """Write a zip with the given name -> content members."""
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in members.items():
            archive.writestr(name, content)
        if metadata is not None:
            archive.writestr(METADATA_FILE, metadata.to_json())
    return path


def make_damaged_package(path: Path, name: str, content: bytes, intact: dict = None) -> Path:
    """Write a deflated zip whose member name has its compressed bytes flipped."""
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(name, content)
        for other, data in (intact or {}).items():
            archive.writestr(other, data)

    with zipfile.ZipFile(path) as archive:
        info = archive.getinfo(name)
    raw = bytearray(path.read_bytes())
    # Local header: 30 fixed bytes, then file name, then extra field
    name_length = int.from_bytes(raw[info.header_offset + 26:info.header_offset + 28], "little")
    extra_length = int.from_bytes(raw[info.header_offset + 28:info.header_offset + 30], "little")
    start = info.header_offset + 30 + name_length + extra_length
    for offset in range(start, start + info.compress_size):
        raw[offset] ^= 0xFF
    path.write_bytes(bytes(raw))
    return path
