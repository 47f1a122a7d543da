import hashlib
from pathlib import Path

from aws_build_infrastructure.templates.lib import ASSET_KEY_DELIMITER
from aws_build_infrastructure.templates.lib import ZipDirectoryAsset

ASSET_KEY_PREFIX = "assets"


class AssetPathNotDirectoryError(Exception):
    def __init__(self, *, path: Path):
        super().__init__(f"Asset path {path} is not a directory, only directories can be zipped up as assets.")


def hash_directory(path: Path) -> str:
    """Fingerprint the directory contents so a changed script produces a new S3 key (and a new stack parameter)."""
    if not path.is_dir():
        raise AssetPathNotDirectoryError(path=path)
    digest = hashlib.sha256()
    for file_path in sorted(p for p in path.rglob("*") if p.is_file()):
        digest.update(file_path.relative_to(path).as_posix().encode("utf-8"))
        digest.update(b"\0")
        digest.update(file_path.read_bytes())
    return digest.hexdigest()


def asset_object_key(artifact_hash: str) -> tuple[str, str]:
    return f"{ASSET_KEY_PREFIX}/{artifact_hash}/", f"{artifact_hash}.zip"


def asset_parameter_values(asset: ZipDirectoryAsset, *, bucket_name: str, artifact_hash: str) -> dict[str, str]:
    prefix, filename = asset_object_key(artifact_hash)
    return {
        asset.bucket_parameter_id: bucket_name,
        asset.version_key_parameter_id: f"{prefix}{ASSET_KEY_DELIMITER}{filename}",
        asset.artifact_hash_parameter_id: artifact_hash,
    }
