from pathlib import Path
from uuid import uuid4

import pytest

# separate internal imports from external imports with this comment, because otherwise ruff in the copier template doesn't recognize them as internal and reformats them
from aws_build_infrastructure.artifact_stores.lib import LifecycleRule
from aws_build_infrastructure.artifact_stores.lib import RepositoryConfig
from aws_build_infrastructure.build_projects.lib import ProjectConfig
from aws_build_infrastructure.deployment.lib import AssetPathNotDirectoryError
from aws_build_infrastructure.deployment.lib import asset_object_key
from aws_build_infrastructure.deployment.lib import asset_parameter_values
from aws_build_infrastructure.deployment.lib import hash_directory
from aws_build_infrastructure.deployment.lib import populate_template_stack
from aws_build_infrastructure.templates.lib import TemplateStack
from aws_build_infrastructure.templates.lib import ZipDirectoryAsset


def _write_scripts(directory: Path, contents: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    _ = (directory / "build.sh").write_text(contents)
    (directory / "lib").mkdir(exist_ok=True)
    _ = (directory / "lib" / "helpers.sh").write_text("echo helping")
    return directory


class TestHashDirectory:
    def test_Given_identical_directories__When_hashed__Then_same_hash(self, tmp_path: Path):
        contents = str(uuid4())
        first = _write_scripts(tmp_path / "first", contents)
        second = _write_scripts(tmp_path / "second", contents)

        assert hash_directory(first) == hash_directory(second)

    def test_Given_changed_file_contents__When_hashed__Then_different_hash(self, tmp_path: Path):
        first = _write_scripts(tmp_path / "first", str(uuid4()))
        second = _write_scripts(tmp_path / "second", str(uuid4()))

        assert hash_directory(first) != hash_directory(second)

    def test_Given_renamed_file__When_hashed__Then_different_hash(self, tmp_path: Path):
        contents = str(uuid4())
        directory = _write_scripts(tmp_path / "scripts", contents)
        original_hash = hash_directory(directory)

        _ = (directory / "build.sh").rename(directory / "run.sh")

        assert hash_directory(directory) != original_hash

    def test_Given_file_instead_of_directory__When_hashed__Then_error(self, tmp_path: Path):
        file_path = tmp_path / "build.sh"
        _ = file_path.write_text("echo hi")

        with pytest.raises(AssetPathNotDirectoryError, match="is not a directory"):
            _ = hash_directory(file_path)


class TestAssetParameterValues:
    def test_Given_artifact_hash__When_object_key_built__Then_prefix_and_zip_filename(self):
        artifact_hash = uuid4().hex

        assert asset_object_key(artifact_hash) == (f"assets/{artifact_hash}/", f"{artifact_hash}.zip")

    def test_Given_asset__When_parameter_values_built__Then_version_key_splits_into_prefix_and_filename(self):
        stack = TemplateStack(str(uuid4()))
        asset = ZipDirectoryAsset(stack, "Asset", path=".")
        bucket_name = str(uuid4())
        artifact_hash = uuid4().hex

        values = asset_parameter_values(asset, bucket_name=bucket_name, artifact_hash=artifact_hash)

        assert set(values) == set(stack.parameter_ids)
        assert values[asset.bucket_parameter_id] == bucket_name
        assert values[asset.artifact_hash_parameter_id] == artifact_hash
        prefix, filename = values[asset.version_key_parameter_id].split("||")
        assert f"{prefix}{filename}" == f"assets/{artifact_hash}/{artifact_hash}.zip"


class TestPopulateTemplateStack:
    def test_Given_project_and_registry__When_populated__Then_resources_and_uri_output(self):
        stack = TemplateStack(str(uuid4()))
        registry = RepositoryConfig(name="Backend")
        registry.add_lifecycle_rule(LifecycleRule(max_image_count=10))
        asset = ZipDirectoryAsset(stack, "Scripts", path=".")

        populate_template_stack(
            stack=stack,
            project_configs=[ProjectConfig(name="Nightly", build_script_asset=asset)],
            registry_configs=[registry],
        )

        template = stack.to_template()
        resource_types = sorted(resource["Type"] for resource in template["Resources"].values())
        assert resource_types == ["AWS::CodeBuild::Project", "AWS::ECR::Repository", "AWS::IAM::Role"]
        assert list(template["Outputs"]) == ["BackendRepositoryUri"]
        assert len(template["Parameters"]) == 3
