import hashlib
import re
from uuid import uuid4

import pytest
from troposphere import Export
from troposphere import Output
from troposphere import Parameter
from troposphere import Ref
from troposphere import sns

# separate internal imports from external imports with this comment, because otherwise ruff in the copier template doesn't recognize them as internal and reformats them
from aws_build_infrastructure.templates.lib import DuplicateLogicalIdError
from aws_build_infrastructure.templates.lib import EmptyConstructPathError
from aws_build_infrastructure.templates.lib import TemplateStack
from aws_build_infrastructure.templates.lib import ZipDirectoryAsset
from aws_build_infrastructure.templates.lib import make_logical_id


class TestMakeLogicalId:
    def test_Given_single_component__When_id_made__Then_component_used_as_is(self):
        assert make_logical_id("MyBucket") == "MyBucket"

    def test_Given_single_component_with_punctuation__When_id_made__Then_non_alphanumerics_removed(self):
        assert make_logical_id("my-bucket_1") == "mybucket1"

    def test_Given_nested_path__When_id_made__Then_human_part_plus_md5_hash(self):
        expected_hash = hashlib.md5(b"Asset/S3Bucket").hexdigest()[:8].upper()  # noqa: S324 # matching the id scheme

        assert make_logical_id("Asset", "S3Bucket") == f"AssetS3Bucket{expected_hash}"

    def test_Given_resource_component__When_id_made__Then_hidden_from_human_part_but_hashed(self):
        logical_id = make_logical_id("Project", "Resource")

        assert re.fullmatch(r"Project[0-9A-F]{8}", logical_id)
        assert logical_id != make_logical_id("Project", "Other")

    def test_Given_default_component__When_id_made__Then_ignored_entirely(self):
        assert make_logical_id("Project", "Default", "Resource") == make_logical_id("Project", "Resource")

    def test_Given_consecutive_duplicates__When_id_made__Then_removed_from_human_part(self):
        assert make_logical_id("Repo", "Repo", "Policy").startswith("RepoPolicy")

    def test_Given_same_human_part__When_id_made__Then_distinct_ids(self):
        assert make_logical_id("AB") != make_logical_id("A", "B")

    @pytest.mark.parametrize("path", [pytest.param((), id="empty"), pytest.param(("Default",), id="only-default")])
    def test_Given_no_usable_components__When_id_made__Then_error(self, path: tuple[str, ...]):
        with pytest.raises(EmptyConstructPathError, match="empty set of components"):
            _ = make_logical_id(*path)


class TestTemplateStack:
    def test_Given_empty_stack__When_rendered__Then_only_version_and_resources(self):
        assert TemplateStack(str(uuid4())).to_template() == {
            "AWSTemplateFormatVersion": "2010-09-09",
            "Resources": {},
        }

    def test_Given_resource_parameter_and_output__When_rendered__Then_all_sections_present(self):
        description = str(uuid4())
        stack = TemplateStack(str(uuid4()), description=description)
        stack.add_parameter(Parameter("Param", Type="String", Description="a parameter"))
        stack.add_resource(sns.Topic("Topic", TopicName="topic"))
        stack.add_output(
            Output("TopicArn", Value=Ref("Topic"), Description="the topic", Export=Export("shared-topic"))
        )

        assert stack.to_template() == {
            "AWSTemplateFormatVersion": "2010-09-09",
            "Description": description,
            "Parameters": {"Param": {"Type": "String", "Description": "a parameter"}},
            "Resources": {"Topic": {"Type": "AWS::SNS::Topic", "Properties": {"TopicName": "topic"}}},
            "Outputs": {
                "TopicArn": {"Description": "the topic", "Value": {"Ref": "Topic"}, "Export": {"Name": "shared-topic"}}
            },
        }

    @pytest.mark.parametrize("second_kind", ["parameter", "resource", "output"])
    def test_Given_logical_id_in_use__When_added_again__Then_error(self, second_kind: str):
        stack_name = str(uuid4())
        stack = TemplateStack(stack_name)
        stack.add_resource(sns.Topic("Thing"))

        with pytest.raises(DuplicateLogicalIdError, match=rf"Thing.*{stack_name}"):
            if second_kind == "parameter":
                stack.add_parameter(Parameter("Thing", Type="String"))
            elif second_kind == "resource":
                stack.add_resource(sns.Topic("Thing"))
            else:
                stack.add_output(Output("Thing", Value="value"))

    def test_Given_several_ids_one_in_use__When_ensured_unused__Then_error_names_the_used_one(self):
        stack = TemplateStack(str(uuid4()))
        stack.add_parameter(Parameter("Taken", Type="String"))

        assert stack.is_unused("Free")
        assert not stack.is_unused("Taken")
        with pytest.raises(DuplicateLogicalIdError, match="Logical ID Taken"):
            stack.ensure_unused("Free", "Taken")

    def test_Given_rendered_template_mutated__When_rendered_again__Then_unaffected(self):
        stack = TemplateStack(str(uuid4()))
        stack.add_resource(sns.Topic("Topic", TopicName="original"))

        stack.to_template()["Resources"]["Topic"]["Properties"]["TopicName"] = "mutated"

        assert stack.to_template()["Resources"]["Topic"]["Properties"]["TopicName"] == "original"

    def test_Given_resource_modified_after_being_added__When_rendered__Then_reflects_latest_state(self):
        stack = TemplateStack(str(uuid4()))
        topic = sns.Topic("Topic", TopicName="first")
        stack.add_resource(topic)

        topic.TopicName = "second"

        assert stack.to_template()["Resources"]["Topic"]["Properties"]["TopicName"] == "second"

    def test_Given_stack__When_rendered_as_json_twice__Then_identical(self):
        stack = TemplateStack(str(uuid4()))
        stack.add_resource(sns.Topic("Topic"))

        assert stack.to_json() == stack.to_json()
        assert stack.to_json().startswith('{\n  "AWSTemplateFormatVersion"')


class TestZipDirectoryAsset:
    def test_Given_asset__When_created__Then_three_string_parameters_registered(self):
        stack = TemplateStack(str(uuid4()))

        asset = ZipDirectoryAsset(stack, "Asset", path=".")

        parameters = stack.to_template()["Parameters"]
        assert set(parameters) == {
            asset.bucket_parameter_id,
            asset.version_key_parameter_id,
            asset.artifact_hash_parameter_id,
        }
        assert all(parameter["Type"] == "String" for parameter in parameters.values())
        assert asset.bucket_parameter_id.startswith("AssetS3Bucket")
        assert asset.version_key_parameter_id.startswith("AssetS3VersionKey")
        assert stack.assets == [asset]

    def test_Given_asset__When_object_key_requested__Then_joined_from_version_key_parts(self):
        stack = TemplateStack(str(uuid4()))
        asset = ZipDirectoryAsset(stack, "Asset", path=".")
        version_key = {"Ref": asset.version_key_parameter_id}

        assert asset.s3_object_key.to_dict() == {
            "Fn::Join": [
                "",
                [
                    {"Fn::Select": [0, {"Fn::Split": ["||", version_key]}]},
                    {"Fn::Select": [1, {"Fn::Split": ["||", version_key]}]},
                ],
            ]
        }

    def test_Given_asset__When_bucket_arn_requested__Then_partition_aware_s3_arn(self):
        stack = TemplateStack(str(uuid4()))
        asset = ZipDirectoryAsset(stack, "Asset", path=".")

        assert asset.s3_bucket_arn.to_dict() == {
            "Fn::Join": ["", ["arn:", {"Ref": "AWS::Partition"}, ":s3:::", {"Ref": asset.bucket_parameter_id}]]
        }

    def test_Given_two_assets_with_same_id__When_created__Then_error_and_nothing_registered_twice(self):
        stack = TemplateStack(str(uuid4()))
        _ = ZipDirectoryAsset(stack, "Asset", path=".")

        with pytest.raises(DuplicateLogicalIdError):
            _ = ZipDirectoryAsset(stack, "Asset", path="other")

        assert len(stack.parameter_ids) == 3
        assert len(stack.assets) == 1
