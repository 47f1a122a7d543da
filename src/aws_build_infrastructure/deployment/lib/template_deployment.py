import logging

import boto3
from ephemeral_pulumi_deploy import append_resource_suffix
from ephemeral_pulumi_deploy import common_tags
from ephemeral_pulumi_deploy import get_config_str
from pulumi import ComponentResource
from pulumi import FileArchive
from pulumi import Resource
from pulumi import ResourceOptions
from pulumi import export
from pulumi_aws import cloudformation
from pulumi_aws import s3

from aws_build_infrastructure.templates.lib import TemplateStack

from .asset_upload import asset_object_key
from .asset_upload import asset_parameter_values
from .asset_upload import hash_directory

logger = logging.getLogger(__name__)


def get_asset_bucket_name() -> str:
    org_home_region = get_config_str("proj:aws_org_home_region")
    ssm_client = boto3.client("ssm", region_name=org_home_region)
    param = ssm_client.get_parameter(Name=get_config_str("proj:asset_bucket_ssm_param"))["Parameter"]
    assert "Value" in param, f"Expected 'Value' in {param}"
    return param["Value"]


class MissingAssetBucketError(Exception):
    def __init__(self, *, stack_name: str):
        super().__init__(f"Stack {stack_name} has assets to upload, but no asset bucket name was provided.")


class TemplateDeployment(ComponentResource):
    """Upload the stack's assets and deploy the rendered template as a CloudFormation stack."""

    def __init__(self, *, stack: TemplateStack, asset_bucket_name: str | None):
        super().__init__("labauto:TemplateDeployment", append_resource_suffix(stack.name), None)
        if stack.assets and asset_bucket_name is None:
            raise MissingAssetBucketError(stack_name=stack.name)
        parameters: dict[str, str] = {}
        uploads: list[Resource] = []
        for asset in stack.assets:
            assert asset_bucket_name is not None  # checked above, this just narrows the type
            artifact_hash = hash_directory(asset.path)
            prefix, filename = asset_object_key(artifact_hash)
            logger.info(f"Uploading asset {asset.construct_id} from {asset.path} to s3://{asset_bucket_name}/{prefix}{filename}")
            uploads.append(
                s3.BucketObjectv2(
                    append_resource_suffix(f"{stack.name}-{asset.construct_id}", max_length=100),
                    bucket=asset_bucket_name,
                    key=f"{prefix}{filename}",
                    source=FileArchive(str(asset.path)),
                    tags=common_tags(),
                    opts=ResourceOptions(parent=self),
                )
            )
            parameters.update(
                asset_parameter_values(asset, bucket_name=asset_bucket_name, artifact_hash=artifact_hash)
            )

        self.cloudformation_stack = cloudformation.Stack(
            append_resource_suffix(stack.name),
            name=stack.name,
            template_body=stack.to_json(),
            parameters=parameters,
            capabilities=["CAPABILITY_IAM"],  # the build projects each come with their own service role
            tags=common_tags(),
            opts=ResourceOptions(parent=self, depends_on=uploads),
        )
        for output_id in stack.output_ids:
            export(
                output_id,
                self.cloudformation_stack.outputs.apply(
                    lambda outputs, output_id=output_id: (outputs or {}).get(output_id)
                ),
            )
