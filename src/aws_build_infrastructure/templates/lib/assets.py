import logging
from pathlib import Path

from troposphere import AWSHelperFn
from troposphere import Join
from troposphere import Parameter
from troposphere import Partition
from troposphere import Ref
from troposphere import Select
from troposphere import Split

from .logical_ids import LogicalId
from .logical_ids import make_logical_id
from .stack import TemplateStack
from .stack import TemplateValue

logger = logging.getLogger(__name__)

ASSET_KEY_DELIMITER = "||"


def bucket_arn(bucket_name: TemplateValue) -> AWSHelperFn:
    return Join("", ["arn:", Partition, ":s3:::", bucket_name])


class ZipDirectoryAsset:
    """A local directory that gets zipped and uploaded to S3 when the stack is deployed.

    The template only references the upload location through parameters. The deployment supplies the
    bucket name and a `<prefix>||<filename>` version key once the archive has actually been uploaded.
    """

    def __init__(self, stack: TemplateStack, construct_id: str, *, path: str | Path):
        self.construct_id = construct_id
        self.path = Path(path)
        self.bucket_parameter_id: LogicalId = make_logical_id(construct_id, "S3Bucket")
        self.version_key_parameter_id: LogicalId = make_logical_id(construct_id, "S3VersionKey")
        self.artifact_hash_parameter_id: LogicalId = make_logical_id(construct_id, "ArtifactHash")
        stack.ensure_unused(self.bucket_parameter_id, self.version_key_parameter_id, self.artifact_hash_parameter_id)
        stack.add_parameter(
            Parameter(
                self.bucket_parameter_id, Type="String", Description=f'S3 bucket for asset "{construct_id}"'
            )
        )
        stack.add_parameter(
            Parameter(
                self.version_key_parameter_id,
                Type="String",
                Description=f'S3 key for asset version "{construct_id}"',
            )
        )
        stack.add_parameter(
            Parameter(
                self.artifact_hash_parameter_id,
                Type="String",
                Description=f'Artifact hash for asset "{construct_id}"',
            )
        )
        stack.add_asset(self)
        logger.debug(f"Registered asset {construct_id} for {self.path}")

    @property
    def s3_bucket_name(self) -> AWSHelperFn:
        return Ref(self.bucket_parameter_id)

    @property
    def s3_bucket_arn(self) -> AWSHelperFn:
        return bucket_arn(self.s3_bucket_name)

    @property
    def s3_prefix(self) -> AWSHelperFn:
        return Select(0, Split(ASSET_KEY_DELIMITER, Ref(self.version_key_parameter_id)))

    @property
    def s3_filename(self) -> AWSHelperFn:
        return Select(1, Split(ASSET_KEY_DELIMITER, Ref(self.version_key_parameter_id)))

    @property
    def s3_object_key(self) -> AWSHelperFn:
        return Join("", [self.s3_prefix, self.s3_filename])
