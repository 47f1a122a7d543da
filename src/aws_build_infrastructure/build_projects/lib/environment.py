from enum import StrEnum
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from troposphere import codebuild

from aws_build_infrastructure.templates.lib import TemplateValue

LINUX_CONTAINER = "LINUX_CONTAINER"
DEFAULT_BUILD_IMAGE = "aws/codebuild/ubuntu-base:14.04"
S3_BUCKET_ENV = "SCRIPT_S3_BUCKET"
S3_KEY_ENV = "SCRIPT_S3_KEY"
DEFAULT_BUILD_SCRIPT_ENTRYPOINT = "build.sh"


class ComputeType(StrEnum):
    SMALL = "BUILD_GENERAL1_SMALL"
    MEDIUM = "BUILD_GENERAL1_MEDIUM"
    LARGE = "BUILD_GENERAL1_LARGE"


class EnvironmentVariableType(StrEnum):
    PLAINTEXT = "PLAINTEXT"
    PARAMETER_STORE = "PARAMETER_STORE"


class EnvironmentVariable(BaseModel):
    value: TemplateValue
    type: EnvironmentVariableType = EnvironmentVariableType.PLAINTEXT

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class BuildEnvironment(BaseModel):
    compute_type: ComputeType = ComputeType.SMALL
    image: str = DEFAULT_BUILD_IMAGE
    privileged: bool = False  # needed when building docker images inside the build

    model_config = ConfigDict(frozen=True)


def run_script_build_spec(entrypoint: str) -> dict[str, Any]:
    """Buildspec that downloads the zipped script asset from S3 and runs the entrypoint inside it."""
    return {
        "version": "0.2",
        "phases": {
            "pre_build": {
                "commands": [
                    f'echo "Downloading scripts from s3://${{{S3_BUCKET_ENV}}}/${{{S3_KEY_ENV}}}"',
                    f"aws s3 cp s3://${{{S3_BUCKET_ENV}}}/${{{S3_KEY_ENV}}} /tmp",
                    "mkdir -p /tmp/scriptdir",
                    f"unzip /tmp/$(basename ${S3_KEY_ENV}) -d /tmp/scriptdir",
                ]
            },
            "build": {
                "commands": [
                    "export SCRIPT_DIR=/tmp/scriptdir",
                    f'echo "Running {entrypoint}"',
                    f"chmod +x /tmp/scriptdir/{entrypoint}",
                    f"/tmp/scriptdir/{entrypoint}",
                ]
            },
        },
    }


def render_environment(
    environment: BuildEnvironment, variables: dict[str, EnvironmentVariable]
) -> codebuild.Environment:
    optional: dict[str, Any] = {}
    if variables:
        optional["EnvironmentVariables"] = [
            codebuild.EnvironmentVariable(Name=name, Type=str(variable.type), Value=variable.value)
            for name, variable in variables.items()
        ]
    return codebuild.Environment(
        Type=LINUX_CONTAINER,
        Image=environment.image,
        PrivilegedMode=environment.privileged,
        ComputeType=str(environment.compute_type),
        **optional,
    )
