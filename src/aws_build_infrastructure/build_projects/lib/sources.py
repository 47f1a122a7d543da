from typing import Annotated
from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from troposphere import Join
from troposphere import Region
from troposphere import URLSuffix
from troposphere import codebuild

from aws_build_infrastructure.templates.lib import TemplateValue


class NoSource(BaseModel):
    """The build has no source; the buildspec must carry everything the build needs."""

    type: Literal["NO_SOURCE"] = "NO_SOURCE"


class CodePipelineSource(BaseModel):
    """The source is handed over by the CodePipeline action invoking the build."""

    type: Literal["CODEPIPELINE"] = "CODEPIPELINE"


class GitHubSource(BaseModel):
    type: Literal["GITHUB"] = "GITHUB"
    owner: str
    repo: str
    clone_depth: int | None = Field(default=None, ge=0)
    report_build_status: bool = True
    webhook: bool = False

    @property
    def location(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}.git"


class GitHubEnterpriseSource(BaseModel):
    type: Literal["GITHUB_ENTERPRISE"] = "GITHUB_ENTERPRISE"
    https_clone_url: str
    ignore_ssl_errors: bool | None = None
    clone_depth: int | None = Field(default=None, ge=0)


class BitBucketSource(BaseModel):
    type: Literal["BITBUCKET"] = "BITBUCKET"
    owner: str
    repo: str
    clone_depth: int | None = Field(default=None, ge=0)

    @property
    def location(self) -> str:
        return f"https://bitbucket.org/{self.owner}/{self.repo}.git"


class CodeCommitSource(BaseModel):
    type: Literal["CODECOMMIT"] = "CODECOMMIT"
    repository_name: str
    clone_depth: int | None = Field(default=None, ge=0)

    @property
    def location(self) -> TemplateValue:
        return Join("", ["https://git-codecommit.", Region, ".", URLSuffix, f"/v1/repos/{self.repository_name}"])


class S3BucketSource(BaseModel):
    type: Literal["S3"] = "S3"
    bucket: TemplateValue  # bucket name, either literal or a reference to a bucket elsewhere in the template
    path: str

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def location(self) -> TemplateValue:
        return Join("/", [self.bucket, self.path])


ProjectSource = Annotated[
    NoSource
    | CodePipelineSource
    | GitHubSource
    | GitHubEnterpriseSource
    | BitBucketSource
    | CodeCommitSource
    | S3BucketSource,
    Field(discriminator="type"),
]


def _clone_depth(clone_depth: int | None) -> dict[str, Any]:
    return {} if clone_depth is None else {"GitCloneDepth": clone_depth}


def render_source(source: ProjectSource) -> codebuild.Source:
    match source:
        case NoSource() | CodePipelineSource():
            return codebuild.Source(Type=source.type)
        case GitHubSource():
            return codebuild.Source(
                Type=source.type,
                Location=source.location,
                ReportBuildStatus=source.report_build_status,
                **_clone_depth(source.clone_depth),
            )
        case GitHubEnterpriseSource():
            insecure_ssl = {} if source.ignore_ssl_errors is None else {"InsecureSsl": source.ignore_ssl_errors}
            return codebuild.Source(
                Type=source.type, Location=source.https_clone_url, **insecure_ssl, **_clone_depth(source.clone_depth)
            )
        case BitBucketSource() | CodeCommitSource():
            return codebuild.Source(Type=source.type, Location=source.location, **_clone_depth(source.clone_depth))
        case S3BucketSource():
            return codebuild.Source(Type=source.type, Location=source.location)


def render_triggers(source: ProjectSource) -> codebuild.ProjectTriggers | None:
    if isinstance(source, GitHubSource) and source.webhook:
        return codebuild.ProjectTriggers(Webhook=True)
    return None


def render_artifacts(source: ProjectSource) -> codebuild.Artifacts:
    if isinstance(source, CodePipelineSource):
        return codebuild.Artifacts(Type="CODEPIPELINE")
    return codebuild.Artifacts(Type="NO_ARTIFACTS")
