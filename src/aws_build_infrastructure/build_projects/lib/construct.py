import logging

from troposphere import AWSHelperFn
from troposphere import GetAtt
from troposphere import Ref

from aws_build_infrastructure.templates.lib import LogicalId
from aws_build_infrastructure.templates.lib import PolicyStatement
from aws_build_infrastructure.templates.lib import TemplateStack
from aws_build_infrastructure.templates.lib import bucket_arn
from aws_build_infrastructure.templates.lib import codebuild_logs_statement
from aws_build_infrastructure.templates.lib import make_logical_id
from aws_build_infrastructure.templates.lib import s3_read_statement
from aws_build_infrastructure.templates.lib import s3_read_write_statement
from aws_build_infrastructure.templates.lib import service_role

from .cache import S3Cache
from .errors import ProjectConfigError
from .errors import ProjectConfigurationError
from .project import ProjectConfig
from .project import ValidatedProject
from .project import construct_project
from .project import project_resource

logger = logging.getLogger(__name__)

CODEBUILD_SERVICE_PRINCIPAL = "codebuild.amazonaws.com"


def project_role_statements(project: ValidatedProject) -> list[PolicyStatement]:
    statements = [codebuild_logs_statement()]
    if project.build_script_asset is not None:
        statements.append(
            s3_read_statement(sid="ReadBuildScriptAsset", bucket_arn=project.build_script_asset.s3_bucket_arn)
        )
    if isinstance(project.cache, S3Cache):
        statements.append(s3_read_write_statement(sid="ReadWriteCache", bucket_arn=bucket_arn(project.cache.bucket)))
    return statements


class BuildProject:
    """A CodeBuild project, along with the service role it runs as, added to a template stack.

    Configuration problems are raised immediately, so an invalid project never makes it into the template.
    """

    def __init__(self, stack: TemplateStack, *, config: ProjectConfig):
        result = construct_project(config)
        if isinstance(result, ProjectConfigError):
            raise ProjectConfigurationError(project_name=config.name, error=result)
        self.project: ValidatedProject = result

        self.role_logical_id: LogicalId = make_logical_id(config.name, "Role")
        self.logical_id: LogicalId = make_logical_id(config.name, "Resource")
        stack.ensure_unused(self.role_logical_id, self.logical_id)

        self.role = service_role(
            self.role_logical_id,
            service_principal=CODEBUILD_SERVICE_PRINCIPAL,
            statements=project_role_statements(self.project),
        )
        stack.add_resource(self.role)
        self.resource = project_resource(
            self.project, service_role=GetAtt(self.role, "Arn"), logical_id=self.logical_id
        )
        stack.add_resource(self.resource)
        logger.info(f"Added build project {config.name} to stack {stack.name}")

    @property
    def project_name(self) -> AWSHelperFn:
        return Ref(self.resource)

    @property
    def project_arn(self) -> AWSHelperFn:
        return GetAtt(self.resource, "Arn")
