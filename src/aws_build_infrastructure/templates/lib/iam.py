from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from troposphere import AccountId
from troposphere import Join
from troposphere import Partition
from troposphere import Region
from troposphere import iam

from .logical_ids import LogicalId
from .stack import TemplateValue

POLICY_VERSION = "2012-10-17"
DEFAULT_POLICY_NAME = "ServiceRoleDefaultPolicy"


class PolicyStatement(BaseModel):
    sid: str | None = None
    effect: Literal["Allow", "Deny"] = "Allow"
    actions: list[str]
    resources: list[TemplateValue] = Field(default_factory=list)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def render(self) -> dict[str, Any]:
        rendered: dict[str, Any] = {}
        if self.sid is not None:
            rendered["Sid"] = self.sid
        rendered["Effect"] = self.effect
        rendered["Action"] = self.actions[0] if len(self.actions) == 1 else list(self.actions)
        rendered["Resource"] = self.resources[0] if len(self.resources) == 1 else list(self.resources)
        return rendered


def policy_document(statements: list[PolicyStatement]) -> dict[str, Any]:
    return {"Version": POLICY_VERSION, "Statement": [statement.render() for statement in statements]}


def s3_read_statement(*, sid: str, bucket_arn: TemplateValue) -> PolicyStatement:
    return PolicyStatement(
        sid=sid,
        actions=["s3:GetObject*", "s3:GetBucket*", "s3:List*"],
        resources=[bucket_arn, Join("", [bucket_arn, "/*"])],
    )


def s3_read_write_statement(*, sid: str, bucket_arn: TemplateValue) -> PolicyStatement:
    return PolicyStatement(
        sid=sid,
        actions=["s3:GetObject*", "s3:GetBucket*", "s3:List*", "s3:DeleteObject*", "s3:PutObject*", "s3:Abort*"],
        resources=[bucket_arn, Join("", [bucket_arn, "/*"])],
    )


def codebuild_logs_statement() -> PolicyStatement:
    return PolicyStatement(
        sid="WriteBuildLogs",
        actions=["logs:CreateLogGroup", "logs:CreateLogStream", "logs:PutLogEvents"],
        resources=[
            Join("", ["arn:", Partition, ":logs:", Region, ":", AccountId, ":log-group:/aws/codebuild/*"])
        ],
    )


def service_role(logical_id: LogicalId, *, service_principal: str, statements: list[PolicyStatement]) -> iam.Role:
    return iam.Role(
        logical_id,
        AssumeRolePolicyDocument={
            "Version": POLICY_VERSION,
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"Service": service_principal},
                    "Action": "sts:AssumeRole",
                }
            ],
        },
        Policies=[iam.Policy(PolicyName=DEFAULT_POLICY_NAME, PolicyDocument=policy_document(statements))],
    )
