import logging
from typing import TYPE_CHECKING
from typing import Any

from troposphere import AWSHelperFn
from troposphere import AWSObject
from troposphere import Output
from troposphere import Parameter
from troposphere import Template

from .logical_ids import LogicalId

if TYPE_CHECKING:
    from .assets import ZipDirectoryAsset

logger = logging.getLogger(__name__)

TEMPLATE_FORMAT_VERSION = "2010-09-09"

type TemplateValue = str | AWSHelperFn  # either a literal or a CloudFormation intrinsic function


class DuplicateLogicalIdError(Exception):
    def __init__(self, *, logical_id: LogicalId, stack_name: str):
        super().__init__(f"Logical ID {logical_id} is already in use within stack {stack_name}.")


class TemplateStack:
    """A troposphere Template plus the local assets its parameters refer to.

    Logical ids are unique across parameters, resources and outputs, not just within each section.
    """

    def __init__(self, name: str, *, description: str | None = None):
        self.name = name
        self.template = Template(Description=description)
        self.template.set_version(TEMPLATE_FORMAT_VERSION)
        self.assets: list["ZipDirectoryAsset"] = []

    def is_unused(self, logical_id: LogicalId) -> bool:
        return (
            logical_id not in self.template.parameters
            and logical_id not in self.template.resources
            and logical_id not in self.template.outputs
        )

    def ensure_unused(self, *logical_ids: LogicalId) -> None:
        for logical_id in logical_ids:
            if not self.is_unused(logical_id):
                raise DuplicateLogicalIdError(logical_id=logical_id, stack_name=self.name)

    def add_parameter(self, parameter: Parameter) -> None:
        self.ensure_unused(parameter.title)
        _ = self.template.add_parameter(parameter)

    def add_resource(self, resource: AWSObject) -> None:
        """Add a resource to the template.

        The resource is only serialized when the template is rendered, so it can still be modified afterwards.
        """
        self.ensure_unused(resource.title)
        logger.info(f"Adding {resource.title} to stack {self.name}")
        _ = self.template.add_resource(resource)

    def add_output(self, output: Output) -> None:
        self.ensure_unused(output.title)
        _ = self.template.add_output(output)

    def add_asset(self, asset: "ZipDirectoryAsset") -> None:
        self.assets.append(asset)

    @property
    def parameter_ids(self) -> list[LogicalId]:
        return list(self.template.parameters)

    @property
    def output_ids(self) -> list[LogicalId]:
        return list(self.template.outputs)

    def to_template(self) -> dict[str, Any]:
        return self.template.to_dict()

    def to_json(self) -> str:
        return self.template.to_json(indent=2)
