"""Provider for clusters running in AWS."""

from __future__ import annotations

from ..config import StackConfig
from ..errors import ConfigError
from .base import Provider, Values

AWS_PROVIDER_NAME = "aws"


class AwsProvider(Provider):
    """AWS accounts and regions."""

    name = AWS_PROVIDER_NAME

    def __init__(self, stack_config: StackConfig):
        if not stack_config.region:
            raise ConfigError(
                message="The aws provider requires a region",
                hint="Pass --region or set 'region' in the stack file.",
            )
        super().__init__(stack_config)

    def derived_vars(self, values: Values) -> Values:
        provisioner = values.get("provisioner") or {}
        global_params = (provisioner.get("params") or {}).get("global") or {}
        kube_context = (
            values.get("kube_context") or global_params.get("name") or self.stack_config.cluster
        )
        return {
            "kube_context": kube_context,
            "region": self.stack_config.region,
            "account": self.stack_config.account,
        }

    def installer_vars(self) -> Values:
        installer_vars = {"region": self.stack_config.region}
        if self.stack_config.account:
            installer_vars["account"] = self.stack_config.account
        return installer_vars
