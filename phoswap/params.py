import typing
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional

import yaml
from eth_typing import ChecksumAddress

from phoswap.constants import DEFAULT_INITIALIZER, ZERO_ADDRESS
from phoswap.registry import ContractRegistry, NetworkName

DEPLOYMENT_KEY = "deployment"
CONSTANTS_KEY = "constants"
INITIALIZER_KEY = "initializer"


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


class VariableContext:
    def __init__(
        self,
        registry: ContractRegistry,
        network: NetworkName,
        deployer_address: Optional[ChecksumAddress] = None,
    ):
        self.registry = registry
        self.network = network
        self.deployer_address = deployer_address


# Variables


class Variable(ABC):
    VARIABLE_PREFIX = "$"

    @abstractmethod
    def resolve(self, context: VariableContext) -> Any:
        raise NotImplementedError

    @classmethod
    def is_variable(cls, param: Any) -> bool:
        """Returns True if the param is a variable."""
        result = isinstance(param, str) and param.startswith(cls.VARIABLE_PREFIX)
        return result


class DeployerAccount(Variable):
    DEPLOYER_INDICATOR = "deployer"

    @classmethod
    def is_deployer(cls, value: str) -> bool:
        """Returns True if the variable is a special deployer variable."""
        return value == cls.DEPLOYER_INDICATOR

    def resolve(self, context: VariableContext) -> Any:
        if context.deployer_address is None:
            # eager validation
            return ZERO_ADDRESS
        return context.deployer_address


class Constant(Variable):
    def __init__(self, constant_name: str, constants: typing.Dict[str, Any]):
        try:
            self.constant_value = constants[constant_name]
        except KeyError:
            raise ProxyParameters.Invalid(
                f"Constant '{constant_name}' not found in deployment file."
            )

    @classmethod
    def is_constant(cls, value: str) -> bool:
        """Returns True if the variable is a deployment constant."""
        return value.isupper()

    def resolve(self, context: VariableContext) -> Any:
        return self.constant_value


class RegistryAddress(Variable):
    """An address looked up by name in the registry of the active network."""

    def __init__(self, contract_name: str):
        self.contract_name = contract_name

    def resolve(self, context: VariableContext) -> Any:
        return context.registry.get_contract(context.network, self.contract_name)


def _variable_from_value(variable: str, constants: typing.Dict[str, Any]) -> Variable:
    variable = variable[len(Variable.VARIABLE_PREFIX) :]
    if not variable:
        raise ProxyParameters.Invalid("Empty variable name in deployment file.")
    if DeployerAccount.is_deployer(variable):
        return DeployerAccount()
    elif Constant.is_constant(variable):
        return Constant(variable, constants)
    else:
        return RegistryAddress(variable)


def _process_raw_value(value: Any, constants: typing.Dict[str, Any]) -> Any:
    if isinstance(value, list):
        return [_process_raw_value(v, constants) for v in value]

    if Variable.is_variable(value):
        value = _variable_from_value(value, constants)

    return value


def _resolve_param(value: Any, context: VariableContext) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, list):
        return [_resolve_param(v, context) for v in value]

    if isinstance(value, Variable):
        return value.resolve(context)

    return value  # literally a value


class ProxyParameters:
    """
    Represents the deployment parameters of a single proxied contract:
    the contract type, the name it is recorded under in the registry
    and the arguments of its initializer call.
    """

    class Invalid(ValueError):
        """Raised when the deployment parameters are invalid"""

    def __init__(
        self,
        contract_name: str,
        registry_name: str,
        initializer_args: List[Any],
        initializer: str = DEFAULT_INITIALIZER,
        constants: typing.Dict[str, Any] = None,
    ):
        self.contract_name = contract_name
        self.registry_name = registry_name
        self.initializer = initializer
        self.constants = constants or dict()
        self.initializer_args = _process_raw_value(list(initializer_args), self.constants)

    @classmethod
    def from_yaml(cls, filepath: Path) -> "ProxyParameters":
        config = _load_yaml(filepath)
        return cls.from_config(config)

    @classmethod
    def from_config(cls, config: typing.Dict) -> "ProxyParameters":
        """Loads the proxy parameters from a parsed YAML config."""
        print("Processing deployment parameters...")
        if not isinstance(config, dict):
            raise cls.Invalid("Malformed deployment parameters YAML.")

        deployment = config.get(DEPLOYMENT_KEY)
        if not isinstance(deployment, dict):
            raise cls.Invalid("deployment is not set in params file.")
        contract_name = deployment.get("contract")
        if not contract_name:
            raise cls.Invalid("deployment.contract is not set in params file.")
        registry_name = deployment.get("registry_name")
        if not registry_name:
            raise cls.Invalid("deployment.registry_name is not set in params file.")

        constants = config.get(CONSTANTS_KEY) or dict()
        if not isinstance(constants, dict):
            raise cls.Invalid("constants must be a mapping.")

        initializer_data = config.get(INITIALIZER_KEY) or dict()
        if not isinstance(initializer_data, dict):
            raise cls.Invalid("initializer must be a mapping.")
        initializer = initializer_data.get("method", DEFAULT_INITIALIZER)
        initializer_args = initializer_data.get("args") or list()
        if not isinstance(initializer_args, list):
            raise cls.Invalid("initializer.args must be a list.")

        return cls(
            contract_name=contract_name,
            registry_name=registry_name,
            initializer=initializer,
            initializer_args=initializer_args,
            constants=constants,
        )

    def validate(self, registry: ContractRegistry, network: NetworkName) -> None:
        """Checks that every registry variable can be resolved on the network."""
        self.resolve(registry=registry, network=network)

    def resolve(
        self,
        registry: ContractRegistry,
        network: NetworkName,
        deployer_address: Optional[ChecksumAddress] = None,
    ) -> List[Any]:
        """Resolves the initializer arguments, in order."""
        context = VariableContext(
            registry=registry, network=network, deployer_address=deployer_address
        )
        return _resolve_param(self.initializer_args, context)
