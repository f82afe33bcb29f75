from pathlib import Path

import phoswap

#
# Filesystem
#

DEPLOYMENT_DIR = Path(phoswap.__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"

REGISTRY_FILEPATH = ARTIFACTS_DIR / "contracts.json"
FARM_PARAMS_FILEPATH = CONSTRUCTOR_PARAMS_DIR / "farm.yml"

#
# Registry names
#

PHO = "pho"
DEV = "dev"
FARM = "farm"

#
# Networks
#

LOCAL_BLOCKCHAIN_ENVIRONMENTS = ["local"]

#
# Contracts
#

OZ_DEPENDENCY_NAME = "openzeppelin"
OZ_DEPENDENCY_VERSION = "5.0.0"

DEFAULT_INITIALIZER = "initialize"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# EIP1967 slots - https://eips.ethereum.org/EIPS/eip-1967
EIP1967_ADMIN_SLOT = 0xB53127684A568B3173AE13B9F8A6016E243E63B6E8EE1178D6A717850B5D6103
EIP1967_IMPLEMENTATION_SLOT = 0x360894A13BA1A3210667C828492DB98DCA3E2076CC3735A920A3CA505D382BBC
