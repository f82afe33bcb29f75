import pytest

from phoswap.confirm import exit_on_error
from phoswap.proxy import (
    AlreadyDeployed,
    ExternalCallError,
    check_not_deployed,
    deploy_proxied_contract,
    upgrade_proxied_contract,
)
from phoswap.registry import ConfigLookupError, PersistenceError
from tests.conftest import (
    DEV_ADDRESS,
    IMPLEMENTATION_ADDRESS,
    MAINNET,
    NEW_IMPLEMENTATION_ADDRESS,
    PHO_ADDRESS,
    PROXY_ADDRESS,
    SEPOLIA,
)


def test_deploy_farm(mainnet_registry, proxy_deployer, farm_parameters):
    receipt = deploy_proxied_contract(
        registry=mainnet_registry,
        network=MAINNET,
        deployer=proxy_deployer,
        parameters=farm_parameters,
    )

    assert proxy_deployer.calls == [
        (
            "deploy_proxy",
            "PhoSwapFarming",
            [PHO_ADDRESS, DEV_ADDRESS, "40000000000000000000", "10031542"],
            "initialize",
        )
    ]
    assert receipt.address == PROXY_ADDRESS
    assert receipt.implementation == IMPLEMENTATION_ADDRESS
    assert mainnet_registry.get_contracts(MAINNET) == {
        "pho": PHO_ADDRESS,
        "dev": DEV_ADDRESS,
        "farm": PROXY_ADDRESS,
    }


def test_deploy_farm_does_not_touch_other_networks(
    mainnet_registry, proxy_deployer, farm_parameters
):
    mainnet_registry.save_contract(SEPOLIA, "pho", PHO_ADDRESS)
    deploy_proxied_contract(mainnet_registry, MAINNET, proxy_deployer, farm_parameters)
    assert mainnet_registry.get_contracts(SEPOLIA) == {"pho": PHO_ADDRESS}


def test_deploy_with_missing_dependency(registry, proxy_deployer, farm_parameters):
    registry.save_contract(MAINNET, "pho", PHO_ADDRESS)

    with pytest.raises(ConfigLookupError):
        deploy_proxied_contract(registry, MAINNET, proxy_deployer, farm_parameters)
    assert proxy_deployer.calls == []
    assert "farm" not in registry.get_contracts(MAINNET)


def test_deploy_refuses_registered_contract(mainnet_registry, proxy_deployer, farm_parameters):
    mainnet_registry.save_contract(MAINNET, "farm", PROXY_ADDRESS)

    with pytest.raises(AlreadyDeployed):
        deploy_proxied_contract(mainnet_registry, MAINNET, proxy_deployer, farm_parameters)
    assert proxy_deployer.calls == []

    deploy_proxied_contract(
        mainnet_registry, MAINNET, proxy_deployer, farm_parameters, overwrite=True
    )
    assert len(proxy_deployer.calls) == 1


def test_failed_deployment_is_not_recorded(
    mainnet_registry, failing_proxy_deployer, farm_parameters
):
    with pytest.raises(ExternalCallError):
        deploy_proxied_contract(mainnet_registry, MAINNET, failing_proxy_deployer, farm_parameters)
    assert "farm" not in mainnet_registry.get_contracts(MAINNET)


def test_upgrade_farm(mainnet_registry, proxy_deployer):
    mainnet_registry.save_contract(MAINNET, "farm", PROXY_ADDRESS)

    receipt = upgrade_proxied_contract(
        registry=mainnet_registry,
        network=MAINNET,
        deployer=proxy_deployer,
        contract_name="PhoSwapFarming",
        registry_name="farm",
    )

    assert proxy_deployer.calls == [("upgrade_proxy", PROXY_ADDRESS, "PhoSwapFarming")]
    assert receipt.implementation == NEW_IMPLEMENTATION_ADDRESS
    assert mainnet_registry.get_contract(MAINNET, "farm") == PROXY_ADDRESS


def test_upgrade_without_registered_farm(mainnet_registry, proxy_deployer):
    with pytest.raises(ConfigLookupError, match="'farm'"):
        upgrade_proxied_contract(
            mainnet_registry, MAINNET, proxy_deployer, "PhoSwapFarming", "farm"
        )
    assert proxy_deployer.calls == []


def test_upgrade_script_exit_status(mainnet_registry, proxy_deployer, capsys):
    @exit_on_error
    def upgrade():
        upgrade_proxied_contract(
            mainnet_registry, MAINNET, proxy_deployer, "PhoSwapFarming", "farm"
        )

    with pytest.raises(SystemExit) as exc_info:
        upgrade()
    assert exc_info.value.code == 1
    assert proxy_deployer.calls == []
    assert "ConfigLookupError" in capsys.readouterr().err


def test_deploy_script_exit_status(mainnet_registry, proxy_deployer, farm_parameters):
    @exit_on_error
    def deploy():
        return deploy_proxied_contract(mainnet_registry, MAINNET, proxy_deployer, farm_parameters)

    receipt = deploy()
    assert receipt.address == PROXY_ADDRESS


def test_check_not_deployed(mainnet_registry):
    check_not_deployed(mainnet_registry, MAINNET, "farm")

    mainnet_registry.save_contract(MAINNET, "farm", PROXY_ADDRESS)
    with pytest.raises(AlreadyDeployed, match=PROXY_ADDRESS):
        check_not_deployed(mainnet_registry, MAINNET, "farm")
    check_not_deployed(mainnet_registry, MAINNET, "farm", overwrite=True)
    check_not_deployed(mainnet_registry, SEPOLIA, "farm")


def _fail_registry_writes(monkeypatch):
    def fail(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("phoswap.registry.os.replace", fail)


def test_unrecorded_deployment_names_proxy_address(
    mainnet_registry, proxy_deployer, farm_parameters, monkeypatch, capsys
):
    _fail_registry_writes(monkeypatch)

    @exit_on_error
    def deploy():
        deploy_proxied_contract(mainnet_registry, MAINNET, proxy_deployer, farm_parameters)

    with pytest.raises(SystemExit) as exc_info:
        deploy()
    assert exc_info.value.code == 1
    assert len(proxy_deployer.calls) == 1

    err = capsys.readouterr().err
    assert "disk full" in err
    assert PROXY_ADDRESS in err
    assert IMPLEMENTATION_ADDRESS in err
    assert f"register_contract --registry {mainnet_registry.filepath}" in err
    assert f"--network-name {MAINNET} --name farm --address {PROXY_ADDRESS}" in err
    assert "farm" not in mainnet_registry.get_contracts(MAINNET)


def test_unrecorded_upgrade_names_proxy_address(mainnet_registry, proxy_deployer, monkeypatch):
    mainnet_registry.save_contract(MAINNET, "farm", PROXY_ADDRESS)
    _fail_registry_writes(monkeypatch)

    with pytest.raises(PersistenceError) as exc_info:
        upgrade_proxied_contract(
            mainnet_registry, MAINNET, proxy_deployer, "PhoSwapFarming", "farm"
        )
    message = str(exc_info.value)
    assert PROXY_ADDRESS in message
    assert NEW_IMPLEMENTATION_ADDRESS in message
    assert "register_contract" in message
    assert len(proxy_deployer.calls) == 1
