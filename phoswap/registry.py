import json
import os
import stat
import tempfile
from collections import defaultdict
from enum import Enum
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

NetworkName = str
ContractName = str
Contracts = Dict[ContractName, ChecksumAddress]


STANDARD_REGISTRY_JSON_FORMAT = {"indent": 4, "separators": (",", ": "), "sort_keys": True}


class RegistryError(Exception):
    """Base class for contract registry failures."""


class ConfigLookupError(RegistryError):
    """Raised when a required network or contract entry is missing from the registry."""


class PersistenceError(RegistryError):
    """Raised when the registry file cannot be read or written."""


class RegistryEntry(NamedTuple):
    """Represents a single (network, name, address) entry of a contract registry."""

    network: NetworkName
    name: ContractName
    address: ChecksumAddress


def _checksum(address: str, name: ContractName) -> ChecksumAddress:
    try:
        return to_checksum_address(address)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid address '{address}' for contract '{name}'.")


def _load_registry_data(filepath: Path) -> Dict[NetworkName, Contracts]:
    """Loads the raw registry mapping. A missing file is an empty registry."""
    if not filepath.exists():
        return dict()
    try:
        with open(filepath, "r") as file:
            data = json.load(file)
    except (OSError, ValueError) as e:
        raise PersistenceError(f"Cannot read registry at {filepath}: {e}") from e

    if not isinstance(data, dict) or not all(isinstance(c, dict) for c in data.values()):
        raise PersistenceError(f"Malformed registry at {filepath}.")
    return data


def _registry_file_mode(filepath: Path) -> int:
    """Mode of the existing registry file, or the umask default for a new one."""
    try:
        return stat.S_IMODE(os.stat(filepath).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _fsync_directory(directory: Path) -> None:
    dir_fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(dir_fd)
    finally:
        os.close(dir_fd)


def _dump_registry_data(data: Dict[NetworkName, Contracts], filepath: Path) -> None:
    """
    Atomically replaces the registry file with the given data.

    The data is written to a temporary file next to the registry, flushed to disk
    and then renamed over the registry, so readers never observe a partial write.
    The registry keeps its file mode across writes.
    """
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        mode = _registry_file_mode(filepath)
        fd, temp_filepath = tempfile.mkstemp(
            dir=filepath.parent, prefix=f".{filepath.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as file:
                json.dump(data, file, **STANDARD_REGISTRY_JSON_FORMAT)
                file.write("\n")
                file.flush()
                os.fsync(file.fileno())
            os.chmod(temp_filepath, mode)
            os.replace(temp_filepath, filepath)
            _fsync_directory(filepath.parent)
        finally:
            if os.path.exists(temp_filepath):
                os.unlink(temp_filepath)
    except OSError as e:
        raise PersistenceError(f"Cannot write registry at {filepath}: {e}") from e


class ContractRegistry:
    """
    Network-scoped address book shared by independent deployment scripts.

    Maps logical contract names (e.g. 'pho', 'dev', 'farm') to checksummed
    addresses for each network, persisted as a single JSON file.
    """

    def __init__(self, filepath: Path):
        self.filepath = Path(filepath)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.filepath})"

    def networks(self) -> List[NetworkName]:
        return sorted(_load_registry_data(self.filepath))

    def get_contracts(self, network: NetworkName) -> Contracts:
        """
        Returns all contracts registered for the network.
        An empty mapping is returned when nothing was ever saved for the network.
        """
        data = _load_registry_data(self.filepath)
        return dict(data.get(network, {}))

    def get_contract(self, network: NetworkName, name: ContractName) -> ChecksumAddress:
        """Returns the address registered for name on the network, or fails."""
        contracts = self.get_contracts(network)
        if not contracts:
            raise ConfigLookupError(
                f"No contracts registered for network '{network}' in {self.filepath}."
            )
        try:
            return contracts[name]
        except KeyError:
            raise ConfigLookupError(
                f"Contract '{name}' is not registered for network '{network}' in {self.filepath}."
            )

    def save_contract(self, network: NetworkName, name: ContractName, address: str) -> None:
        """Records (or overwrites) the address of name on the network and persists it."""
        if not network:
            raise ValueError("Network name must not be empty.")
        if not name:
            raise ValueError("Contract name must not be empty.")
        checksum_address = _checksum(address, name)

        data = _load_registry_data(self.filepath)
        data.setdefault(network, dict())[name] = checksum_address
        _dump_registry_data(data, self.filepath)


def read_registry(filepath: Path) -> List[RegistryEntry]:
    data = _load_registry_data(filepath)
    registry_entries = list()
    for network, contracts in data.items():
        for name, address in contracts.items():
            registry_entry = RegistryEntry(network=network, name=name, address=address)
            registry_entries.append(registry_entry)
    return registry_entries


def write_registry(entries: List[RegistryEntry], filepath: Path, silent: bool = False) -> Path:
    """Writes registry entries to a file, replacing its previous contents."""
    data = defaultdict(dict)
    for entry in entries:
        data[entry.network][entry.name] = _checksum(entry.address, entry.name)

    if not silent:
        action = "Updating existing" if filepath.exists() else "Creating new"
        print(f"{action} registry at {filepath}.")

    _dump_registry_data(dict(data), filepath)
    return filepath


class ConflictResolution(Enum):
    USE_1 = 1
    USE_2 = 2


def _select_conflict_resolution(
    registry_1_entry, registry_1_filepath, registry_2_entry, registry_2_filepath
) -> ConflictResolution:
    print(
        f"\n! Conflict detected for {registry_1_entry.name} "
        f"on network {registry_1_entry.network}:"
    )
    print(f"[1]: {registry_1_entry.name} at {registry_1_entry.address} for {registry_1_filepath}")
    print(f"[2]: {registry_2_entry.name} at {registry_2_entry.address} for {registry_2_filepath}")
    print("[A]: Abort merge")

    valid_str_answers = [
        str(ConflictResolution.USE_1.value),
        str(ConflictResolution.USE_2.value),
        "A",
    ]
    answer = None
    while answer not in valid_str_answers:
        answer = input(f"Merge resolution, {valid_str_answers}? ")

    if answer == "A":
        raise RegistryError("Merge aborted.")
    return ConflictResolution(int(answer))


def merge_registries(
    registry_1_filepath: Path,
    registry_2_filepath: Path,
    output_filepath: Path,
    deprecated_contracts: Optional[List[ContractName]] = None,
) -> Path:
    """Merges two registries, asking the operator to settle conflicting addresses."""
    deprecated_contracts = deprecated_contracts or []

    reg1 = defaultdict(dict)
    reg2 = defaultdict(dict)

    for e in read_registry(registry_1_filepath):
        if e.name in deprecated_contracts:
            continue
        reg1[e.network][e.name] = e

    for e in read_registry(registry_2_filepath):
        if e.name in deprecated_contracts:
            continue
        reg2[e.network][e.name] = e

    merged: List[RegistryEntry] = list()
    for network in sorted(set(reg1) | set(reg2)):
        reg1_entries, reg2_entries = reg1.get(network, {}), reg2.get(network, {})
        for name in sorted(set(reg1_entries) | set(reg2_entries)):
            entry_1, entry_2 = reg1_entries.get(name), reg2_entries.get(name)
            if entry_1 and entry_2 and entry_1.address.lower() != entry_2.address.lower():
                resolution = _select_conflict_resolution(
                    registry_1_entry=entry_1,
                    registry_2_entry=entry_2,
                    registry_1_filepath=registry_1_filepath,
                    registry_2_filepath=registry_2_filepath,
                )
                selected_entry = entry_1 if resolution == ConflictResolution.USE_1 else entry_2
            else:
                selected_entry = entry_1 or entry_2
            merged.append(selected_entry)

    write_registry(entries=merged, filepath=output_filepath)
    print(f"Merged registry output to {output_filepath}")
    return output_filepath


def normalize_registry(filepath: Path) -> None:
    """Rewrites a registry file with checksummed addresses and the standard layout."""
    try:
        registry_entries = read_registry(filepath=filepath)
    except Exception:
        print(f"Error when reading registry at {filepath}.")
        raise

    try:
        write_registry(entries=registry_entries, filepath=filepath, silent=True)
    except Exception:
        print(f"Error when normalizing registry at {filepath}.")
        raise
    print(f"Successfully normalized registry at {filepath}.")
