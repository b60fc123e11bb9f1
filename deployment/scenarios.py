"""
Named deployment scenarios for the Keeper and Founders contract families.
"""

from typing import Callable, Dict, List

from .artifacts import AddressOf, ArtifactDescriptor, EnvValue
from .errors import ConfigurationError


def keeper_token() -> List[ArtifactDescriptor]:
    """KEEPER token and KeeperNFT, then the KeeperTB controller wired to both."""
    return [
        ArtifactDescriptor("KEEPER", label="Keeper"),
        ArtifactDescriptor("KeeperNFT", label="Keeper NFT"),
        ArtifactDescriptor(
            "KeeperTB",
            [AddressOf("KEEPER"), AddressOf("KeeperNFT"), EnvValue("METAMASK_ADDRESS")],
            label="Keeper TB",
        ),
    ]


def founders_pass() -> List[ArtifactDescriptor]:
    return [
        ArtifactDescriptor(
            "FoundersPass",
            [EnvValue("USDT_ADDRESS"), EnvValue("TIER1_METADATA"), EnvValue("TIER2_METADATA")],
            label="Founders Pass",
        ),
    ]


def founders_keeper() -> List[ArtifactDescriptor]:
    return [
        ArtifactDescriptor(
            "FoundersKeeper",
            [EnvValue("PRIVATE_SAFE_ADDRESS"), EnvValue("TEAM_TOKENS_ADDRESS"), EnvValue("TB_AND_GA")],
            label="Founders Keeper",
        ),
    ]


def founders() -> List[ArtifactDescriptor]:
    return founders_pass() + founders_keeper()


SCENARIOS: Dict[str, Callable[[], List[ArtifactDescriptor]]] = {
    "keeper-token": keeper_token,
    "founders-pass": founders_pass,
    "founders-keeper": founders_keeper,
    "founders": founders,
}


def get_scenario(name: str) -> List[ArtifactDescriptor]:
    try:
        return SCENARIOS[name]()
    except KeyError:
        known = ", ".join(sorted(SCENARIOS))
        raise ConfigurationError(f"Unknown deployment scenario '{name}' (known scenarios: {known})") from None
