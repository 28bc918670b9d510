import tomllib
from pathlib import Path
from typing import Annotated

import tomlkit
from eth_typing import ChecksumAddress
from pydantic import (
    BaseModel,
    BeforeValidator,
    Field,
    HttpUrl,
    PlainSerializer,
    WebsocketUrl,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from cooler_loans.checksum_cache import get_checksum_address
from cooler_loans.constants import (
    DEFAULT_COOLER_FACTORY_ADDRESSES,
    DEFAULT_GOHM_ADDRESSES,
    DEFAULT_OHM_ADDRESSES,
    DEFAULT_PRICE_FEEDS,
)
from cooler_loans.exceptions import AddressNotFound

CONFIG_DIR = Path.home() / ".config" / "cooler_loans"
CONFIG_FILE = CONFIG_DIR / "config.toml"
DB_PATH = CONFIG_DIR / "cooler_loans.db"


Address = Annotated[ChecksumAddress, BeforeValidator(get_checksum_address)]


class DatabaseSettings(BaseModel):
    # Serialize the path as a string representation of the absolute path
    path: Annotated[
        Path,
        PlainSerializer(lambda path: str(path.absolute()), return_type=str),
    ]


class PriceFeed(BaseModel):
    """
    A Chainlink aggregator pricing a token in some quote asset. If `quote_feed` is set, the price
    is converted to USD by multiplying with the quote asset's USD price from that aggregator.
    """

    aggregator: Address
    quote_feed: Address | None = None


class NetworkAddresses(BaseModel):
    ohm: Address | None = None
    gohm: Address | None = None
    cooler_factory: Address | None = None
    price_feeds: dict[Address, PriceFeed] = Field(default_factory=dict)


def _default_network_addresses() -> dict[str, NetworkAddresses]:
    networks = (
        DEFAULT_OHM_ADDRESSES.keys()
        | DEFAULT_GOHM_ADDRESSES.keys()
        | DEFAULT_COOLER_FACTORY_ADDRESSES.keys()
    )
    return {
        network: NetworkAddresses(
            ohm=DEFAULT_OHM_ADDRESSES.get(network),
            gohm=DEFAULT_GOHM_ADDRESSES.get(network),
            cooler_factory=DEFAULT_COOLER_FACTORY_ADDRESSES.get(network),
            price_feeds={
                token: PriceFeed(aggregator=aggregator, quote_feed=quote_feed)
                for token, (aggregator, quote_feed) in DEFAULT_PRICE_FEEDS.get(network, {}).items()
            },
        )
        for network in sorted(networks)
    }


class Settings(BaseSettings):
    """
    Runtime configuration. A single instance is built at startup and passed to the indexer; nothing
    in the package reads configuration from module-level state.
    """

    model_config = SettingsConfigDict(
        env_prefix="COOLER_LOANS_",
        env_nested_delimiter="__",
    )

    network: str = "mainnet"
    database: DatabaseSettings = Field(
        default_factory=lambda: DatabaseSettings(path=DB_PATH),
    )
    rpc: dict[
        int,
        HttpUrl | WebsocketUrl | Path,
    ] = Field(default_factory=dict)
    addresses: dict[str, NetworkAddresses] = Field(default_factory=_default_network_addresses)
    halt_on_error: bool = True

    @field_validator("rpc", mode="after")
    def validate_paths(
        cls,  # noqa: N805
        rpc_dict: dict[int, HttpUrl | WebsocketUrl | Path],
    ) -> dict[int, HttpUrl | WebsocketUrl | Path]:
        """
        Validate the endpoints.

        This will convert all file paths to an absolute reference, leaving HTTP and WS URLs as-is.
        """

        return {
            chain_id: endpoint.expanduser().absolute() if isinstance(endpoint, Path) else endpoint
            for chain_id, endpoint in rpc_dict.items()
        }

    def get_network_addresses(self) -> NetworkAddresses:
        """
        Get the address table for the active network. An empty table is returned for an unknown
        network, so that the failure surfaces at the first lookup of a specific address.
        """

        return self.addresses.get(self.network, NetworkAddresses())

    def get_ohm_address(self) -> ChecksumAddress:
        if (address := self.get_network_addresses().ohm) is None:
            raise AddressNotFound(network=self.network, asset="OHM")
        return address

    def get_gohm_address(self) -> ChecksumAddress:
        if (address := self.get_network_addresses().gohm) is None:
            raise AddressNotFound(network=self.network, asset="gOHM")
        return address

    def get_cooler_factory_address(self) -> ChecksumAddress:
        if (address := self.get_network_addresses().cooler_factory) is None:
            raise AddressNotFound(network=self.network, asset="CoolerFactory")
        return address


def load_config_from_file(config_path: Path) -> Settings:
    return Settings.model_validate(
        tomllib.loads(
            config_path.read_text(),
        ),
    )


def save_config_to_file(config: Settings, config_path: Path = CONFIG_FILE) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        tomlkit.dumps(
            config.model_dump(mode="json", exclude_none=True),
        ),
    )
