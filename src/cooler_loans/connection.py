from json import JSONDecodeError
from pathlib import Path
from typing import TYPE_CHECKING, cast

from pydantic import HttpUrl, WebsocketUrl
from ujson import loads as ujson_loads
from web3 import HTTPProvider, IPCProvider, JSONBaseProvider, LegacyWebSocketProvider, Web3
from web3.types import RPCResponse

from cooler_loans.config import Settings
from cooler_loans.constants import CHAIN_ID_TO_NETWORK
from cooler_loans.exceptions import CoolerLoansValueError, UnknownNetwork


def _fast_decode_rpc_response(raw_response: bytes) -> RPCResponse:
    """
    Decode the JSON-RPC response using ujson.
    """

    try:
        return cast("RPCResponse", ujson_loads(raw_response))
    except ValueError:
        # Re-raise as a dummy JSONDecodeError so web3py's exception handling works as intended.
        msg = "JSON failure"
        raise JSONDecodeError(msg, "[]", 0) from None


def get_chain_id_for_network(network: str) -> int:
    for chain_id, network_name in CHAIN_ID_TO_NETWORK.items():
        if network_name == network:
            return chain_id
    raise CoolerLoansValueError(message=f"Unknown network {network!r}")


def get_network_for_chain_id(chain_id: int) -> str:
    try:
        return CHAIN_ID_TO_NETWORK[chain_id]
    except KeyError:
        raise UnknownNetwork(chain_id=chain_id) from None


def get_web3_from_config(settings: Settings, *, optimize: bool = True) -> Web3:
    """
    Build a Web3 connection to the RPC endpoint configured for the active network.
    """

    chain_id = get_chain_id_for_network(settings.network)

    match endpoint := settings.rpc.get(chain_id):
        case HttpUrl():
            w3 = Web3(HTTPProvider(str(endpoint)))
        case WebsocketUrl():
            w3 = Web3(LegacyWebSocketProvider(str(endpoint)))
        case Path():
            w3 = Web3(IPCProvider(str(endpoint)))
        case None:
            raise CoolerLoansValueError(
                message=f"Chain ID {chain_id} ({settings.network}) does not have an RPC defined"
            )

    if w3.eth.chain_id != chain_id:
        raise CoolerLoansValueError(
            message=(
                f"The chain ID ({w3.eth.chain_id}) at endpoint {endpoint} does not match "
                f"the chain ID ({chain_id}) for network {settings.network}."
            )
        )

    if optimize:
        # Remove all middleware and monkey-patch the JSON decoding for RPC responses
        w3.middleware_onion.clear()
        if TYPE_CHECKING:
            assert isinstance(w3.provider, JSONBaseProvider)
        w3.provider.decode_rpc_response = _fast_decode_rpc_response  # type:ignore[method-assign]

    return w3
