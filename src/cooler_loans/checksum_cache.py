import functools

from cchecksum import to_checksum_address
from eth_typing import ChecksumAddress, HexAddress


# Every Cooler, token, and feed address seen while indexing passes through here, and the set of
# Coolers grows with the number of borrowers
@functools.lru_cache(maxsize=4096)
def get_checksum_address(address: HexAddress | str | bytes) -> ChecksumAddress:
    """
    Get the EIP-55 checksummed form of an address given as a hex string or 20 raw bytes.
    """

    return to_checksum_address(address)
