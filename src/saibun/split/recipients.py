"""
Destination address resolution for split outputs.
"""

from __future__ import annotations

from loguru import logger

from saibun.errors import DerivationFailureError, InvalidRecipientConfigError
from saibun.models import SingleRecipient, XpubRecipient
from saibun.wallet.address import is_valid_address
from saibun.wallet.bip32 import ExtendedPublicKey, chain_index_from_path


def derive_addresses(
    xpub: str,
    derivation_path: str,
    start_index: int,
    count: int,
    network: str = "mainnet",
) -> list[str]:
    """
    Derive ``count`` sequential P2PKH addresses from an extended public key.

    The xpub is treated as the account node; the receive/change branch is taken
    from ``derivation_path`` and derived once, then children
    ``start_index .. start_index + count - 1`` are derived from it.

    Raises:
        InvalidRecipientConfigError: if the xpub or path cannot be parsed
        DerivationFailureError: if any child fails; no partial list is returned
    """
    try:
        account_key = ExtendedPublicKey.from_string(xpub)
        chain_index = chain_index_from_path(derivation_path)
    except ValueError as e:
        raise InvalidRecipientConfigError(str(e)) from e

    try:
        chain_key = account_key.derive_child(chain_index)
    except ValueError as e:
        raise DerivationFailureError(chain_index, str(e)) from e

    addresses: list[str] = []
    for index in range(start_index, start_index + count):
        try:
            addresses.append(chain_key.derive_child(index).get_address(network))
        except ValueError as e:
            raise DerivationFailureError(index, str(e)) from e

    logger.debug(
        f"Derived {count} addresses on chain {chain_index} "
        f"from index {start_index} to {start_index + count - 1}"
    )
    return addresses


def resolve_recipients(
    recipient: SingleRecipient | XpubRecipient,
    output_count: int,
    network: str = "mainnet",
) -> list[str]:
    """Return exactly ``output_count`` destination addresses, in output order."""
    if isinstance(recipient, SingleRecipient):
        if not is_valid_address(recipient.address, network):
            raise InvalidRecipientConfigError(f"invalid {network} address {recipient.address!r}")
        return [recipient.address] * output_count

    if isinstance(recipient, XpubRecipient):
        if recipient.resolved_addresses is not None:
            addresses = list(recipient.resolved_addresses)
            if len(addresses) != output_count:
                raise InvalidRecipientConfigError(
                    f"{len(addresses)} resolved addresses supplied for {output_count} outputs"
                )
            for position, address in enumerate(addresses):
                if not is_valid_address(address, network):
                    raise InvalidRecipientConfigError(
                        f"resolved address {position} ({address!r}) is not valid on {network}"
                    )
            logger.debug(f"Using {len(addresses)} caller-resolved addresses")
            return addresses

        return derive_addresses(
            recipient.xpub,
            recipient.derivation_path,
            recipient.start_index,
            output_count,
            network,
        )

    raise InvalidRecipientConfigError(f"unsupported recipient {type(recipient).__name__}")
