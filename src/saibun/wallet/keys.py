"""
WIF private key handling.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from functools import cached_property

import base58
from coincurve import PrivateKey

from saibun.constants import WIF_VERSION
from saibun.errors import InvalidKeyFormatError
from saibun.wallet.address import hash160, p2pkh_script, pubkey_to_p2pkh_address


@dataclass(frozen=True)
class KeyPair:
    """A signing key together with its public key encoding and network."""

    private_key: PrivateKey
    compressed: bool = True
    network: str = "mainnet"

    @cached_property
    def public_key_bytes(self) -> bytes:
        return self.private_key.public_key.format(compressed=self.compressed)

    @property
    def public_key_hex(self) -> str:
        return self.public_key_bytes.hex()

    @cached_property
    def pubkey_hash(self) -> bytes:
        return hash160(self.public_key_bytes)

    @property
    def address(self) -> str:
        return pubkey_to_p2pkh_address(self.public_key_bytes, self.network)

    @property
    def locking_script(self) -> bytes:
        return p2pkh_script(self.pubkey_hash)

    @property
    def wif(self) -> str:
        return encode_wif(self.private_key.secret, self.compressed, self.network)


def encode_wif(secret: bytes, compressed: bool = True, network: str = "mainnet") -> str:
    payload = bytes([WIF_VERSION[network]]) + secret
    if compressed:
        payload += b"\x01"
    return base58.b58encode_check(payload).decode("ascii")


def decode_wif(wif: str, network: str = "mainnet") -> tuple[bytes, bool]:
    """Return (secret, compressed) for a WIF string on ``network``."""
    try:
        payload = base58.b58decode_check(wif.strip())
    except ValueError as e:
        raise InvalidKeyFormatError("Invalid WIF format") from e

    if not payload or payload[0] != WIF_VERSION[network]:
        raise InvalidKeyFormatError(f"WIF is not a {network} private key")

    body = payload[1:]
    if len(body) == 33 and body[32] == 0x01:
        return body[:32], True
    if len(body) == 32:
        return body, False
    raise InvalidKeyFormatError(f"Invalid WIF payload length: {len(body)}")


def import_from_wif(wif: str, network: str = "mainnet") -> KeyPair:
    secret, compressed = decode_wif(wif, network)
    try:
        private_key = PrivateKey(secret)
    except ValueError as e:
        raise InvalidKeyFormatError(f"Invalid private key: {e}") from e
    return KeyPair(private_key, compressed, network)


def generate_key_pair(network: str = "mainnet") -> KeyPair:
    return KeyPair(PrivateKey(secrets.token_bytes(32)), True, network)


def is_valid_wif(wif: str, network: str = "mainnet") -> bool:
    try:
        import_from_wif(wif, network)
    except InvalidKeyFormatError:
        return False
    return True
