"""
P2PKH address and script utilities.
"""

from __future__ import annotations

import hashlib

import base58

from saibun.constants import P2PKH_VERSION
from saibun.wallet.signing import push_data

OP_FALSE = 0x00
OP_RETURN = 0x6A


def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data))"""
    h = hashlib.new("ripemd160")
    h.update(hashlib.sha256(data).digest())
    return h.digest()


def p2pkh_script(pubkey_hash: bytes) -> bytes:
    """OP_DUP OP_HASH160 <20-byte-pubkeyhash> OP_EQUALVERIFY OP_CHECKSIG"""
    if len(pubkey_hash) != 20:
        raise ValueError(f"Invalid pubkey hash length: {len(pubkey_hash)}")
    return bytes([0x76, 0xA9, 0x14]) + pubkey_hash + bytes([0x88, 0xAC])


def pubkey_hash_to_address(pubkey_hash: bytes, network: str = "mainnet") -> str:
    version = P2PKH_VERSION[network]
    return base58.b58encode_check(bytes([version]) + pubkey_hash).decode("ascii")


def pubkey_to_p2pkh_address(pubkey_bytes: bytes, network: str = "mainnet") -> str:
    """Convert a compressed (33 bytes) or uncompressed (65 bytes) public key to a P2PKH address."""
    if len(pubkey_bytes) not in (33, 65):
        raise ValueError(f"Invalid pubkey length: {len(pubkey_bytes)}")
    return pubkey_hash_to_address(hash160(pubkey_bytes), network)


def decode_address(address: str, network: str = "mainnet") -> bytes:
    """Return the 20-byte pubkey hash of a P2PKH address on ``network``."""
    try:
        decoded = base58.b58decode_check(address)
    except ValueError as e:
        raise ValueError(f"Invalid base58 address: {address}") from e

    if len(decoded) != 21:
        raise ValueError(f"Invalid address payload length: {len(decoded)}")

    version = decoded[0]
    if version != P2PKH_VERSION[network]:
        raise ValueError(f"Address version 0x{version:02x} is not P2PKH on {network}")

    return decoded[1:]


def address_to_scriptpubkey(address: str, network: str = "mainnet") -> bytes:
    return p2pkh_script(decode_address(address, network))


def scriptpubkey_to_address(scriptpubkey: bytes, network: str = "mainnet") -> str | None:
    """Convert a P2PKH scriptPubKey to its address, None for any other script."""
    if (
        len(scriptpubkey) == 25
        and scriptpubkey[:3] == bytes([0x76, 0xA9, 0x14])
        and scriptpubkey[23:] == bytes([0x88, 0xAC])
    ):
        return pubkey_hash_to_address(scriptpubkey[3:23], network)
    return None


def is_valid_address(address: str, network: str = "mainnet") -> bool:
    try:
        decode_address(address, network)
    except ValueError:
        return False
    return True


def op_return_script(payload: bytes) -> bytes:
    """Unspendable data carrier script: OP_FALSE OP_RETURN <payload>"""
    return bytes([OP_FALSE, OP_RETURN]) + push_data(payload)
