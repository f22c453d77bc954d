"""
BIP32 HD key derivation.

Private derivation (``HDKey``) and public-only derivation from a serialized
extended public key (``ExtendedPublicKey``) for watch-only address batches.
"""

from __future__ import annotations

import hashlib
import hmac
import re

import base58
from coincurve import PrivateKey, PublicKey

from saibun.constants import XPUB_VERSION
from saibun.wallet.address import hash160, pubkey_to_p2pkh_address

# secp256k1 curve order
SECP256K1_N = int("FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16)

HARDENED_OFFSET = 0x80000000

_PATH_SEGMENT = re.compile(r"^\d+['hH]?$")


class HDKey:
    """
    Hierarchical Deterministic Key for Bitcoin.
    Implements BIP32 derivation.
    """

    def __init__(
        self,
        private_key: PrivateKey,
        chain_code: bytes,
        depth: int = 0,
        parent_fingerprint: bytes = b"\x00\x00\x00\x00",
        child_number: int = 0,
    ):
        self._private_key = private_key
        self._public_key = private_key.public_key
        self.chain_code = chain_code
        self.depth = depth
        self.parent_fingerprint = parent_fingerprint
        self.child_number = child_number

    @property
    def private_key(self) -> PrivateKey:
        """Return the coincurve PrivateKey instance."""
        return self._private_key

    @property
    def public_key(self) -> PublicKey:
        """Return the coincurve PublicKey instance."""
        return self._public_key

    @property
    def fingerprint(self) -> bytes:
        return hash160(self._public_key.format(compressed=True))[:4]

    @classmethod
    def from_seed(cls, seed: bytes) -> HDKey:
        """Create master HD key from seed"""
        hmac_result = hmac.new(b"Bitcoin seed", seed, hashlib.sha512).digest()
        key_bytes = hmac_result[:32]
        chain_code = hmac_result[32:]

        private_key = PrivateKey(key_bytes)

        return cls(private_key, chain_code, depth=0)

    def derive(self, path: str) -> HDKey:
        """
        Derive child key from path notation (e.g., "m/44'/145'/0'/0/0")
        ' indicates hardened derivation
        """
        if not path.startswith("m"):
            raise ValueError("Path must start with 'm'")

        key = self
        for index in parse_path(path):
            key = key._derive_child(index)

        return key

    def _derive_child(self, index: int) -> HDKey:
        """Derive a child key at the given index"""
        hardened = index >= HARDENED_OFFSET

        if hardened:
            priv_bytes = self._private_key.secret
            data = b"\x00" + priv_bytes + index.to_bytes(4, "big")
        else:
            pub_bytes = self._public_key.format(compressed=True)
            data = pub_bytes + index.to_bytes(4, "big")

        hmac_result = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        key_offset = hmac_result[:32]
        child_chain = hmac_result[32:]

        parent_key_int = int.from_bytes(self._private_key.secret, "big")
        offset_int = int.from_bytes(key_offset, "big")

        if offset_int >= SECP256K1_N:
            raise ValueError("Invalid child key")

        child_key_int = (parent_key_int + offset_int) % SECP256K1_N

        if child_key_int == 0:
            raise ValueError("Invalid child key")

        child_key_bytes = child_key_int.to_bytes(32, "big")
        child_private_key = PrivateKey(child_key_bytes)

        return HDKey(
            child_private_key,
            child_chain,
            depth=self.depth + 1,
            parent_fingerprint=self.fingerprint,
            child_number=index,
        )

    def to_extended_public_key(self, network: str = "mainnet") -> ExtendedPublicKey:
        """Drop the private half, keeping everything needed for public derivation."""
        return ExtendedPublicKey(
            public_key=self._public_key,
            chain_code=self.chain_code,
            depth=self.depth,
            parent_fingerprint=self.parent_fingerprint,
            child_number=self.child_number,
            version=XPUB_VERSION[network],
        )

class ExtendedPublicKey:
    """Serialized-form BIP32 node without a private key."""

    def __init__(
        self,
        public_key: PublicKey,
        chain_code: bytes,
        depth: int = 0,
        parent_fingerprint: bytes = b"\x00\x00\x00\x00",
        child_number: int = 0,
        version: bytes = XPUB_VERSION["mainnet"],
    ):
        self.public_key = public_key
        self.chain_code = chain_code
        self.depth = depth
        self.parent_fingerprint = parent_fingerprint
        self.child_number = child_number
        self.version = version

    @classmethod
    def from_string(cls, xpub: str) -> ExtendedPublicKey:
        try:
            data = base58.b58decode_check(xpub.strip())
        except ValueError as e:
            raise ValueError(f"Invalid extended key encoding: {e}") from e

        if len(data) != 78:
            raise ValueError(f"Invalid extended key length: {len(data)}")

        version = data[0:4]
        if version not in XPUB_VERSION.values():
            raise ValueError(f"Not an extended public key (version {version.hex()})")

        key_bytes = data[45:78]
        if key_bytes[0] not in (0x02, 0x03):
            raise ValueError("Invalid public key prefix in extended key")

        return cls(
            public_key=PublicKey(key_bytes),
            chain_code=data[13:45],
            depth=data[4],
            parent_fingerprint=data[5:9],
            child_number=int.from_bytes(data[9:13], "big"),
            version=version,
        )

    def to_string(self) -> str:
        data = (
            self.version
            + bytes([self.depth])
            + self.parent_fingerprint
            + self.child_number.to_bytes(4, "big")
            + self.chain_code
            + self.public_key.format(compressed=True)
        )
        return base58.b58encode_check(data).decode("ascii")

    @property
    def fingerprint(self) -> bytes:
        return hash160(self.public_key.format(compressed=True))[:4]

    def derive_child(self, index: int) -> ExtendedPublicKey:
        """Non-hardened child derivation (CKDpub)."""
        if index < 0 or index >= HARDENED_OFFSET:
            raise ValueError(f"Cannot derive hardened index {index} from a public key")

        data = self.public_key.format(compressed=True) + index.to_bytes(4, "big")
        hmac_result = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        key_offset = hmac_result[:32]
        child_chain = hmac_result[32:]

        if int.from_bytes(key_offset, "big") >= SECP256K1_N:
            raise ValueError("Invalid child key")

        # point(key_offset) + parent point; coincurve raises on the point at infinity
        child_public_key = self.public_key.add(key_offset)

        return ExtendedPublicKey(
            public_key=child_public_key,
            chain_code=child_chain,
            depth=self.depth + 1,
            parent_fingerprint=self.fingerprint,
            child_number=index,
            version=self.version,
        )

    def get_address(self, network: str = "mainnet") -> str:
        return pubkey_to_p2pkh_address(self.public_key.format(compressed=True), network)


def parse_path(path: str) -> list[int]:
    """Parse "m/44'/145'/0'/0" into child indices (hardened ones offset by 2^31)."""
    parts = re.sub(r"^m/?", "", path.strip()).split("/")
    indices: list[int] = []

    for part in parts:
        if not part:
            continue
        if not _PATH_SEGMENT.match(part):
            raise ValueError(f"Invalid derivation path segment: {part!r}")

        hardened = part[-1] in "'hH"
        index = int(part.rstrip("'hH"))
        if index >= HARDENED_OFFSET:
            raise ValueError(f"Derivation index out of range: {part!r}")

        indices.append(index + HARDENED_OFFSET if hardened else index)

    return indices


def chain_index_from_path(path: str) -> int:
    """
    Pick the receive (0) or change (1) branch from a base path.

    The path is scanned from the end for the first unhardened segment equal to
    0 or 1; receive is used when there is none.
    """
    for index in reversed(parse_path(path)):
        if index in (0, 1):
            return index
    return 0


def is_valid_xpub(xpub: str) -> bool:
    try:
        ExtendedPublicKey.from_string(xpub)
    except ValueError:
        return False
    return True
