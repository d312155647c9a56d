"""Content-addressable identifiers.

An Identifier is a fixed-length digest tagged with the code of the algorithm
that produced it, so identifiers from different algorithms can be stored
side by side and always describe themselves.
"""

import binascii
import hashlib
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from feed_sync.errors import InvalidEncoding, InvalidInput, InvalidLength


class Algo(IntEnum):
    """Hash algorithm codes. Codes are persisted, never reuse one."""

    SHA224 = 1
    SHA256 = 2


DEFAULT_ALGO = Algo.SHA224

_HASHES = {
    Algo.SHA224: hashlib.sha224,
    Algo.SHA256: hashlib.sha256,
}


def _to_algo(algo: Union[Algo, int]) -> Algo:
    try:
        return Algo(algo)
    except ValueError as e:
        raise InvalidInput(f"Unknown identifier algorithm: {algo!r}") from e


def digest_size(algo: Union[Algo, int]) -> int:
    """Return the value length in bytes for an algorithm."""
    return _HASHES[_to_algo(algo)]().digest_size


@dataclass(frozen=True)
class Identifier:
    """A typed, fixed-length content identifier."""

    algo: Algo
    value: bytes

    def __post_init__(self):
        algo = _to_algo(self.algo)
        value = bytes(self.value)
        if len(value) != digest_size(algo):
            raise InvalidLength(
                f"{algo.name} identifiers are {digest_size(algo)} bytes, got {len(value)}"
            )
        object.__setattr__(self, "algo", algo)
        object.__setattr__(self, "value", value)

    @classmethod
    def from_content(
        cls, content: Union[bytes, str], algo: Union[Algo, int] = DEFAULT_ALGO
    ) -> "Identifier":
        """Hash content into an identifier.

        Args:
            content: Raw bytes, or a string which is UTF-8 encoded first
            algo: Algorithm code (default SHA-224)

        Returns:
            Identifier of the content
        """
        algo = _to_algo(algo)
        if isinstance(content, str):
            content = content.encode("utf-8")
        return cls(algo, _HASHES[algo](content).digest())

    @classmethod
    def from_hex(cls, algo: Union[Algo, int], hex_string: str) -> "Identifier":
        """Decode a hex string produced by hex_string.

        Raises:
            InvalidLength: If the string length is not twice the digest size
            InvalidEncoding: If the string contains non-hex characters
        """
        algo = _to_algo(algo)
        expected = 2 * digest_size(algo)
        if len(hex_string) != expected:
            raise InvalidLength(
                f"{algo.name} hex strings are {expected} characters, got {len(hex_string)}"
            )
        try:
            raw = binascii.unhexlify(hex_string)
        except (binascii.Error, ValueError) as e:
            raise InvalidEncoding(f"Invalid hex string: {hex_string!r}") from e
        return cls(algo, raw)

    @property
    def hex_string(self) -> str:
        return self.value.hex()

    def __str__(self) -> str:
        return self.hex_string
