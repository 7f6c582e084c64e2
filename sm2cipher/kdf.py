"""
KDF Stream
Expands the shared point into the XOR mask for the payload.

The SM2 KDF is the ANSI X9.63 construction with no shared info:
Hash(Z || 00000001) || Hash(Z || 00000002) || ... truncated to klen bytes,
where Z = x2 || y2 are the shared point's coordinates.
"""

from cryptography.hazmat.primitives.kdf.x963kdf import X963KDF

from sm2cipher.errors import DomainError
from sm2cipher.hashes import HashLike, resolve_kdf_hash


def is_all_zero(data: bytes) -> bool:
    """
    True if every byte is zero.

    A structural check, not a cryptographic one. An all-zero mask
    would leave C2 equal to the plaintext.
    """
    return not any(data)


class KdfStream:
    """
    Deterministic byte-stream generator over one digest algorithm.

    Output depends only on (shared secret, length), never on call history.

    Args:
        hash_name: Digest the KDF is built from (default SM3).

    Raises:
        KdfUnavailable: If no X9.63 KDF matches the hash.
    """

    def __init__(self, hash_name: HashLike = "sm3"):
        self.algorithm = resolve_kdf_hash(hash_name)

    @property
    def name(self) -> str:
        return self.algorithm.name

    def derive(self, shared_secret: bytes, length: int) -> bytes:
        """
        Derive ``length`` bytes from the shared secret octets.

        Args:
            shared_secret: x2 || y2 of the shared point.
            length: Number of output bytes (the plaintext length).

        Returns:
            The mask t.
        """
        if length < 0:
            raise DomainError(f"KDF output length must be non-negative, got {length}")
        if length == 0:
            return b""
        # X963KDF instances are single-use
        kdf = X963KDF(algorithm=self.algorithm, length=length, sharedinfo=None)
        return kdf.derive(shared_secret)

    is_all_zero = staticmethod(is_all_zero)
