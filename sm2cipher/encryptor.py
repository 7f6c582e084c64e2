"""
Encryptor
Builds an SM2 ciphertext value from a plaintext and a recipient public key.

GB/T 32918.4-2016 6.1:
  A1  k <- [1, n-1]
  A2  C1 = [k]G
  A3  [h]P != O, otherwise the public key is rejected
  A4  (x2, y2) = [k]P
  A5  t = KDF(x2 || y2, klen); an all-zero t restarts at A1
  A6  C2 = M xor t
  A7  C3 = Hash(x2 || M || y2)

The restart at A5 is bounded by ``max_attempts``.
"""

import logging
import secrets
from typing import Callable

from sm2cipher.agreement import compute_tag, shared_point_octets, xor_bytes
from sm2cipher.ciphertext import CiphertextValue
from sm2cipher.curves import ECGroup
from sm2cipher.errors import DomainError, EncryptionFailed, InvalidPublicKey
from sm2cipher.hashes import HashLike, resolve_hash
from sm2cipher.kdf import KdfStream
from sm2cipher.keys import PublicKey

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 8


class Encryptor:
    """
    SM2 encryption engine.

    Args:
        kdf_hash: Digest the X9.63 KDF is built from.
        mac_hash: Digest for the C3 tag.
        max_attempts: Upper bound on fresh-k attempts when the mask is all zero.
        kdf: KdfStream to use instead of one built from ``kdf_hash``.
        random_scalar: Callable n -> int in [0, n). Defaults to secrets.randbelow.

    Raises:
        KdfUnavailable: If no KDF matches ``kdf_hash``.
        DomainError: If ``mac_hash`` is unknown or ``max_attempts`` < 1.
    """

    def __init__(
        self,
        kdf_hash: HashLike = "sm3",
        mac_hash: HashLike = "sm3",
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        kdf: KdfStream = None,
        random_scalar: Callable[[int], int] = None,
    ):
        if max_attempts < 1:
            raise DomainError("max_attempts must be at least 1")
        self.kdf = kdf or KdfStream(kdf_hash)
        self.mac_hash = resolve_hash(mac_hash)
        self.max_attempts = max_attempts
        self.random_scalar = random_scalar or secrets.randbelow

    @property
    def mac_digest_size(self) -> int:
        return self.mac_hash.digest_size

    def _sample_scalar(self, order: int) -> int:
        """A1: k uniform in [1, n-1], resampling zero."""
        while True:
            k = self.random_scalar(order)
            if not 0 <= k < order:
                raise DomainError("Scalar source returned a value outside [0, n)")
            if k != 0:
                return k

    def encrypt(self, plaintext: bytes, public_key: PublicKey,
                group: ECGroup = None) -> CiphertextValue:
        """
        Encrypt ``plaintext`` for the holder of ``public_key``.

        Args:
            plaintext: Non-empty bytes to encrypt.
            public_key: Recipient public key.
            group: Group to use; defaults to the key's own group.

        Returns:
            A fresh CiphertextValue.

        Raises:
            DomainError: Missing/invalid group, key or plaintext.
            InvalidPublicKey: The key fails the cofactor check.
            EncryptionFailed: Every attempt produced an all-zero mask.
        """
        if public_key is None:
            raise DomainError("A recipient public key is required")
        group = group or public_key.group
        if group is None:
            raise DomainError("A group is required")
        if public_key.group is not group:
            raise DomainError("Public key belongs to a different group")
        if not isinstance(plaintext, (bytes, bytearray, memoryview)):
            raise DomainError(f"Plaintext must be bytes, got {type(plaintext).__name__}")
        plaintext = bytes(plaintext)
        if not plaintext:
            raise DomainError("Plaintext must be non-empty: the wire format cannot carry an empty payload")

        point = public_key.point
        if point is None or not group.contains(point):
            raise DomainError("Public key point is not on the curve")

        # A3: weak or invalid keys are rejected outright, never retried
        if group.is_infinity(group.multiply(group.cofactor, point)):
            raise InvalidPublicKey("[h]P is the point at infinity")

        for attempt in range(1, self.max_attempts + 1):
            k = self._sample_scalar(group.order)
            ephemeral = group.multiply_generator(k)

            try:
                x2, y2 = shared_point_octets(group, k, point)
            except ValueError as exc:
                raise InvalidPublicKey(str(exc)) from exc

            mask = self.kdf.derive(x2 + y2, len(plaintext))
            if self.kdf.is_all_zero(mask):
                logger.debug("All-zero KDF output on attempt %d/%d, resampling k",
                             attempt, self.max_attempts)
                continue

            payload = xor_bytes(plaintext, mask)
            tag = compute_tag(self.mac_hash, x2, plaintext, y2)
            return CiphertextValue(ephemeral_point=ephemeral, payload=payload, tag=tag)

        logger.warning("Encryption gave up after %d degenerate KDF outputs", self.max_attempts)
        raise EncryptionFailed(
            f"KDF produced an all-zero mask on all {self.max_attempts} attempts"
        )
