"""
Decryptor
Recovers the plaintext from an SM2 ciphertext value and a private key.

GB/T 32918.4-2016 7.1:
  B1  C1 decoded and on the curve (see ciphertext.decode)
  B2  [h]C1 != O, otherwise the ciphertext is rejected
  B3  (x2, y2) = [d]C1
  B4  t = KDF(x2 || y2, klen)
  B5  M' = C2 xor t
  B6  u = Hash(x2 || M' || y2); u must equal C3

No retry here. An all-zero t only means M' = C2; the tag is the one gate.
"""

import hmac
import logging

from sm2cipher.agreement import compute_tag, shared_point_octets, xor_bytes
from sm2cipher.ciphertext import CiphertextValue
from sm2cipher.curves import ECGroup
from sm2cipher.errors import AuthenticationFailed, DomainError, InvalidCiphertext, InvalidPrivateKey
from sm2cipher.hashes import HashLike, resolve_hash
from sm2cipher.kdf import KdfStream
from sm2cipher.keys import PrivateKey

logger = logging.getLogger(__name__)


class Decryptor:
    """
    SM2 decryption engine.

    Args:
        kdf_hash: Digest the X9.63 KDF is built from.
        mac_hash: Digest for the C3 tag.
        kdf: KdfStream to use instead of one built from ``kdf_hash``.
    """

    def __init__(self, kdf_hash: HashLike = "sm3", mac_hash: HashLike = "sm3",
                 kdf: KdfStream = None):
        self.kdf = kdf or KdfStream(kdf_hash)
        self.mac_hash = resolve_hash(mac_hash)

    @property
    def mac_digest_size(self) -> int:
        return self.mac_hash.digest_size

    def decrypt(self, value: CiphertextValue, private_key: PrivateKey,
                group: ECGroup = None) -> bytes:
        """
        Verify and unmask a ciphertext value.

        Returns:
            The plaintext. Never returned unless the tag matched.

        Raises:
            InvalidPrivateKey: No private key given.
            DomainError: Missing group, or the key belongs to another group.
            InvalidCiphertext: C1 is off the curve or fails the cofactor check.
            AuthenticationFailed: The tag does not match.
        """
        if private_key is None:
            raise InvalidPrivateKey("A private key is required")
        group = group or private_key.group
        if group is None:
            raise DomainError("A group is required")
        if private_key.group is not group:
            raise DomainError("Private key belongs to a different group")
        if value is None:
            raise InvalidCiphertext("no ciphertext value")

        c1 = value.ephemeral_point
        if c1 is None or not group.contains(c1):
            logger.debug("Rejecting ciphertext: C1 not on %s", group.name)
            raise InvalidCiphertext("C1 is not on the curve")

        # B2: mirror of the sender-side check, applied to the received point
        if group.is_infinity(group.multiply(group.cofactor, c1)):
            logger.debug("Rejecting ciphertext: [h]C1 is the point at infinity")
            raise InvalidCiphertext("[h]C1 is the point at infinity")

        try:
            x2, y2 = shared_point_octets(group, private_key.scalar, c1)
        except ValueError as exc:
            raise InvalidCiphertext(str(exc)) from exc

        mask = self.kdf.derive(x2 + y2, len(value.payload))
        candidate = xor_bytes(value.payload, mask)
        expected = compute_tag(self.mac_hash, x2, candidate, y2)

        # compare_digest treats unequal lengths as a mismatch
        if not hmac.compare_digest(expected, value.tag):
            logger.debug("Rejecting ciphertext: tag mismatch")
            raise AuthenticationFailed("tag mismatch")

        return candidate
