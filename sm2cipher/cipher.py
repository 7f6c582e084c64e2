"""
SM2 Cipher — the public encryption surface.

Wraps the Encryptor/Decryptor engines and the wire codec behind one
object configured with the agreed parameters (KDF hash, MAC hash, point
form). Three ways to get output:

1. Plain:        ``cipher.encrypt(m, pub)`` -> bytes
2. Size query:   ``cipher.encrypted_size(group, len(m))`` -> int
3. Into buffer:  ``cipher.encrypt_into(buf, m, pub)`` -> bytes written

The same three exist for decryption.
"""

from sm2cipher.ciphertext import (
    CiphertextValue,
    decode,
    encode,
    encode_into,
    payload_size,
    required_size,
)
from sm2cipher.config import CipherConfig
from sm2cipher.curves import ECGroup, PointForm
from sm2cipher.decryptor import Decryptor
from sm2cipher.encryptor import Encryptor
from sm2cipher.errors import BufferTooSmall, DomainError, InvalidPrivateKey
from sm2cipher.hashes import HashLike
from sm2cipher.kdf import KdfStream
from sm2cipher.keys import PrivateKey, PublicKey


def _require_group(key, error=DomainError) -> ECGroup:
    if key is None:
        raise error("Key material is required")
    if key.group is None:
        raise DomainError("Key has no group")
    return key.group


class SM2Cipher:
    """
    SM2 public-key encryption with a fixed set of agreed parameters.

    Args:
        config: Agreed parameters. Defaults to SM3 / SM3 / uncompressed.
        kdf: KdfStream override (shared by both directions).
        random_scalar: Callable n -> int in [0, n) for the ephemeral k.

    Raises:
        KdfUnavailable: If no KDF matches ``config.kdf_hash``.
        DomainError: If ``config.mac_hash`` is unknown.
    """

    def __init__(self, config: CipherConfig = None, kdf: KdfStream = None,
                 random_scalar=None):
        self.config = (config or CipherConfig()).validate()
        kdf = kdf or KdfStream(self.config.kdf_hash)
        self.encryptor = Encryptor(
            mac_hash=self.config.mac_hash,
            max_attempts=self.config.max_attempts,
            kdf=kdf,
            random_scalar=random_scalar,
        )
        self.decryptor = Decryptor(mac_hash=self.config.mac_hash, kdf=kdf)

    @property
    def point_form(self) -> PointForm:
        return self.config.point_form

    @property
    def mac_digest_size(self) -> int:
        return self.encryptor.mac_digest_size

    # -- Size queries ---------------------------------------------------

    def encrypted_size(self, group: ECGroup, plaintext_length: int) -> int:
        """Bytes ``encrypt`` will return for a plaintext of this length."""
        return required_size(group, self.point_form, plaintext_length, self.mac_digest_size)

    def decrypted_size(self, group: ECGroup, ciphertext_length: int) -> int:
        """
        Bytes ``decrypt`` will return for a ciphertext of this length.

        Raises:
            InvalidCiphertext: If the length cannot hold a non-empty payload.
        """
        return payload_size(group, self.point_form, ciphertext_length, self.mac_digest_size)

    # -- Encryption -----------------------------------------------------

    def encrypt_value(self, plaintext: bytes, public_key: PublicKey) -> CiphertextValue:
        """Encrypt without serializing."""
        return self.encryptor.encrypt(plaintext, public_key)

    def encrypt(self, plaintext: bytes, public_key: PublicKey) -> bytes:
        """Encrypt and serialize as C1 || C2 || C3."""
        group = _require_group(public_key)
        value = self.encrypt_value(plaintext, public_key)
        return encode(value, group, self.point_form)

    def encrypt_into(self, buffer, plaintext: bytes, public_key: PublicKey) -> int:
        """
        Encrypt into a writable buffer.

        Raises:
            BufferTooSmall: Before any work is done, if the buffer is short.
        """
        group = _require_group(public_key)
        needed = self.encrypted_size(group, len(plaintext))
        available = memoryview(buffer).nbytes
        if available < needed:
            raise BufferTooSmall(needed, available)

        value = self.encrypt_value(plaintext, public_key)
        return encode_into(value, group, self.point_form, buffer)

    # -- Decryption -----------------------------------------------------

    def decrypt_value(self, value: CiphertextValue, private_key: PrivateKey) -> bytes:
        """Verify and unmask a parsed ciphertext."""
        return self.decryptor.decrypt(value, private_key)

    def decrypt(self, ciphertext: bytes, private_key: PrivateKey) -> bytes:
        """
        Parse and decrypt C1 || C2 || C3.

        Raises:
            InvalidCiphertext: Malformed ciphertext.
            AuthenticationFailed: Tag mismatch (wrong key or tampering).
        """
        group = _require_group(private_key, InvalidPrivateKey)
        value = decode(group, self.point_form, self.mac_digest_size, ciphertext)
        return self.decrypt_value(value, private_key)

    def decrypt_into(self, buffer, ciphertext: bytes, private_key: PrivateKey) -> int:
        """
        Decrypt into a writable buffer.

        Nothing is written unless the tag verified.

        Raises:
            BufferTooSmall: Before any work is done, if the buffer is short.
        """
        group = _require_group(private_key, InvalidPrivateKey)
        needed = self.decrypted_size(group, len(ciphertext))
        view = memoryview(buffer)
        if view.nbytes < needed:
            raise BufferTooSmall(needed, view.nbytes)

        plaintext = self.decrypt(ciphertext, private_key)
        view.cast("B")[:len(plaintext)] = plaintext
        return len(plaintext)


def encrypt(
    plaintext: bytes,
    public_key: PublicKey,
    kdf_hash: HashLike = "sm3",
    mac_hash: HashLike = "sm3",
    point_form: PointForm = PointForm.UNCOMPRESSED,
) -> bytes:
    """One-shot SM2 encryption to wire format."""
    config = CipherConfig(kdf_hash=kdf_hash, mac_hash=mac_hash, point_form=point_form)
    return SM2Cipher(config).encrypt(plaintext, public_key)


def decrypt(
    ciphertext: bytes,
    private_key: PrivateKey,
    kdf_hash: HashLike = "sm3",
    mac_hash: HashLike = "sm3",
    point_form: PointForm = PointForm.UNCOMPRESSED,
) -> bytes:
    """One-shot SM2 decryption from wire format."""
    config = CipherConfig(kdf_hash=kdf_hash, mac_hash=mac_hash, point_form=point_form)
    return SM2Cipher(config).decrypt(ciphertext, private_key)
