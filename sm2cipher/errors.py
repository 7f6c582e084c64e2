"""
Errors
Typed failures raised by the SM2 encryption layer.

Every failure is surfaced to the caller as one of these. Nothing is
swallowed and no partial plaintext is returned alongside an error.

Decryption failures share one generic message so that a caller (or an
attacker probing with crafted ciphertexts) cannot tell a bad tag from a
subtly malformed blob. The specific reason stays on ``exc.reason``.
"""


class SM2Error(Exception):
    """Base class for all sm2cipher errors."""


class DomainError(SM2Error, ValueError):
    """Missing or invalid group, key material, or parameters."""


class InvalidPublicKey(DomainError):
    """The recipient public key fails the cofactor check."""


class InvalidPrivateKey(DomainError):
    """The private key is absent or out of range."""


class KdfUnavailable(SM2Error):
    """No X9.63 KDF can be built from the requested hash."""


class EncryptionFailed(SM2Error):
    """Every attempt produced a degenerate (all-zero) mask."""


class DecryptionFailed(SM2Error):
    """
    Generic decryption failure.

    Args:
        reason: Internal detail, kept off the rendered message.
    """

    MESSAGE = "decryption failed"

    def __init__(self, reason: str = ""):
        super().__init__(self.MESSAGE)
        self.reason = reason


class InvalidCiphertext(DecryptionFailed):
    """The ciphertext is structurally malformed or its point is invalid."""


class AuthenticationFailed(DecryptionFailed):
    """The recomputed tag does not match the stored one."""


class BufferTooSmall(SM2Error):
    """
    The caller-supplied output buffer cannot hold the result.

    Args:
        required_size: Number of bytes the buffer must hold.
        available: Number of bytes the buffer actually holds.
    """

    def __init__(self, required_size: int, available: int):
        super().__init__(
            f"Output buffer too small: need {required_size} bytes, "
            f"got {available}"
        )
        self.required_size = required_size
        self.available = available
