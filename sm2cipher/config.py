"""
Cipher configuration: the parameters both parties agree on out of band.
"""

from dataclasses import dataclass

from sm2cipher.curves import PointForm
from sm2cipher.encryptor import DEFAULT_MAX_ATTEMPTS
from sm2cipher.errors import DomainError
from sm2cipher.hashes import resolve_hash, resolve_kdf_hash


DEFAULT_KDF_HASH = "sm3"
DEFAULT_MAC_HASH = "sm3"
DEFAULT_POINT_FORM = PointForm.UNCOMPRESSED


@dataclass
class CipherConfig:
    """
    Agreed SM2 encryption parameters.

    Nothing on the wire identifies these, so sender and recipient must
    use the same values.
    """
    kdf_hash: str = DEFAULT_KDF_HASH
    mac_hash: str = DEFAULT_MAC_HASH
    point_form: PointForm = DEFAULT_POINT_FORM
    max_attempts: int = DEFAULT_MAX_ATTEMPTS  # degenerate-mask retries

    def __post_init__(self):
        if not isinstance(self.point_form, PointForm):
            try:
                self.point_form = PointForm(self.point_form)
            except ValueError:
                raise DomainError(f"Unknown point form {self.point_form!r}") from None

    def validate(self) -> "CipherConfig":
        """
        Resolve both hashes and check the retry bound.

        Raises:
            KdfUnavailable: If no KDF matches ``kdf_hash``.
            DomainError: If ``mac_hash`` is unknown or ``max_attempts`` < 1.
        """
        resolve_kdf_hash(self.kdf_hash)
        resolve_hash(self.mac_hash)
        if not isinstance(self.max_attempts, int) or self.max_attempts < 1:
            raise DomainError("max_attempts must be a positive integer")
        return self

    def to_dict(self) -> dict:
        return {
            "kdf_hash": getattr(self.kdf_hash, "name", self.kdf_hash),
            "mac_hash": getattr(self.mac_hash, "name", self.mac_hash),
            "point_form": self.point_form.value,
            "max_attempts": self.max_attempts,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CipherConfig":
        """Build a config from a dict; missing keys take the defaults."""
        return cls(
            kdf_hash=data.get("kdf_hash", DEFAULT_KDF_HASH),
            mac_hash=data.get("mac_hash", DEFAULT_MAC_HASH),
            point_form=data.get("point_form", DEFAULT_POINT_FORM),
            max_attempts=data.get("max_attempts", DEFAULT_MAX_ATTEMPTS),
        )
