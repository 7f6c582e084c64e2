"""
Keys
Recipient key material. Each key carries the group it lives in.
"""

import secrets
from dataclasses import dataclass

from sm2cipher.curves import ECGroup, Point, PointForm
from sm2cipher.errors import DomainError, InvalidPrivateKey


@dataclass(frozen=True)
class PublicKey:
    """A recipient public key P = d*G."""
    group: ECGroup
    point: Point

    def __post_init__(self):
        if self.group is None:
            raise DomainError("A public key needs a group")
        if self.point is None:
            raise DomainError("A public key needs a point")

    def to_octets(self, form: PointForm = PointForm.UNCOMPRESSED) -> bytes:
        return self.group.point_to_octets(self.point, form)

    @classmethod
    def from_octets(cls, group: ECGroup, data: bytes,
                    form: PointForm = PointForm.UNCOMPRESSED) -> "PublicKey":
        """Decode a public key. Raises DomainError for malformed input."""
        try:
            point = group.octets_to_point(data, form)
        except ValueError as exc:
            raise DomainError(f"Invalid public key encoding: {exc}") from exc
        return cls(group=group, point=point)


@dataclass(frozen=True)
class PrivateKey:
    """A recipient private scalar d in [1, n-1]."""
    group: ECGroup
    scalar: int

    def __post_init__(self):
        if self.group is None:
            raise DomainError("A private key needs a group")
        if not isinstance(self.scalar, int) or not 1 <= self.scalar < self.group.order:
            raise InvalidPrivateKey("Private scalar must lie in [1, n-1]")

    def __repr__(self) -> str:
        return f"PrivateKey(group={self.group.name!r})"

    @property
    def public_key(self) -> PublicKey:
        return PublicKey(self.group, self.group.multiply_generator(self.scalar))

    def to_bytes(self) -> bytes:
        size = (self.group.order.bit_length() + 7) // 8
        return self.scalar.to_bytes(size, "big")

    @classmethod
    def from_bytes(cls, group: ECGroup, data: bytes) -> "PrivateKey":
        return cls(group=group, scalar=int.from_bytes(data, "big"))


def generate_private_key(group: ECGroup) -> PrivateKey:
    """Draw d uniformly from [1, n-1]."""
    if group is None:
        raise DomainError("A group is required to generate a key")
    scalar = secrets.randbelow(group.order - 1) + 1
    return PrivateKey(group=group, scalar=scalar)
