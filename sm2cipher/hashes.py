"""
Hashes
Digest algorithms for the tag (C3) and for the X9.63 KDF.

Hashes are named by short case-insensitive strings ("sm3", "sha256",
"sha3-256", ...) or passed directly as a ``cryptography`` HashAlgorithm.
The MAC may use any registered digest; the KDF only the ones an X9.63
construction is defined over.
"""

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes

from sm2cipher.errors import DomainError, KdfUnavailable


HashLike = str | hashes.HashAlgorithm

# Digest algorithms usable for the authentication tag
_DIGESTS = {
    "sm3": hashes.SM3,
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha512256": hashes.SHA512_256,
    "sha3224": hashes.SHA3_224,
    "sha3256": hashes.SHA3_256,
    "sha3384": hashes.SHA3_384,
    "sha3512": hashes.SHA3_512,
    "blake2b": lambda: hashes.BLAKE2b(64),
    "blake2s": lambda: hashes.BLAKE2s(32),
    "md5": hashes.MD5,
}

# Digest algorithms an X9.63 KDF may be built from
_KDF_DIGESTS = frozenset({
    "sm3",
    "sha1",
    "sha224",
    "sha256",
    "sha384",
    "sha512",
    "sha512256",
    "sha3224",
    "sha3256",
    "sha3384",
    "sha3512",
})


def _normalize(name: str) -> str:
    return name.lower().replace("-", "").replace("_", "").replace("/", "")


def _check_supported(algorithm: hashes.HashAlgorithm) -> bool:
    """Whether the linked OpenSSL can compute this digest."""
    try:
        hashes.Hash(algorithm)
    except UnsupportedAlgorithm:
        return False
    return True


def resolve_hash(hash_like: HashLike) -> hashes.HashAlgorithm:
    """
    Resolve a hash name (or algorithm instance) for use as the MAC digest.

    Raises:
        DomainError: If the hash is unknown or not supported by OpenSSL.
    """
    if isinstance(hash_like, hashes.HashAlgorithm):
        algorithm = hash_like
    elif isinstance(hash_like, str):
        factory = _DIGESTS.get(_normalize(hash_like))
        if factory is None:
            raise DomainError(f"Unknown digest algorithm: {hash_like!r}")
        algorithm = factory()
    else:
        raise DomainError(f"Expected a hash name or HashAlgorithm, got {type(hash_like).__name__}")

    if not _check_supported(algorithm):
        raise DomainError(f"Digest {algorithm.name} is not supported by this OpenSSL build")
    return algorithm


def resolve_kdf_hash(hash_like: HashLike) -> hashes.HashAlgorithm:
    """
    Resolve the hash the X9.63 KDF is built from.

    Raises:
        KdfUnavailable: If no X9.63 KDF matches the hash.
    """
    if isinstance(hash_like, hashes.HashAlgorithm):
        name = hash_like.name
    elif isinstance(hash_like, str):
        name = hash_like
    else:
        raise KdfUnavailable(f"Expected a hash name or HashAlgorithm, got {type(hash_like).__name__}")

    if _normalize(name) not in _KDF_DIGESTS:
        raise KdfUnavailable(f"No X9.63 KDF for digest {name!r}")

    try:
        return resolve_hash(hash_like)
    except DomainError as exc:
        raise KdfUnavailable(str(exc)) from exc


def digest_size(hash_like: HashLike) -> int:
    """Output size in bytes of the digest."""
    return resolve_hash(hash_like).digest_size


def digest(hash_like: HashLike, *parts: bytes) -> bytes:
    """Hash the concatenation of ``parts``."""
    h = hashes.Hash(resolve_hash(hash_like))
    for part in parts:
        h.update(part)
    return h.finalize()
