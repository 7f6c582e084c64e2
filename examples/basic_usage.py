"""
sm2cipher — Basic Usage Example

Demonstrates encrypting a message to an SM2 public key and decrypting it
with the matching private key. The ciphertext authenticates itself: a
wrong key or a single flipped bit is rejected, and no plaintext leaks.
"""

import logging
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sm2cipher import (
    AuthenticationFailed, CipherConfig, PointForm, SM2Cipher, SM2P256V1,
    generate_private_key,
)


def main():
    logging.basicConfig(level=logging.INFO)

    print("=" * 50)
    print("  sm2cipher — SM2 Public-Key Encryption")
    print("=" * 50)

    # The recipient's key pair; only the public half is shared
    recipient = generate_private_key(SM2P256V1)
    public_key = recipient.public_key
    print(f"\nRecipient public key: {public_key.to_octets(PointForm.COMPRESSED).hex()}")

    # Both sides agree on these out of band — nothing on the wire says which
    cipher = SM2Cipher(CipherConfig(kdf_hash="sm3", mac_hash="sm3",
                                    point_form=PointForm.UNCOMPRESSED))

    message = "Meet at the usual place at 7.".encode("utf-8")
    needed = cipher.encrypted_size(SM2P256V1, len(message))
    blob = cipher.encrypt(message, public_key)

    point_len = SM2P256V1.point_length(cipher.point_form)
    print(f"\nPlaintext:  {len(message)} bytes")
    print(f"Ciphertext: {len(blob)} bytes (size query said {needed})")
    print(f"  C1 ephemeral point: {point_len} bytes")
    print(f"  C2 masked payload:  {len(blob) - point_len - cipher.mac_digest_size} bytes")
    print(f"  C3 tag:             {cipher.mac_digest_size} bytes")

    recovered = cipher.decrypt(blob, recipient)
    print(f"\nDecrypted: {recovered.decode('utf-8')!r}")

    # Someone else's key cannot open it
    print("\nAttempting decrypt with a different private key...")
    stranger = generate_private_key(SM2P256V1)
    try:
        cipher.decrypt(blob, stranger)
        print("  ERROR: Should have failed!")
    except AuthenticationFailed:
        print("  Correctly rejected — wrong key = wrong mask = tag mismatch")

    # Neither can a tampered ciphertext
    print("\nAttempting decrypt of a tampered ciphertext...")
    tampered = bytearray(blob)
    tampered[point_len] ^= 0x01
    try:
        cipher.decrypt(bytes(tampered), recipient)
        print("  ERROR: Should have failed!")
    except AuthenticationFailed:
        print("  Correctly rejected — one flipped bit changes the tag")


if __name__ == "__main__":
    main()
