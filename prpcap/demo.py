"""PRP-Cap Demo - 0-RTT key agreement with capability derivation and double ladder."""

import logging

from .capability import compute_capability, compute_private_scalar, generate_epoch
from .point import G
from .session import Session


def main():
    """Run the PRP-Cap demo."""
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    print("=== PRP-Cap 0-RTT Demo (Python) ===\n")

    # Bob publishes an epoch (A, B); Alice needs nothing else
    print("Generating Bob's epoch key pair...")
    epoch = generate_epoch()
    bob = Session(epoch)
    bob_info = bob.public_info()
    print(f"  A = {bob_info.A.hex()}")
    print(f"  B = {bob_info.B.hex()}")
    print(f"  epoch id: {bob_info.epoch_id[:16]}...")

    # Capabilities are publicly derivable
    print("\n--- Capabilities ---")
    for index in (0, 1, 42):
        v_point = compute_capability(bob_info.A, bob_info.B, index)
        print(f"  V_{index} = {v_point.encode().hex()[:32]}...")

    v_42 = compute_private_scalar(epoch.s1, epoch.s2, epoch.A, epoch.B, 42)
    assert G.multiply(v_42) == compute_capability(bob_info.A, bob_info.B, 42)
    print("✓ v_42 * G == V_42")

    # Alice sends without a round trip
    print("\n--- 0-RTT Message ---")
    alice = Session()
    plaintext = "Hello Bob, no handshake needed."
    print(f"Alice sends: \"{plaintext}\"")
    msg = alice.initiate(bob_info, plaintext.encode(), index=42)
    print(f"  ephemeral public: {msg.ephemeral_public.hex()[:32]}...")
    print(f"  ciphertext: {len(msg.ciphertext)} bytes")

    # Bob sends to Alice at the same time: double ladder
    print("\n--- Double Ladder ---")
    reply = bob.initiate(alice.public_info(), b"Hello Alice, crossing paths!", index=7)

    alice_result = alice.complete_double_ladder(bob_info.epoch_id, reply)
    bob_result = bob.complete_double_ladder(alice.public_info().epoch_id, msg)
    assert alice_result is not None and bob_result is not None
    print(f"Bob receives: \"{bob_result.plaintext.decode('utf-8')}\"")
    print(f"Alice receives: \"{alice_result.plaintext.decode('utf-8')}\"")
    assert alice_result.merged_secret == bob_result.merged_secret
    print(f"✓ Merged secrets match: {alice_result.merged_secret.hex()[:32]}...")

    # Forward secrecy: rotation erases the old secrets
    print("\n--- Epoch Rotation ---")
    stale = alice.initiate(bob_info, b"Sent to the old epoch", index=43)
    bob.rotate()
    print(f"  new epoch id: {bob.epoch_id[:16]}...")
    print(f"  old secrets erased: {epoch.erased}")
    result = bob.process_message(stale)
    print(f"  message to old epoch after rotation: {result!r}")
    assert result is None

    print("\n=== Demo Complete ===")


if __name__ == "__main__":
    main()
