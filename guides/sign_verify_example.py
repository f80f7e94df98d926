"""Example signing and verifying tokens with an ECDSA key pair."""

from cryptography.hazmat.primitives.asymmetric import ec

import jwskit


def main():
    private_key = ec.generate_private_key(ec.SECP256R1())

    token = jwskit.encode({"alg": "ES256", "typ": "JWT"}, {"sub": "123"}, private_key)
    print(f"Token: {token}")

    # The algorithm is pinned by the verifier, never read from the token
    print("Valid:", jwskit.verify(token, "ES256", private_key.public_key()))
    print("Decoded:", jwskit.decode(token))


if __name__ == "__main__":
    main()
