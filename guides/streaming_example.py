"""Example feeding a SignStream and a VerifyStream from concurrent producers."""

import asyncio

from jwskit import SignStream, VerifyStream


async def produce(text: str):
    for start in range(0, len(text), 4):
        await asyncio.sleep(0.01)
        yield text[start : start + 4]


async def main():
    signer = SignStream(header={"alg": "HS256", "typ": "JWT"})
    signer.on("done", lambda token: print(f"Signed: {token}"))

    await asyncio.gather(
        signer.payload.feed(produce('{"sub": "123"}')),
        signer.secret.feed(produce("streamed-secret")),
    )
    token = await signer.wait()

    verifier = VerifyStream(algorithm="HS256", signature=token)
    verifier.on("done", lambda valid, decoded: print(f"Valid: {valid} {decoded.payload}"))
    verifier.on("error", lambda exc: print(f"Failed: {exc}"))
    verifier.secret.close("streamed-secret")


if __name__ == "__main__":
    asyncio.run(main())
