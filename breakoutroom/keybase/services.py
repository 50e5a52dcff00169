"""Identity services port used by the negotiation orchestrator."""

from typing import Optional, Protocol

from breakoutroom.models import ProofChain, SignedText

from . import challenge, proofs


class IdentityServices(Protocol):
    """Signing, verification and proof lookup for one identity provider."""

    async def verify_signed_text(self, signed: SignedText, username: str) -> bool:
        ...

    async def sign_text(
        self,
        text: str,
        private_key_armored: str,
        passphrase: Optional[str] = None,
    ) -> SignedText:
        ...

    async def get_proof_chain(self, username: str) -> Optional[ProofChain]:
        ...


class KeybaseServices:
    """IdentityServices backed by Keybase and GnuPG."""

    async def verify_signed_text(self, signed: SignedText, username: str) -> bool:
        return await challenge.verify_signed_text(signed, username)

    async def sign_text(
        self,
        text: str,
        private_key_armored: str,
        passphrase: Optional[str] = None,
    ) -> SignedText:
        return await challenge.sign_text(text, private_key_armored, passphrase)

    async def get_proof_chain(self, username: str) -> Optional[ProofChain]:
        return await proofs.get_proof_chain(username)
