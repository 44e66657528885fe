"""
Solana SPL token ledger.

The sale's tokens sit in the associated token account (the "vault") of the
admin keypair. Transfers create the buyer's associated token account when it
is missing and issue ``TransferChecked``; burning reads the vault balance and
issues ``BurnChecked`` for all of it.

Once a transaction has been submitted, a failed confirmation is not reported
as a failed transfer until the signature status shows that it failed or can no
longer land.
"""

import base58
import logging
import struct
import time
from typing import List, Optional

from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed
from solana.rpc.core import RPCException
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from app.blockchain.base import BlockchainType, TokenLedger
from app.core.config import settings
from app.core.constants import UINT64_MAX

logger = logging.getLogger(__name__)

SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")

# SPL token instruction tags
IX_TRANSFER_CHECKED = 12
IX_BURN_CHECKED = 15
# Associated token account program: CreateIdempotent
IX_CREATE_ATA_IDEMPOTENT = 1

# Signature status polls before a submitted transaction counts as landed
SETTLE_ATTEMPTS = 30
SETTLE_INTERVAL_SECONDS = 2.0


def get_associated_token_address(owner: Pubkey, mint: Pubkey) -> Pubkey:
    address, _ = Pubkey.find_program_address(
        [bytes(owner), bytes(TOKEN_PROGRAM_ID), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return address


def build_create_ata_ix(payer: Pubkey, owner: Pubkey, mint: Pubkey) -> Instruction:
    accounts = [
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=get_associated_token_address(owner, mint), is_signer=False, is_writable=True),
        AccountMeta(pubkey=owner, is_signer=False, is_writable=False),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(ASSOCIATED_TOKEN_PROGRAM_ID, bytes([IX_CREATE_ATA_IDEMPOTENT]), accounts)


def build_transfer_checked_ix(
    source: Pubkey,
    mint: Pubkey,
    dest: Pubkey,
    authority: Pubkey,
    amount: int,
    decimals: int,
) -> Instruction:
    # data: tag(u8) + amount(u64) + decimals(u8)
    data = struct.pack("<BQB", IX_TRANSFER_CHECKED, amount, decimals)
    accounts = [
        AccountMeta(pubkey=source, is_signer=False, is_writable=True),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
        AccountMeta(pubkey=dest, is_signer=False, is_writable=True),
        AccountMeta(pubkey=authority, is_signer=True, is_writable=False),
    ]
    return Instruction(TOKEN_PROGRAM_ID, data, accounts)


def build_burn_checked_ix(
    account: Pubkey,
    mint: Pubkey,
    authority: Pubkey,
    amount: int,
    decimals: int,
) -> Instruction:
    data = struct.pack("<BQB", IX_BURN_CHECKED, amount, decimals)
    accounts = [
        AccountMeta(pubkey=account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=True),
        AccountMeta(pubkey=authority, is_signer=True, is_writable=False),
    ]
    return Instruction(TOKEN_PROGRAM_ID, data, accounts)


class SolanaTokenLedger(TokenLedger):
    """SPL token ledger signed by the admin keypair."""

    def __init__(self, client: Optional[Client] = None, keypair: Optional[Keypair] = None):
        self._client = client
        self._keypair = keypair
        self._mint = Pubkey.from_string(settings.token_mint) if settings.token_mint else None
        self._decimals = settings.token_decimals

    @property
    def chain_type(self) -> BlockchainType:
        return BlockchainType.SOLANA

    @property
    def address(self) -> str:
        return str(self._mint) if self._mint else ""

    @property
    def admin_keypair(self) -> Keypair:
        if self._keypair is None:
            if not settings.admin_private_key:
                raise ValueError("ADMIN_PRIVATE_KEY not configured")
            secret_key = base58.b58decode(settings.admin_private_key)
            self._keypair = Keypair.from_bytes(secret_key)
        return self._keypair

    @property
    def vault(self) -> Pubkey:
        return get_associated_token_address(self.admin_keypair.pubkey(), self._mint)

    def _get_client(self) -> Client:
        if self._client is None:
            self._client = Client(settings.solana_rpc_url, commitment=Confirmed)
        return self._client

    def is_connected(self) -> bool:
        try:
            return self._get_client().is_connected()
        except Exception:
            return False

    def _status(self, sig: Signature) -> Optional[bool]:
        """True if the transaction landed, False if it failed on chain, None if not seen."""
        status = self._get_client().get_signature_statuses([sig]).value[0]
        if status is None:
            return None
        if status.err is not None:
            logger.error(f"spl tx {sig} failed on chain: {status.err}")
            return False
        return True

    def _settle(self, sig: Signature, last_valid_block_height: int) -> bool:
        """
        Decide whether a submitted transaction landed.

        Polls the signature status until the transaction shows up or its
        blockhash expires. An outcome still unknown after ``SETTLE_ATTEMPTS``
        polls counts as landed, so tokens that may have left the vault are
        never reported as undelivered.
        """
        client = self._get_client()
        for _ in range(SETTLE_ATTEMPTS):
            try:
                landed = self._status(sig)
                if landed is not None:
                    return landed
                if client.get_block_height().value > last_valid_block_height:
                    # Expired blockhash: the transaction can no longer land
                    landed = self._status(sig)
                    if landed is None:
                        logger.error(f"spl tx {sig} expired without landing")
                        return False
                    return landed
            except Exception as e:
                logger.warning(f"spl tx {sig}: status check failed: {e}")
            time.sleep(SETTLE_INTERVAL_SECONDS)

        logger.error(f"spl tx {sig}: outcome unknown after {SETTLE_ATTEMPTS} checks, counting it as landed")
        return True

    def _send(self, instructions: List[Instruction]) -> bool:
        """
        Sign and submit a transaction; return whether it landed.

        Errors raised before submission propagate, since nothing was sent.
        """
        client = self._get_client()
        admin = self.admin_keypair

        latest = client.get_latest_blockhash().value
        msg = Message.new_with_blockhash(instructions, admin.pubkey(), latest.blockhash)
        tx = Transaction.new_unsigned(msg)
        tx.sign([admin], latest.blockhash)
        sig = tx.signatures[0]

        try:
            client.send_transaction(tx)
        except RPCException as e:
            # Rejected by the node during preflight, never broadcast
            logger.error(f"spl tx {sig} rejected: {e}")
            return False
        except Exception as e:
            logger.warning(f"spl tx {sig}: send failed ({e}), checking status")
            return self._settle(sig, latest.last_valid_block_height)

        logger.info(f"spl tx sent: {sig}")
        try:
            client.confirm_transaction(sig, commitment=Confirmed)
        except Exception as e:
            logger.warning(f"spl tx {sig}: confirmation failed ({e}), checking status")

        landed = self._settle(sig, latest.last_valid_block_height)
        if landed:
            logger.info(f"spl tx confirmed: {sig}")
        return landed

    def transfer(self, to: str, amount: int) -> bool:
        if self._mint is None:
            logger.error("spl transfer: TOKEN_MINT not configured")
            return False
        if amount <= 0 or amount > UINT64_MAX:
            logger.error(f"spl transfer: amount {amount} does not fit in a u64")
            return False

        try:
            recipient = Pubkey.from_string(to)
            admin = self.admin_keypair.pubkey()
            dest = get_associated_token_address(recipient, self._mint)
            landed = self._send([
                build_create_ata_ix(admin, recipient, self._mint),
                build_transfer_checked_ix(self.vault, self._mint, dest, admin, amount, self._decimals),
            ])
        except Exception as e:
            logger.error(f"spl transfer of {amount} to {to} failed before submission: {e}")
            return False

        if not landed:
            logger.error(f"spl transfer of {amount} to {to} did not land")
        return landed

    def burn_unsold_tokens(self) -> bool:
        if self._mint is None:
            logger.error("spl burn: TOKEN_MINT not configured")
            return False

        try:
            client = self._get_client()
            vault = self.vault
            balance = int(client.get_token_account_balance(vault).value.amount)
            if balance == 0:
                logger.info("spl burn: vault already empty")
                return True
            landed = self._send([
                build_burn_checked_ix(vault, self._mint, self.admin_keypair.pubkey(), balance, self._decimals),
            ])
        except Exception as e:
            logger.error(f"spl burn failed before submission: {e}")
            return False

        if landed:
            logger.info(f"spl burn: retired {balance} unsold tokens")
        else:
            logger.error("spl burn did not land")
        return landed
