"""
Tortoise ORM models for the sale audit trail.

These models record every event the sale emits:
- Allocations (TokensPurchased)
- Ownership changes (OwnershipTransferred)
- Nonces of accepted signed requests (replay protection)

The in-memory sale state is the source of truth; these tables are history.
"""

from tortoise import fields, models


class AllocationRecord(models.Model):
    """One successful allocation."""
    id = fields.UUIDField(pk=True)

    stage = fields.CharField(max_length=32, index=True)
    purchaser = fields.CharField(max_length=64)
    beneficiary = fields.CharField(max_length=64, index=True)

    # Stored as text: u256 values do not fit a BIGINT
    value = fields.CharField(max_length=80)
    amount = fields.CharField(max_length=80)
    sold_after = fields.CharField(max_length=80)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "allocations"
        ordering = ["created_at"]


class OwnershipRecord(models.Model):
    """One ownership transfer or renouncement."""
    id = fields.UUIDField(pk=True)

    previous_owner = fields.CharField(max_length=64)
    new_owner = fields.CharField(max_length=64)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "ownership_changes"


class RequestNonce(models.Model):
    """
    Nonce of one accepted signed request.

    A nonce can be used once per caller. Rows whose ``issued_at`` has left the
    freshness window are purged, since those requests are rejected as expired.
    """
    id = fields.IntField(pk=True)

    caller = fields.CharField(max_length=64)
    nonce = fields.CharField(max_length=64)
    issued_at = fields.BigIntField(index=True)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "request_nonces"
        unique_together = [("caller", "nonce")]
