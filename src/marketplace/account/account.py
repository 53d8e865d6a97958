"""Account aggregate: a registered marketplace user.

Registered buyers reference their account by id from an order; the account
supplies the name and email used for receipts. An account becomes a vendor
once its vendor profile is approved.
"""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Account")
class AccountRegistered:
    __version__ = 1

    account_id = String(required=True)
    name = String(required=True)
    email = String(required=True)
    registered_at = DateTime(required=True)


@marketplace.aggregate
class Account:
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254, unique=True)
    is_vendor = Boolean(default=False)
    registered_at = DateTime()

    @classmethod
    def register(cls, name, email):
        now = datetime.now(UTC)
        account = cls(name=name, email=email.strip().lower(), registered_at=now)
        account.raise_(
            AccountRegistered(
                account_id=str(account.id),
                name=account.name,
                email=account.email,
                registered_at=now,
            )
        )
        return account

    def grant_vendor_role(self):
        self.is_vendor = True

    def revoke_vendor_role(self):
        self.is_vendor = False
