import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from marketplace.account.account import Account
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Account")
class RegisterAccount:
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)


@marketplace.command_handler(part_of=Account)
class AccountRegistrationHandler:
    @handle(RegisterAccount)
    def register_account(self, command):
        repo = current_domain.repository_for(Account)
        email = command.email.strip().lower()
        if "@" not in email:
            raise ValidationError({"email": ["Invalid email address"]})
        if repo._dao.query.filter(email=email).all().total:
            raise ValidationError({"email": ["An account with this email already exists"]})

        account = Account.register(name=command.name, email=email)
        repo.add(account)

        logger.info("Account registered", account_id=str(account.id))
        return str(account.id)
