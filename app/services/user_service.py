"""
User service.

Account registration and lookups.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import WALLET_ID_MAX_ATTEMPTS
from app.models.enums import UserRole
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService, transaction
from app.utils.exceptions import ConflictError, NotFoundError, ValidationError
from app.utils.identifiers import generate_wallet_id, normalize_wallet_id
from app.utils.security import mask_email
from app.validators import normalize_email, sanitize_text, validate_email

MIN_PASSWORD_LENGTH = 6


class UserService(BaseService):
    """Account operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user service."""
        super().__init__(session)
        self.user_repo = UserRepository(session)

    async def _allocate_wallet_id(self) -> str:
        for _ in range(WALLET_ID_MAX_ATTEMPTS):
            wallet_id = generate_wallet_id()
            if not await self.user_repo.wallet_id_exists(wallet_id):
                return wallet_id
        raise ConflictError("Could not allocate a unique wallet ID")

    @transaction
    async def register_user(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.USER,
        crypto_wallet: str | None = None,
    ) -> User:
        """
        Register a new account with a fresh wallet ID and zero balance.

        Args:
            email: Login email (unique, case-insensitive)
            password: Plain text password (stored as bcrypt hash)
            first_name: First name
            last_name: Last name
            role: Account role
            crypto_wallet: External payout address

        Returns:
            Created user

        Raises:
            ValidationError: Malformed email, short password or empty name
            ConflictError: Email already registered
        """
        is_valid, error = validate_email(email)
        if not is_valid:
            raise ValidationError(error or "Invalid email")
        email = normalize_email(email)

        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        first_name = sanitize_text(first_name, max_length=100)
        last_name = sanitize_text(last_name, max_length=100)
        if not first_name or not last_name:
            raise ValidationError("First and last name are required")

        if await self.user_repo.get_by_email(email):
            raise ConflictError("User already registered")

        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=UserRole(role).value,
            wallet_id=await self._allocate_wallet_id(),
            crypto_wallet=sanitize_text(crypto_wallet, max_length=255),
        )
        user.set_password(password)
        self.session.add(user)
        await self.session.flush()

        self.logger.info(
            "User registered",
            extra={
                "user_id": user.id,
                "email": mask_email(email),
                "wallet_id": user.wallet_id,
            },
        )
        return user

    async def get_user(self, user_id: int) -> User:
        """
        Get account by ID.

        Raises:
            NotFoundError: Account missing
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def get_by_wallet_id(self, wallet_id: str) -> User:
        """
        Get account by wallet ID (any case).

        Raises:
            NotFoundError: No such wallet ID
        """
        user = await self.user_repo.get_by_wallet_id(
            normalize_wallet_id(wallet_id)
        )
        if user is None:
            raise NotFoundError("Wallet ID not found")
        return user
