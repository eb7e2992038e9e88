"""
Admin Credential Seeder

Hashes the designated admin password with bcrypt and either promotes the
existing account holding the admin email or creates it. The plaintext is
printed once to the operator console and never stored or logged.
"""

import asyncio
from enum import Enum

import bcrypt
import structlog
from pydantic import BaseModel, SecretStr
from sqlalchemy import func, insert, update
from sqlalchemy.ext.asyncio import AsyncEngine

from droguerie.config.settings import AdminSettings
from droguerie.database.models import User, UserRole, UserStatus

logger = structlog.get_logger(__name__)

users = User.__table__

SECURITY_FEATURES = [
    "Password hashing with bcrypt",
    "JWT authentication tokens",
    "CORS protection configured",
    "Rate limiting enabled",
    "Helmet security headers",
    "XSS protection",
    "SQL injection protection",
]

SECURITY_RECOMMENDATIONS = [
    ("🔄", "Change admin password regularly"),
    ("🔐", "Enable 2FA for production"),
    ("🚫", "Use HTTPS in production"),
    ("📊", "Monitor login attempts"),
    ("🗄️", "Regular database backups"),
]


class SeedAction(str, Enum):
    """What the seeder did to the users table"""
    UPDATED = "updated"
    CREATED = "created"


class SeedResult(BaseModel):
    """Outcome of a seeding run"""
    email: str
    action: SeedAction
    rows_affected: int


def hash_password(password: str, rounds: int) -> str:
    """Salted bcrypt hash of a plaintext password."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


class CredentialSeeder:
    """
    Update-or-insert of the admin account.

    The update and the fallback insert share one transaction; a failure in
    either rolls both back and propagates to the caller.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        email: str,
        password: SecretStr,
        rounds: int = 12,
        display_name: str = "Admin Droguerie Jamal",
    ):
        self.engine = engine
        self.email = email
        self.password = password
        self.rounds = rounds
        self.display_name = display_name

    @classmethod
    def from_settings(cls, engine: AsyncEngine, admin: AdminSettings) -> "CredentialSeeder":
        return cls(
            engine=engine,
            email=admin.email,
            password=admin.password,
            rounds=admin.bcrypt_rounds,
            display_name=admin.display_name,
        )

    async def seed(self) -> SeedResult:
        logger.info("🔐 Updating admin security...", email=self.email, rounds=self.rounds)

        hashed = await asyncio.to_thread(hash_password, self.password.get_secret_value(), self.rounds)

        async with self.engine.begin() as conn:
            result = await conn.execute(
                update(users)
                .where(users.c.email == self.email)
                .values(
                    password=hashed,
                    role=UserRole.ADMIN,
                    updated_at=func.current_timestamp(),
                )
            )

            if result.rowcount:
                logger.info("✅ Admin credentials updated successfully", rows=result.rowcount)
                return SeedResult(email=self.email, action=SeedAction.UPDATED, rows_affected=result.rowcount)

            logger.warning("⚠️ No user found with email, creating new admin user...", email=self.email)
            await conn.execute(
                insert(users).values(
                    name=self.display_name,
                    email=self.email,
                    password=hashed,
                    role=UserRole.ADMIN,
                    status=UserStatus.ACTIVE,
                    email_verified=True,
                    email_verified_at=func.current_timestamp(),
                    created_at=func.current_timestamp(),
                    updated_at=func.current_timestamp(),
                )
            )

        logger.info("✅ New admin user created successfully", email=self.email)
        return SeedResult(email=self.email, action=SeedAction.CREATED, rows_affected=1)


def display_credentials(email: str, password: SecretStr, panel_url: str) -> None:
    """Print the admin credentials. This is the only place the plaintext appears."""
    print("\n" + "=" * 60)
    print("🔐 SECURE ADMIN CREDENTIALS")
    print("=" * 60)
    print(f"📧 Email: {email}")
    print(f"🔑 Password: {password.get_secret_value()}")
    print("=" * 60)
    print("⚠️  IMPORTANT: Store these credentials securely!")
    print("🔒 The password is now properly hashed in the database")
    print(f"🚪 Access admin panel at: {panel_url}")
    print("=" * 60 + "\n")


def display_security_info(rounds: int) -> None:
    print("🛡️ Security Features Enabled:")
    for feature in SECURITY_FEATURES:
        suffix = f" ({rounds} rounds)" if "bcrypt" in feature else ""
        print(f"  ✅ {feature}{suffix}")

    print("\n📋 Security Recommendations:")
    for icon, recommendation in SECURITY_RECOMMENDATIONS:
        print(f"  {icon} {recommendation}")


async def seed_admin(engine: AsyncEngine, admin: AdminSettings) -> SeedResult:
    """Seed the admin account, then disclose the credentials once."""
    seeder = CredentialSeeder.from_settings(engine, admin)
    result = await seeder.seed()
    display_credentials(admin.email, admin.password, admin.panel_url)
    display_security_info(admin.bcrypt_rounds)
    return result
