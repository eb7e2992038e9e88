"""
Admin Security Module
"""
from .credentials import CredentialSeeder, SeedAction, SeedResult, seed_admin

__all__ = ["CredentialSeeder", "SeedAction", "SeedResult", "seed_admin"]
