"""
Configuration settings for the Range Vault API

Loads environment variables and provides application configuration.
"""
import os
from typing import List
from dotenv import load_dotenv

from range_vault.config import VaultConfig

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Application settings"""

    # API Configuration
    API_VERSION: str = "1.0.0"
    API_TITLE: str = "Range Vault API"
    API_DESCRIPTION: str = "Auto-rebalancing Uniswap V3 liquidity vault running on simulated collaborators"

    # The Graph API (optional, enables live pool fee estimates)
    GRAPH_API_KEY: str = os.getenv("RANGE_VAULT_GRAPH_API_KEY", "")

    # CORS Configuration
    CORS_ORIGINS: List[str] = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000"
    ).split(",")

    # Server Configuration
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", 8000))
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"

    # Simulated pool
    POOL_FEE: int = int(os.getenv("POOL_FEE", 3000))
    INITIAL_TICK: int = int(os.getenv("INITIAL_TICK", 0))

    # Vault defaults (overridden by RANGE_VAULT_* variables)
    DEFAULT_PROTOCOL_FEE_RECIPIENT: str = "0xprotocol"

    def vault_config(self) -> VaultConfig:
        """Build the vault configuration from RANGE_VAULT_* variables"""
        values = {}
        for name in VaultConfig.model_fields:
            raw = os.getenv("RANGE_VAULT_" + name.upper())
            if raw is not None:
                values[name] = raw
        values.setdefault("protocol_fee_recipient", self.DEFAULT_PROTOCOL_FEE_RECIPIENT)
        return VaultConfig.create(**values)


# Create global settings instance
settings = Settings()
