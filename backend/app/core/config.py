from pydantic_settings import BaseSettings
from typing import List
import json

from app.core import constants


class Settings(BaseSettings):
    # Application
    app_name: str = "StageSale API"
    debug: bool = False
    api_v1_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Sale ownership: base58 public key of the operator allowed to mutate the sale
    owner_address: str = ""

    # Token boundary: "memory" keeps balances in-process, "solana" moves SPL tokens
    token_chain: str = "memory"
    token_address: str = ""
    # Initial supply held by the sale (in-memory ledger only, smallest units)
    token_supply: int = 300_000_000 * constants.TOKEN_DECIMALS
    token_decimals: int = constants.DECIMALS

    # Solana configuration (SPL token ledger)
    solana_rpc_url: str = "https://api.devnet.solana.com"
    token_mint: str = ""
    # Admin keypair (Base58 encoded), owns the sale vault and signs transfers/burns
    admin_private_key: str = ""

    # Stage schedule defaults (applied once, when the sale is constructed)
    private_sale_start: int = constants.PRIVATE_SALE_START
    private_sale_end: int = constants.PRIVATE_SALE_END
    private_sale_price: int = constants.PRIVATE_SALE_PRICE
    private_sale_cap: int = constants.PRIVATE_SALE_CAP
    private_sale_discount: int = constants.PRIVATE_SALE_DISCOUNT

    pre_sale_start: int = constants.PRE_SALE_START
    pre_sale_end: int = constants.PRE_SALE_END
    pre_sale_price: int = constants.PRE_SALE_PRICE
    pre_sale_cap: int = constants.PRE_SALE_CAP
    pre_sale_discount: int = constants.PRE_SALE_DISCOUNT

    main_sale_start: int = constants.MAIN_SALE_START
    main_sale_end: int = constants.MAIN_SALE_END
    main_sale_price: int = constants.MAIN_SALE_PRICE
    main_sale_cap: int = constants.MAIN_SALE_CAP
    main_sale_discount: int = constants.MAIN_SALE_DISCOUNT

    # Signed admin requests older than this are rejected
    auth_max_age_seconds: int = 300

    # Sale closer worker
    auto_terminate: bool = True
    terminate_retry_seconds: int = 300

    # Database (Tortoise ORM format)
    database_url: str = "sqlite://db.sqlite3"

    @property
    def tortoise_config(self) -> dict:
        """Tortoise ORM configuration."""
        return {
            "connections": {
                "default": self.database_url,
            },
            "apps": {
                "models": {
                    "models": ["app.models.sale"],
                    "default_connection": "default",
                },
            },
        }

    # CORS
    cors_origins: str = '["http://localhost:3000","http://localhost:8080"]'

    @property
    def cors_origins_list(self) -> List[str]:
        return json.loads(self.cors_origins)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


settings = Settings()
