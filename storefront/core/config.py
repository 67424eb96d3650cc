from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    db_name: str = "storefront"
    db_user: str = "storefront"
    db_password: str = "CHANGE_ME"
    db_host: str = "db"
    db_port: int = 5432
    db_ssl: bool = False
    db_pool_size: int = 20
    db_max_overflow: int = 10

    # CORS
    cors_allowed_origins: str = "http://localhost:5173"

    # JWT (tokens are issued by the auth service, only verified here)
    jwt_secret_key: str = "CHANGE_ME"
    jwt_issuer: str = "storefront"
    jwt_access_token_expire_minutes: int = 15

    # Inventory
    low_stock_threshold: int = 5
    cart_stale_days: int = 30

    # App
    debug: bool = False

    @property
    def database_url(self) -> str:
        base = (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )
        return f"{base}?ssl=require" if self.db_ssl else base

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    model_config = {"env_file": ".env", "extra": "ignore"}

    def validate_secrets(self) -> None:
        """Raise if production-critical secrets are still defaults."""
        if self.debug:
            return
        defaults = {"CHANGE_ME"}
        if self.jwt_secret_key in defaults:
            raise ValueError("jwt_secret_key must be changed from default")
        if len(self.jwt_secret_key) < 32:
            raise ValueError("jwt_secret_key must be at least 32 characters")
        if self.db_password in defaults:
            raise ValueError("db_password must be changed from default")
        if self.cart_stale_days < 1:
            raise ValueError("cart_stale_days must be at least 1")


settings = Settings()
