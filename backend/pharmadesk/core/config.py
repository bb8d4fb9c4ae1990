import os
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # 🧠 App Info
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "PharmaDesk Dispensary")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = os.getenv("DEBUG", "true").lower() == "true"
    API_PREFIX: str = os.getenv("API_PREFIX", "/api")

    # 🌍 CORS
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # 🗄️ Database (SQLite by default, Postgres via DATABASE_URL)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./data/pharmadesk.db")

    # 🔒 Security
    SECRET_KEY: str = os.getenv("SECRET_KEY", "changeme")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

    # 🕓 Logs
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # 🧾 Billing
    BILL_NUMBER_ON_CREATE: bool = os.getenv("BILL_NUMBER_ON_CREATE", "true").lower() in {"1", "true", "yes"}
    DISPENSED_APPOINTMENT_STATUS: str = os.getenv("DISPENSED_APPOINTMENT_STATUS", "prescription dispensed")

    # 🏥 Printed bill header
    CLINIC_NAME: str = os.getenv("CLINIC_NAME", "PharmaDesk Clinic Pharmacy")
    CLINIC_ADDRESS: str = os.getenv("CLINIC_ADDRESS", "")
    CURRENCY_SYMBOL: str = os.getenv("CURRENCY_SYMBOL", "Rs.")

    @property
    def cors_origins(self) -> List[str]:
        return _split_csv(self.CORS_ORIGINS) or ["*"]


settings = Settings()
