import os

from dotenv import load_dotenv
from flask_sqlalchemy import SQLAlchemy

load_dotenv()

db = SQLAlchemy()


def _split(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [v.strip() for v in value.split(",") if v.strip()]


class Config:
    # engine sources, tried in order until one loads
    ENGINE_URLS = _split(os.getenv("STOCKLEDGER_ENGINE_URLS"), ["sqlite://"])

    # JSON file standing in for the local key-value store; None keeps it in memory
    SNAPSHOT_PATH = os.getenv("STOCKLEDGER_SNAPSHOT_PATH")
    SNAPSHOT_KEY = os.getenv("STOCKLEDGER_SNAPSHOT_KEY", "materialsDB")

    SEARCH_LIMIT = int(os.getenv("STOCKLEDGER_SEARCH_LIMIT", "20"))
    RECORD_LIMIT = int(os.getenv("STOCKLEDGER_RECORD_LIMIT", "100"))
    ORDER_TERMINAL_STATUSES = tuple(
        _split(os.getenv("STOCKLEDGER_ORDER_STATUSES"), ["fulfilled", "cancelled"])
    )

    SQLALCHEMY_TRACK_MODIFICATIONS = False
