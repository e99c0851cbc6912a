import os
import threading

class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.LOG_LEVEL = os.environ.get("LOG_LEVEL","INFO").upper()
        # Database settings, DATABASE_URL wins over the POSTGRES_* parts
        self.POSTGRES_URL = os.environ.get("POSTGRES_URL","localhost:5432")
        self.POSTGRES_USER = os.environ.get("POSTGRES_USER","postgres")
        self.POSTGRES_PASSWORD = os.environ.get("POSTGRES_PASSWORD","postgres")
        self.POSTGRES_DB = os.environ.get("POSTGRES_DB","veriton")
        self.DATABASE_URL = os.environ.get("DATABASE_URL", None)
        # Authentication settings
        self.JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "change-me")
        self.JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_URL}/{self.POSTGRES_DB}"

settings = BackendSettings()
