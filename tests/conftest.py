import os

# Settings are read once at import time, so the test environment has to be in place first.
os.environ["ENV_FILE"] = os.devnull
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["CORS_ORIGINS"] = "http://localhost:3000"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["SYNC_RETRY_DELAY_SECONDS"] = "0"
os.environ["SYNC_BATCH_DELAY_SECONDS"] = "0"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ.pop("DEFAULT_ADMIN_USERNAME", None)
os.environ.pop("DEFAULT_ADMIN_PASSWORD", None)
