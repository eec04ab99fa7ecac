import os
from dotenv import load_dotenv

load_dotenv()

# =====================================================
# ENV
# =====================================================
ENV = os.getenv("ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# =====================================================
# DATABASE
# =====================================================
MONGO_URI = os.getenv("MONGO_URI") or os.getenv("MONGODB_URI")

# =====================================================
# JWT
# =====================================================
JWT_SECRET = os.getenv("JWT_SECRET")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# =====================================================
# STORE SETTINGS / ADMISSION
# =====================================================
# Weekday and "HH:MM" for admission are derived in this zone
STORE_TIMEZONE = os.getenv("STORE_TIMEZONE", "Asia/Kolkata")

SETTINGS_CACHE_BACKEND = os.getenv("SETTINGS_CACHE_BACKEND", "mongo")  # mongo | memory
SETTINGS_CACHE_TTL_SECONDS = int(os.getenv("SETTINGS_CACHE_TTL_SECONDS", 300))
SETTINGS_CACHE_TIMEOUT_SECONDS = float(os.getenv("SETTINGS_CACHE_TIMEOUT_SECONDS", 0.5))
SETTINGS_STORE_TIMEOUT_SECONDS = float(os.getenv("SETTINGS_STORE_TIMEOUT_SECONDS", 2.0))

# =====================================================
# CORS
# =====================================================
CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")


def validate_production_env() -> None:
    if (ENV or "").lower() != "production":
        return

    required = {
        "JWT_SECRET": JWT_SECRET,
        "MONGODB_URI": MONGO_URI,
    }

    invalid = []
    for key, value in required.items():
        val = (value or "").strip()
        if not val or val.startswith("CHANGE_THIS"):
            invalid.append(key)

    if SETTINGS_CACHE_BACKEND not in {"mongo", "memory"}:
        invalid.append("SETTINGS_CACHE_BACKEND")

    if invalid:
        raise RuntimeError(f"Production env misconfigured. Invalid keys: {', '.join(sorted(invalid))}")
