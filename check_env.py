#!/usr/bin/env python3
"""Helper script to check and create a .env file for TravelTime credentials."""

from pathlib import Path

REQUIRED_KEYS = ("TRANSIT_REACH_TRAVELTIME_APP_ID", "TRANSIT_REACH_TRAVELTIME_API_KEY")

TEMPLATE = """# TravelTime credentials (required for matrix and route requests)
# Get these from: https://account.traveltime.com
TRANSIT_REACH_TRAVELTIME_APP_ID=your-application-id
TRANSIT_REACH_TRAVELTIME_API_KEY=your-api-key

# API Configuration
TRANSIT_REACH_API_PREFIX=/api
# TRANSIT_REACH_FRONTEND_ALLOWED_ORIGINS accepts a JSON array or comma-separated list
"""


def _mask(value: str) -> str:
    return value[:4] + "..." + value[-4:] if len(value) > 12 else value


def main() -> int:
    env_file = Path(__file__).parent / ".env"

    if not env_file.exists():
        print(f"[MISSING] .env file not found at: {env_file}")
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print("Created template .env file. Fill in your TravelTime credentials.")
        return 1

    values = {}
    for line in env_file.read_text(encoding="utf-8").splitlines():
        if "=" in line and not line.lstrip().startswith("#"):
            key, value = line.split("=", 1)
            values[key.strip()] = value.strip()

    missing = [key for key in REQUIRED_KEYS if not values.get(key)]
    for key in REQUIRED_KEYS:
        if values.get(key):
            print(f"[OK] {key}={_mask(values[key])}")
    for key in missing:
        print(f"[MISSING] {key}")
    return 1 if missing else 0


if __name__ == "__main__":
    raise SystemExit(main())
