import datetime
import os
import pathlib
import shutil
import sqlite3
import sys

from dotenv import load_dotenv

DB_PATH = os.getenv("DATABASE_PATH", "data/catalog.db")


def check_db():
    print("📊 Checking database...")
    if not os.path.exists(DB_PATH):
        print("⚠️  Database not found (will be created on first run)")
        return

    print(f"✅ Database exists at {DB_PATH}")
    with sqlite3.connect(DB_PATH) as conn:
        games = conn.execute("SELECT COUNT(*) FROM games").fetchone()[0]
        expiry = conn.execute("SELECT token_expiry_time FROM credentials").fetchone()
    print(f"🎮 Cached games: {games}")
    if expiry:
        expires_at = datetime.datetime.fromtimestamp(expiry[0] / 1000)
        print(f"🔑 Access token expires at {expires_at:%Y-%m-%d %H:%M:%S}")
    else:
        print("🔑 No access token stored yet")


def backup_db():
    print("💾 Backing up database...")
    os.makedirs("backups", exist_ok=True)
    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    dst = f"backups/catalog_{timestamp}.db"
    if os.path.exists(DB_PATH):
        shutil.copy2(DB_PATH, dst)
        print(f"✅ Database backed up to {dst}")
    else:
        print("⚠️  No database to backup")


def clean_cache():
    print("🧹 Cleaning Python cache files...")
    for p in pathlib.Path(".").rglob("__pycache__"):
        shutil.rmtree(p)
    for p in pathlib.Path(".").rglob("*.pyc"):
        p.unlink()
    print("✅ Python cache cleaned")


def clean_test():
    print("🧹 Cleaning test artifacts...")
    for p in [".pytest_cache", "htmlcov"]:
        shutil.rmtree(p, ignore_errors=True)
    pathlib.Path(".coverage").unlink(missing_ok=True)
    print("✅ Test artifacts cleaned")


def clean_build():
    print("🧹 Cleaning build artifacts...")
    for p in ["dist", "build"]:
        shutil.rmtree(p, ignore_errors=True)
    for p in pathlib.Path(".").rglob("*.egg-info"):
        shutil.rmtree(p)
    print("✅ Build artifacts cleaned")


def check_env():
    print("🔍 Checking environment configuration...")
    if os.path.exists(".env"):
        load_dotenv(".env")
        print("✅ .env file found")
    else:
        print("⚠️  .env file not found")
    for key in ("IGDB_CLIENT_ID", "IGDB_CLIENT_SECRET"):
        print(f"{'✅' if os.getenv(key) else '⚠️ '} {key} {'set' if os.getenv(key) else 'missing'}")


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/tasks.py <command>")
        sys.exit(1)

    command = sys.argv[1]

    commands = {
        "check-db": check_db,
        "backup-db": backup_db,
        "clean-cache": clean_cache,
        "clean-test": clean_test,
        "clean-build": clean_build,
        "check-env": check_env,
    }

    if command in commands:
        commands[command]()
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
