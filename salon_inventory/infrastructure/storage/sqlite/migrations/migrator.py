"""
Versioned schema migrations for the inventory database.

Scripts live next to this module as ``v<NNN>_<name>.sql`` and are applied in
version order. Each applied version is recorded in ``schema_migrations``
with a short content hash so that edits to an already-applied script are
reported rather than silently re-run.
"""

import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import aiosqlite

from salon_inventory.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_FILENAME_RE = re.compile(r"v(?P<version>\d+)_(?P<name>.+)\.sql")

_TRACKING_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    checksum TEXT,
    applied_at TEXT DEFAULT (datetime('now')),
    execution_time_ms INTEGER
)
"""


@dataclass
class MigrationInfo:
    """One migration script found on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        """Parse ``v001_name.sql``; raises ValueError for any other name."""
        found = _FILENAME_RE.fullmatch(path.name)
        if found is None:
            raise ValueError(f"Migration file must be named v<NNN>_<name>.sql, got {path.name}")

        digest = hashlib.sha256(path.read_bytes()).hexdigest()
        return cls(
            version=found["version"],
            name=found["name"],
            path=path,
            checksum=digest[:16],
        )

    def read_sql(self) -> str:
        """Script body as UTF-8 text."""
        return self.path.read_text(encoding="utf-8")


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Bundled migration scripts sorted by version; misnamed files are skipped."""
    found: list[MigrationInfo] = []
    for path in directory.glob("v*.sql"):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as exc:
            logger.warning("migration_file_ignored", path=str(path), reason=str(exc))
    return sorted(found, key=lambda m: int(m.version))


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Version to checksum for every recorded migration (empty on a fresh file)."""
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    except aiosqlite.OperationalError:
        return {}
    return {version: checksum for version, checksum in await cursor.fetchall()}


async def apply_migration(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    """Run one script and record it; failures are rolled back and reported, not raised."""
    started = time.perf_counter()

    def elapsed_ms() -> int:
        return int((time.perf_counter() - started) * 1000)

    try:
        await conn.executescript(migration.read_sql())
        await conn.execute(
            "INSERT OR REPLACE INTO schema_migrations "
            "(version, name, checksum, execution_time_ms) VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, elapsed_ms()),
        )
        await conn.commit()
    except Exception as exc:
        await conn.rollback()
        logger.error("schema_migration_failed", version=migration.version, error=str(exc))
        return MigrationResult(migration.version, migration.name, False, elapsed_ms(), str(exc))

    logger.info(
        "schema_migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=elapsed_ms(),
    )
    return MigrationResult(migration.version, migration.name, True, elapsed_ms())


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside, returning the copy's path."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_name(f"{db_path.stem}.backup_{stamp}{db_path.suffix or '.db'}")
    shutil.copy2(db_path, backup_path)
    logger.info("inventory_db_backed_up", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    """Overwrite the database file with a backup copy."""
    shutil.copy2(backup_path, db_path)
    logger.warning("inventory_db_restored", backup_path=str(backup_path))


async def _migrate(db_path: Path) -> list[MigrationResult]:
    """Apply pending scripts in order, stopping at the first failure."""
    results: list[MigrationResult] = []
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")
        await conn.execute(_TRACKING_TABLE)
        await conn.commit()

        applied = await get_applied_migrations(conn)
        for migration in discover_migrations():
            recorded = applied.get(migration.version)
            if recorded is not None:
                if recorded != migration.checksum:
                    logger.warning("applied_migration_modified", version=migration.version)
                continue

            result = await apply_migration(conn, migration)
            results.append(result)
            # Later scripts assume earlier ones succeeded
            if not result.success:
                break
    return results


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Bring the inventory database up to the latest schema version.

    An existing file is backed up first when ``create_backup_before`` is set.
    The backup is restored if migrating raises, and removed once every
    pending script has applied cleanly.

    Returns one result per migration attempted in this run.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    backup_path = create_backup(db_path) if create_backup_before and db_path.exists() else None

    try:
        results = await _migrate(db_path)
    except Exception:
        logger.exception("inventory_db_migration_aborted", db_path=str(db_path))
        if backup_path is not None:
            restore_backup(db_path, backup_path)
        raise

    if backup_path is not None and all(r.success for r in results):
        backup_path.unlink()

    logger.info("inventory_db_ready", db_path=str(db_path), applied=len(results))
    return results


run_migrations = initialize_database
