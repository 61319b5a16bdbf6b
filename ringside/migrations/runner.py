"""Ordered schema migrations with a version ledger.

Migration files live in ``versions/`` and are named ``NNNN_description.py``.
Each module defines ``upgrade()`` and ``downgrade()`` written against
Alembic's ``op`` proxy, plus ``version`` and ``reversible``. Applied versions
are recorded in the ``schema_migrations`` table.
"""
import importlib.util
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from types import ModuleType
from typing import List, Optional

import sqlalchemy as sa
from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext

from errors import IrreversibleMigrationError, MigrationError


logger = logging.getLogger(__name__)

VERSIONS_DIR = Path(__file__).resolve().parent / "versions"
LEDGER_TABLE = "schema_migrations"

_FILENAME = re.compile(r"^(?P<version>\d+)_(?P<name>\w+)\.py$")

_metadata = sa.MetaData()
ledger = sa.Table(
    LEDGER_TABLE,
    _metadata,
    sa.Column("version", sa.Integer(), primary_key=True, autoincrement=False),
    sa.Column("name", sa.Text(), nullable=False),
    sa.Column("applied_at", sa.Text(), nullable=False),
)


@dataclass
class Migration:
    version: int
    name: str
    path: Path
    module: ModuleType

    @property
    def label(self) -> str:
        return f"{self.version:04d}_{self.name}"

    @property
    def reversible(self) -> bool:
        return bool(getattr(self.module, "reversible", True))

    def upgrade(self, connection) -> None:
        self._run(connection, self.module.upgrade)

    def downgrade(self, connection) -> None:
        self._run(connection, self.module.downgrade)

    @staticmethod
    def _run(connection, step) -> None:
        context = MigrationContext.configure(connection=connection)
        with Operations.context(context):
            step()


@dataclass
class MigrationStatus:
    version: int
    name: str
    applied: bool
    applied_at: Optional[str] = None
    missing_file: bool = False


def load_migration(path: Path) -> Migration:
    match = _FILENAME.match(path.name)
    if not match:
        raise MigrationError(None, f"Not a migration file name: {path.name}")

    version = int(match.group("version"))
    spec = importlib.util.spec_from_file_location(f"migrations.versions.{path.stem}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    declared = getattr(module, "version", version)
    if declared != version:
        raise MigrationError(version, f"{path.name} declares version {declared}")
    for attr in ("upgrade", "downgrade"):
        if not callable(getattr(module, attr, None)):
            raise MigrationError(version, f"{path.name} has no {attr}() function")

    return Migration(version=version, name=match.group("name"), path=path, module=module)


def find_gaps(versions) -> List[int]:
    """Version numbers missing below the highest one (numbering starts at 1)."""
    present = set(versions)
    if not present:
        return []
    return [v for v in range(1, max(present) + 1) if v not in present]


class MigrationRunner:
    """Applies and reverts migrations against one database.

    Not safe to run twice at the same time against the same file.
    """

    def __init__(self, engine, versions_dir=None):
        self.engine = engine
        self.versions_dir = Path(versions_dir) if versions_dir else VERSIONS_DIR

    def discover(self) -> List[Migration]:
        migrations = [
            load_migration(path)
            for path in self.versions_dir.glob("*.py")
            if _FILENAME.match(path.name)
        ]
        migrations.sort(key=lambda m: m.version)

        seen = set()
        for migration in migrations:
            if migration.version in seen:
                raise MigrationError(migration.version, f"Duplicate migration version {migration.version}")
            seen.add(migration.version)

        gaps = find_gaps(seen)
        if gaps:
            # Gaps are legal; a human should still confirm nothing was lost.
            logger.warning("Migration numbering skips version(s) %s in %s", gaps, self.versions_dir)
        return migrations

    def ensure_ledger(self) -> None:
        with self.engine.begin() as conn:
            ledger.create(conn, checkfirst=True)

    def applied(self) -> dict:
        """Map of applied version -> ledger row."""
        self.ensure_ledger()
        with self.engine.connect() as conn:
            rows = conn.execute(sa.select(ledger).order_by(ledger.c.version)).mappings().all()
        return {row["version"]: dict(row) for row in rows}

    def pending(self) -> List[Migration]:
        applied = self.applied()
        return [m for m in self.discover() if m.version not in applied]

    def upgrade(self, target: Optional[int] = None) -> List[Migration]:
        """Apply pending migrations in order, stopping at ``target`` if given."""
        pending = [m for m in self.pending() if target is None or m.version <= target]
        if not pending:
            logger.info("No pending migrations")
            return []

        logger.info("Found %d pending migration(s)", len(pending))
        done = []
        for migration in pending:
            self.apply(migration)
            done.append(migration)
        logger.info("All migrations completed successfully")
        return done

    def apply(self, migration: Migration) -> None:
        logger.info("Running migration %s", migration.label)
        try:
            # SQLite auto-commits some DDL, so a failure can leave part of a step behind.
            with self.engine.begin() as conn:
                migration.upgrade(conn)
                conn.execute(
                    ledger.insert().values(
                        version=migration.version,
                        name=migration.label,
                        applied_at=datetime.utcnow().isoformat(sep=" ", timespec="seconds"),
                    )
                )
        except Exception as exc:
            logger.exception("Migration %s failed", migration.label)
            raise MigrationError(migration.version, f"Migration {migration.label} failed: {exc}") from exc
        logger.info("Migration %s completed", migration.label)

    def downgrade(self, steps: int = 1, force: bool = False) -> List[Migration]:
        """Revert the last ``steps`` applied migrations, newest first."""
        if steps < 1:
            raise ValueError(f"steps must be at least 1, got {steps}")
        applied = sorted(self.applied(), reverse=True)[:steps]
        if not applied:
            logger.info("No migrations to roll back")
            return []

        available = {m.version: m for m in self.discover()}
        plan = []
        for version in applied:
            migration = available.get(version)
            if migration is None:
                raise MigrationError(version, f"Migration file for version {version} not found")
            if not migration.reversible and not force:
                raise IrreversibleMigrationError(
                    version,
                    f"Migration {migration.label} is not reversible; use force to roll back anyway",
                )
            plan.append(migration)

        for migration in plan:
            self.revert(migration)
        return plan

    def revert(self, migration: Migration) -> None:
        logger.info("Rolling back migration %s", migration.label)
        if not migration.reversible:
            logger.warning("Migration %s is irreversible; rollback leaves its column changes", migration.label)
        try:
            with self.engine.begin() as conn:
                migration.downgrade(conn)
                conn.execute(ledger.delete().where(ledger.c.version == migration.version))
        except Exception as exc:
            logger.exception("Rollback of %s failed", migration.label)
            raise MigrationError(migration.version, f"Rollback of {migration.label} failed: {exc}") from exc
        logger.info("Rollback of %s completed", migration.label)

    def status(self) -> List[MigrationStatus]:
        applied = self.applied()
        rows = []
        known = set()
        for migration in self.discover():
            known.add(migration.version)
            entry = applied.get(migration.version)
            rows.append(
                MigrationStatus(
                    version=migration.version,
                    name=migration.label,
                    applied=entry is not None,
                    applied_at=entry["applied_at"] if entry else None,
                )
            )
        for version, entry in applied.items():
            if version not in known:
                rows.append(
                    MigrationStatus(
                        version=version,
                        name=entry["name"],
                        applied=True,
                        applied_at=entry["applied_at"],
                        missing_file=True,
                    )
                )
        rows.sort(key=lambda row: row.version)
        return rows
