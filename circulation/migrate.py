import logging
from pathlib import Path

from peewee_migrate import Router
from circulation.db import db, init_db

log = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


class Utf8Router(Router):
    def read(self, name):
        migrate_dir = self.migrate_dir
        if not isinstance(migrate_dir, (str, Path)):
            migrate_dir = str(migrate_dir)

        mdir = Path(migrate_dir)
        path = mdir / f"{name}.py"

        code = path.read_text(encoding="utf-8")
        scope = {}
        exec(compile(code, str(path), "exec"), scope)

        migrate = scope.get("migrate")
        rollback = scope.get("rollback")
        return migrate, rollback


def run(migrate_dir=MIGRATIONS_DIR):
    db.connect(reuse_if_open=True)
    try:
        router = Utf8Router(db.obj, migrate_dir=str(migrate_dir))
        pending = router.diff
        log.info("pending migrations: %s", ", ".join(pending) or "none")
        router.run()
        return pending
    finally:
        if not db.is_closed():
            db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    run()
