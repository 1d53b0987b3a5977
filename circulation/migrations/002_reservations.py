from peewee_migrate import Migrator
from circulation.models import Reservation


def migrate(migrator: Migrator, database, fake=False, **kwargs):
    migrator.create_model(Reservation)

    # Открытый резерв (checked_in_at IS NULL) у книги может быть только один
    migrator.sql("""
    CREATE UNIQUE INDEX IF NOT EXISTS uq_reservations_open_book
    ON reservations(book_id)
    WHERE checked_in_at IS NULL;
    """)

    migrator.sql("""
    CREATE INDEX IF NOT EXISTS ix_reservations_book_actor_open
    ON reservations(book_id, actor_id, checked_in_at);
    """)


def rollback(migrator: Migrator, database, fake=False, **kwargs):
    migrator.sql("DROP INDEX IF EXISTS ix_reservations_book_actor_open;")
    migrator.sql("DROP INDEX IF EXISTS uq_reservations_open_book;")
    migrator.drop_model(Reservation)
