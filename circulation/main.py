import logging

import click

from circulation.auth import SessionAuthenticator, authenticate
from circulation.catalog import BookCatalog
from circulation.clock import SystemClock
from circulation.db import db, init_db
from circulation.desk import CirculationDesk
from circulation.errors import CirculationError
from circulation.ledger import ReservationRepository
from circulation.policy import AccessPolicy

log = logging.getLogger(__name__)

# Код ошибки -> код выхода процесса
EXIT_CODES = {
    "NOT_AUTHENTICATED": 3,
    "BOOK_NOT_FOUND": 4,
    "NOT_FOUND": 4,
    "INVALID_STATE": 5,
    "ALREADY_CHECKED_OUT": 5,
}


def make_desk(session=None) -> CirculationDesk:
    policy = AccessPolicy(SessionAuthenticator(session).is_authenticated)
    return CirculationDesk(ReservationRepository(), BookCatalog(), policy, SystemClock())


def _fmt_dt(value) -> str:
    return value.isoformat(sep=" ", timespec="seconds") if value else "—"


def format_record(rec) -> str:
    return (f"#{rec.id} book={rec.book_id} actor={rec.actor_id} "
            f"out={_fmt_dt(rec.checked_out_at)} in={_fmt_dt(rec.checked_in_at)}")


@click.group()
@click.option("--database-url", envvar="LIBRARY_DATABASE_URL", default=None,
              help="URL базы (sqlite:///library.db, postgresql://...). По умолчанию LIBRARY_DB_*.")
@click.option("-v", "--verbose", is_flag=True, help="Подробный лог.")
def cli(database_url, verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db(url=database_url)


@cli.command()
def migrate():
    """Применить миграции"""
    from circulation.migrate import run

    applied = run()
    click.echo(f"Применено миграций: {len(applied)}")


@cli.command()
def seed():
    """Демо-данные: пользователи и книги"""
    from circulation.seed import run_seed

    users = run_seed()
    click.echo("Seed OK. Users: " + ", ".join(sorted(users)))


@cli.command()
def books():
    """Список книг и кто их сейчас держит"""
    db.connect(reuse_if_open=True)
    try:
        for row in BookCatalog().list_books():
            holder = row["holder_id"] if row["open_reservation_id"] else "—"
            click.echo(f"{row['id']:>4}  {row['title']}  ({row['author'] or '—'})  выдана: {holder}")
    finally:
        if not db.is_closed():
            db.close()


def _run_operation(ctx, operation: str, book_id: int, login: str, password: str) -> None:
    db.connect(reuse_if_open=True)
    try:
        session = authenticate(login, password)
        if session is None:
            log.warning("login failed for %r", login)
        actor_id = session.actor_id if session else None

        desk = make_desk(session)
        try:
            rec = getattr(desk, operation)(book_id, actor_id)
        except CirculationError as e:
            log.info("%s book=%s actor=%s failed: %s", operation, book_id, actor_id, e.code)
            click.echo(f"Ошибка ({e.code}): {e.message}", err=True)
            ctx.exit(EXIT_CODES.get(e.code, 1))

        log.info("%s book=%s actor=%s -> reservation %s", operation, book_id, actor_id, rec.id)
        click.echo(format_record(rec))
    finally:
        if not db.is_closed():
            db.close()


@cli.command()
@click.argument("book_id", type=int)
@click.option("--login", required=True)
@click.option("--password", prompt=True, hide_input=True)
@click.pass_context
def checkout(ctx, book_id, login, password):
    """Выдать книгу"""
    _run_operation(ctx, "checkout", book_id, login, password)


@cli.command()
@click.argument("book_id", type=int)
@click.option("--login", required=True)
@click.option("--password", prompt=True, hide_input=True)
@click.pass_context
def checkin(ctx, book_id, login, password):
    """Вернуть книгу"""
    _run_operation(ctx, "checkin", book_id, login, password)


@cli.command()
@click.argument("book_id", type=int)
@click.pass_context
def history(ctx, book_id):
    """История выдач книги"""
    db.connect(reuse_if_open=True)
    try:
        try:
            records = make_desk().history(book_id)
        except CirculationError as e:
            click.echo(f"Ошибка ({e.code}): {e.message}", err=True)
            ctx.exit(EXIT_CODES.get(e.code, 1))
        if not records:
            click.echo("Книгу ещё не выдавали.")
        for rec in records:
            click.echo(format_record(rec))
    finally:
        if not db.is_closed():
            db.close()


if __name__ == "__main__":
    cli()
