from peewee_migrate import Migrator
from circulation.models import User, Author, Book

def migrate(migrator: Migrator, database, fake=False, **kwargs):
    migrator.create_model(User)
    migrator.create_model(Author)
    migrator.create_model(Book)

def rollback(migrator: Migrator, database, fake=False, **kwargs):
    migrator.drop_model(Book)
    migrator.drop_model(Author)
    migrator.drop_model(User)
