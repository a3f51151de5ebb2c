"""
Database Layer

This package holds the shared database handle and the adapter that registers model
modules against it.

Key Components:
- base.py: Database, a SQLAlchemy AsyncEngine plus the MetaData and model registry that
  model modules define their tables on
- setup.py: apply_models, which loads every module in the models package and calls its
  register(database) function

Model modules themselves live in the sibling models/ directory. Each one exposes
register(database) and calls database.define(...) for the tables it owns:

    def register(database):
        database.define(
            "users",
            Column("id", Integer, primary_key=True),
            ...
        )

The server calls apply_models and then Database.sync() during startup, before it starts
accepting requests.
"""
