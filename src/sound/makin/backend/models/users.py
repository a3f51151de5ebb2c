from sqlalchemy import Column, DateTime, Integer, String, func


def register(database):
    database.define(
        "users",
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("spotify_id", String(255), nullable=False, unique=True),
        Column("display_name", String(255), nullable=True),
        Column("email", String(512), nullable=True),
        Column(
            "created_at",
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        ),
    )
