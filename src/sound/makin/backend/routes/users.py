"""
User and favorite track endpoints, mounted at /api/users.

Endpoints:
- GET / - List users
- POST / - Create a user
- GET /{user_id} - Fetch one user
- GET /{user_id}/favorites - List a user's favorite tracks
- POST /{user_id}/favorites - Add a favorite track
"""

from datetime import datetime
import logging
from typing import Optional

from aiohttp import web
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError

from sound.makin.backend.app.config import DatabaseAppKey

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


class UserIn(BaseModel):
    spotify_id: str = Field(min_length=1, max_length=255)
    display_name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=512)


class UserOut(UserIn):
    id: int
    created_at: datetime


class FavoriteIn(BaseModel):
    track_uri: str = Field(min_length=1, max_length=255, pattern=r"^spotify:track:")


class FavoriteOut(FavoriteIn):
    id: int
    user_id: int
    created_at: datetime


def bad_request(e: ValidationError) -> web.Response:
    logger.debug("Invalid request body: %s", e)
    return web.json_response(
        status=400,
        data={"error": {"status": 400, "message": "Invalid request body"}},
    )


async def parse_body(request: web.Request, model):
    data = await request.read()
    return model.model_validate_json(data)


async def fetch_user(conn, users, user_id: int):
    result = await conn.execute(select(users).where(users.c.id == user_id))
    row = result.mappings().one_or_none()
    if row is None:
        raise web.HTTPNotFound(text=f"User {user_id} not found")
    return row


@routes.get("/")
async def handle_list_users(request: web.Request) -> web.Response:
    database = request.app[DatabaseAppKey]
    users = database["users"]
    async with database.engine.connect() as conn:
        result = await conn.execute(select(users).order_by(users.c.id))
        rows = result.mappings().all()
    return web.json_response(
        [UserOut.model_validate(dict(row)).model_dump(mode="json") for row in rows]
    )


@routes.post("/")
async def handle_create_user(request: web.Request) -> web.Response:
    database = request.app[DatabaseAppKey]
    users = database["users"]

    try:
        user = await parse_body(request, UserIn)
    except ValidationError as e:
        return bad_request(e)

    try:
        async with database.engine.begin() as conn:
            result = await conn.execute(insert(users).values(**user.model_dump()))
            row = await fetch_user(conn, users, result.inserted_primary_key[0])
    except IntegrityError:
        logger.info("Duplicate user %s", user.spotify_id)
        return web.json_response(
            status=409,
            data={"error": {"status": 409, "message": "User already exists"}},
        )

    return web.json_response(
        UserOut.model_validate(dict(row)).model_dump(mode="json"), status=201
    )


@routes.get("/{user_id:\\d+}")
async def handle_get_user(request: web.Request) -> web.Response:
    database = request.app[DatabaseAppKey]
    users = database["users"]
    async with database.engine.connect() as conn:
        row = await fetch_user(conn, users, int(request.match_info["user_id"]))
    return web.json_response(UserOut.model_validate(dict(row)).model_dump(mode="json"))


@routes.get("/{user_id:\\d+}/favorites")
async def handle_list_favorites(request: web.Request) -> web.Response:
    database = request.app[DatabaseAppKey]
    users = database["users"]
    favorites = database["favorites"]
    user_id = int(request.match_info["user_id"])

    async with database.engine.connect() as conn:
        await fetch_user(conn, users, user_id)
        result = await conn.execute(
            select(favorites)
            .where(favorites.c.user_id == user_id)
            .order_by(favorites.c.id)
        )
        rows = result.mappings().all()

    return web.json_response(
        [FavoriteOut.model_validate(dict(row)).model_dump(mode="json") for row in rows]
    )


@routes.post("/{user_id:\\d+}/favorites")
async def handle_add_favorite(request: web.Request) -> web.Response:
    database = request.app[DatabaseAppKey]
    users = database["users"]
    favorites = database["favorites"]
    user_id = int(request.match_info["user_id"])

    try:
        favorite = await parse_body(request, FavoriteIn)
    except ValidationError as e:
        return bad_request(e)

    try:
        async with database.engine.begin() as conn:
            await fetch_user(conn, users, user_id)
            result = await conn.execute(
                insert(favorites).values(user_id=user_id, track_uri=favorite.track_uri)
            )
            row = (
                await conn.execute(
                    select(favorites).where(
                        favorites.c.id == result.inserted_primary_key[0]
                    )
                )
            ).mappings().one()
    except IntegrityError:
        return web.json_response(
            status=409,
            data={"error": {"status": 409, "message": "Track already saved"}},
        )

    return web.json_response(
        FavoriteOut.model_validate(dict(row)).model_dump(mode="json"), status=201
    )
