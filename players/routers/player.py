import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette import status

from players.repositories.player import PlayerRepository
from players.schemas import (
    INTERNAL_SERVER_ERROR,
    Player,
    envelope,
    validate_create,
    validate_update,
)

log: logging.Logger = logging.getLogger(__name__)


class MalformedBodyError(Exception):
    pass


async def read_json_body(request: Request) -> Any:
    """Parses an application/json body; an empty or non-JSON body reads as {}."""
    media_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    raw = await request.body()
    if not raw or media_type != "application/json":
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        raise MalformedBodyError from e


def serialize_player(row: Dict) -> Dict:
    return Player(**row).model_dump()


def bad_request(message: str) -> JSONResponse:
    return envelope(status.HTTP_400_BAD_REQUEST, success=False, error=message)


def internal_error() -> JSONResponse:
    return envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        success=False,
        error=INTERNAL_SERVER_ERROR,
    )


def make_player_router(player_repository: PlayerRepository) -> APIRouter:
    router = APIRouter(prefix="/players", tags=["players"])

    @router.get("", summary="List all players ordered by name")
    async def list_players():
        try:
            players = await player_repository.find_many(order_by="name")
            return envelope(
                status.HTTP_200_OK,
                success=True,
                data={"players": [serialize_player(p) for p in players]},
            )
        except Exception:
            log.exception("Failed to list players")
            return internal_error()

    @router.post("", summary="Create a player")
    async def create_player(request: Request):
        try:
            try:
                body = await read_json_body(request)
            except MalformedBodyError:
                return bad_request("Malformed JSON body")

            result = validate_create(body)
            if not result.ok:
                log.info(f"Rejected player creation: {result.first_error}")
                return bad_request(result.first_error)

            player = await player_repository.create(result.data)
            return envelope(
                status.HTTP_201_CREATED,
                success=True,
                data={"player": serialize_player(player)},
                message="Player successfully created",
            )
        except Exception:
            log.exception("Failed to create player")
            return internal_error()

    # Found and not-found both answer 201 with success=true.
    @router.get("/{player_id}", summary="Get a player by id")
    async def get_player(player_id: str):
        try:
            player = await player_repository.find_first(player_id)
            if not player:
                return envelope(
                    status.HTTP_201_CREATED, success=True, message="Player not found"
                )
            return envelope(
                status.HTTP_201_CREATED,
                success=True,
                data={"player": serialize_player(player)},
            )
        except Exception:
            log.exception(f"Failed to get player {player_id}")
            return internal_error()

    @router.put("/{player_id}", summary="Partially update a player")
    async def update_player(player_id: str, request: Request):
        try:
            try:
                body = await read_json_body(request)
            except MalformedBodyError:
                return bad_request("Malformed JSON body")

            result = validate_update(body)
            if not result.ok:
                log.info(f"Rejected update of player {player_id}: {result.first_error}")
                return bad_request(result.first_error)

            player = await player_repository.update(player_id, result.data)
            return envelope(
                status.HTTP_201_CREATED,
                success=True,
                data={"player": serialize_player(player)},
                message="Player successfully updated",
            )
        except Exception:
            log.exception(f"Failed to update player {player_id}")
            return internal_error()

    @router.delete("/{player_id}", summary="Delete a player")
    async def delete_player(player_id: str):
        try:
            await player_repository.delete(player_id)
            return envelope(
                status.HTTP_201_CREATED,
                success=True,
                message="Player successfully deleted",
            )
        except Exception:
            log.exception(f"Failed to delete player {player_id}")
            return internal_error()

    return router
