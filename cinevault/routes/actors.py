from flask import Blueprint

from cinevault.routes.responses import ok, parse_envelope
from cinevault.schemas import ActorRequest
from cinevault.services import actor_service

READ_METHODS = ["GET", "OPTIONS"]

# Actors only exist in v2
bp_v2 = Blueprint("actors", __name__, url_prefix="/Actors")


@bp_v2.route("/GetActors", methods=READ_METHODS)
def get_actors():
    parse_envelope(required=False)
    return ok(actor_service.list_actors(), "Actors are received")


@bp_v2.route("/GetActorById/<int:actor_id>", methods=READ_METHODS)
def get_actor_by_id(actor_id):
    parse_envelope(required=False)
    return ok(actor_service.get_actor(actor_id), "Actor is received")


@bp_v2.route("/CreateActor", methods=["POST"])
def create_actor():
    """
    POST /api/v2/Actors/CreateActor
    Envelope data is an ActorRequest; ``movie_ids`` links the actor to
    existing movies. Responds with the new actor id.
    """
    _, payload = parse_envelope(ActorRequest)
    actor = actor_service.create_actor(payload)
    return ok(actor.id, "Actor is created")


@bp_v2.route("/UpdateActor/<int:actor_id>", methods=["PUT"])
def update_actor(actor_id):
    _, payload = parse_envelope(ActorRequest)
    return ok(actor_service.update_actor(actor_id, payload), "Actor is updated")


@bp_v2.route("/DeleteActor/<int:actor_id>", methods=["DELETE"])
def delete_actor(actor_id):
    parse_envelope(required=False)
    actor_service.soft_delete_actor(actor_id)
    return ok(message="Actor is deleted")
