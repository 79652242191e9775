import structlog
from typing import List, Optional

from sqlalchemy.orm import selectinload

from cinevault.exceptions import NotFoundError
from cinevault.metrics import track_entity_operation
from cinevault.models import db, Actor, Movie
from cinevault.schemas import ActorRequest, ActorResponse

logger = structlog.get_logger()


class ActorService:
    """Actor CRUD; the filmography is set through ``movie_ids``."""

    def _get_or_404(self, actor_id: int) -> Actor:
        actor = Actor.query.filter_by(id=actor_id).first()
        if actor is None:
            logger.warning("actor_not_found", actor_id=actor_id)
            raise NotFoundError("Actor is not found")
        return actor

    def _resolve_movies(self, movie_ids: Optional[List[int]]) -> List[Movie]:
        unique_ids = list(dict.fromkeys(movie_ids or []))
        if not unique_ids:
            return []
        movies = Movie.query.filter(Movie.id.in_(unique_ids)).all()
        missing = sorted(set(unique_ids) - {movie.id for movie in movies})
        if missing:
            logger.warning("actor_movies_not_found", movie_ids=missing)
            raise NotFoundError(f"Movies not found: {', '.join(str(m) for m in missing)}")
        return movies

    def list_actors(self) -> List[ActorResponse]:
        logger.info("actors_list_start")
        actors = Actor.query.options(selectinload(Actor.movies)).order_by(Actor.id).all()
        logger.info("actors_list_success", count=len(actors))
        return [ActorResponse.from_actor(actor) for actor in actors]

    def get_actor(self, actor_id: int) -> ActorResponse:
        logger.info("actor_get_start", actor_id=actor_id)
        actor = self._get_or_404(actor_id)
        logger.info("actor_get_success", actor_id=actor_id)
        return ActorResponse.from_actor(actor)

    def create_actor(self, payload: ActorRequest) -> ActorResponse:
        logger.info("actor_create_start", full_name=payload.full_name, birth_date=payload.birth_date)
        movies = self._resolve_movies(payload.movie_ids)

        actor = Actor(
            full_name=payload.full_name,
            birth_date=payload.birth_date,
            biography=payload.biography,
        )
        actor.movies = movies
        db.session.add(actor)
        db.session.commit()

        track_entity_operation("actor", "create")
        logger.info("actor_create_success", actor_id=actor.id)
        return ActorResponse.from_actor(actor)

    def update_actor(self, actor_id: int, payload: ActorRequest) -> ActorResponse:
        logger.info("actor_update_start", actor_id=actor_id)
        actor = self._get_or_404(actor_id)

        actor.full_name = payload.full_name
        actor.birth_date = payload.birth_date
        actor.biography = payload.biography
        # Omitted movie_ids leaves the filmography as it is
        if payload.movie_ids is not None:
            actor.movies = self._resolve_movies(payload.movie_ids)
        db.session.commit()

        track_entity_operation("actor", "update")
        logger.info("actor_update_success", actor_id=actor_id)
        return ActorResponse.from_actor(actor)

    def soft_delete_actor(self, actor_id: int):
        logger.info("actor_soft_delete_start", actor_id=actor_id)
        actor = self._get_or_404(actor_id)
        actor.soft_delete()
        db.session.commit()

        track_entity_operation("actor", "soft_delete")
        logger.info("actor_soft_delete_success", actor_id=actor_id)


# Singleton instance
actor_service = ActorService()
