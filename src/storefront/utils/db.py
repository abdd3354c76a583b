from protean.domain import Domain
from sqlalchemy import create_engine


def _is_event_sourced(cls):
    # Event-sourced aggregates, and the entities inside them, live in the event store
    owner = getattr(cls.meta_, "part_of", None) or cls
    return bool(getattr(owner.meta_, "is_event_sourced", False))


def _relational_providers(domain: Domain):
    for _, provider in domain.providers.items():
        if provider.conn_info["provider"] in ("sqlite", "postgresql"):
            yield provider


def setup_db(domain: Domain):
    """Create tables for every aggregate, entity and projection on a relational provider."""
    with domain.domain_context():
        for provider in _relational_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])

            # Touch each repository's DAO so the model is registered with SQLAlchemy
            # before create_all runs.
            for registry in (
                domain.registry.aggregates,
                domain.registry.entities,
                domain.registry.projections,
            ):
                for _, record in registry.items():
                    if record.cls.meta_.provider == provider.name and not _is_event_sourced(record.cls):
                        domain.repository_for(record.cls)._dao  # noqa: B018

            provider._metadata.create_all(engine)


def drop_db(domain: Domain):
    """Drop the tables created by ``setup_db``."""
    with domain.domain_context():
        for provider in _relational_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.drop_all(engine)
