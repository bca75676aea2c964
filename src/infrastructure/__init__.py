"""Infrastructure layer - Adapters for the domain ports.

This layer contains implementations of domain protocols (ports):
- events/: in-memory event bus and the pipeline handlers
- stores/: protected (regulated) and general document stores
- audit/: audit stores, queued audit writer and export
- persistence/: SQLAlchemy database, models and repositories
- identity/ and logging/: current actor and structured logs

The infrastructure layer depends on the domain layer (implements protocols)
but the domain layer does NOT depend on infrastructure.
"""
