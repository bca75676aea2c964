"""Application environment types.

Environments:
- DEVELOPMENT: local development, human-readable console logs
- TESTING: automated test runs
- CI: continuous integration
- PRODUCTION: deployed service, JSON logs
"""

from enum import Enum


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    CI = "ci"
    PRODUCTION = "production"
