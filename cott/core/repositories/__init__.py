"""
Database Tester Repositories

Registry and factory for the backends the benchmark can drive.
"""

import logging
from typing import Callable, Dict

from cott.config import settings
from cott.core.errors import MissingEnvVarError, UnknownComponentError
from cott.core.repositories.base import DatabaseTesterRepository
from cott.core.repositories.postgres import PostgresDatabaseTesterRepository
from cott.models import ComponentType, TestCase

logger = logging.getLogger(__name__)

POSTGRES_USER_ENV_VAR = "POSTGRES_USER"
POSTGRES_PASSWORD_ENV_VAR = "POSTGRES_PASSWORD"

RepositoryFactory = Callable[[TestCase], DatabaseTesterRepository]

_registry: Dict[ComponentType, RepositoryFactory] = {}


def register_backend(component_type: ComponentType, factory: RepositoryFactory) -> None:
    """Register (or replace) the factory used for ``component_type``."""
    _registry[ComponentType(component_type)] = factory


def unregister_backend(component_type: ComponentType) -> None:
    _registry.pop(ComponentType(component_type), None)


def registered_backends() -> list[ComponentType]:
    return list(_registry)


def require_env_var(test_case: TestCase, name: str) -> str:
    """
    Return a required env var of the test case.

    Raises:
        MissingEnvVarError: If the variable is not set
    """
    if name not in test_case.env_vars:
        logger.error("No required env var key: %s", name)
        raise MissingEnvVarError(name)
    return test_case.env_vars[name]


def create_postgres_repository(test_case: TestCase) -> PostgresDatabaseTesterRepository:
    user = require_env_var(test_case, POSTGRES_USER_ENV_VAR)
    password = require_env_var(test_case, POSTGRES_PASSWORD_ENV_VAR)
    return PostgresDatabaseTesterRepository(
        port=test_case.port,
        host=settings.POSTGRES_HOST,
        user=user,
        password=password,
    )


def create_repository(test_case: TestCase) -> DatabaseTesterRepository:
    """
    Factory function to create the repository for a test case's component.

    Args:
        test_case: Test case to run

    Returns:
        DatabaseTesterRepository for the component type

    Raises:
        UnknownComponentError: If no backend is registered for the component type
        MissingEnvVarError: If the backend's required credentials are missing
    """
    factory = _registry.get(test_case.component_type)
    if factory is None:
        logger.error("Unknown component for testing: %r", test_case.component_type)
        raise UnknownComponentError(test_case.component_type)
    return factory(test_case)


register_backend(ComponentType.POSTGRES, create_postgres_repository)


__all__ = [
    "DatabaseTesterRepository",
    "PostgresDatabaseTesterRepository",
    "POSTGRES_USER_ENV_VAR",
    "POSTGRES_PASSWORD_ENV_VAR",
    "create_postgres_repository",
    "create_repository",
    "register_backend",
    "registered_backends",
    "require_env_var",
    "unregister_backend",
]
