#!/usr/bin/env python3
"""
Demonstration of wirecore.

This demo shows:
1. Instance and type bindings
2. Qualified bindings
3. Singleton scope
4. Deferred dependencies closing a cycle
5. Missing and cyclic dependency detection
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Annotated

from wirecore import (
    ContextConfig,
    CyclicDependencyError,
    Deferred,
    DependencyNotFoundError,
    Id,
    Inject,
    inject,
    singleton,
)


@dataclass
class Config:
    """Application configuration."""

    app_name: str
    debug: bool = False


class Database(ABC):
    """Abstract database interface."""

    @abstractmethod
    def query(self, sql: str) -> str:
        pass


class PostgresDB(Database):
    def __init__(self, connection_string: Annotated[str, Id("dsn")]):
        self.connection_string = connection_string

    def query(self, sql: str) -> str:
        return f"PostgreSQL[{self.connection_string}]: {sql}"


class InMemoryDB(Database):
    def query(self, sql: str) -> str:
        return f"InMemoryDB: {sql}"


@singleton
class AuditLog:
    """Shared by everybody who needs it."""

    def __init__(self):
        self.entries: list[str] = []

    def record(self, entry: str) -> None:
        self.entries.append(entry)


class UserService:
    audit: Annotated[AuditLog, Inject]

    def __init__(
        self,
        config: Config,
        primary: Annotated[Database, Id("primary")],
        cache: Annotated[Database, Id("cache")],
    ):
        self.config = config
        self.primary = primary
        self.cache = cache

    @inject
    def announce(self, config: Config) -> None:
        self.audit.record(f"{config.app_name}: UserService ready")

    def find_user(self, user_id: int) -> str:
        return self.cache.query(f"SELECT * FROM users WHERE id = {user_id}")


class Parent:
    def __init__(self, children: Deferred["Child"]):
        self.children = children


class Child:
    def __init__(self, parent: Parent):
        self.parent = parent


class Chicken:
    def __init__(self, egg: "Egg"):
        self.egg = egg


class Egg:
    def __init__(self, chicken: Chicken):
        self.chicken = chicken


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    print("=== wirecore demo ===\n")

    print("1. Wiring with qualifiers and scopes:")
    print("-" * 30)
    config = ContextConfig()
    config.bind_instance(Config, Config("demo-app", debug=True))
    config.bind_instance(str, "postgresql://localhost/demo", Id("dsn"))
    config.bind_type(Database, PostgresDB, Id("primary"))
    config.bind_type(Database, InMemoryDB, Id("cache"))
    config.bind_type(AuditLog, AuditLog)
    config.bind_type(UserService, UserService)

    context = config.finalize()
    service = context.get(UserService)
    print(service.primary.query("SELECT 1"))
    print(service.find_user(42))
    print(f"Audit log shared: {context.get(AuditLog) is service.audit}")
    print(f"Audit entries: {service.audit.entries}")

    print("\n2. Deferred dependencies:")
    print("-" * 30)
    config = ContextConfig()
    config.bind_type(Parent, Parent)
    config.bind_type(Child, Child)
    parent = config.finalize().get(Parent)
    child = parent.children.get()
    print(f"Resolved lazily: {type(child).__name__} of {type(child.parent).__name__}")

    print("\n3. Cyclic dependency detection:")
    print("-" * 30)
    config = ContextConfig()
    config.bind_type(Chicken, Chicken)
    config.bind_type(Egg, Egg)
    try:
        config.finalize()
        print("This shouldn't print - the cycle should be caught by finalize()")
    except CyclicDependencyError as e:
        print(f"Caught expected cyclic dependency: {e}")

    print("\n4. Missing dependency detection:")
    print("-" * 30)
    config = ContextConfig()
    config.bind_type(UserService, UserService)
    try:
        config.finalize()
        print("This shouldn't print - the missing dependency should be caught by finalize()")
    except DependencyNotFoundError as e:
        print(f"Caught expected missing dependency: {e}")

    print("\nDemo completed successfully!")


if __name__ == "__main__":
    main()
