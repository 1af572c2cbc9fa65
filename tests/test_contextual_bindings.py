import pytest

from rewire import Container, RewireBindingError, RewireUnresolvableParameterError
from tests.services import (
    AuditTrail,
    Database,
    FileLogger,
    Logger,
    Mailer,
    NullLogger,
)


class TestClassDependencies:
    def test_contextual_binding_only_applies_to_anchor(self, container: Container) -> None:
        container.when(Mailer).needs(Logger).give(NullLogger)
        container.bind(Logger, FileLogger)

        assert isinstance(container.make(Mailer).logger, NullLogger)
        assert isinstance(container.make(AuditTrail).logger, FileLogger)
        assert isinstance(container.make(Logger), FileLogger)

    def test_multiple_anchors(self, container: Container) -> None:
        container.when([Mailer, AuditTrail]).needs(Logger).give(NullLogger)

        assert isinstance(container.make(Mailer).logger, NullLogger)
        assert isinstance(container.make(AuditTrail).logger, NullLogger)

    def test_contextual_factory(self, container: Container) -> None:
        shared = NullLogger()
        container.when(Mailer).needs(Logger).give(lambda c: shared)

        assert container.make(Mailer).logger is shared

    def test_contextual_override_bypasses_singleton_cache(self, container: Container) -> None:
        container.singleton(Logger, FileLogger)
        cached = container.make(Logger)
        container.when(Mailer).needs(Logger).give(NullLogger)

        mailer = container.make(Mailer)

        assert isinstance(mailer.logger, NullLogger)
        assert container.make(Logger) is cached
        assert container.make(AuditTrail).logger is cached

    def test_contextual_binding_registered_under_alias(self, container: Container) -> None:
        container.alias(Logger, "log")
        container.bind(Logger, FileLogger)
        container.when(Mailer).needs("log").give(NullLogger)

        assert isinstance(container.make(Mailer).logger, NullLogger)

    def test_contextual_binding_registered_before_alias(self, container: Container) -> None:
        container.when(Mailer).needs("log").give(NullLogger)
        container.alias(Logger, "log")
        container.bind(Logger, FileLogger)

        assert isinstance(container.make(Mailer).logger, NullLogger)

    def test_anchor_is_only_direct_constructor(self, container: Container) -> None:
        class Newsletter:
            def __init__(self, mailer: Mailer) -> None:
                self.mailer = mailer

        container.bind(Logger, FileLogger)
        container.when(Newsletter).needs(Logger).give(NullLogger)

        assert isinstance(container.make(Newsletter).mailer.logger, FileLogger)

    def test_anchor_through_alias(self, container: Container) -> None:
        container.alias(Mailer, "mailer")
        container.when("mailer").needs(Logger).give(NullLogger)

        assert isinstance(container.make(Mailer).logger, NullLogger)

    def test_give_requires_needs(self, container: Container) -> None:
        with pytest.raises(RewireBindingError):
            container.when(Mailer).give(NullLogger)


class TestPrimitiveDependencies:
    def test_primitive_by_parameter_name(self, container: Container) -> None:
        container.when(Database).needs("dsn").give("sqlite://")

        database = container.make(Database)

        assert database.dsn == "sqlite://"
        assert database.timeout == 30

    def test_primitive_factory_receives_container(self, container: Container) -> None:
        container.instance("config.dsn", "postgres://")
        container.when(Database).needs("dsn").give(lambda c: c.make("config.dsn"))

        assert container.make(Database).dsn == "postgres://"

    def test_falsy_primitive_is_used(self, container: Container) -> None:
        container.when(Database).needs("dsn").give("")
        container.when(Database).needs("timeout").give(0)

        database = container.make(Database)

        assert database.dsn == ""
        assert database.timeout == 0

    def test_parameter_override_beats_contextual_value(self, container: Container) -> None:
        container.when(Database).needs("dsn").give("sqlite://")

        assert container.make(Database, {"dsn": "mysql://"}).dsn == "mysql://"

    def test_missing_primitive_faults(self, container: Container) -> None:
        with pytest.raises(RewireUnresolvableParameterError) as exc_info:
            container.make(Database)

        assert exc_info.value.parameter == "dsn"
        assert exc_info.value.declaring is Database
        assert "Unresolvable dependency resolving [dsn] in class Database" in str(exc_info.value)

    def test_class_binding_does_not_leak_into_primitive_named_like_alias(
        self,
        container: Container,
    ) -> None:
        class ReportJob:
            def __init__(self, db: str = "primary") -> None:
                self.db = db

        container.alias(Database, "db")
        container.when(ReportJob).needs(Database).give(lambda c: "contextual-db")

        assert container.make(ReportJob).db == "primary"

    def test_primitive_named_like_alias_receives_value_given_for_it(
        self,
        container: Container,
    ) -> None:
        class ReportJob:
            def __init__(self, db: str = "primary") -> None:
                self.db = db

        container.alias(Database, "db")
        container.when(ReportJob).needs("db").give("replica")

        assert container.make(ReportJob).db == "replica"
