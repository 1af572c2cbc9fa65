import pytest

from rewire import Container, RewireInvalidCallableError, RewireUnresolvableParameterError
from tests.services import FileLogger, Logger, Repository


class Reporter:
    def __init__(self, repo: Repository) -> None:
        self.repo = repo

    def run(self, logger: Logger, title: str = "daily") -> str:
        logger.log(title)
        return f"{title}:{type(logger).__name__}"

    def summary(self) -> Repository:
        return self.repo


def build_report(repo: Repository, title: str = "weekly") -> tuple[Repository, str]:
    return repo, title


def test_call_plain_function_injects_dependencies(container: Container) -> None:
    repo, title = container.call(build_report)

    assert isinstance(repo, Repository)
    assert title == "weekly"


def test_call_passes_parameters_by_name(container: Container) -> None:
    shared = Repository()

    repo, title = container.call(build_report, {"repo": shared, "title": "monthly"})

    assert repo is shared
    assert title == "monthly"


def test_call_lambda_with_primitive_override(container: Container) -> None:
    assert container.call(lambda amount: amount * 2, {"amount": 21}) == 42


def test_call_missing_primitive_faults(container: Container) -> None:
    def needs_name(name: str) -> str:
        return name

    with pytest.raises(RewireUnresolvableParameterError):
        container.call(needs_name)


def test_call_callable_object(container: Container) -> None:
    class Handler:
        def __call__(self, repo: Repository) -> Repository:
            return repo

    assert isinstance(container.call(Handler()), Repository)


class TestMethodTargets:
    def test_instance_and_method_pair(self, container: Container) -> None:
        container.bind(Logger, FileLogger)
        reporter = Reporter(Repository())

        assert container.call((reporter, "run")) == "daily:FileLogger"

    def test_class_and_method_pair_resolves_instance(self, container: Container) -> None:
        container.bind(Logger, FileLogger)

        assert container.call((Reporter, "run"), {"title": "adhoc"}) == "adhoc:FileLogger"

    def test_bound_method(self, container: Container) -> None:
        reporter = container.make(Reporter)

        assert container.call(reporter.summary) is reporter.repo

    def test_identifier_at_method_reference(self, container: Container) -> None:
        container.bind(Logger, FileLogger)
        container.singleton("reports", Reporter)

        assert container.call("reports@run") == "daily:FileLogger"

    def test_default_method_for_identifier(self, container: Container) -> None:
        reporter = Reporter(Repository())
        container.instance("reports", reporter)

        assert container.call("reports", default_method="summary") is reporter.repo

    def test_default_method_for_class(self, container: Container) -> None:
        assert isinstance(container.call(Reporter, default_method="summary"), Repository)

    def test_reference_without_method_faults(self, container: Container) -> None:
        container.bind("reports", Reporter)

        with pytest.raises(RewireInvalidCallableError, match="Method not provided"):
            container.call("reports")

    def test_missing_method_faults(self, container: Container) -> None:
        with pytest.raises(RewireInvalidCallableError, match="no callable method"):
            container.call((Reporter(Repository()), "missing"))


class TestMethodBindings:
    def test_method_binding_replaces_call(self, container: Container) -> None:
        container.bind_method((Reporter, "run"), lambda reporter, c: f"bound:{type(reporter).__name__}")

        assert container.has_method_binding("Reporter@run")
        assert container.call((Reporter, "run")) == "bound:Reporter"

    def test_method_binding_by_string_key(self, container: Container) -> None:
        container.bind_method("Reporter@summary", lambda reporter: "custom")
        reporter = Reporter(Repository())

        assert container.call((reporter, "summary")) == "custom"
        assert container.call_method_binding("Reporter@summary", reporter) == "custom"


def test_wrap_defers_call(container: Container) -> None:
    calls: list[Repository] = []

    def record(repo: Repository) -> None:
        calls.append(repo)

    wrapped = container.wrap(record)
    assert calls == []

    wrapped()

    assert len(calls) == 1
    assert isinstance(calls[0], Repository)


def test_wrap_forwards_parameters(container: Container) -> None:
    wrapped = container.wrap(build_report, {"title": "quarterly"})

    assert wrapped()[1] == "quarterly"


def test_call_restores_override_stack(container: Container) -> None:
    with pytest.raises(RewireUnresolvableParameterError):
        container.call(lambda value: value)

    assert container._pipeline.override_depth == 0
    assert container._pipeline.build_stack == ()


def test_method_binding_rejects_identifier_target(container: Container) -> None:
    with pytest.raises(RewireInvalidCallableError, match=r"\[reports\] for \[run\]"):
        container.bind_method(("reports", "run"), lambda reporter: None)

    assert not container.has_method_binding("str@run")
