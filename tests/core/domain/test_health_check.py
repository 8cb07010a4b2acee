import pytest

from core.domain.backend import Backend
from core.domain.configuration import Configuration
from core.domain.health_check import HealthCheck
from core.domain.health_check_method import HealthCheckMethod
from core.domain.interval import Interval, TimeUnit


def test_health_check_defaults_to_thirty_second_interval() -> None:
    check = HealthCheck(method=HealthCheckMethod.PING)

    assert check.interval == Interval(30, TimeUnit.SECONDS)
    assert check.interval.to_milliseconds() == 30_000


def test_http_health_check_requires_endpoint() -> None:
    with pytest.raises(ValueError, match="requires an endpoint"):
        HealthCheck(method=HealthCheckMethod.HTTP)


def test_health_check_rejects_out_of_range_port() -> None:
    with pytest.raises(ValueError, match="Port out of range"):
        HealthCheck(method=HealthCheckMethod.PING, port=70_000)


def test_probe_timeout_is_strictly_shorter_than_interval() -> None:
    short = HealthCheck(method=HealthCheckMethod.PING, interval=Interval(200, TimeUnit.MILLISECONDS))
    long = HealthCheck(method=HealthCheckMethod.PING, interval=Interval(1, TimeUnit.HOURS))

    assert short.probe_timeout_seconds(10.0, 0.9) == pytest.approx(0.18)
    assert short.probe_timeout_seconds(10.0, 0.9) < short.interval.to_seconds()
    assert long.probe_timeout_seconds(10.0, 0.9) == 10.0


def test_method_default_ports() -> None:
    assert HealthCheckMethod.HTTP.default_port == 80
    assert HealthCheckMethod.PING.default_port is None


def test_configuration_iterates_checks_with_stable_keys() -> None:
    configuration = Configuration(
        backends=(
            Backend(
                name="Foo",
                host="foo.example.com",
                health=(
                    HealthCheck(method=HealthCheckMethod.HTTP, endpoint="/status"),
                    HealthCheck(method=HealthCheckMethod.PING),
                ),
            ),
            Backend(name="Bar", host="bar.example.com"),
        )
    )

    keys = [key for key, _, _ in configuration.iter_health_checks()]

    assert keys == ["Foo#0", "Foo#1"]
    assert configuration.count_health_checks() == 2


def test_empty_configuration_has_no_checks() -> None:
    assert list(Configuration().iter_health_checks()) == []
