import pytest
from gui.services.service_locator import (
    services,
    ServiceAlreadyRegisteredError,
    ServiceNotFoundError,
    ServiceLocator,
)


def setup_function(_):
    services.clear()


def test_register_and_get():
    services.register("config", {"env": "test"})
    assert services.get("config")["env"] == "test"


def test_double_register_raises():
    services.register("x", 1)
    with pytest.raises(ServiceAlreadyRegisteredError):
        services.register("x", 2)
    services.register("x", 3, allow_override=True)
    assert services.get("x") == 3


def test_try_get_default():
    assert services.try_get("missing", 123) == 123


def test_unregister():
    services.register("temp", object())
    services.unregister("temp")
    with pytest.raises(ServiceNotFoundError):
        services.get("temp")


def test_get_typed():
    services.register("n", 5)
    assert services.get_typed("n", int) == 5
    with pytest.raises(TypeError):
        services.get_typed("n", str)


def test_override_context_restores_previous():
    loc = ServiceLocator()
    loc.register("bus", "real")
    with loc.override_context(bus="fake", extra=1):
        assert loc.get("bus") == "fake"
        assert loc.get("extra") == 1
    assert loc.get("bus") == "real"
    assert "extra" not in loc.list_keys()
