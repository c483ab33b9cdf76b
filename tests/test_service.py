import pytest

from rings.erx import Erx
from rings.service import (
    SHARED_SERVICE_NAME,
    Service,
    ServiceManager,
    register_to_shared,
    shared_service_manager,
)


class AuthService(Service):
    name = "auth"

    def __init__(self):
        self.initialized = False
        self.released = False

    def initialize(self):
        self.initialized = True

    def release(self):
        self.released = True


class HomeService(Service):
    name = "Home"

    def initialize(self):
        pass

    def release(self):
        pass


class SharedProbeService(Service):
    name = "testservice"

    def initialize(self):
        self.started = True

    def release(self):
        self.started = False


def test_register_initializes_and_returns_instance():
    manager = ServiceManager("m")
    service = manager.register(AuthService)
    assert isinstance(service, AuthService)
    assert service.initialized is True
    assert manager.managed_services() == [service]


def test_register_duplicate_raises():
    manager = ServiceManager("m")
    manager.register(AuthService)
    with pytest.raises(Erx) as info:
        manager.register(AuthService)
    assert info.value.message == "Service 'auth' already registered!"
    assert len(manager.managed_services()) == 1


def test_get_returns_registered_instance():
    manager = ServiceManager("m")
    auth = manager.register(AuthService)
    assert manager.get(AuthService) is auth
    assert manager.get(HomeService) is None


def test_unregister_releases_and_removes():
    manager = ServiceManager("m")
    auth = manager.register(AuthService)
    home = manager.register(HomeService)
    manager.unregister(AuthService)
    assert auth.released is True
    assert manager.managed_services() == [home]
    assert manager.get(AuthService) is None


def test_unregister_unknown_raises():
    manager = ServiceManager("m")
    with pytest.raises(Erx) as info:
        manager.unregister(HomeService)
    assert info.value.message == "Service 'Home' was not registered!"


def test_managed_services_is_a_snapshot():
    manager = ServiceManager("m")
    manager.register(AuthService)
    snapshot = manager.managed_services()
    snapshot.clear()
    assert len(manager.managed_services()) == 1


def test_default_ready_and_schedules():
    manager = ServiceManager("m")
    service = manager.register(HomeService)
    assert manager.get(HomeService) is service
    assert service.ready() is True
    assert service.schedules() == []


def test_manager_name():
    assert ServiceManager("custom").name == "custom"


def test_shared_manager_is_single():
    first = shared_service_manager()
    assert first is shared_service_manager()
    assert first.name == SHARED_SERVICE_NAME


def test_register_to_shared():
    service = register_to_shared(SharedProbeService)
    try:
        assert service.started is True
        assert shared_service_manager().get(SharedProbeService) is service
    finally:
        shared_service_manager().unregister(SharedProbeService)
    assert shared_service_manager().get(SharedProbeService) is None