"""Tests for the last-applied baseline store."""

import json

import pytest

from aviatrix_transitgw.errors import RemoteOperationError
from aviatrix_transitgw.reconciler import TransitGatewayReconciler, TransitGatewayResource
from aviatrix_transitgw.state_store import StateStore


def test_missing_file_means_no_baseline(tmp_path):
    store = StateStore(tmp_path / "state" / "last-applied.json")
    assert store.load_last_applied() is None
    assert (tmp_path / "state").is_dir()


def test_save_then_load(tmp_path, make_config):
    path = tmp_path / "last-applied.json"
    store = StateStore(path)
    config = make_config(ha_subnet="10.0.1.0/24", ha_gw_size="t2.micro", tag_list=["env:prod"])

    store.save_last_applied(TransitGatewayResource(id="transit-gw", config=config))

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["id"] == "transit-gw"
    assert payload["config"]["cloud_type"] == 1
    assert payload["config_hash"]
    assert payload["timestamp"]

    loaded = store.load_last_applied()
    assert loaded.id == "transit-gw"
    assert loaded.config == config


def test_corrupt_file_is_ignored(tmp_path):
    path = tmp_path / "last-applied.json"
    path.write_text("{not json", encoding="utf-8")
    assert StateStore(path).load_last_applied() is None


def test_deleted_resource_has_no_config(tmp_path):
    store = StateStore(tmp_path / "last-applied.json")
    store.save_last_applied(TransitGatewayResource())

    loaded = store.load_last_applied()
    assert loaded.config is None
    assert not loaded.exists


class TestReconcilerBaseline:
    @pytest.fixture
    def store(self, tmp_path):
        return StateStore(tmp_path / "last-applied.json")

    @pytest.fixture
    def tracked(self, controller, store):
        return TransitGatewayReconciler(controller, state_store=store)

    def test_create_records_read_back_config(self, tracked, store, make_config):
        resource = TransitGatewayResource()
        tracked.create(resource, make_config(ha_subnet="10.0.1.0/24", ha_gw_size="t2.micro"))

        baseline = store.load_last_applied()
        assert baseline.id == "transit-gw"
        assert baseline.config == resource.config
        assert baseline.config.eip == "54.0.0.11"

    def test_update_records_new_config(self, tracked, store, make_config):
        resource = TransitGatewayResource()
        tracked.create(resource, make_config())
        old = store.load_last_applied().config

        tracked.update(resource, old, old.model_copy(update={"gw_size": "t2.large"}))
        assert store.load_last_applied().config.gw_size == "t2.large"

    def test_update_stopped_by_missing_ha_is_recorded(self, tracked, store, controller, make_config):
        resource = TransitGatewayResource()
        tracked.create(resource, make_config(ha_subnet="10.0.1.0/24", ha_gw_size="t2.micro"))
        del controller.gateways["transit-gw-hagw"]

        old = resource.config
        tracked.update(resource, old, old.model_copy(update={"ha_gw_size": "t2.large"}))
        assert store.load_last_applied().config.ha_subnet == ""

    def test_delete_leaves_empty_baseline(self, tracked, store, make_config):
        resource = TransitGatewayResource()
        tracked.create(resource, make_config())
        tracked.delete(resource)

        baseline = store.load_last_applied()
        assert baseline.id == ""
        assert baseline.config is None

    def test_read_of_gone_gateway_leaves_empty_baseline(self, tracked, store, controller, make_config):
        resource = TransitGatewayResource()
        tracked.create(resource, make_config())
        del controller.gateways["transit-gw"]

        assert tracked.read(resource) is None
        assert store.load_last_applied().config is None

    def test_failed_update_keeps_previous_baseline(self, tracked, store, controller, make_config):
        resource = TransitGatewayResource()
        tracked.create(resource, make_config())
        controller.failures["update_gateway_size"] = RuntimeError("size unavailable")

        old = resource.config
        with pytest.raises(RemoteOperationError):
            tracked.update(resource, old, old.model_copy(update={"gw_size": "t2.large"}))
        assert store.load_last_applied().config.gw_size == "t2.micro"
