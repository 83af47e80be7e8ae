# -*- coding: utf-8 -*-
import gc
import threading
import unittest
from time import sleep
from unittest import mock

from swarm_secret_rotator import *

from swarm_fakes import FakeProvider, FakeSwarm


def wait_for(predicate, timeout=5.0):
    waited = 0.0
    while not predicate() and waited < timeout:
        sleep(0.01)
        waited += 0.01
    return predicate()


class TestRotationScheduler(unittest.TestCase):

    def setUp(self):
        self.provider = FakeProvider({"secret/data/db-pass": {"value": "old"},
                                      "secret/data/api-key": {"value": "k1"}})
        self.tracker = SecretTracker()
        self.swarm = FakeSwarm()
        self.rotator = SecretRotator(self.provider, self.tracker, self.swarm)
        self.scheduler = RotationScheduler([self.provider], self.tracker, self.rotator, interval=60)
        for name, value in [("db-pass", b"old"), ("api-key", b"k1")]:
            self.swarm.add_secret(name, value)
            self.swarm.add_service(f"svc-{name}", [name])
            self.tracker.track(name, f"secret/data/{name}", "value", f"svc-{name}", value,
                               provider="fake")

    def tearDown(self):
        self.scheduler.stop(timeout=5)

    def test_no_changes(self):
        assert self.scheduler.run_cycle() == []
        assert self.swarm.created == []
        assert self.scheduler.stats.cycles == 1
        assert self.scheduler.stats.last_heartbeat is not None

    def test_changed_secret_rotated(self):
        self.provider.records["secret/data/db-pass"] = {"value": "new"}

        rotated = self.scheduler.run_cycle()

        assert rotated == ["db-pass"]
        new_name = self.swarm.service_refs("svc-db-pass")[0]["SecretName"]
        assert new_name.startswith("db-pass-")
        assert "db-pass" not in self.swarm.secret_names()
        assert self.tracker.get("db-pass").last_hash == fingerprint(b"new")
        assert self.scheduler.stats.rotations == 1

        assert self.scheduler.run_cycle() == [], "Same value must not rotate twice"

    def test_check_error_isolated(self):
        self.provider.failing.add("secret/data/db-pass")
        self.provider.records["secret/data/api-key"] = {"value": "k2"}

        rotated = self.scheduler.run_cycle()

        assert rotated == ["api-key"]
        assert self.scheduler.stats.check_errors == 1
        assert self.tracker.get("db-pass").last_hash == fingerprint(b"old")

    def test_rotation_error_isolated(self):
        self.provider.records["secret/data/db-pass"] = {"value": "new"}
        self.provider.records["secret/data/api-key"] = {"value": "k2"}
        self.swarm.fail_update_for.add("svc-db-pass")

        rotated = self.scheduler.run_cycle()

        assert rotated == ["api-key"]
        assert self.scheduler.stats.rotation_errors == 1
        assert self.tracker.get("db-pass").last_hash == fingerprint(b"old")
        assert "db-pass" in self.swarm.secret_names()

    def test_failed_rotation_retried_next_cycle(self):
        self.provider.records["secret/data/db-pass"] = {"value": "new"}
        self.swarm.fail_update_for.add("svc-db-pass")
        assert self.scheduler.run_cycle() == []

        self.swarm.fail_update_for.clear()
        assert self.scheduler.run_cycle() == ["db-pass"]

    def test_unexpected_check_error_isolated(self):
        self.provider.records["secret/data/api-key"] = {"value": "k2"}
        original = self.provider.check_secret_changed

        def check(secret_info):
            if secret_info.secret_name == "db-pass":
                raise ValueError("malformed service account info")
            return original(secret_info)

        with mock.patch.object(self.provider, "check_secret_changed", side_effect=check):
            rotated = self.scheduler.run_cycle()

        assert rotated == ["api-key"], "Remaining secrets must still be checked"
        assert self.scheduler.stats.check_errors == 1
        assert self.scheduler.stats.cycles == 1

    def test_unexpected_rotation_error_isolated(self):
        self.provider.records["secret/data/db-pass"] = {"value": "new"}
        self.provider.records["secret/data/api-key"] = {"value": "k2"}
        original = self.rotator.rotate_secret

        def rotate(secret_info):
            if secret_info.secret_name == "db-pass":
                raise KeyError("Version")
            return original(secret_info)

        with mock.patch.object(self.rotator, "rotate_secret", side_effect=rotate):
            rotated = self.scheduler.run_cycle()

        assert rotated == ["api-key"]
        assert self.scheduler.stats.rotation_errors == 1
        assert self.scheduler.stats.rotations == 1
        assert self.tracker.get("db-pass").last_hash == fingerprint(b"old")

    def test_providers_without_rotation_skipped(self):
        provider = FakeProvider(dict(self.provider.records), rotation=False)
        scheduler = RotationScheduler([provider], self.tracker, self.rotator, interval=60)
        provider.records["secret/data/db-pass"] = {"value": "new"}

        assert scheduler.run_cycle() == []
        assert provider.reads == [], "Provider must never be polled"

    def test_unknown_provider_skipped(self):
        self.tracker.track("other", "secret/data/other", "value", "svc", b"v", provider="gone")
        self.provider.records["secret/data/db-pass"] = {"value": "new"}
        assert self.scheduler.run_cycle() == ["db-pass"]

    def test_snapshot_not_locked_during_io(self):
        blocked = []

        def slow_read(path, original=self.provider.read_record):
            # registering a secret from another thread must not block on the cycle
            t = threading.Thread(target=self.tracker.track,
                                 args=["late", "secret/data/late", "value", "svc", b"v"],
                                 kwargs={"provider": "fake"})
            t.start()
            t.join(2)
            if t.is_alive():
                blocked.append(path)
            return original(path)

        with mock.patch.object(self.provider, "read_record", side_effect=slow_read):
            self.scheduler.run_cycle()
        assert "late" in self.tracker
        assert blocked == [], "track blocked while a cycle was reading"

    def test_invalid_interval(self):
        with self.assertRaises(AssertionError):
            RotationScheduler([self.provider], self.tracker, self.rotator, interval=0)

    def test_background_thread(self):
        scheduler = RotationScheduler([self.provider], self.tracker, self.rotator, interval=0.02)
        scheduler.start()
        try:
            assert scheduler.running
            self.provider.records["secret/data/db-pass"] = {"value": "new"}
            assert wait_for(lambda: scheduler.stats.rotations == 1), "Rotation never happened"
            assert wait_for(lambda: scheduler.stats.cycles >= 3)
        finally:
            scheduler.stop(timeout=5)
        assert not scheduler.running
        cycles = scheduler.stats.cycles
        sleep(0.1)
        assert scheduler.stats.cycles == cycles, "Cycles ran after stop"

    def test_stop_waits_for_inflight_rotation(self):
        entered = threading.Event()
        release = threading.Event()
        rotator = mock.Mock()

        def blocking_rotate(secret_info):
            entered.set()
            release.wait(5)
            return f"{secret_info.secret_name}-1"

        rotator.rotate_secret.side_effect = blocking_rotate
        scheduler = RotationScheduler([self.provider], self.tracker, rotator, interval=0.02)
        self.provider.records["secret/data/db-pass"] = {"value": "new"}
        scheduler.start()

        assert entered.wait(5), "Rotation never started"
        stopper = threading.Thread(target=scheduler.stop, kwargs={"timeout": 5})
        stopper.start()
        sleep(0.1)
        assert stopper.is_alive(), "stop must wait for the rotation in flight"

        release.set()
        stopper.join(5)
        assert not stopper.is_alive()
        assert scheduler.stats.rotations >= 1

    def test_thread_exits_when_scheduler_collected(self):
        scheduler = RotationScheduler([self.provider], self.tracker, self.rotator, interval=0.02)
        scheduler.start()
        thread = scheduler._thread
        del scheduler
        gc.collect()
        thread.join(5)
        assert not thread.is_alive()
