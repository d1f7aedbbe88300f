"""Unit tests for probes/storage.py — command output parsing, no real LVM/df."""

from __future__ import annotations

import subprocess

from conftest import FakeCompleted

from probes import storage


class TestGlusterd:
    def test_running(self, fake_run):
        fake_run({"systemctl": FakeCompleted(stdout="active\n")})
        assert storage.check_glusterd_running().passed

    def test_not_running(self, fake_run):
        fake_run({"systemctl": FakeCompleted(stdout="inactive\n", returncode=3)})
        result = storage.check_glusterd_running()
        assert not result.passed
        assert result.message == "glusterd is not running"

    def test_timeout_is_a_failure(self, fake_run):
        fake_run({"systemctl": subprocess.TimeoutExpired(["systemctl"], 10)})
        result = storage.check_glusterd_running(timeout_seconds=10)
        assert not result.passed
        assert "timed out (10s)" in result.message


class TestMountPoints:
    DF = (
        "Use% Mounted on\n"
        " 95% /gluster/brick1\n"
        " 87% /gluster/brick2\n"
        " 99% /boot\n"
        " 10% /gluster/brick3\n"
    )

    def test_major_threshold(self, fake_run):
        fake_run({"df": FakeCompleted(stdout=self.DF)})
        result = storage.check_mount_point_sizes(90)
        assert not result.passed
        assert result.message == "Mount point usage is above 90%: /gluster/brick1 (95%)"

    def test_minor_threshold_catches_more(self, fake_run):
        fake_run({"df": FakeCompleted(stdout=self.DF)})
        result = storage.check_mount_point_sizes(85)
        assert "/gluster/brick1 (95%)" in result.message
        assert "/gluster/brick2 (87%)" in result.message
        assert "/boot" not in result.message

    def test_all_below(self, fake_run):
        fake_run({"df": FakeCompleted(stdout="Use% Mounted on\n 10% /gluster/brick1\n")})
        assert storage.check_mount_point_sizes(90).passed


class TestLvPools:
    LVS = (
        "  vg_gluster,tp_brick1,twi-aotz--,91.20,10.00\n"
        "  vg_gluster,brick1,Vwi-aotz--,91.20,\n"
        "  vg_gluster,tp_brick2,twi-aotz--,50.00,82.50\n"
    )

    def test_only_thin_pools_are_checked(self, fake_run):
        fake_run({"lvs": FakeCompleted(stdout=self.LVS)})
        result = storage.check_lv_pool_sizes(90)
        assert not result.passed
        assert result.message == "LV pool usage is above 90%: vg_gluster/tp_brick1 data 91.2%"

    def test_metadata_usage_counts(self, fake_run):
        fake_run({"lvs": FakeCompleted(stdout=self.LVS)})
        result = storage.check_lv_pool_sizes(80)
        assert "vg_gluster/tp_brick2 metadata 82.5%" in result.message

    def test_lvs_failure(self, fake_run):
        fake_run({"lvs": FakeCompleted(stderr="permission denied", returncode=5)})
        result = storage.check_lv_pool_sizes(90)
        assert not result.passed
        assert result.detail == "permission denied"


class TestVgSizes:
    def test_low_free_space(self, fake_run):
        fake_run({"vgs": FakeCompleted(stdout="  vg_a,100.00,4.00\n  vg_b,200.00,100.00\n")})
        result = storage.check_vg_sizes(5)
        assert not result.passed
        assert result.message == "VG free space is below 5%: vg_a (4.0% free)"

    def test_enough_free_space(self, fake_run):
        fake_run({"vgs": FakeCompleted(stdout="  vg_a,100.00,40.00\n")})
        assert storage.check_vg_sizes(10).passed


class TestDockerPool:
    def test_over_threshold(self, fake_run):
        calls = fake_run({"lvs": FakeCompleted(stdout="  92.10,12.00\n")})
        result = storage.check_docker_pool(90)
        assert not result.passed
        assert result.message == "Docker pool usage is above 90%: data 92.1%, metadata 12%"
        assert calls[0][-1] == storage.DOCKER_POOL

    def test_below_threshold(self, fake_run):
        fake_run({"lvs": FakeCompleted(stdout="  42.00,12.00\n")})
        assert storage.check_docker_pool(80).passed

    def test_unparseable_output(self, fake_run):
        fake_run({"lvs": FakeCompleted(stdout="garbage\n")})
        result = storage.check_docker_pool(80)
        assert not result.passed
        assert "unexpected lvs output" in result.message

    def test_missing_binary(self, fake_run):
        fake_run({"lvs": FileNotFoundError("lvs")})
        result = storage.check_docker_pool(80)
        assert not result.passed
        assert result.message.startswith("could not run lvs")


class TestOpenFiles:
    def test_below_limit(self, tmp_path):
        file_nr = tmp_path / "file-nr"
        file_nr.write_text("1000\t0\t10000\n")
        assert storage.check_open_file_count(90, path=str(file_nr)).passed

    def test_above_limit(self, tmp_path):
        file_nr = tmp_path / "file-nr"
        file_nr.write_text("9500\t0\t10000\n")
        result = storage.check_open_file_count(90, path=str(file_nr))
        assert not result.passed
        assert result.message == "Open file count 9500 is above 90% of the limit 10000"

    def test_unreadable(self, tmp_path):
        result = storage.check_open_file_count(90, path=str(tmp_path / "missing"))
        assert not result.passed
        assert "could not read open file count" in result.message
