"""Tests for the scheduler service."""

import pytest
from unittest.mock import Mock

from polyarb.services.scheduler import SchedulerService


@pytest.fixture
def mock_settings():
    settings = Mock()
    settings.timezone = "UTC"
    return settings


def noop():
    pass


class TestSchedulerService:
    """Tests for SchedulerService (jobs are inspected without starting)."""

    def test_interval_job_never_overlaps(self, mock_settings):
        service = SchedulerService(settings=mock_settings)

        service.add_interval_job("refresh", noop, seconds=60)

        job = service.scheduler.get_job("refresh")
        assert job.max_instances == 1
        assert job.coalesce is True

    def test_cron_job(self, mock_settings):
        service = SchedulerService(settings=mock_settings)

        service.add_job("refresh", noop, "*/5 * * * *")

        job = service.scheduler.get_job("refresh")
        assert job.max_instances == 1
        assert job.coalesce is True

    def test_invalid_cron(self, mock_settings):
        service = SchedulerService(settings=mock_settings)
        with pytest.raises(ValueError):
            service.add_job("refresh", noop, "* * *")

    def test_invalid_interval(self, mock_settings):
        service = SchedulerService(settings=mock_settings)
        with pytest.raises(ValueError):
            service.add_interval_job("refresh", noop, seconds=0)

    def test_setup_from_config_interval(self, mock_settings):
        service = SchedulerService(
            settings=mock_settings,
            config={"scheduler": {"refresh": {"interval_seconds": 30}}},
        )

        service.setup_from_config(noop)

        assert [j["name"] for j in service.get_jobs()] == ["refresh"]

    def test_setup_from_config_disabled(self, mock_settings):
        service = SchedulerService(
            settings=mock_settings,
            config={"scheduler": {"refresh": {"enabled": False}}},
        )

        service.setup_from_config(noop)

        assert service.get_jobs() == []

    def test_remove_job(self, mock_settings):
        service = SchedulerService(settings=mock_settings)
        service.add_interval_job("refresh", noop, seconds=60)

        assert service.remove_job("refresh")
        assert not service.remove_job("refresh")
