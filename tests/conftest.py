"""Shared fixtures for plansmith tests."""

import pytest

from plansmith.domain.descriptors import DescriptorRegistry, TaskDescriptor, builtin_descriptors
from plansmith.domain.task import TestConfig

from .factories import background, task


@pytest.fixture(autouse=True)
def plansmith_home(tmp_path, monkeypatch):
    """Keep settings out of the real home directory."""
    home = tmp_path / "plansmith-home"
    monkeypatch.setenv("PLANSMITH_HOME", str(home))
    return home


@pytest.fixture
def registry() -> DescriptorRegistry:
    """Built-in glue descriptors plus a few plain task types."""
    return DescriptorRegistry(builtin_descriptors()).merged(
        [
            TaskDescriptor(name="sleep", aliases=["wait"]),
            TaskDescriptor(name="http_request"),
            TaskDescriptor(name="check_status"),
        ]
    )


@pytest.fixture
def sample_config() -> TestConfig:
    """A test using every container kind in both forests."""
    return TestConfig(
        id="smoke",
        name="Smoke test",
        timeout="30m",
        test_vars={"endpoint": "http://localhost"},
        tasks=[
            task(
                "run_tasks",
                task("sleep", title="Warm up", config={"duration": "5s"}),
                task("http_request", task_id="fetch", config_vars={"url": "endpoint"}),
                title="Setup",
            ),
            background(
                bg=task("check_status", title="Watch"),
                fg=task("run_task_matrix", task("sleep")),
            ),
            task("run_tasks_concurrent", task("sleep"), task("sleep")),
        ],
        cleanup_tasks=[task("run_task_options", task("http_request", title="Teardown"))],
    )
