"""Tests for the dependency graph walker."""

import asyncio

import pytest

from conftest import (
    CORE_ID,
    CORE_VERSION_ID,
    LOGGING_ID,
    LOGGING_VERSION_ID,
    PLATFORM_ID,
    PLATFORM_VERSION_ID,
)
from errors import ResolutionError, ServiceRequestError
from manifest.models import AliasTable
from registry.client import PackageVersionReport
from resolution.aliases import AliasResolver
from resolution.walker import DependencyGraphWalker


def _walker(client, max_concurrency=8, aliases=None):
    table = AliasTable(aliases if aliases is not None else {"Platform": PLATFORM_ID, "Core": CORE_ID})
    return DependencyGraphWalker(client, AliasResolver(client, table), max_concurrency=max_concurrency)


def _dep_ids(count):
    return [f"04t0000000001{index:02d}AAA" for index in range(count)]


class TestWalkerResolution:
    """Successful walks."""

    def test_root_without_dependencies(self, fake_client):
        client = fake_client(reports={
            PLATFORM_VERSION_ID: PackageVersionReport(package_id=PLATFORM_ID, version="1.1.0.4"),
        })

        records = asyncio.run(_walker(client).resolve(PLATFORM_VERSION_ID))

        assert [(r.package_alias, r.package_version) for r in records] == [("Platform", "1.1.0.4")]
        assert client.report_calls == [(PLATFORM_VERSION_ID, True)]

    def test_dependencies_then_root_last(self, graph_client):
        records = asyncio.run(_walker(graph_client).resolve(PLATFORM_VERSION_ID))

        assert records[-1].package_id == PLATFORM_ID
        assert {r.package_id for r in records[:-1]} == {CORE_ID, LOGGING_ID}
        assert {r.package_alias for r in records} == {"Platform", "Core", "Logging"}

    def test_dependencies_fetched_shallow(self, graph_client):
        asyncio.run(_walker(graph_client).resolve(PLATFORM_VERSION_ID))

        assert graph_client.report_calls[0] == (PLATFORM_VERSION_ID, True)
        assert sorted(graph_client.report_calls[1:]) == [
            (CORE_VERSION_ID, False),
            (LOGGING_VERSION_ID, False),
        ]

    def test_concurrency_is_bounded(self, fake_client):
        dep_ids = _dep_ids(6)
        reports = {
            PLATFORM_VERSION_ID: PackageVersionReport(
                package_id=PLATFORM_ID, version="1.0.0.1", dependency_ids=dep_ids
            ),
        }
        for index, dep_id in enumerate(dep_ids):
            reports[dep_id] = PackageVersionReport(package_id=f"0Ho0000000001{index:02d}AAA", version="1.0.0.1")
        client = fake_client(reports=reports, delays={dep_id: 0.01 for dep_id in dep_ids})

        records = asyncio.run(_walker(client, max_concurrency=2).resolve(PLATFORM_VERSION_ID))

        assert len(records) == 7
        assert client.max_in_flight <= 2


class TestWalkerFailures:
    """Fail-fast behaviour."""

    def test_root_without_version_fails(self, fake_client):
        client = fake_client(reports={
            PLATFORM_VERSION_ID: PackageVersionReport(package_id=PLATFORM_ID, version=None),
        })
        with pytest.raises(ResolutionError) as exc_info:
            asyncio.run(_walker(client).resolve(PLATFORM_VERSION_ID))
        assert exc_info.value.package_id == PLATFORM_VERSION_ID

    def test_unknown_root_fails(self, fake_client):
        with pytest.raises(ResolutionError):
            asyncio.run(_walker(fake_client()).resolve(PLATFORM_VERSION_ID))

    def test_one_missing_dependency_fails_everything(self, fake_client):
        slow_id, broken_id = _dep_ids(2)
        client = fake_client(
            reports={
                PLATFORM_VERSION_ID: PackageVersionReport(
                    package_id=PLATFORM_ID, version="1.0.0.1", dependency_ids=[slow_id, broken_id]
                ),
                slow_id: PackageVersionReport(package_id=CORE_ID, version="1.3.0.1"),
            },
            delays={slow_id: 5},
        )

        with pytest.raises(ResolutionError) as exc_info:
            asyncio.run(_walker(client).resolve(PLATFORM_VERSION_ID))

        assert exc_info.value.package_id == broken_id
        assert client.cancelled == [slow_id]

    def test_service_error_propagates(self, fake_client):
        dep_id = _dep_ids(1)[0]
        client = fake_client(
            reports={
                PLATFORM_VERSION_ID: PackageVersionReport(
                    package_id=PLATFORM_ID, version="1.0.0.1", dependency_ids=[dep_id]
                ),
            },
            failures={dep_id: ServiceRequestError("timed out")},
        )
        with pytest.raises(ServiceRequestError):
            asyncio.run(_walker(client).resolve(PLATFORM_VERSION_ID))
