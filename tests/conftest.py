"""Shared fixtures: a scripted distribution service and a sample project file."""

import asyncio
import copy
import json

import pytest

from constants import Constants
from registry.client import DistributionServiceClient, PackageListing, PackageVersionReport

CORE_ID = "0Ho000000000002AAA"
UTILS_ID = "0Ho000000000003AAA"
PLATFORM_ID = "0Ho000000000004AAA"
LOGGING_ID = "0Ho000000000005AAA"

PLATFORM_VERSION_ID = "04t000000000001AAA"
CORE_VERSION_ID = "04t000000000002AAA"
LOGGING_VERSION_ID = "04t000000000005AAA"

SAMPLE_PROJECT = {
    "packageDirectories": [
        {
            "path": "force-app",
            "default": True,
            "package": "App",
            "versionNumber": "2.0.0.NEXT",
            "dependencies": [
                {"package": "Core", "versionNumber": "1.2.0.LATEST"},
                {"package": "Utils", "versionNumber": "3.1.0.LATEST"},
                {"versionNumber": "1.0.0.LATEST", "package": "Platform"},
                {"package": "Legacy@1.0.0-1"},
            ],
        },
        {"path": "unpackaged"},
    ],
    "namespace": "",
    "sourceApiVersion": "59.0",
    "packageAliases": {
        "App": "0Ho000000000001AAA",
        "Core": CORE_ID,
        "Utils": UTILS_ID,
        "Platform": PLATFORM_ID,
        "Platform@1.1.0-4": PLATFORM_VERSION_ID,
        "Legacy@1.0.0-1": "04t000000000009AAA",
    },
}


class FakeServiceClient(DistributionServiceClient):
    """Scripted DistributionServiceClient recording every call."""

    def __init__(self, reports=None, listing=None, failures=None, delays=None):
        self.reports = reports or {}
        self.listing = listing if listing is not None else []
        self.failures = failures or {}
        self.delays = delays or {}
        self.report_calls = []
        self.listing_calls = 0
        self.cancelled = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.started = False
        self.stopped = False

    async def report(self, package_version_id, verbose=False):
        self.report_calls.append((package_version_id, verbose))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(package_version_id)
            if delay:
                try:
                    await asyncio.sleep(delay)
                except asyncio.CancelledError:
                    self.cancelled.append(package_version_id)
                    raise
            if package_version_id in self.failures:
                raise self.failures[package_version_id]
            return copy.deepcopy(self.reports.get(package_version_id, PackageVersionReport()))
        finally:
            self.in_flight -= 1

    async def list_packages(self):
        self.listing_calls += 1
        if isinstance(self.listing, Exception):
            raise self.listing
        return list(self.listing)

    async def start(self):
        self.started = True

    async def stop(self):
        self.stopped = True


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path):
    """Keep DEPUPDATE_* variables and a stray .depupdate.yml out of every test."""
    for name in (
        Constants.ENV_CONFIG,
        Constants.ENV_TARGET_DEV_HUB,
        Constants.ENV_INSTANCE_URL,
        Constants.ENV_ACCESS_TOKEN,
        Constants.ENV_ACCESS_TOKEN_COMMAND,
        Constants.ENV_API_VERSION,
        Constants.ENV_LOG_LEVEL,
        Constants.ENV_LOG_FORMAT,
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def fake_client():
    """Factory for FakeServiceClient instances."""
    return FakeServiceClient


@pytest.fixture
def sample_document():
    return copy.deepcopy(SAMPLE_PROJECT)


@pytest.fixture
def project_file(tmp_path, sample_document):
    path = tmp_path / "sfdx-project.json"
    path.write_text(json.dumps(sample_document, indent=4), encoding="utf-8")
    return path


@pytest.fixture
def graph_client(fake_client):
    """Platform 1.1.0.4 depending on a newer Core and a not-yet-declared Logging."""
    return fake_client(
        reports={
            PLATFORM_VERSION_ID: PackageVersionReport(
                package_id=PLATFORM_ID,
                version="1.1.0.4",
                subscriber_version_id=PLATFORM_VERSION_ID,
                dependency_ids=[CORE_VERSION_ID, LOGGING_VERSION_ID],
            ),
            CORE_VERSION_ID: PackageVersionReport(
                package_id=CORE_ID, version="1.3.0.2", subscriber_version_id=CORE_VERSION_ID
            ),
            LOGGING_VERSION_ID: PackageVersionReport(
                package_id=LOGGING_ID, version="0.4.0.1", subscriber_version_id=LOGGING_VERSION_ID
            ),
        },
        listing=[
            PackageListing(package_id=CORE_ID, name="Core"),
            PackageListing(package_id=LOGGING_ID, name="Logging"),
        ],
    )
