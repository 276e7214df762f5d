"""Shared fixtures: an in-memory forge and a recording unpacker."""

import copy

import pytest

from versioning.catalog import Repository
from installer.unpacker import Unpacker

FIXTURE_RELEASES = {
    "pmtacceptance/stdlib": [
        {"dependencies": [],
         "version": "0.0.1",
         "file": "/pmtacceptance-stdlib-0.0.1.tar.gz"},
        {"dependencies": [],
         "version": "0.0.2",
         "file": "/pmtacceptance-stdlib-0.0.2.tar.gz"},
        {"dependencies": [],
         "version": "1.0.0",
         "file": "/pmtacceptance-stdlib-1.0.0.tar.gz"},
    ],
    "pmtacceptance/java": [
        {"dependencies": [["pmtacceptance/stdlib", ">= 0.0.1"]],
         "version": "1.7.0",
         "file": "/pmtacceptance-java-1.7.0.tar.gz"},
        {"dependencies": [["pmtacceptance/stdlib", "1.0.0"]],
         "version": "1.7.1",
         "file": "/pmtacceptance-java-1.7.1.tar.gz"},
    ],
    "pmtacceptance/apollo": [
        {"dependencies": [
            ["pmtacceptance/java", "1.7.1"],
            ["pmtacceptance/stdlib", "0.0.1"],
        ],
         "version": "0.0.1",
         "file": "/pmtacceptance-apollo-0.0.1.tar.gz"},
        {"dependencies": [
            ["pmtacceptance/java", ">= 1.7.0"],
            ["pmtacceptance/stdlib", ">= 1.0.0"],
        ],
         "version": "0.0.2",
         "file": "/pmtacceptance-apollo-0.0.2.tar.gz"},
    ],
}


class FakeRepository(Repository):
    """Serves release data from a dict and records every call."""

    uri = "forge-dev.example.com"

    def __init__(self, releases):
        self.releases = releases
        self.info_calls = []
        self.retrieved = []

    def remote_dependency_info(self, module):
        self.info_calls.append(module.forge_name)
        return copy.deepcopy(self.releases.get(module.forge_name, []))

    def retrieve(self, archive_ref):
        self.retrieved.append(archive_ref)
        return f"/fake_cache{archive_ref}"


class RecordingUnpacker(Unpacker):
    """Records (path, options) instead of touching the filesystem."""

    def __init__(self):
        self.calls = []

    def run(self, archive_path, options):
        self.calls.append((archive_path, options))


@pytest.fixture
def make_repository():
    """Factory for FakeRepository instances over arbitrary release data."""
    return FakeRepository


@pytest.fixture
def repository():
    return FakeRepository(FIXTURE_RELEASES)


@pytest.fixture
def unpacker():
    return RecordingUnpacker()
