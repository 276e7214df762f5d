"""Tests for module identifier parsing."""

import pytest

from errors import InvalidName
from versioning.models import ModuleName
from versioning.parser import is_valid_module_name, parse_archive_filename, parse_module_name


class TestParseModuleName:
    """parse_module_name accepts owner-name and owner/name forms only."""

    @pytest.mark.parametrize("raw, owner, name", [
        ("pmtacceptance-stdlib", "pmtacceptance", "stdlib"),
        ("pmtacceptance/stdlib", "pmtacceptance", "stdlib"),
        ("PuppetLabs-apache", "PuppetLabs", "apache"),
        ("user1-my_module2", "user1", "my_module2"),
        ("  pmtacceptance-java  ", "pmtacceptance", "java"),
    ])
    def test_valid_names(self, raw, owner, name):
        assert parse_module_name(raw) == ModuleName(owner=owner, name=name)

    @pytest.mark.parametrize("raw", [
        "puppet",
        "",
        "-stdlib",
        "owner-",
        "owner-Stdlib",
        "owner-1stdlib",
        "owner--stdlib",
        "own.er-stdlib",
        "owner-std-lib",
        "ha ha cant parse",
    ])
    def test_invalid_names_raise(self, raw):
        with pytest.raises(InvalidName) as excinfo:
            parse_module_name(raw)
        assert excinfo.value.raw == raw
        assert str(excinfo.value) == f"Could not install module with invalid name: {raw}"

    def test_invalid_name_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_module_name("puppet")

    def test_parse_is_deterministic(self):
        assert parse_module_name("pmtacceptance-apollo") == parse_module_name("pmtacceptance-apollo")
        assert hash(parse_module_name("pmtacceptance/apollo")) == hash(parse_module_name("pmtacceptance-apollo"))

    def test_name_forms(self):
        module = parse_module_name("pmtacceptance/apollo")
        assert module.full_name == "pmtacceptance-apollo"
        assert module.forge_name == "pmtacceptance/apollo"
        assert str(module) == "pmtacceptance-apollo"

    def test_is_valid_module_name(self):
        assert is_valid_module_name("pmtacceptance-stdlib")
        assert not is_valid_module_name("puppet")


class TestParseArchiveFilename:
    """Release archive names carry the module and its version."""

    def test_valid_archive(self):
        module, version = parse_archive_filename("/tmp/cache/pmtacceptance-stdlib-1.0.0.tar.gz")
        assert module == ModuleName("pmtacceptance", "stdlib")
        assert version == "1.0.0"

    def test_prerelease_archive(self):
        _, version = parse_archive_filename("pmtacceptance-java-1.7.1-rc1.tgz")
        assert version == "1.7.1-rc1"

    @pytest.mark.parametrize("path", [
        "/tmp/sourcedir/notparseable",
        "pmtacceptance-stdlib.tar.gz",
        "puppet-1.0.0.tar.gz",
        "pmtacceptance-stdlib-1.0.tar.gz",
    ])
    def test_invalid_archive_carries_full_path(self, path):
        with pytest.raises(InvalidName) as excinfo:
            parse_archive_filename(path)
        assert str(excinfo.value) == f"Could not install module with invalid name: {path}"
