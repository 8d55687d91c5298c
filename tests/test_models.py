"""Tests for adapter configuration and package record models."""

from pathlib import Path

import pytest

from licscan.models import (
    DEFAULT_ENUMERATOR_SCRIPT,
    AdapterConfig,
    EnumeratedPackage,
    PackageRecord,
    PythonVersion,
)
from licscan.utils.exceptions import EnumerationFailedError, InvalidConfigurationError


class TestAdapterConfig:
    """Test suite for AdapterConfig."""

    def test_defaults(self):
        config = AdapterConfig.from_options({})

        assert config.requirements_path == Path("requirements.txt")
        assert config.python_version is PythonVersion.PY2
        assert config.project_path is None
        assert config.prepare_no_fail is False
        assert config.fail_on_prepare_error is True
        assert config.enumerator_script == DEFAULT_ENUMERATOR_SCRIPT
        assert config.registry_url == "https://pypi.org"

    @pytest.mark.parametrize("version", ["2", "3", 2, 3, " 3 "])
    def test_valid_python_versions(self, version):
        """Both major versions are accepted, as strings or ints."""
        config = AdapterConfig.from_options({"python_version": version})

        assert config.python_version.value == str(version).strip()

    @pytest.mark.parametrize("version", ["1", "4", "3.11", "python3", ""])
    def test_invalid_python_versions(self, version):
        """Any other value fails construction."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            AdapterConfig.from_options({"python_version": version})

        assert f"Invalid python version '{version}'" in str(exc_info.value)
        assert exc_info.value.option == "python_version"

    def test_direct_construction_validates(self):
        with pytest.raises(InvalidConfigurationError):
            AdapterConfig(python_version="5")

    def test_binaries_follow_version(self):
        config = AdapterConfig.from_options({"python_version": "3"})

        assert config.python_version.pip_binary == "pip3"
        assert config.python_version.python_binary == "python3"

    def test_recognized_options(self, tmp_path):
        script = tmp_path / "enumerate.py"
        config = AdapterConfig.from_options({
            "pip_requirements_path": "requirements/base.txt",
            "project_path": str(tmp_path),
            "prepare_no_fail": True,
            "enumerator_script": str(script),
            "request_timeout": "2.5",
            "registry_url": "https://mirror.example/",
        })

        assert config.requirements_path == Path("requirements/base.txt")
        assert config.project_path == tmp_path
        assert config.prepare_no_fail is True
        assert config.fail_on_prepare_error is False
        assert config.enumerator_script == script
        assert config.request_timeout == 2.5
        assert config.registry_url == "https://mirror.example"

    def test_none_values_use_defaults(self):
        config = AdapterConfig.from_options({"python_version": None, "prepare_no_fail": None})

        assert config.python_version is PythonVersion.PY2
        assert config.prepare_no_fail is False

    @pytest.mark.parametrize("value", ["false", "true", 0, 1, "no"])
    def test_prepare_no_fail_must_be_bool(self, value):
        """Quoted or numeric flags are rejected instead of read as truthy."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            AdapterConfig.from_options({"prepare_no_fail": value})

        assert exc_info.value.option == "prepare_no_fail"

    def test_invalid_timeout(self):
        with pytest.raises(InvalidConfigurationError) as exc_info:
            AdapterConfig.from_options({"install_timeout": "soon"})

        assert exc_info.value.option == "install_timeout"


class TestEnumeratedPackage:
    """Schema checks for enumerator records."""

    def test_valid_record(self):
        package = EnumeratedPackage.from_dict({
            "name": "flask",
            "version": "2.0.0",
            "dependencies": ["werkzeug"],
            "location": "/venv/lib",
        })

        assert package == EnumeratedPackage("flask", "2.0.0", ["werkzeug"], "/venv/lib")

    def test_missing_fields(self):
        with pytest.raises(EnumerationFailedError) as exc_info:
            EnumeratedPackage.from_dict({"name": "flask", "version": "2.0.0"})

        assert "dependencies, location" in str(exc_info.value)

    @pytest.mark.parametrize("record", [
        {"name": 1, "version": "2.0.0", "dependencies": [], "location": "/venv"},
        {"name": "flask", "version": None, "dependencies": [], "location": "/venv"},
        {"name": "flask", "version": "2.0.0", "dependencies": "werkzeug", "location": "/venv"},
        {"name": "flask", "version": "2.0.0", "dependencies": [1], "location": "/venv"},
    ])
    def test_wrong_types(self, record):
        with pytest.raises(EnumerationFailedError):
            EnumeratedPackage.from_dict(record)

    def test_non_object_record(self):
        with pytest.raises(EnumerationFailedError):
            EnumeratedPackage.from_dict(["flask", "2.0.0"])


class TestPackageRecord:
    """Test suite for PackageRecord."""

    def test_record_is_immutable(self):
        metadata = {"license": "MIT"}
        record = PackageRecord("flask", "2.0.0", {"werkzeug"}, Path("/venv/lib/flask"), metadata)
        metadata["license"] = "GPL"

        assert record.license_metadata["license"] == "MIT"
        assert record.children == frozenset({"werkzeug"})
        with pytest.raises(TypeError):
            record.license_metadata["license"] = "GPL"
        with pytest.raises(AttributeError):
            record.name = "django"

    def test_record_is_hashable(self):
        first = PackageRecord("flask", "2.0.0", {"werkzeug"}, Path("/venv/lib/flask"), {"license": "MIT"})
        second = PackageRecord("flask", "2.0.0", {"werkzeug"}, Path("/venv/lib/flask"), {"license": "MIT"})

        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_license_from_license_field(self):
        record = PackageRecord("flask", "2.0.0", license_metadata={"license": "MIT"})

        assert record.license_names == ["MIT"]

    def test_license_expression_preferred(self):
        record = PackageRecord("flask", "2.0.0", license_metadata={
            "license_expression": "BSD-3-Clause",
            "license": "BSD",
        })

        assert record.license_names == ["BSD-3-Clause"]

    def test_license_from_classifiers(self):
        """UNKNOWN or empty license fields fall back to trove classifiers."""
        record = PackageRecord("six", "1.16.0", license_metadata={
            "license": "UNKNOWN",
            "classifiers": [
                "Programming Language :: Python :: 3",
                "License :: OSI Approved :: MIT License",
                "License :: OSI Approved :: MIT License",
                "License :: OSI Approved",
            ],
        })

        assert record.license_names == ["MIT License"]

    def test_license_text_is_not_a_name(self):
        """A full license text in the license field is ignored."""
        record = PackageRecord("pkg", "1.0", license_metadata={
            "license": "Copyright (c) 2020\n\nPermission is hereby granted...",
            "classifiers": ["License :: OSI Approved :: Apache Software License"],
        })

        assert record.license_names == ["Apache Software License"]

    def test_no_metadata(self):
        record = PackageRecord("private-pkg", "0.1")

        assert record.license_names == []
        assert record.homepage is None
        assert record.summary is None

    def test_homepage_from_project_urls(self):
        record = PackageRecord("pkg", "1.0", license_metadata={
            "home_page": "",
            "project_urls": {"Homepage": "https://example.org"},
        })

        assert record.homepage == "https://example.org"

    def test_to_dict(self):
        record = PackageRecord(
            "flask",
            "2.0.0",
            {"werkzeug", "jinja2"},
            Path("/venv/lib/flask"),
            {"license": "BSD-3-Clause", "home_page": "https://palletsprojects.com", "summary": "web"},
        )

        assert record.to_dict() == {
            "name": "flask",
            "version": "2.0.0",
            "children": ["jinja2", "werkzeug"],
            "install_path": str(Path("/venv/lib/flask")),
            "licenses": ["BSD-3-Clause"],
            "homepage": "https://palletsprojects.com",
            "summary": "web",
        }
