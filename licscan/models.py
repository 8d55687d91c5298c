from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional

from licscan.utils.exceptions import EnumerationFailedError, InvalidConfigurationError


DEFAULT_ENUMERATOR_SCRIPT = Path(__file__).resolve().parent / "bin" / "license_finder_pip.py"
DEFAULT_REGISTRY_URL = "https://pypi.org"


class PythonVersion(str, Enum):
    """Major Python version selecting the pip and python binaries."""
    PY2 = "2"
    PY3 = "3"

    @property
    def pip_binary(self) -> str:
        return f"pip{self.value}"

    @property
    def python_binary(self) -> str:
        return f"python{self.value}"


def _parse_python_version(value: Any) -> PythonVersion:
    text = str(value).strip()
    try:
        return PythonVersion(text)
    except ValueError:
        raise InvalidConfigurationError(
            f"Invalid python version '{value}'. Valid versions are '2' or '3'.",
            option="python_version",
        ) from None


def _optional_path(value: Any) -> Optional[Path]:
    if value is None or value == "":
        return None
    return Path(value)


def _parse_flag(value: Any, option: str) -> bool:
    if not isinstance(value, bool):
        raise InvalidConfigurationError(
            f"Invalid {option} '{value}'. Expected true or false.",
            option=option,
        )
    return value


@dataclass
class AdapterConfig:
    """Configuration for the pip adapter.

    Built once at adapter construction; validation happens in
    ``from_options`` and ``__post_init__`` so an invalid python version
    never yields a config object.
    """
    requirements_path: Path = Path("requirements.txt")
    python_version: PythonVersion = PythonVersion.PY2
    project_path: Optional[Path] = None
    prepare_no_fail: bool = False
    enumerator_script: Path = DEFAULT_ENUMERATOR_SCRIPT
    install_timeout: float = 600
    enumerate_timeout: float = 300
    request_timeout: float = 10
    registry_url: str = DEFAULT_REGISTRY_URL

    def __post_init__(self):
        self.python_version = _parse_python_version(
            self.python_version.value
            if isinstance(self.python_version, PythonVersion)
            else self.python_version
        )
        self.requirements_path = Path(self.requirements_path)
        self.project_path = _optional_path(self.project_path)
        self.enumerator_script = Path(self.enumerator_script)
        self.registry_url = self.registry_url.rstrip("/")

    @property
    def fail_on_prepare_error(self) -> bool:
        return not self.prepare_no_fail

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "AdapterConfig":
        """Build a config from a loose options mapping.

        Recognized keys: ``pip_requirements_path``, ``python_version``,
        ``project_path``, ``prepare_no_fail``, ``enumerator_script``,
        ``install_timeout``, ``enumerate_timeout``, ``request_timeout``,
        ``registry_url``. Unset or ``None`` values fall back to defaults.
        """
        options = {k: v for k, v in (options or {}).items() if v is not None}

        kwargs: Dict[str, Any] = {}
        if "pip_requirements_path" in options:
            kwargs["requirements_path"] = Path(options["pip_requirements_path"])
        if "python_version" in options:
            kwargs["python_version"] = _parse_python_version(options["python_version"])
        if "project_path" in options:
            kwargs["project_path"] = _optional_path(options["project_path"])
        if "prepare_no_fail" in options:
            kwargs["prepare_no_fail"] = _parse_flag(options["prepare_no_fail"], "prepare_no_fail")
        if "enumerator_script" in options:
            kwargs["enumerator_script"] = Path(options["enumerator_script"])
        if "registry_url" in options:
            kwargs["registry_url"] = str(options["registry_url"])

        for key in ("install_timeout", "enumerate_timeout", "request_timeout"):
            if key in options:
                try:
                    kwargs[key] = float(options[key])
                except (TypeError, ValueError):
                    raise InvalidConfigurationError(
                        f"Invalid {key} '{options[key]}'. Expected a number of seconds.",
                        option=key,
                    ) from None

        return cls(**kwargs)


@dataclass
class EnumeratedPackage:
    """One record of enumerator output."""
    name: str
    version: str
    dependencies: List[str]
    location: str

    @classmethod
    def from_dict(cls, data: Any) -> "EnumeratedPackage":
        if not isinstance(data, dict):
            raise EnumerationFailedError(
                f"Expected an object per package, got {type(data).__name__}"
            )

        missing = [key for key in ("name", "version", "dependencies", "location") if key not in data]
        if missing:
            raise EnumerationFailedError(
                f"Package record is missing fields: {', '.join(missing)}"
            )

        for key in ("name", "version", "location"):
            if not isinstance(data[key], str):
                raise EnumerationFailedError(
                    f"Field '{key}' of package record must be a string"
                )

        dependencies = data["dependencies"]
        if not isinstance(dependencies, list) or not all(isinstance(d, str) for d in dependencies):
            raise EnumerationFailedError(
                f"Field 'dependencies' of package '{data['name']}' must be a list of strings"
            )

        return cls(
            name=data["name"],
            version=data["version"],
            dependencies=list(dependencies),
            location=data["location"],
        )


@dataclass(frozen=True)
class PackageRecord:
    """Normalized package entry combining enumerator data with registry metadata."""
    name: str
    version: str
    children: FrozenSet[str] = frozenset()
    install_path: Optional[Path] = None
    license_metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # Freeze inputs so the record cannot be mutated through shared references.
        object.__setattr__(self, "children", frozenset(self.children))
        object.__setattr__(self, "license_metadata", MappingProxyType(dict(self.license_metadata)))

    @property
    def license_names(self) -> List[str]:
        """License names declared in the registry metadata.

        Prefers ``license_expression``, then a meaningful ``license`` field,
        and falls back to ``License ::`` trove classifiers.
        """
        names: List[str] = []

        for key in ("license_expression", "license"):
            value = self.license_metadata.get(key)
            if isinstance(value, str):
                value = value.strip()
                if value and value.upper() != "UNKNOWN" and "\n" not in value:
                    names.append(value)
                    break

        if not names:
            names.extend(_classifier_licenses(self.license_metadata.get("classifiers") or []))

        return list(dict.fromkeys(names))

    @property
    def homepage(self) -> Optional[str]:
        home_page = self.license_metadata.get("home_page")
        if home_page:
            return home_page
        project_urls = self.license_metadata.get("project_urls") or {}
        return project_urls.get("Homepage") or project_urls.get("homepage")

    @property
    def summary(self) -> Optional[str]:
        return self.license_metadata.get("summary") or None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "children": sorted(self.children),
            "install_path": str(self.install_path) if self.install_path else None,
            "licenses": self.license_names,
            "homepage": self.homepage,
            "summary": self.summary,
        }


def _classifier_licenses(classifiers: Iterable[str]) -> List[str]:
    names = []
    for classifier in classifiers:
        if not isinstance(classifier, str) or not classifier.startswith("License"):
            continue
        name = classifier.split("::")[-1].strip()
        if name and name != "OSI Approved":
            names.append(name)
    return names
