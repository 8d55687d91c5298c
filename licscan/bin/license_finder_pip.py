"""
List the installed dependency closure of a requirements file as JSON.

Usage: python3 license_finder_pip.py <requirements.txt>

Runs under the interpreter being scanned, so it only uses the standard
library. Prints a JSON array of objects with ``name``, ``version``,
``dependencies`` and ``location``. Requirements that are not installed
are skipped.
"""

import json
import os
import re
import sys
from importlib import metadata

NAME_PATTERN = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")
EGG_PATTERN = re.compile(r"#egg=([A-Za-z0-9][A-Za-z0-9._-]*)")


def canonical(name):
    return re.sub(r"[-_.]+", "-", name).lower()


def requirement_name(line):
    """Distribution name of one requirements line, or None for options."""
    line = line.split(" #", 1)[0].strip()
    if not line or line.startswith("#"):
        return None

    egg = EGG_PATTERN.search(line)
    if egg:
        return egg.group(1)
    if line.startswith("-"):
        return None

    match = NAME_PATTERN.match(line)
    return match.group(1) if match else None


def read_requirements(path, seen=None):
    """Names declared in ``path``, following ``-r`` includes."""
    seen = seen if seen is not None else set()
    if path in seen:
        return []
    seen.add(path)

    names = []
    with open(path, encoding="utf-8") as handle:
        for raw in handle:
            line = raw.strip()
            if line.startswith(("-r ", "--requirement ")):
                include = line.split(None, 1)[1].strip()
                base = os.path.dirname(path)
                names.extend(read_requirements(os.path.join(base, include), seen))
                continue
            name = requirement_name(line)
            if name:
                names.append(name)
    return names


def runtime_dependencies(dist):
    """Names of a distribution's requirements, excluding those behind extras."""
    names = []
    for requirement in dist.requires or []:
        spec, _, marker = requirement.partition(";")
        if "extra" in marker:
            continue
        match = NAME_PATTERN.match(spec)
        if match:
            names.append(match.group(1))
    return names


def find_distribution(name):
    try:
        return metadata.distribution(name)
    except metadata.PackageNotFoundError:
        return None


def installed_closure(names):
    packages = []
    visited = set()
    queue = list(names)

    while queue:
        name = queue.pop(0)
        key = canonical(name)
        if key in visited:
            continue
        visited.add(key)

        dist = find_distribution(name)
        if dist is None:
            continue

        dependencies = runtime_dependencies(dist)
        packages.append({
            "name": dist.metadata["Name"],
            "version": dist.version,
            "dependencies": dependencies,
            "location": str(dist.locate_file("")),
        })
        queue.extend(dependencies)

    return packages


def main(argv):
    if len(argv) != 2:
        sys.stderr.write("usage: license_finder_pip.py <requirements file>\n")
        return 2

    print(json.dumps(installed_closure(read_requirements(argv[1]))))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
