"""Release helper: bump the project version, build and upload the distribution."""

import re
import subprocess
import sys
import tomllib
from http import HTTPStatus
from pathlib import Path
from typing import Literal

import httpx
from loguru import logger


BumpPart = Literal["patch", "minor", "major"]
PACKAGE_INDEX_URL = "https://pypi.org/pypi/{name}/json"
VERSION_LINE = re.compile(r'^(version\s*=\s*")([^"]+)(")', re.MULTILINE)


def bump_version(version: str, part: str) -> str:
    """
    Return `version` bumped by one `part` (patch, minor or major).

    Examples:
        >>> bump_version("1.4.2", "minor")
        '1.5.0'

    """
    try:
        major, minor, patch = (int(piece) for piece in version.split(".")[:3])
    except ValueError as exc:
        msg = f"unsupported version format: {version!r}"
        raise ValueError(msg) from exc

    if part == "major":
        return f"{major + 1}.0.0"
    if part == "minor":
        return f"{major}.{minor + 1}.0"
    if part == "patch":
        return f"{major}.{minor}.{patch + 1}"
    msg = f"unknown version bump type: {part!r}"
    raise ValueError(msg)


def read_project(pyproject: Path) -> dict[str, str]:
    """Return the name and version from the `[project]` table."""
    with pyproject.open("rb") as fh:
        project = tomllib.load(fh).get("project", {})
    return {"name": str(project.get("name", "")), "version": str(project.get("version", ""))}


def write_project_version(pyproject: Path, new_version: str) -> None:
    """Rewrite the first `version = "..."` line of the `[project]` table."""
    content = pyproject.read_text(encoding="utf-8")
    start = content.find("[project]")
    if start == -1:
        msg = f"no [project] table in {pyproject}"
        raise ValueError(msg)
    end = content.find("\n[", start + 1)
    end = len(content) if end == -1 else end
    table, count = VERSION_LINE.subn(rf"\g<1>{new_version}\g<3>", content[start:end], count=1)
    if not count:
        msg = f"no version field in the [project] table of {pyproject}"
        raise ValueError(msg)
    pyproject.write_text(content[:start] + table + content[end:], encoding="utf-8")


def published_version(name: str) -> str | None:
    """Return the latest version of `name` on the package index, or None."""
    url = PACKAGE_INDEX_URL.format(name=name)
    try:
        response = httpx.get(url, headers={"Accept": "application/json"}, timeout=5.0)
    except httpx.HTTPError as exc:
        logger.warning("package_index_unreachable", url=url, error=str(exc))
        return None

    if response.status_code != HTTPStatus.OK:
        logger.info("package_not_published", name=name, status=response.status_code)
        return None
    try:
        return str(response.json()["info"]["version"])
    except (ValueError, KeyError, TypeError) as exc:
        logger.warning("package_index_invalid_response", url=url, error=str(exc))
        return None


def run_command(*args: str, cwd: Path) -> None:
    logger.info("running_command", command=" ".join(args), cwd=str(cwd))
    subprocess.run(args, cwd=cwd, check=True)  # noqa: S603


def publish(root: Path, part: str) -> None:
    """
    Bump the version in `root`/pyproject.toml, build, and upload with twine.

    Raises:
        ValueError: unknown bump type or unreadable version.
        subprocess.CalledProcessError: build or upload failed.

    """
    pyproject = root / "pyproject.toml"
    project = read_project(pyproject)
    new_version = bump_version(project["version"], part)

    write_project_version(pyproject, new_version)
    logger.info("version_bumped", old=project["version"], new=new_version)

    run_command(sys.executable, "-m", "build", cwd=root)
    dist_files = sorted(str(path) for path in (root / "dist").glob(f"*{new_version}*"))
    if not dist_files:
        msg = f"build produced no files for version {new_version}"
        raise ValueError(msg)
    run_command(sys.executable, "-m", "twine", "upload", *dist_files, cwd=root)
    logger.info("package_published", name=project["name"], version=new_version)
