#!/usr/bin/env python3

"""
Check that setup.py agrees with the package.

The metadata needs to coincide with ``twx_ts_codegen/__init__.py``. The runtime
requirements need to be exactly the third-party packages imported by
``twx_ts_codegen``, and the ``dev`` extra needs to install the tools which
``precommit.py`` runs.
"""
import ast
import os
import pathlib
import re
import sys
from typing import Any, Dict, List, Set

import twx_ts_codegen

#: Tools run by ``precommit.py`` which the ``dev`` extra needs to install
PRECOMMIT_TOOLS = ("black", "mypy", "pylint", "coverage")

#: Keyword arguments of ``setup(...)`` which we check
CHECKED_KEYWORDS = (
    "version",
    "author",
    "license",
    "description",
    "classifiers",
    "install_requires",
    "extras_require",
)

DEVELOPMENT_STATUS_RE = re.compile(r"Development Status :: [0-9]+ - (.+)")

REQUIREMENT_NAME_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.\-]*")


def parse_setup_keywords(setup_py: pathlib.Path) -> Dict[str, Any]:
    """Evaluate the literal keyword arguments of the ``setup(...)`` call."""
    module = ast.parse(setup_py.read_text(encoding="utf-8"), filename=str(setup_py))

    for node in ast.walk(module):
        if (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Name)
            and node.func.id == "setup"
        ):
            return {
                keyword.arg: ast.literal_eval(keyword.value)
                for keyword in node.keywords
                if keyword.arg in CHECKED_KEYWORDS
            }

    raise RuntimeError(f"Could not find the setup(...) call in: {setup_py}")


def import_name(requirement: str) -> str:
    """Map a requirement such as ``more-itertools>=8`` to ``more_itertools``."""
    match = REQUIREMENT_NAME_RE.match(requirement)
    if match is None:
        raise ValueError(f"Unexpected requirement: {requirement!r}")

    return match.group(0).lower().replace("-", "_").replace(".", "_")


def imported_top_level_modules(package_dir: pathlib.Path) -> Set[str]:
    """Collect the top-level modules imported absolutely in the ``package_dir``."""
    result = set()  # type: Set[str]

    for pth in sorted(package_dir.glob("**/*.py")):
        module = ast.parse(pth.read_text(encoding="utf-8"), filename=str(pth))

        for node in ast.walk(module):
            if isinstance(node, ast.Import):
                result.update(alias.name.split(".")[0] for alias in node.names)
            elif (
                isinstance(node, ast.ImportFrom)
                and node.level == 0
                and node.module is not None
            ):
                result.add(node.module.split(".")[0])

    return result


def main() -> int:
    """Execute the main routine."""
    repo_root = pathlib.Path(os.path.realpath(__file__)).parent.parent

    setup_py_pth = repo_root / "setup.py"
    if not setup_py_pth.exists():
        raise RuntimeError(f"Could not find the setup.py: {setup_py_pth}")

    keywords = parse_setup_keywords(setup_py_pth)

    missing = [keyword for keyword in CHECKED_KEYWORDS if keyword not in keywords]
    if len(missing) > 0:
        print(
            f"Expected the literal keyword arguments in setup.py: {missing}",
            file=sys.stderr,
        )
        return -1

    errors = []  # type: List[str]

    for field, value_in_init in (
        ("version", twx_ts_codegen.__version__),
        ("author", twx_ts_codegen.__author__),
        ("license", twx_ts_codegen.__license__),
        ("description", twx_ts_codegen.__doc__),
    ):
        if keywords[field] != value_in_init:
            errors.append(
                f"The {field} in setup.py is {keywords[field]!r}, "
                f"while in twx_ts_codegen/__init__.py it is {value_in_init!r}"
            )

    statuses = []  # type: List[str]
    for classifier in keywords["classifiers"]:
        match = DEVELOPMENT_STATUS_RE.fullmatch(classifier)
        if match is not None:
            statuses.append(match.group(1))

    if statuses != [twx_ts_codegen.__status__]:
        errors.append(
            f"Expected exactly one development status classifier in setup.py "
            f"coinciding with {twx_ts_codegen.__status__!r} "
            f"in twx_ts_codegen/__init__.py, but got: {statuses}"
        )

    required = set(
        import_name(requirement) for requirement in keywords["install_requires"]
    )

    imported = (
        imported_top_level_modules(repo_root / "twx_ts_codegen")
        - set(sys.stdlib_module_names)
        - {"twx_ts_codegen"}
    )

    for module in sorted(imported - required):
        errors.append(
            f"The package imports {module!r}, but setup.py does not require it"
        )

    for module in sorted(required - imported):
        errors.append(
            f"The setup.py requires {module!r}, but the package never imports it"
        )

    dev_requirements = set(
        import_name(requirement)
        for requirement in keywords["extras_require"].get("dev", [])
    )
    for tool in PRECOMMIT_TOOLS:
        if tool not in dev_requirements:
            errors.append(
                f"The precommit.py runs {tool!r}, "
                f"but the dev extra in setup.py does not install it"
            )

    if len(errors) > 0:
        for error in errors:
            print(error, file=sys.stderr)

        return -1

    return 0


if __name__ == "__main__":
    sys.exit(main())
