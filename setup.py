"""A setuptools based setup module.

See:
https://packaging.python.org/en/latest/distributing.html
https://github.com/pypa/sampleproject
"""
import os

from setuptools import find_packages, setup

# pylint: disable=redefined-builtin

here = os.path.abspath(os.path.dirname(__file__))

with open(os.path.join(here, "README.rst"), encoding="utf-8") as fid:
    long_description = fid.read()

setup(
    name="twx-ts-codegen",
    version="0.0.1",
    description=(
        "Compile the entities of a ThingWorx project "
        "into decorated TypeScript classes."
    ),
    long_description=long_description,
    author="twx-ts-codegen developers",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    license="License :: OSI Approved :: MIT License",
    python_requires=">=3.10",
    keywords="thingworx typescript code generation entities iot",
    packages=find_packages(exclude=["tests", "tests.*", "continuous_integration"]),
    install_requires=[
        "icontract>=2.6.1,<3",
        "more-itertools>=8",
        "tree-sitter>=0.22",
        "tree-sitter-javascript>=0.21",
    ],
    extras_require={
        "dev": [
            "black==24.8.0",
            "mypy==1.5.1",
            "pylint==3.0.3",
            "coverage>=6.5.0,<7",
        ],
    },
    py_modules=["twx_ts_codegen"],
    package_data={"twx_ts_codegen": ["py.typed"]},
)
