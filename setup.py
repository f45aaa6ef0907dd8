#!/usr/bin/env python
# -*- coding: utf-8 -*-

import os.path
import re

from setuptools import find_packages, setup


def read_requirements(path):
    requirements = []
    with open(path) as requirements_file:
        for req in requirements_file.read().splitlines():
            # skip comments, blank lines and hash lines
            if not req.strip() or re.match(r"\s*#", req) or re.match(r"\s*--hash", req):
                continue
            requirements.append(req.split(" ")[0])
    return requirements


with open(os.path.join("sfexport", "version.txt"), "r") as version_file:
    version = version_file.read().strip()

with open("README.rst", "rb") as readme_file:
    readme = readme_file.read().decode("utf-8")

with open("HISTORY.rst", "rb") as history_file:
    history = history_file.read().decode("utf-8")

setup(
    name="sfexport",
    version=version,
    description="Export all of a Salesforce org's metadata with the sf CLI",
    long_description=readme + "\n\n" + history,
    long_description_content_type="text/x-rst",
    packages=find_packages(include=["sfexport", "sfexport.*"]),
    package_data={"sfexport": ["version.txt", "sfexport.yml", "tasks/metadata/*.yml"]},
    entry_points={"console_scripts": ["sfexport=sfexport.cli.cci:main"]},
    include_package_data=True,
    install_requires=read_requirements("requirements/prod.txt"),
    extras_require={"test": read_requirements("requirements/dev.txt")},
    license="BSD license",
    zip_safe=False,
    keywords="salesforce metadata package.xml",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Natural Language :: English",
        "Programming Language :: Python :: 3",
    ],
    python_requires=">=3.8",
)
