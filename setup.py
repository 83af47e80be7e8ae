# -*- coding: utf-8 -*-
"""swarm-secret-rotator a docker swarm secrets driver with automatic rotation.

This module reads secrets for swarm from HashiCorp Vault, OpenBao, AWS Secrets Manager,
Azure Key Vault or GCP Secret Manager and watches them for changes.
When a value changes every service using it is moved onto a new copy of the swarm secret.

"""

import setuptools
import re

VERSIONFILE="swarm_secret_rotator/_version.py"
verstrline = open(VERSIONFILE, "rt").read()
VSRE = r"^__version__ = ['\"]([^'\"]*)['\"]"
mo = re.search(VSRE, verstrline, re.M)
if mo:
    verstr = mo.group(1)
else:
    raise RuntimeError("Unable to find version string in %s." % (VERSIONFILE,))

with open("README.md", "r", encoding='utf-8') as fh:
    long_description = fh.read()

setuptools.setup(
    name='swarm_secret_rotator',
    version=verstr,
    description="A docker swarm secrets driver that reads external secret stores and rotates swarm secrets when the store changes",
    long_description_content_type="text/markdown",
    long_description=long_description,
    packages=setuptools.find_packages(exclude=["*.tests", "*.tests.*", "tests"]),
    include_package_data=True,
    license="MIT",
    scripts=[],
    python_requires=">=3.8",
    install_requires=[
        "google-cloud-secret-manager~=2.0",
        "google-auth>=2.0,<3.0",
        "grpcio~=1.0",
        "google-crc32c~=1.0",
        "python-dateutil~=2.0",
        "pytz>=2022.0",
        "hvac>=1.0",
        "boto3~=1.26",
        "requests~=2.0",
        "docker>=6.0",
    ],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],

)
