#!/usr/bin/env python
from setuptools import find_packages, setup

INSTALL_REQUIREMENTS = [
    "Django>=4.2",
    "celery[redis]>=5.3",
    "kombu",
    "django-redis",
    "django-structlog",
    "psycopg2-binary",
    "requests",
    "sentry-sdk",
    "setuptools_scm",
    "structlog",
]
TEST_REQUIREMENTS = ["pytest", "pytest-django"]
SCRIPTS = ["manage.py"]
DESCRIPTION = "Traction Rec program and session import"
CLASSIFIERS = """\
Environment :: Web Environment
Framework :: Django
Programming Language :: Python
Programming Language :: Python :: 3
""".splitlines()

with open("README.md", "r") as f:
    LONG_DESCRIPTION = f.read()


setup(
    name="traction_rec",
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["*.tests", "*.tests.*"]),
    include_package_data=True,
    scripts=SCRIPTS,
    install_requires=INSTALL_REQUIREMENTS,
    extras_require={"test": TEST_REQUIREMENTS},
    python_requires=">=3.10",
    classifiers=CLASSIFIERS,
    use_scm_version={
        "write_to": "version.txt",
        "tag_regex": r"^(?P<prefix>v)?(?P<version>[^\+]+)(?P<suffix>.*)?$",
        "fallback_version": "0.0.1",
    },
    setup_requires=["setuptools_scm"],
)
