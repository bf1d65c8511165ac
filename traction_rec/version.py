import functools

from setuptools_scm import get_version


@functools.lru_cache(maxsize=None)
def get_traction_rec_version():
    # Deployments built from an sdist have no git metadata to read
    return get_version(fallback_version="0.0.1")
