import os.path
import re

from setuptools import find_packages, setup

try:
    # Import all script providers so that ENTRYPOINTS gets populated.
    from devstack.scripts import env, pgsql, redis  # noqa: F401
    from devstack.scripts.utils import ENTRYPOINTS
except ImportError:
    # Avoid chicken-and-egg dependency requirements during initial installation.
    # This means you need to re-run setup in order to gain per-operation script entrypoints.
    ENTRYPOINTS = []


HERE = os.path.abspath(os.path.dirname(__file__))

README = os.path.join(HERE, "README.rst")


def version():
    with open(os.path.join(HERE, "devstack", "__init__.py")) as init:
        return re.search(r'^__version__ = "([^"]+)"', init.read(), re.M).group(1)


setup(name="devstack",
      version=version(),
      description="Bring up, tear down, inspect and reset PostgreSQL and Redis for local development.",
      long_description=open(README).read(),
      long_description_content_type="text/x-rst",
      platforms=["Any"],
      python_requires=">=3.7",
      install_requires=["docopt", "psycopg2-binary", "redis"],
      packages=find_packages(exclude=["tests"]),
      entry_points={"console_scripts": ["devstack=devstack.__main__:main"] + ENTRYPOINTS})
