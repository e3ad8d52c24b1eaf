# Copyright 2019 TerraPower, LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Setup.py script for snsweep, a discrete-ordinates sweep engine."""
from setuptools import setup, find_packages
import os
import pathlib

# grab __version__ from meta.py, without calling __init__.py
this_file = pathlib.Path(__file__).parent.absolute()
exec(open(os.path.join(this_file, "snsweep", "meta.py"), "r").read())

with open(os.path.join(this_file, "README.rst")) as f:
    README = f.read()


setup(
    name="snsweep",
    version=__version__,  # noqa: undefined-name
    description="Discrete-ordinates transport sweeps on structured Cartesian meshes",
    author="TerraPower, LLC",
    license="Apache 2.0",
    long_description=README,
    python_requires=">=3.9",
    packages=find_packages(),
    install_requires=[
        "numpy",
        "ruamel.yaml",
        "scipy>=1.12",
        "tabulate",
        "voluptuous",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
        "dev": [
            "black",
            "pytest",
            "pytest-cov",
            "pytest-xdist",
            "ruff",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Physics",
        "License :: OSI Approved :: Apache Software License",
    ],
)
