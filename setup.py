""" hdtree build script for setuptools.

"""

from setuptools import find_packages, setup  # type: ignore

import hdtree

with open("README.md", "r", encoding="ascii") as file_:
    longdescription = file_.read()

setup(
    name=hdtree.name,
    version=hdtree.__version__,
    license=hdtree.__license__,
    author=hdtree.__author__,
    author_email=hdtree.__author_email__,
    description="Hierarchical deterministic key derivation with labelled paths",
    long_description=longdescription,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"hdtree": ["_data/*.json"]},
    include_package_data=True,
    install_requires=["coincurve", "dataclasses-json"],
    extras_require={"test": ["pytest"]},
    keywords=(
        "bitcoin cryptography elliptic-curves secp256k1 bip32 slip132 "
        "hd-wallet key-derivation base58 wif bip340"
    ),
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Topic :: Security :: Cryptography",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)
