"""Setup script for OrgTree."""

from setuptools import setup, find_packages

with open("requirements.txt") as f:
    requirements = f.read().splitlines()
    # Filter out comments and empty lines
    requirements = [
        line.strip() for line in requirements
        if line.strip() and not line.startswith("#")
    ]

setup(
    name="orgtree",
    version="0.1.0",
    description="Hierarchical organization and group administration over LDAP",
    author="OrgTree Team",
    packages=find_packages(include=["orgtree", "orgtree.*"]),
    install_requires=requirements,
    extras_require={
        "ldap": ["ldap3>=2.9"],
        "test": ["pytest>=7.4.0", "httpx>=0.26.0", "ldap3>=2.9"],
    },
    entry_points={
        "console_scripts": [
            "orgtree=orgtree.cli.main:app",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: System Administrators",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
