from setuptools import setup, find_packages

setup(
    name="acmefmt",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pyyaml",
        # Filesystem save source (``acmefmt watch --source fs``)
        "watchdog>=3.0",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "acmefmt=acmefmt.cli:main",
        ],
    },
    author="Uday Kanth",
    description="Reformats files saved in acme and patches only the changed lines into the open window.",
)
