from setuptools import find_packages, setup

setup(
    name="ordmap",
    version="0.1.0",
    description="Fluent ordered key/value collections with JSON export",
    python_requires=">=3.10",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[],
    extras_require={
        # unittest ships with Python; pytest is an optional runner
        "test": ["pytest"],
    },
)
