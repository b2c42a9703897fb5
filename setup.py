from setuptools import setup, find_packages

setup(
    name="graphql-sonar",
    version="0.1.0",
    packages=find_packages(exclude=["graphql_sonar.tests", "graphql_sonar.tests.*"]),
    install_requires=[
        "requests>=2.27.0",
        "graphql-core>=3.2.0,<3.3",
        "jsonschema>=3.2.0",
        "rich>=10.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0.0",
            "pytest-cov>=2.10.0",
            "black>=20.8b1",
        ],
    },
    entry_points={
        "console_scripts": [
            "graphql-sonar=graphql_sonar.cli:main",
        ],
    },
    python_requires=">=3.11",
    author="Sonar Team",
    description="Generate GraphQL clients and run endpoint checks with latency stats",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
