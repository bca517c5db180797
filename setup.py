from setuptools import setup, find_packages

setup(
    name="optihub",
    version="0.1.0",
    description="OptiHub - Asset optimization analysis engine for game content repositories",
    author="Your Name",
    packages=find_packages(include=["optihub", "optihub.*"]),
    include_package_data=True,
    install_requires=[
        # Core data modeling and validation
        "pydantic>=2.0.0",

        # Environment variables
        "python-dotenv>=1.0.0",

        # Dependency graph and union-find
        "networkx>=3.0",

        # Sample-level content comparison
        "numpy>=1.24.0",

        # CLI and rich output
        "typer>=0.9.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "optihub = optihub.app.main:main",
        ],
    },
    python_requires=">=3.11",
    package_dir={"": "."},
)
