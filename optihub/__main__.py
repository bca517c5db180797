"""
Entry point for running OptiHub as a module.

Usage:
    python -m optihub analyze ./project.json
    python -m optihub --help
"""

from optihub.app.main import main

if __name__ == "__main__":
    main()
