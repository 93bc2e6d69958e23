"""
Entry point for running as a module.
Usage: python -m sqlbatch SCRIPT_DIR --server HOST --database DB
"""
from .main import main

if __name__ == "__main__":
    main()
