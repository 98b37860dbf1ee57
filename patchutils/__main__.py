"""
CLI entry point, when used as a module: `python -m patchutils`.
"""
from patchutils import cli

if __name__ == '__main__':
    cli.main()
