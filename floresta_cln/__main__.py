"""Entry point for `python -m floresta_cln`."""

from floresta_cln.cli.commands import main

if __name__ == "__main__":
    main()
